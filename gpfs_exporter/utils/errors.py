"""Exceptions raised during a collection cycle."""


class CollectorError(Exception):
    """Base class for cycle-scoped collection failures."""


class CommandExecutionError(CollectorError):
    """Command failed to start or exited with a non-zero status."""

    def __init__(self, message: str, returncode: int = None):
        super().__init__(message)
        self.returncode = returncode


class CommandTimeoutError(CollectorError, TimeoutError):
    """Command did not finish before its deadline and was killed."""

    def __init__(self, message: str, timeout: float = None):
        super().__init__(message)
        self.timeout = timeout


class ParseError(CollectorError, ValueError):
    """Command output did not match the expected grammar."""
