"""Bounded-time execution of GPFS diagnostic commands."""

import logging
import os
import signal
import subprocess
from typing import Optional, Sequence

from ..utils.errors import CommandExecutionError, CommandTimeoutError

# Seconds allowed between SIGTERM and SIGKILL, and for reading leftover output
TERM_GRACE = 0.5
DRAIN_TIMEOUT = 1.0


class CommandRunner:
    """Run a local command with a hard deadline and return its stdout."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize command runner.

        Args:
            logger: Optional logger instance
        """
        self.logger = (logger or logging.getLogger(__name__)).getChild(self.__class__.__name__)

    def run(
        self,
        args: Sequence[str],
        timeout: float,
        input_text: Optional[str] = None
    ) -> str:
        """
        Execute command and return stdout.

        The child runs in its own session so the whole process group
        (including anything started through sudo) is killed on timeout.
        A timed-out call returns within roughly timeout + TERM_GRACE +
        2 * DRAIN_TIMEOUT seconds even when a descendant keeps the output
        pipes open.

        Args:
            args: Argument vector, executable first
            timeout: Deadline in seconds
            input_text: Optional text written to the command's stdin

        Returns:
            str: Command stdout

        Raises:
            CommandExecutionError: If the command cannot start or exits non-zero
            CommandTimeoutError: If the command exceeds the deadline
        """
        args = list(args)
        self.logger.debug(f"Executing command: {' '.join(args)}")

        try:
            proc = subprocess.Popen(
                args,
                stdin=subprocess.PIPE if input_text is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                start_new_session=True,
            )
        except OSError as e:
            raise CommandExecutionError(f"Failed to start {args[0]}: {e}") from e

        try:
            stdout_data, stderr_data = proc.communicate(input=input_text, timeout=timeout)
        except subprocess.TimeoutExpired:
            self._terminate(proc)
            raise CommandTimeoutError(
                f"Command {args[0]} timed out after {timeout}s",
                timeout=timeout
            ) from None

        if proc.returncode != 0:
            raise CommandExecutionError(
                f"Command {args[0]} failed with exit code {proc.returncode}: "
                f"{(stderr_data or '').strip()}",
                returncode=proc.returncode
            )

        self.logger.debug(f"Command completed successfully ({len(stdout_data)} bytes)")
        return stdout_data

    def _terminate(self, proc: subprocess.Popen) -> None:
        """
        Stop a timed-out command within a bounded time.

        SIGTERM goes to the process group first so a sudo wrapper can relay
        it to a child it runs as another user, then SIGKILL follows. A process
        that left the group can still hold the output pipes, so the final
        drain is bounded and the pipes are closed if it does not finish.
        """
        self._signal_group(proc, signal.SIGTERM)
        try:
            proc.wait(timeout=TERM_GRACE)
        except subprocess.TimeoutExpired:
            pass
        self._signal_group(proc, signal.SIGKILL)

        try:
            proc.communicate(timeout=DRAIN_TIMEOUT)
        except subprocess.TimeoutExpired:
            self.logger.warning(
                f"Output of pid {proc.pid} still held open after kill, closing pipes"
            )
            for stream in (proc.stdin, proc.stdout, proc.stderr):
                if stream is not None:
                    stream.close()
            try:
                proc.wait(timeout=DRAIN_TIMEOUT)
            except subprocess.TimeoutExpired:
                self.logger.error(f"Process {proc.pid} did not exit after SIGKILL")

    def _signal_group(self, proc: subprocess.Popen, sig: signal.Signals) -> None:
        """Signal the process group of *proc*, falling back to the process itself."""
        try:
            os.killpg(proc.pid, sig)
        except ProcessLookupError:
            return
        except PermissionError:
            try:
                proc.send_signal(sig)
            except PermissionError as e:
                self.logger.warning(f"Cannot signal pid {proc.pid}: {e}")
