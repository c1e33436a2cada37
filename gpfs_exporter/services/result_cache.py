"""Per-collector last-known-good result cache."""

import logging
import threading
from typing import Any, Optional


class ResultCache:
    """
    Hold the most recent successful payload of one collector.

    A failed cycle can re-emit this payload instead of exposing no data.
    Each instance carries its own lock, so concurrent scrapes of one
    collector serialise on it while other collectors are unaffected.
    When disabled, get() always returns None and set()/clear() do nothing.
    """

    def __init__(self, enabled: bool = False, logger: logging.Logger = None):
        """
        Initialize result cache.

        Args:
            enabled: Whether fallback caching is active
            logger: Optional logger instance
        """
        self._enabled = enabled
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._payload: Optional[Any] = None
        self._present = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    def get(self) -> Optional[Any]:
        """Return the cached payload, or None when absent or disabled."""
        if not self._enabled:
            return None
        with self._lock:
            return self._payload if self._present else None

    def set(self, payload: Any) -> None:
        """Replace the cached payload with a fresh successful result."""
        if not self._enabled:
            return
        with self._lock:
            self._payload = payload
            self._present = True

    def clear(self) -> None:
        """Drop the cached payload."""
        if not self._enabled:
            return
        with self._lock:
            self._payload = None
            self._present = False
        self.logger.debug("Result cache cleared")
