"""Collection status enumeration."""

from enum import Enum


class CollectionStatus(Enum):
    """Outcome of a single collection cycle."""

    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"

    @property
    def failed(self) -> bool:
        """True for any outcome that did not produce fresh data."""
        return self is not CollectionStatus.SUCCESS
