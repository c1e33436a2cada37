"""Metric data structures for collectors."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .status import CollectionStatus


# Operation name -> PerformanceRecord attribute, in exposition order
OPERATIONS = (
    "opens",
    "closes",
    "reads",
    "writes",
    "read_dir",
    "inode_updates",
)

VERBS_ACTIVE_STATUS = "started"


@dataclass(frozen=True)
class PerformanceRecord:
    """One row of mmpmon fs_io_s statistics for a (node, filesystem) pair."""

    node_ip: str = ""
    node_name: str = ""
    filesystem: str = ""
    read_bytes: int = 0
    write_bytes: int = 0
    opens: int = 0
    closes: int = 0
    reads: int = 0
    writes: int = 0
    read_dir: int = 0
    inode_updates: int = 0

    def operations(self) -> Dict[str, int]:
        """Return operation counters keyed by operation name."""
        return {op: getattr(self, op) for op in OPERATIONS}


@dataclass(frozen=True)
class LinkStatus:
    """Verbs RDMA link status token as reported by mmfsadm."""

    status: str

    @property
    def is_active(self) -> bool:
        return self.status == VERBS_ACTIVE_STATUS


@dataclass
class CollectionOutcome:
    """Result of one collector cycle."""

    status: CollectionStatus
    payload: Optional[Any] = None
    error: Optional[str] = None
    duration: float = 0.0

    @classmethod
    def success(cls, payload: Any, duration: float = 0.0) -> "CollectionOutcome":
        return cls(status=CollectionStatus.SUCCESS, payload=payload, duration=duration)

    @classmethod
    def failure(
        cls,
        status: CollectionStatus,
        error: str,
        duration: float = 0.0
    ) -> "CollectionOutcome":
        return cls(status=status, error=error, duration=duration)
