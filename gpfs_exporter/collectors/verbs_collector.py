"""Verbs RDMA status collector."""

import re
from typing import List

from prometheus_client.core import GaugeMetricFamily, Metric

from ..utils.errors import ParseError
from ..utils.metrics import LinkStatus
from .base import BaseCollector


VERBS_LABEL = "VERBS RDMA status"

# The label must open the line; anything after its colon is the value
_VERBS_LINE = re.compile(r"^\s*" + re.escape(VERBS_LABEL) + r"\s*:(.*)$")


def parse_verbs(output: str) -> LinkStatus:
    """
    Extract the verbs RDMA status token.

    Args:
        output: Output from 'mmfsadm test verbs status'

    Returns:
        LinkStatus: Status token, verbatim

    Raises:
        ParseError: If the status line is missing or has no value

    Example output:
        VERBS RDMA status: started
    """
    for line in output.splitlines():
        match = _VERBS_LINE.match(line)
        if not match:
            continue
        status = match.group(1).strip()
        if not status:
            raise ParseError(f"Empty value for '{VERBS_LABEL}'")
        return LinkStatus(status=status)

    raise ParseError(f"'{VERBS_LABEL}' not found in output: {output[:200]!r}")


class VerbsCollector(BaseCollector):
    """Collector reporting whether GPFS verbs RDMA is started."""

    name = "verbs"

    def parse(self, output: str) -> LinkStatus:
        return parse_verbs(output)

    def describe_metrics(self) -> List[Metric]:
        return [self._family()]

    def build_metrics(self, payload: LinkStatus) -> List[Metric]:
        status = self._family()
        status.add_metric([], 1 if payload.is_active else 0)
        return [status]

    @staticmethod
    def _family() -> GaugeMetricFamily:
        return GaugeMetricFamily(
            "gpfs_verbs_status",
            "GPFS verbs status, 1=started 0=not started"
        )
