"""mmpmon fs_io_s performance counter collector."""

import re
from typing import Dict, List, Optional

from prometheus_client.core import Metric

from ..utils.errors import ParseError
from ..utils.metrics import PerformanceRecord
from .base import BaseCollector


MMPMON_SENTINEL = "_fs_io_s_"
MMPMON_REQUEST = "fs_io_s\n"

_STRING_TAGS = {
    "_n_": "node_ip",
    "_nn_": "node_name",
    "_fs_": "filesystem",
}

_NUMERIC_TAGS = {
    "_br_": "read_bytes",
    "_bw_": "write_bytes",
    "_oc_": "opens",
    "_cc_": "closes",
    "_rdc_": "reads",
    "_wc_": "writes",
    "_dir_": "read_dir",
    "_iu_": "inode_updates",
}

_UINT64_MAX = 2 ** 64 - 1
_DIGITS = re.compile(r"[0-9]+")


def _parse_uint64(tag: str, value: str, line_no: int) -> int:
    if not _DIGITS.fullmatch(value):
        raise ParseError(f"Line {line_no}: {tag} value {value!r} is not an unsigned integer")
    number = int(value)
    if number > _UINT64_MAX:
        raise ParseError(f"Line {line_no}: {tag} value {value} overflows 64 bits")
    return number


def parse_mmpmon(output: str) -> List[PerformanceRecord]:
    """
    Parse ``mmpmon -p`` fs_io_s output into performance records.

    Only lines whose first token is ``_fs_io_s_`` are considered; the rest of
    such a line alternates tag and value. Unknown tags are skipped.

    Args:
        output: Raw mmpmon stdout

    Returns:
        List[PerformanceRecord]: One record per eligible line, in input order

    Raises:
        ParseError: On the first numeric field that is not a uint64

    Example line:
        _fs_io_s_ _n_ 10.22.0.106 _nn_ node1 _rc_ 0 _t_ 1579358234 _tu_ 53212
        _cl_ gpfs.example.com _fs_ scratch _d_ 48 _br_ 205607400434 _bw_ 74839282351
        _oc_ 2377656 _cc_ 2201576 _rdc_ 59420404 _wc_ 18874626 _dir_ 40971 _iu_ 544768
    """
    records = []
    for line_no, line in enumerate(output.splitlines(), start=1):
        tokens = line.split()
        if not tokens or tokens[0] != MMPMON_SENTINEL:
            continue

        fields: Dict[str, object] = {}
        for tag, value in zip(tokens[1::2], tokens[2::2]):
            if tag in _STRING_TAGS:
                fields[_STRING_TAGS[tag]] = value
            elif tag in _NUMERIC_TAGS:
                fields[_NUMERIC_TAGS[tag]] = _parse_uint64(tag, value, line_no)

        records.append(PerformanceRecord(**fields))

    return records


class MmpmonCollector(BaseCollector):
    """Collector for per-filesystem I/O counters reported by mmpmon."""

    name = "mmpmon"

    def command_input(self) -> Optional[str]:
        return MMPMON_REQUEST

    def parse(self, output: str) -> List[PerformanceRecord]:
        records = parse_mmpmon(output)
        self.logger.debug(f"Parsed {len(records)} mmpmon record(s)")
        return records

    def describe_metrics(self) -> List[Metric]:
        return list(self._families())

    def build_metrics(self, payload: List[PerformanceRecord]) -> List[Metric]:
        operations, read_bytes, write_bytes = self._families()
        for record in payload:
            labels = {"fs": record.filesystem, "nodename": record.node_name}
            for operation, count in record.operations().items():
                operations.add_sample(operations.name, dict(labels, operation=operation), count)
            read_bytes.add_sample(read_bytes.name, labels, record.read_bytes)
            write_bytes.add_sample(write_bytes.name, labels, record.write_bytes)
        return [operations, read_bytes, write_bytes]

    @staticmethod
    def _families():
        # Plain Metric keeps the sample names without a _total suffix
        return (
            Metric("gpfs_perf_operations", "GPFS operations reported by mmpmon", "counter"),
            Metric("gpfs_perf_read_bytes", "GPFS read bytes", "counter"),
            Metric("gpfs_perf_write_bytes", "GPFS write bytes", "counter"),
        )
