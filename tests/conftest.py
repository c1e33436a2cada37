"""Shared pytest configuration and fixtures."""

import pytest
from unittest.mock import Mock

from gpfs_exporter.collectors.command_runner import CommandRunner
from gpfs_exporter.config.models import MmpmonConfig, VerbsConfig
from gpfs_exporter.utils.logger import setup_logger


MMPMON_OUTPUT = """
_fs_io_s_ _n_ 10.22.0.106 _nn_ ib-pitzer-rw02.ten _rc_ 0 _t_ 1579358234 _tu_ 53212 _cl_ gpfs.osc.edu _fs_ scratch _d_ 48 _br_ 205607400434 _bw_ 74839282351 _oc_ 2377656 _cc_ 2201576 _rdc_ 59420404 _wc_ 18874626 _dir_ 40971 _iu_ 544768
_fs_io_s_ _n_ 10.22.0.106 _nn_ ib-pitzer-rw02.ten _rc_ 0 _t_ 1579358234 _tu_ 53212 _cl_ gpfs.osc.edu _fs_ project _d_ 96 _br_ 0 _bw_ 0 _oc_ 513 _cc_ 513 _rdc_ 0 _wc_ 0 _dir_ 0 _iu_ 169
"""

VERBS_OUTPUT = """
VERBS RDMA status: started
"""


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test")


@pytest.fixture
def runner():
    """Command runner test double; set return_value or side_effect per test."""
    return Mock(spec=CommandRunner)


@pytest.fixture
def mmpmon_output():
    return MMPMON_OUTPUT


@pytest.fixture
def verbs_output():
    return VERBS_OUTPUT


@pytest.fixture
def mmpmon_config():
    return MmpmonConfig()


@pytest.fixture
def verbs_config():
    return VerbsConfig(enabled=True)


@pytest.fixture
def gather():
    """Run collector.collect() once and return every emitted sample."""
    def _gather(collector):
        return [sample for family in collector.collect() for sample in family.samples]
    return _gather


@pytest.fixture
def sample_value():
    """Look up one sample value by name and labels, None if absent."""
    def _sample_value(samples, name, labels=None):
        labels = labels or {}
        for sample in samples:
            if sample.name == name and sample.labels == labels:
                return sample.value
        return None
    return _sample_value
