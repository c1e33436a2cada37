"""Tests for configuration loading and validation."""

import pytest
from pydantic import ValidationError

from gpfs_exporter.config.loader import ConfigLoader
from gpfs_exporter.config.models import ExporterConfig, GPFSExporterConfig, LoggingConfig


@pytest.fixture
def config_file(tmp_path):
    def _write(content):
        path = tmp_path / "gpfs_exporter.yaml"
        path.write_text(content)
        return str(path)
    return _write


def test_defaults_without_path():
    config = ConfigLoader.load()

    assert config.exporter.listen_port == 9303
    assert config.exporter.use_cache is False
    assert config.exporter.sudo_command == "sudo"
    assert config.collectors.mmpmon.enabled
    assert config.collectors.mmpmon.command == ["/usr/lpp/mmfs/bin/mmpmon", "-s", "-p"]
    assert config.collectors.mmpmon.timeout == 5.0
    assert not config.collectors.verbs.enabled


def test_load_from_file(config_file):
    path = config_file("""
exporter:
  listen_port: 9999
  use_cache: true
collectors:
  verbs:
    enabled: true
    timeout: 2
""")
    config = ConfigLoader.load_from_file(path)

    assert config.exporter.listen_port == 9999
    assert config.exporter.use_cache is True
    assert config.collectors.verbs.enabled
    assert config.collectors.verbs.timeout == 2
    assert config.collectors.verbs.command[-2:] == ["verbs", "status"]


def test_env_substitution(config_file, monkeypatch):
    monkeypatch.setenv("GPFS_SUDO", "doas")
    path = config_file("exporter:\n  sudo_command: \"${GPFS_SUDO}\"\n")

    assert ConfigLoader.load_from_file(path).exporter.sudo_command == "doas"


def test_unset_env_disables_sudo(config_file, monkeypatch):
    monkeypatch.delenv("GPFS_SUDO_UNSET", raising=False)
    path = config_file("exporter:\n  sudo_command: \"${GPFS_SUDO_UNSET}\"\n")

    assert ConfigLoader.load_from_file(path).exporter.sudo_command is None


def test_empty_file_uses_defaults(config_file):
    assert ConfigLoader.load_from_file(config_file("")) == GPFSExporterConfig()


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        ConfigLoader.load_from_file("/nonexistent/gpfs_exporter.yaml")


@pytest.mark.parametrize("content", [
    "exporter:\n  listen_port: 70000\n",
    "collectors:\n  mmpmon:\n    timeout: 0\n",
    "collectors:\n  mmpmon:\n    command: ['  ']\n",
    "logging:\n  level: LOUD\n",
])
def test_invalid_values(config_file, content):
    with pytest.raises(ValidationError):
        ConfigLoader.load_from_file(config_file(content))


def test_log_level_normalised():
    assert LoggingConfig(level="debug").level == "DEBUG"


def test_log_level_from_env(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")

    assert LoggingConfig().level == "WARNING"


def test_blank_sudo_is_none():
    assert ExporterConfig(sudo_command="").sudo_command is None
