"""Pydantic configuration models for the GPFS exporter."""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from .settings import Settings


GPFS_BIN = "/usr/lpp/mmfs/bin"


class CollectorConfig(BaseModel):
    """Settings shared by every command-backed collector."""
    enabled: bool = True
    timeout: float = Field(default=5.0, gt=0)  # Seconds
    command: List[str] = Field(default_factory=list)

    @field_validator('command')
    @classmethod
    def validate_command(cls, v: List[str]) -> List[str]:
        """Reject blank argument vectors."""
        if v and not v[0].strip():
            raise ValueError('Command executable must not be blank')
        return v


class MmpmonConfig(CollectorConfig):
    """mmpmon fs_io_s performance collector."""
    command: List[str] = Field(
        default_factory=lambda: [f"{GPFS_BIN}/mmpmon", "-s", "-p"]
    )


class VerbsConfig(CollectorConfig):
    """Verbs RDMA status collector."""
    enabled: bool = False
    command: List[str] = Field(
        default_factory=lambda: [f"{GPFS_BIN}/mmfsadm", "test", "verbs", "status"]
    )


class CollectorsConfig(BaseModel):
    """All collector configuration."""
    mmpmon: MmpmonConfig = Field(default_factory=MmpmonConfig)
    verbs: VerbsConfig = Field(default_factory=VerbsConfig)


class ExporterConfig(BaseModel):
    """HTTP exposition and shared collection settings."""
    listen_address: str = "0.0.0.0"
    listen_port: int = Field(default=9303, ge=1, le=65535)
    use_cache: bool = False
    sudo_command: Optional[str] = "sudo"  # Empty or null disables the prefix

    @field_validator('sudo_command')
    @classmethod
    def blank_sudo_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Normalise an empty sudo command to None."""
        if v is not None and not v.strip():
            return None
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default_factory=Settings.log_level, validate_default=True)  # LOG_LEVEL env var, else INFO

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f'Unknown log level: {v}')
        return level


class GPFSExporterConfig(BaseModel):
    """Root configuration model for the exporter."""
    exporter: ExporterConfig = Field(default_factory=ExporterConfig)
    collectors: CollectorsConfig = Field(default_factory=CollectorsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
