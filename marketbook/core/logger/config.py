"""
Logger configuration, built explicitly or from LOG_* environment variables.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

_TRUTHY = ("1", "true", "yes")


@dataclass(frozen=True)
class LoggerConfig:
    """
    Configuration for the marketbook logger.

    Use LoggerConfig.from_env() for env-based config, or build explicitly.
    """

    # DEBUG, INFO, WARNING, ERROR, CRITICAL
    level: str = "INFO"
    # Directory for the rotating JSON log (file handler skipped when None)
    log_dir: Optional[str] = None
    log_file_basename: str = "marketbook"
    max_bytes: int = 5 * 1024 * 1024  # 5 MB
    backup_count: int = 5
    # Handlers are attached here; module loggers inherit
    root_name: str = "marketbook"
    console: bool = True
    file_rotating: bool = True

    def __post_init__(self) -> None:
        if self.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"level must be a standard logging level, got {self.level!r}")
        if self.max_bytes < 1:
            raise ValueError(f"max_bytes must be positive, got {self.max_bytes!r}")
        if self.backup_count < 0:
            raise ValueError(f"backup_count must be non-negative, got {self.backup_count!r}")

    @classmethod
    def from_env(cls) -> "LoggerConfig":
        """
        Env:
            LOG_LEVEL, LOG_DIR, LOG_FILE_BASENAME, LOG_MAX_BYTES,
            LOG_BACKUP_COUNT, LOG_ROOT_NAME, LOG_CONSOLE, LOG_FILE_ROTATING
        """
        return cls(
            level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            log_dir=os.environ.get("LOG_DIR") or None,
            log_file_basename=os.environ.get("LOG_FILE_BASENAME", "marketbook"),
            max_bytes=int(os.environ.get("LOG_MAX_BYTES", "5242880")),
            backup_count=int(os.environ.get("LOG_BACKUP_COUNT", "5")),
            root_name=os.environ.get("LOG_ROOT_NAME", "marketbook"),
            console=os.environ.get("LOG_CONSOLE", "true").lower() in _TRUTHY,
            file_rotating=os.environ.get("LOG_FILE_ROTATING", "true").lower() in _TRUTHY,
        )

    def with_overrides(self, **changes: object) -> "LoggerConfig":
        """Return a copy with the given fields replaced (None values ignored)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
