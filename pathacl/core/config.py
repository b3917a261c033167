"""Configuration management for pathacl.

:class:`ConfigManager` loads operator settings from YAML (or TOML) and
validates them with Pydantic models. The permission engine itself needs very
little configuration: the path limits that bound recursion depth, where the
audit trail is written, and how logging is set up.
"""
from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from pathacl.utils.errors import ConfigurationError
from pathacl.utils.logging import get_logger

logger = get_logger(__name__)


class LimitsSettings(BaseModel):
    """Bounds applied to every path handed to the access control facade."""

    max_path_depth: int = Field(default=64, description="Maximum number of path segments")
    max_segment_length: int = Field(default=256, description="Maximum characters per segment")

    @field_validator("max_path_depth", "max_segment_length")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("limits must be positive")
        return value


class AuditSettings(BaseModel):
    """Where permission events are persisted."""

    enabled: bool = True
    path: Path = Field(default=Path(".pathacl/audit.log"))


class LoggingSettings(BaseModel):
    level: str = "INFO"
    directory: Optional[Path] = None
    rich: bool = True


class PathAclSettings(BaseModel):
    """Root configuration schema."""

    limits: LimitsSettings = Field(default_factory=LimitsSettings)
    audit: AuditSettings = Field(default_factory=AuditSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class ConfigManager:
    """Load configuration files for the runtime.

    The manager is created once in :mod:`pathacl.main` and the resulting
    settings are injected into the other components. A missing configuration
    file is not an error; the defaults above apply.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        self.config_path = config_path or Path(os.environ.get("PATHACL_CONFIG", "config/pathacl.yml"))
        self._settings: Optional[PathAclSettings] = None
        self._callbacks: List[Callable[[PathAclSettings], Awaitable[None]]] = []
        self._lock = asyncio.Lock()

    async def load(self) -> PathAclSettings:
        """Load configuration from disk and validate it."""

        async with self._lock:
            logger.debug("loading configuration", extra={"path": str(self.config_path)})
            data = self._read_file(self.config_path)
            try:
                settings = PathAclSettings(**data)
            except ValidationError as exc:
                raise ConfigurationError(str(exc)) from exc
            self._settings = settings
            return settings

    async def reload(self) -> PathAclSettings:
        """Reload configuration explicitly and notify callbacks."""

        settings = await self.load()
        await self._notify(settings)
        return settings

    def register_callback(self, callback: Callable[[PathAclSettings], Awaitable[None]]) -> None:
        """Register a coroutine callback executed after reloads."""

        self._callbacks.append(callback)

    async def get_settings(self) -> PathAclSettings:
        """Return the last loaded settings, loading them if necessary."""

        if self._settings is None:
            return await self.load()
        return self._settings

    async def _notify(self, settings: PathAclSettings) -> None:
        for callback in self._callbacks:
            try:
                await callback(settings)
            except Exception as exc:  # pragma: no cover - logging side effects only
                logger.exception("configuration callback failed", exc_info=exc)

    @staticmethod
    def _read_file(path: Path) -> Dict[str, Any]:
        if not path.exists():
            logger.info("configuration file missing, using defaults", extra={"path": str(path)})
            return {}
        if path.suffix in {".yml", ".yaml"}:
            with path.open("r", encoding="utf-8") as handle:
                try:
                    data = yaml.safe_load(handle) or {}
                except yaml.YAMLError as exc:
                    raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
        elif path.suffix == ".toml":
            import tomllib  # Python 3.11+ built-in

            with path.open("rb") as handle:
                try:
                    data = tomllib.load(handle)
                except tomllib.TOMLDecodeError as exc:
                    raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc
        else:
            raise ConfigurationError(f"Unsupported configuration format: {path.suffix}")
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration in {path} must be a mapping")
        return data


__all__ = [
    "ConfigManager",
    "PathAclSettings",
    "LimitsSettings",
    "AuditSettings",
    "LoggingSettings",
]
