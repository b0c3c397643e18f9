"""Ballast policy settings loaded from YAML."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
import os
from pathlib import Path
from typing import Any

import yaml

from ballast.errors import ConfigError, FormatError
from ballast.models.storage import StorageSize

CONFIG_ENV_VAR = "BALLAST_CONFIG"
DEFAULT_CONFIG_PATH = "config/ballast.yaml"

_SIZE_FIELDS = ("base_capacity", "ballast_margin")


@dataclass(frozen=True)
class BallastSettings:
    image: str = "ubuntu:latest"
    command: tuple[str, ...] = ("sleep", "3600")
    threshold_label: str = "threshold"
    ballast_path: str = "/ballast"
    base_capacity: StorageSize = field(default_factory=lambda: StorageSize.gb(20))
    ballast_margin: StorageSize = field(default_factory=lambda: StorageSize.gb(5))
    reduction_gb: float = 0.5
    trigger_headroom_gb: float = 1.0
    enforce_quota: bool = False
    stop_timeout: int | None = None
    client_timeout: int | None = None

    @property
    def threshold(self) -> StorageSize:
        """Combined capacity recorded on each managed container."""
        return self.base_capacity + self.ballast_margin


def _coerce(name: str, value: Any) -> Any:
    if name in _SIZE_FIELDS:
        if isinstance(value, bool):
            raise ConfigError(f"{name} must be a byte count or size string")
        if isinstance(value, int):
            return StorageSize(value)
        try:
            return StorageSize.parse(str(value))
        except FormatError as exc:
            raise ConfigError(f"{name}: {exc}") from exc
    if name == "command":
        if isinstance(value, str) or not isinstance(value, list):
            raise ConfigError("command must be a list of strings")
        return tuple(str(part) for part in value)
    if name in ("reduction_gb", "trigger_headroom_gb"):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"{name} must be a number")
        return float(value)
    if name == "enforce_quota":
        if not isinstance(value, bool):
            raise ConfigError("enforce_quota must be a boolean")
        return value
    if name in ("stop_timeout", "client_timeout"):
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise ConfigError(f"{name} must be an integer number of seconds")
        return value
    return str(value)


def load_settings(config_path: str | None = None) -> BallastSettings:
    """Read settings from ``config_path``, ``$BALLAST_CONFIG`` or the default path.

    A missing file yields the built-in defaults.
    """
    path = Path(config_path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
    if not path.exists():
        return BallastSettings()
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {path}")
    overrides = data.get("settings", {}) or {}
    if not isinstance(overrides, dict):
        raise ConfigError(f"'settings' in {path} must be a mapping")
    known = {item.name for item in fields(BallastSettings)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ConfigError(f"Unknown settings in {path}: {', '.join(unknown)}")
    values = {name: _coerce(name, value) for name, value in overrides.items()}
    return replace(BallastSettings(), **values)
