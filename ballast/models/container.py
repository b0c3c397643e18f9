"""Data models for runtime containers and in-container commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

DEFAULT_THRESHOLD_LABEL = "threshold"


@dataclass(frozen=True)
class ExecResult:
    exit_code: int
    output: str


@dataclass(frozen=True)
class ContainerHandle:
    id: str
    name: str
    labels: Mapping[str, str] = field(default_factory=dict)
    threshold_label: str = DEFAULT_THRESHOLD_LABEL

    @property
    def threshold(self) -> Optional[str]:
        """Recorded capacity label, or ``None`` if the container is unmanaged."""
        return self.labels.get(self.threshold_label)

    @property
    def managed(self) -> bool:
        return self.threshold is not None

    @classmethod
    def from_inspect(
        cls,
        data: Mapping[str, Any],
        threshold_label: str = DEFAULT_THRESHOLD_LABEL,
    ) -> ContainerHandle:
        config = data.get("Config") or {}
        labels = dict(config.get("Labels") or {})
        name = str(data.get("Name") or "").lstrip("/")
        return cls(
            id=str(data.get("Id", "")),
            name=name,
            labels=labels,
            threshold_label=threshold_label,
        )


@dataclass(frozen=True)
class DiskUsageSample:
    capacity_gb: float
    used_gb: int

    @property
    def headroom_gb(self) -> float:
        return self.capacity_gb - self.used_gb
