"""Shared data models for container-ballast."""

from ballast.models.container import ContainerHandle, DiskUsageSample, ExecResult
from ballast.models.storage import GIGABYTE, StorageSize

__all__ = [
    "ContainerHandle",
    "DiskUsageSample",
    "ExecResult",
    "GIGABYTE",
    "StorageSize",
]
