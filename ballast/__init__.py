"""Quota ballast management for containers."""

from ballast.config import BallastSettings, load_settings
from ballast.lifecycle import ContainerLifecycle
from ballast.models import StorageSize

__all__ = ["BallastSettings", "ContainerLifecycle", "StorageSize", "load_settings"]
