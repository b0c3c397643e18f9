"""Ballast lifecycle policy."""

from ballast.lifecycle.adjuster import BallastAdjuster
from ballast.lifecycle.manager import ContainerLifecycle
from ballast.lifecycle.parsing import parse_capacity, parse_file_size, parse_used_space
from ballast.lifecycle.runner import CommandRunner

__all__ = [
    "BallastAdjuster",
    "CommandRunner",
    "ContainerLifecycle",
    "parse_capacity",
    "parse_file_size",
    "parse_used_space",
]
