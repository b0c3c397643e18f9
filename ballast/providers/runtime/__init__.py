"""Container runtime implementations and interfaces."""

from ballast.providers.runtime.base import ContainerRuntime
from ballast.providers.runtime.docker import DockerRuntime

__all__ = ["ContainerRuntime", "DockerRuntime"]
