"""Provider package for container runtime integrations."""

from ballast.providers.runtime import ContainerRuntime, DockerRuntime

__all__ = ["ContainerRuntime", "DockerRuntime"]
