"""Container runtime interface."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence


class ContainerRuntime(Protocol):
    """Minimal control surface over a container engine.

    Implementations translate engine failures into ``ballast.errors``
    exceptions: ``ContainerNotFoundError`` for unknown names and the
    matching ``LifecycleError`` subclass for everything else.
    """

    def create(
        self,
        name: str,
        image: str,
        command: Sequence[str],
        labels: Mapping[str, str] | None = None,
        storage_opt: Mapping[str, str] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> str:
        ...

    def start(self, name: str) -> None:
        ...

    def stop(self, name: str, timeout: int | None = None) -> None:
        ...

    def remove(self, name: str, force: bool = False) -> None:
        ...

    def inspect(self, name: str) -> Mapping[str, Any]:
        ...

    def exec_create(self, container_id: str, command: Sequence[str]) -> str:
        ...

    def exec_start(self, exec_id: str) -> str:
        ...

    def exec_inspect(self, exec_id: str) -> Mapping[str, Any]:
        ...

    def close(self) -> None:
        ...
