from __future__ import annotations

from dataclasses import dataclass, field
import itertools
from typing import Any, Mapping, Sequence

import pytest

from ballast.config import BallastSettings
from ballast.errors import (
    ContainerCreateError,
    ContainerNotFoundError,
    ContainerRemoveError,
    ContainerStartError,
    ContainerStopError,
    ExecCreateError,
)
from ballast.lifecycle.manager import ContainerLifecycle


@dataclass
class FakeContainer:
    id: str
    name: str
    labels: dict[str, str]
    storage_opt: dict[str, str] | None = None
    running: bool = False
    files: dict[str, int] = field(default_factory=dict)
    capacity_gb: int = 25
    used_gb: int = 3
    df_output: str | None = None
    # command name -> (exit code, output)
    failures: dict[str, tuple[int, str]] = field(default_factory=dict)


class FakeRuntime:
    """In-memory stand-in for a container engine.

    Commands run through exec are interpreted against ``FakeContainer.files``;
    only the handful the ballast code issues are understood.
    """

    def __init__(self) -> None:
        self.containers: dict[str, FakeContainer] = {}
        self.calls: list[tuple[str, str]] = []
        self.commands: list[tuple[str, tuple[str, ...]]] = []
        self.start_error: str | None = None
        self.stop_error: str | None = None
        self.remove_error: str | None = None
        self.closed = 0
        self._ids = itertools.count(1)
        self._execs: dict[str, tuple[FakeContainer, tuple[str, ...]]] = {}
        self._exit_codes: dict[str, int] = {}

    def _lookup(self, name: str) -> FakeContainer:
        for container in self.containers.values():
            if name in (container.name, container.id):
                return container
        raise ContainerNotFoundError(name, "No such container")

    def container(self, name: str) -> FakeContainer:
        return self._lookup(name)

    def create(
        self,
        name: str,
        image: str,
        command: Sequence[str],
        labels: Mapping[str, str] | None = None,
        storage_opt: Mapping[str, str] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> str:
        self.calls.append(("create", name))
        if name in self.containers:
            raise ContainerCreateError(name, "Conflict. The container name is already in use")
        container_id = f"{next(self._ids):064x}"
        self.containers[name] = FakeContainer(
            id=container_id,
            name=name,
            labels=dict(labels or {}),
            storage_opt=dict(storage_opt) if storage_opt else None,
        )
        return container_id

    def start(self, name: str) -> None:
        self.calls.append(("start", name))
        container = self._lookup(name)
        if self.start_error:
            raise ContainerStartError(name, self.start_error)
        container.running = True

    def stop(self, name: str, timeout: int | None = None) -> None:
        self.calls.append(("stop", name))
        container = self._lookup(name)
        if self.stop_error:
            raise ContainerStopError(name, self.stop_error)
        container.running = False

    def remove(self, name: str, force: bool = False) -> None:
        self.calls.append(("remove", name))
        container = self._lookup(name)
        if self.remove_error:
            raise ContainerRemoveError(name, self.remove_error)
        del self.containers[container.name]

    def inspect(self, name: str) -> Mapping[str, Any]:
        self.calls.append(("inspect", name))
        container = self._lookup(name)
        return {
            "Id": container.id,
            "Name": f"/{container.name}",
            "Config": {"Labels": dict(container.labels) or None},
            "State": {"Running": container.running},
        }

    def exec_create(self, container_id: str, command: Sequence[str]) -> str:
        try:
            container = self._lookup(container_id)
        except ContainerNotFoundError as exc:
            raise ExecCreateError(exc) from exc
        if not container.running:
            raise ExecCreateError(f"container {container_id} is not running")
        exec_id = f"exec-{next(self._ids)}"
        self._execs[exec_id] = (container, tuple(command))
        self.commands.append((container.name, tuple(command)))
        return exec_id

    def exec_start(self, exec_id: str) -> str:
        container, command = self._execs[exec_id]
        code, output = self._interpret(container, command)
        self._exit_codes[exec_id] = code
        return output

    def exec_inspect(self, exec_id: str) -> Mapping[str, Any]:
        return {"ExitCode": self._exit_codes[exec_id], "Running": False}

    def close(self) -> None:
        self.closed += 1

    def _interpret(self, container: FakeContainer, command: tuple[str, ...]) -> tuple[int, str]:
        program = command[0]
        if program in container.failures:
            return container.failures[program]
        path = command[-1]
        if program == "df":
            if container.df_output is not None:
                return 0, container.df_output
            free = container.capacity_gb - container.used_gb
            percent = round(container.used_gb * 100 / container.capacity_gb)
            return 0, (
                "Filesystem     1G-blocks  Used Available Use% Mounted on\n"
                f"overlay {container.capacity_gb:>16} {container.used_gb:>5} "
                f"{free:>9} {percent:>3}% /\n"
            )
        if program == "test":
            return (0, "") if path in container.files else (1, "")
        if program == "stat":
            if path not in container.files:
                return 1, f"stat: cannot statx '{path}': No such file or directory\n"
            return 0, f"{container.files[path]}\n"
        if program == "rm":
            container.files.pop(path, None)
            return 0, ""
        if program == "fallocate":
            container.files[path] = int(command[2])
            return 0, ""
        return 127, f"{program}: command not found\n"

    def stop_count(self, name: str) -> int:
        return self.calls.count(("stop", name))


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv("BALLAST_CONFIG", str(tmp_path / "absent.yaml"))


@pytest.fixture
def runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def settings() -> BallastSettings:
    return BallastSettings()


@pytest.fixture
def lifecycle(runtime: FakeRuntime, settings: BallastSettings) -> ContainerLifecycle:
    return ContainerLifecycle(runtime, settings)
