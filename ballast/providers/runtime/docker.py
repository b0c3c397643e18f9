"""Docker engine runtime backed by docker-py's low-level API client."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import Any, Callable, Iterator, Mapping, Sequence

import docker
from docker.errors import DockerException, NotFound
import requests

from ballast.errors import (
    BallastError,
    ContainerCreateError,
    ContainerInspectError,
    ContainerNotFoundError,
    ContainerRemoveError,
    ContainerStartError,
    ContainerStopError,
    ExecAttachError,
    ExecCreateError,
    RuntimeConnectionError,
)
from ballast.providers.runtime.base import ContainerRuntime

logger = logging.getLogger(__name__)


def _explain(exc: DockerException) -> str:
    return str(getattr(exc, "explanation", None) or exc)


@contextmanager
def _lifecycle_errors(
    name: str, error_cls: Callable[[str, object], BallastError]
) -> Iterator[None]:
    try:
        yield
    except NotFound as exc:
        raise ContainerNotFoundError(name, _explain(exc)) from exc
    except requests.exceptions.ConnectionError as exc:
        raise RuntimeConnectionError(f"cannot reach container runtime: {exc}") from exc
    except DockerException as exc:
        raise error_cls(name, _explain(exc)) from exc
    except (requests.exceptions.RequestException, OSError) as exc:
        raise error_cls(name, exc) from exc


@contextmanager
def _exec_errors(error_cls: Callable[[object], BallastError]) -> Iterator[None]:
    try:
        yield
    except requests.exceptions.ConnectionError as exc:
        raise RuntimeConnectionError(f"cannot reach container runtime: {exc}") from exc
    except DockerException as exc:
        raise error_cls(_explain(exc)) from exc
    except (requests.exceptions.RequestException, OSError) as exc:
        raise error_cls(exc) from exc


class DockerRuntime(ContainerRuntime):
    def __init__(self, api: docker.APIClient) -> None:
        self._api = api

    @classmethod
    def from_env(cls, timeout: int | None = None) -> DockerRuntime:
        """Connect using ``DOCKER_HOST`` and friends, negotiating the API version."""
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            client = docker.from_env(**kwargs)
        except (DockerException, requests.exceptions.ConnectionError) as exc:
            raise RuntimeConnectionError(f"cannot connect to docker: {exc}") from exc
        return cls(client.api)

    def create(
        self,
        name: str,
        image: str,
        command: Sequence[str],
        labels: Mapping[str, str] | None = None,
        storage_opt: Mapping[str, str] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> str:
        with _lifecycle_errors(name, ContainerCreateError):
            host_config = self._api.create_host_config(
                storage_opt=dict(storage_opt) if storage_opt else None
            )
            response = self._api.create_container(
                image,
                command=list(command),
                name=name,
                tty=True,
                stdin_open=True,
                environment=dict(env) if env else None,
                labels=dict(labels or {}),
                host_config=host_config,
            )
        return response["Id"]

    def start(self, name: str) -> None:
        with _lifecycle_errors(name, ContainerStartError):
            self._api.start(name)

    def stop(self, name: str, timeout: int | None = None) -> None:
        with _lifecycle_errors(name, ContainerStopError):
            if timeout is None:
                self._api.stop(name)
            else:
                self._api.stop(name, timeout=timeout)

    def remove(self, name: str, force: bool = False) -> None:
        with _lifecycle_errors(name, ContainerRemoveError):
            self._api.remove_container(name, force=force)

    def inspect(self, name: str) -> Mapping[str, Any]:
        with _lifecycle_errors(name, ContainerInspectError):
            return self._api.inspect_container(name)

    def exec_create(self, container_id: str, command: Sequence[str]) -> str:
        with _exec_errors(ExecCreateError):
            response = self._api.exec_create(
                container_id, list(command), stdout=True, stderr=True
            )
        return response["Id"]

    def exec_start(self, exec_id: str) -> str:
        with _exec_errors(ExecAttachError):
            output = self._api.exec_start(exec_id)
        if isinstance(output, bytes):
            return output.decode("utf-8", errors="replace")
        return output or ""

    def exec_inspect(self, exec_id: str) -> Mapping[str, Any]:
        with _exec_errors(ExecAttachError):
            return self._api.exec_inspect(exec_id)

    def close(self) -> None:
        logger.debug("runtime.closed")
        self._api.close()
