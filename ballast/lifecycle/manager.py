"""Container lifecycle with ballast management around stop."""

from __future__ import annotations

from collections import defaultdict
from contextlib import contextmanager
import logging
import threading
from typing import Iterator

from ballast.config import BallastSettings
from ballast.errors import BallastError, ContainerNotFoundError
from ballast.lifecycle.adjuster import BallastAdjuster
from ballast.lifecycle.parsing import parse_capacity, parse_used_space
from ballast.lifecycle.runner import CommandRunner
from ballast.models.container import ContainerHandle, DiskUsageSample
from ballast.providers.runtime.base import ContainerRuntime

logger = logging.getLogger(__name__)


class _NameLocks:
    """One lock per container name; entries are dropped when unused."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._users: defaultdict[str, int] = defaultdict(int)

    @contextmanager
    def hold(self, name: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(name, threading.Lock())
            self._users[name] += 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[name] -= 1
                if self._users[name] == 0:
                    del self._users[name]
                    del self._locks[name]


class ContainerLifecycle:
    """Run, stop, start and remove containers that carry a ballast file.

    On ``run`` the container is labelled with its combined capacity
    (base + margin) and a ballast file of ``ballast_margin`` bytes is
    allocated. On ``stop`` the label is read back; when free space on ``/``
    is at or below ``trigger_headroom_gb`` the ballast shrinks by
    ``reduction_gb`` so the next start has room to write runtime state.

    Diagnostics never block a stop: any failure while sampling or
    adjusting is logged and the container is stopped anyway.

    Calls for the same name are serialized within this process.
    """

    def __init__(
        self, runtime: ContainerRuntime, settings: BallastSettings | None = None
    ) -> None:
        self.settings = settings or BallastSettings()
        self._runtime = runtime
        self._runner = CommandRunner(runtime)
        self._adjuster = BallastAdjuster(self._runner, self.settings.ballast_path)
        self._locks = _NameLocks()
        self._closed = False

    @property
    def adjuster(self) -> BallastAdjuster:
        return self._adjuster

    def __enter__(self) -> ContainerLifecycle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def run(self, name: str) -> str:
        threshold = str(self.settings.threshold)
        storage_opt = {"size": threshold} if self.settings.enforce_quota else None
        with self._locks.hold(name):
            container_id = self._runtime.create(
                name,
                self.settings.image,
                self.settings.command,
                labels={self.settings.threshold_label: threshold},
                storage_opt=storage_opt,
            )
            logger.info(
                "container.created",
                extra={"container": name, "id": container_id, "threshold": threshold},
            )
            try:
                self._runtime.start(container_id)
                handle = ContainerHandle(
                    id=container_id,
                    name=name,
                    labels={self.settings.threshold_label: threshold},
                    threshold_label=self.settings.threshold_label,
                )
                self._adjuster.allocate(handle, self.settings.ballast_margin)
            except Exception:
                self._discard(name, container_id)
                raise
        logger.info("container.running", extra={"container": name})
        return container_id

    def remove(self, name: str) -> None:
        with self._locks.hold(name):
            try:
                self._runtime.remove(name, force=True)
            except ContainerNotFoundError:
                logger.debug("container.absent", extra={"container": name})
                return
        logger.info("container.removed", extra={"container": name})

    def start(self, name: str) -> None:
        with self._locks.hold(name):
            self._runtime.start(name)
        logger.info("container.started", extra={"container": name})

    def stop(self, name: str) -> None:
        with self._locks.hold(name):
            handle = self.inspect(name)
            if handle.managed:
                try:
                    self._relieve_pressure(handle)
                except BallastError as exc:
                    logger.error(
                        "stop.diagnostics_failed",
                        extra={"container": name, "error": str(exc)},
                    )
            self._runtime.stop(name, timeout=self.settings.stop_timeout)
        logger.info("container.stopped", extra={"container": name})

    def inspect(self, name: str) -> ContainerHandle:
        data = self._runtime.inspect(name)
        return ContainerHandle.from_inspect(data, self.settings.threshold_label)

    def sample_usage(self, handle: ContainerHandle) -> DiskUsageSample:
        capacity = parse_capacity(handle.threshold or "")
        output = self._runner.execute(handle.id, ["df", "--block-size=1G", "/"])
        return DiskUsageSample(capacity_gb=capacity, used_gb=parse_used_space(output))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._runtime.close()

    def _relieve_pressure(self, handle: ContainerHandle) -> None:
        sample = self.sample_usage(handle)
        if sample.headroom_gb > self.settings.trigger_headroom_gb:
            logger.debug(
                "stop.headroom_ok",
                extra={"container": handle.name, "headroom_gb": sample.headroom_gb},
            )
            return
        logger.info(
            "ballast.reducing",
            extra={
                "container": handle.name,
                "used_gb": sample.used_gb,
                "capacity_gb": sample.capacity_gb,
                "reduction_gb": self.settings.reduction_gb,
            },
        )
        self._adjuster.reduce(handle, self.settings.reduction_gb)

    def _discard(self, name: str, container_id: str) -> None:
        try:
            self._runtime.remove(container_id, force=True)
        except Exception as exc:
            logger.warning(
                "container.cleanup_failed", extra={"container": name, "error": str(exc)}
            )
