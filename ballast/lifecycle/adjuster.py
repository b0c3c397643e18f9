"""Shrinking the ballast file that reserves quota headroom."""

from __future__ import annotations

import logging

from ballast.errors import AdjustmentError, ExecutionError
from ballast.lifecycle.parsing import parse_file_size
from ballast.lifecycle.runner import CommandRunner
from ballast.models.container import ContainerHandle
from ballast.models.storage import GIGABYTE, StorageSize

logger = logging.getLogger(__name__)

DEFAULT_BALLAST_PATH = "/ballast"


class BallastAdjuster:
    """Owns the single ballast path inside each managed container.

    Nothing here touches any other file. Sizes only ever go down once the
    initial allocation is made, and a size of zero means the file is absent.
    """

    def __init__(self, runner: CommandRunner, path: str = DEFAULT_BALLAST_PATH) -> None:
        self._runner = runner
        self.path = path

    def allocate(self, handle: ContainerHandle, size: StorageSize) -> None:
        self._runner.execute(handle.id, ["fallocate", "-l", str(size.bytes), self.path])
        logger.info(
            "ballast.allocated",
            extra={"container": handle.name or handle.id, "size": str(size)},
        )

    def exists(self, handle: ContainerHandle) -> bool:
        try:
            self._runner.execute(handle.id, ["test", "-e", self.path])
        except ExecutionError as exc:
            if exc.exit_code == 1:
                return False
            raise
        return True

    def current_size(self, handle: ContainerHandle) -> int:
        """Ballast size in bytes; a missing file counts as zero."""
        if not self.exists(handle):
            return 0
        output = self._runner.execute(handle.id, ["stat", "-c", "%s", self.path])
        return parse_file_size(output)

    def reduce(self, handle: ContainerHandle, reduction_gb: float) -> int:
        """Shrink the ballast by ``reduction_gb`` and return the new size in bytes."""
        current = self.current_size(handle)
        if current == 0:
            logger.info("ballast.absent", extra={"container": handle.name or handle.id})
            return 0

        new_size = max(0, current - int(reduction_gb * GIGABYTE))

        try:
            self._runner.execute(handle.id, ["rm", "-f", self.path])
        except ExecutionError as exc:
            raise AdjustmentError(f"failed to remove ballast file: {exc}") from exc

        if new_size > 0:
            try:
                self._runner.execute(
                    handle.id, ["fallocate", "-l", str(new_size), self.path]
                )
            except ExecutionError as exc:
                raise AdjustmentError(f"failed to create new ballast file: {exc}") from exc
            logger.info(
                "ballast.reduced",
                extra={"container": handle.name or handle.id, "size": new_size},
            )
        else:
            logger.info("ballast.removed", extra={"container": handle.name or handle.id})
        return new_size
