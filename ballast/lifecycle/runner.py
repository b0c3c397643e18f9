"""Run commands inside a running container."""

from __future__ import annotations

import logging
from typing import Sequence

from ballast.errors import ExecutionError
from ballast.models.container import ExecResult
from ballast.providers.runtime.base import ContainerRuntime

logger = logging.getLogger(__name__)


class CommandRunner:
    """Executes argv inside a container and captures stdout and stderr together.

    There is no timeout of its own; a hung command blocks until the
    runtime client's timeout (if any) fires.
    """

    def __init__(self, runtime: ContainerRuntime) -> None:
        self._runtime = runtime

    def run(self, container_id: str, command: Sequence[str]) -> ExecResult:
        logger.debug(
            "exec.run", extra={"container": container_id, "command": " ".join(command)}
        )
        exec_id = self._runtime.exec_create(container_id, command)
        output = self._runtime.exec_start(exec_id)
        details = self._runtime.exec_inspect(exec_id)
        exit_code = details.get("ExitCode")
        if exit_code is None:
            # still running, or the engine lost track of it
            raise ExecutionError(
                None, output, message=f"command did not finish: {output.strip()}"
            )
        return ExecResult(exit_code=int(exit_code), output=output)

    def execute(self, container_id: str, command: Sequence[str]) -> str:
        """Return the command output, raising ``ExecutionError`` on a non-zero exit."""
        result = self.run(container_id, command)
        if result.exit_code != 0:
            raise ExecutionError(result.exit_code, result.output)
        return result.output
