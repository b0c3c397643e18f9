"""Exceptions raised by container-ballast."""

from __future__ import annotations


class BallastError(RuntimeError):
    """Base class for every error raised by this package."""


class ConfigError(BallastError):
    """Raised when the settings file is malformed."""


class RuntimeConnectionError(BallastError):
    """Raised when the container runtime cannot be reached."""


class LifecycleError(BallastError):
    """The runtime rejected a lifecycle transition for a container."""

    action = "manage"

    def __init__(self, name: str, cause: object = None) -> None:
        self.name = name
        self.cause = cause
        message = f"failed to {self.action} container {name}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ContainerCreateError(LifecycleError):
    action = "create"


class ContainerStartError(LifecycleError):
    action = "start"


class ContainerStopError(LifecycleError):
    action = "stop"


class ContainerRemoveError(LifecycleError):
    action = "remove"


class ContainerInspectError(LifecycleError):
    action = "inspect"


class ContainerNotFoundError(LifecycleError):
    action = "find"


class ExecutionError(BallastError):
    """An in-container command failed or exited non-zero."""

    def __init__(self, exit_code: int | None, output: str = "", message: str | None = None) -> None:
        self.exit_code = exit_code
        self.output = output
        if message is None:
            message = f"command exited with code {exit_code}: {output.strip()}"
        super().__init__(message)


class ExecCreateError(ExecutionError):
    def __init__(self, cause: object) -> None:
        super().__init__(None, message=f"failed to create exec: {cause}")


class ExecAttachError(ExecutionError):
    def __init__(self, cause: object) -> None:
        super().__init__(None, message=f"failed to attach exec: {cause}")


class FormatError(BallastError, ValueError):
    """Diagnostic output could not be parsed."""


class AdjustmentError(BallastError):
    """Removing or re-allocating the ballast file failed."""
