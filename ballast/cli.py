"""
CLI: ``container-ballast``: drive the ballast lifecycle for a named container.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import typer
from rich.console import Console

from ballast.config import BallastSettings, load_settings
from ballast.errors import BallastError
from ballast.lifecycle.manager import ContainerLifecycle
from ballast.log import configure_logging
from ballast.providers.runtime.docker import DockerRuntime

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(no_args_is_help=True, help="Manage quota ballast for containers.")


def _runtime_factory(settings: BallastSettings) -> DockerRuntime:
    return DockerRuntime.from_env(timeout=settings.client_timeout)


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", "-c", help="Settings YAML file"),
    log_level: str = typer.Option("INFO", "--log-level", "-l", help="Logging level"),
) -> None:
    configure_logging(log_level)
    ctx.obj = config


@contextmanager
def _lifecycle(ctx: typer.Context) -> Iterator[ContainerLifecycle]:
    try:
        settings = load_settings(ctx.obj)
        with ContainerLifecycle(_runtime_factory(settings), settings) as lifecycle:
            yield lifecycle
    except BallastError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)


@app.command("run")
def run(ctx: typer.Context, name: str = typer.Argument(..., help="Container name")) -> None:
    """Create and start a container with a ballast file.

    Example::

        container-ballast run test
    """
    with _lifecycle(ctx) as lifecycle:
        container_id = lifecycle.run(name)
    console.print(f"[bold green]Running[/bold green] {name} ({container_id[:12]})")


@app.command("stop")
def stop(ctx: typer.Context, name: str = typer.Argument(..., help="Container name")) -> None:
    """Stop a container, shrinking its ballast first if the disk is nearly full."""
    with _lifecycle(ctx) as lifecycle:
        lifecycle.stop(name)
    console.print(f"[yellow]Stopped[/yellow] {name}")


@app.command("start")
def start(ctx: typer.Context, name: str = typer.Argument(..., help="Container name")) -> None:
    """Start a stopped container."""
    with _lifecycle(ctx) as lifecycle:
        lifecycle.start(name)
    console.print(f"[bold green]Started[/bold green] {name}")


@app.command("remove")
def remove(ctx: typer.Context, name: str = typer.Argument(..., help="Container name")) -> None:
    """Force-remove a container. Succeeds if it does not exist."""
    with _lifecycle(ctx) as lifecycle:
        lifecycle.remove(name)
    console.print(f"Removed {name}")


@app.command("inspect")
def inspect(ctx: typer.Context, name: str = typer.Argument(..., help="Container name")) -> None:
    """Show the recorded threshold and current ballast size of a running container."""
    with _lifecycle(ctx) as lifecycle:
        handle = lifecycle.inspect(name)
        if not handle.managed:
            console.print(f"{name}: [dim]not under ballast management[/dim]")
            return
        size = lifecycle.adjuster.current_size(handle)
    console.print(f"{name}: threshold={handle.threshold} ballast={size} bytes")
