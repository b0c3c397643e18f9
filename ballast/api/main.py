from __future__ import annotations

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from ballast.config import load_settings
from ballast.errors import (
    BallastError,
    ContainerCreateError,
    ContainerNotFoundError,
    RuntimeConnectionError,
)
from ballast.lifecycle.manager import ContainerLifecycle
from ballast.providers.runtime.docker import DockerRuntime


@lru_cache(maxsize=1)
def get_lifecycle() -> ContainerLifecycle:
    settings = load_settings()
    runtime = DockerRuntime.from_env(timeout=settings.client_timeout)
    return ContainerLifecycle(runtime, settings)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    if get_lifecycle.cache_info().currsize:
        get_lifecycle().close()
        get_lifecycle.cache_clear()


app = FastAPI(title="container-ballast", lifespan=lifespan)


@app.exception_handler(BallastError)
async def ballast_error_handler(_: Request, exc: BallastError) -> JSONResponse:
    if isinstance(exc, ContainerNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ContainerCreateError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, RuntimeConnectionError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_502_BAD_GATEWAY
    return JSONResponse(status_code=code, content={"detail": str(exc)})


@app.get("/health")
def health_check() -> dict:
    return {"status": "ok"}


@app.post("/containers/{name}", status_code=status.HTTP_201_CREATED)
def run_container(
    name: str, lifecycle: ContainerLifecycle = Depends(get_lifecycle)
) -> dict:
    return {"id": lifecycle.run(name)}


@app.post("/containers/{name}/start")
def start_container(
    name: str, lifecycle: ContainerLifecycle = Depends(get_lifecycle)
) -> dict:
    lifecycle.start(name)
    return {"name": name, "state": "running"}


@app.post("/containers/{name}/stop")
def stop_container(
    name: str, lifecycle: ContainerLifecycle = Depends(get_lifecycle)
) -> dict:
    lifecycle.stop(name)
    return {"name": name, "state": "stopped"}


@app.delete("/containers/{name}", status_code=status.HTTP_204_NO_CONTENT)
def remove_container(
    name: str, lifecycle: ContainerLifecycle = Depends(get_lifecycle)
) -> Response:
    lifecycle.remove(name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
