import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from serverfs.api import files
from serverfs.core.config import settings
from serverfs.core.errors import (
    FileSystemError,
    InvalidArgumentType,
    LengthMismatch,
    NoValidEntries,
    NotADirectory,
    NotAFile,
    PathViolation,
    ProtectedPath,
    TooLarge,
    TypeMismatch,
    UnsupportedArchive,
)
from serverfs.services.registry import ServerRegistry

logger = logging.getLogger(__name__)

# Checked in order, first match wins
ERROR_STATUS: list[tuple[type[Exception], int]] = [
    (PathViolation, 403),
    (ProtectedPath, 403),
    (TooLarge, 413),
    (NotAFile, 400),
    (NotADirectory, 400),
    (TypeMismatch, 400),
    (LengthMismatch, 400),
    (InvalidArgumentType, 400),
    (NoValidEntries, 400),
    (UnsupportedArchive, 415),
    (FileNotFoundError, 404),
    (FileExistsError, 409),
    (PermissionError, 403),
]


def status_for(exc: Exception) -> int:
    for kind, status in ERROR_STATUS:
        if isinstance(exc, kind):
            return status
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Configure logging based on debug setting
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s" if settings.debug
        else "%(levelname)-8s %(name)s: %(message)s",
    )

    registry = ServerRegistry()
    await registry.load()
    app.state.registry = registry

    yield

    # Stop config watchers on shutdown
    await registry.close()


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.include_router(files.router, prefix="/api/servers/{uuid}/files", tags=["files"])


@app.exception_handler(FileSystemError)
@app.exception_handler(OSError)
async def filesystem_error_handler(request: Request, exc: Exception):
    status = status_for(exc)
    if status == 500:
        logger.error(f"Unhandled filesystem error on {request.url.path}: {exc}")
    detail = exc.strerror if isinstance(exc, OSError) and exc.strerror else str(exc)
    return JSONResponse(status_code=status, content={"detail": detail})


@app.get("/api/health")
async def health():
    return {"status": "ok", "app": settings.app_name, "servers": len(app.state.registry)}
