"""Sandboxed filesystem for a single server instance."""

from pathlib import Path
from typing import Any

from serverfs.models.file import FileMetadata
from serverfs.services.filesystem.archive import ArchiveEngine
from serverfs.services.filesystem.base import ServerContext
from serverfs.services.filesystem.listing import DirectoryLister
from serverfs.services.filesystem.mover import BatchMover
from serverfs.services.filesystem.operations import FileOps
from serverfs.services.filesystem.reconciler import ConfigWatchReconciler, WatchState


class FileSystem:
    """Every operation resolves its paths inside the server's sandbox first."""

    def __init__(self, server: ServerContext) -> None:
        self.server = server
        self.sandbox = server.sandbox
        self.reconciler = ConfigWatchReconciler(server)
        self.ops = FileOps(self.sandbox, self.reconciler)
        self.mover = BatchMover(self.sandbox)
        self.archives = ArchiveEngine(self.sandbox)
        self.lister = DirectoryLister(self.sandbox)

    def path(self, relative: str = "") -> Path:
        return self.sandbox.path(relative)

    def is_self(self, move_to: str, move_from: str) -> bool:
        return self.sandbox.is_self(move_to, move_from)

    async def write(self, path: str, data: str | bytes) -> None:
        await self.ops.write(path, data)

    async def read(self, path: str) -> str:
        return await self.ops.read(path)

    async def read_tail(self, path: str, max_bytes: int | None = None) -> str:
        return await self.ops.read_tail(path, max_bytes)

    async def stat(self, path: str) -> FileMetadata:
        return await self.ops.stat(path)

    async def delete(self, path: str) -> None:
        await self.ops.delete(path)

    async def copy(
        self,
        path: str,
        new_path: str,
        clobber: bool = False,
        preserve_timestamps: bool = False,
    ) -> None:
        await self.ops.copy(path, new_path, clobber=clobber, preserve_timestamps=preserve_timestamps)

    async def move(self, initial: Any, ending: Any) -> None:
        await self.mover.move(initial, ending)

    async def compress(self, files: Any, to: Any) -> str:
        return await self.archives.compress(files, to)

    async def decompress(self, files: Any) -> None:
        await self.archives.decompress(files)

    async def directory(self, path: str = "") -> list[FileMetadata]:
        return await self.lister.list(path)


__all__ = [
    "ArchiveEngine",
    "BatchMover",
    "ConfigWatchReconciler",
    "DirectoryLister",
    "FileOps",
    "FileSystem",
    "ServerContext",
    "WatchState",
]
