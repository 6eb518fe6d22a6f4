"""Single-file primitives: write, read, tail, stat, delete and copy."""

import asyncio
import errno
import logging
import os
import shutil
import stat
from pathlib import Path

import aiofiles
import aiofiles.os

from serverfs.core.config import settings
from serverfs.core.errors import NotAFile, PathViolation, ProtectedPath, TooLarge
from serverfs.core.sandbox import Sandbox
from serverfs.models.file import FileMetadata
from serverfs.services.filesystem.metadata import describe
from serverfs.services.filesystem.reconciler import ConfigWatchReconciler

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def _remove(target: Path) -> None:
    try:
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        else:
            target.unlink()
    except FileNotFoundError:
        pass


def _refuse_escaping_links(destination: Path, sandbox: Sandbox) -> None:
    """Reject a clobbering copy into a tree holding links that lead out of the sandbox."""
    for current, dirnames, filenames in os.walk(destination):
        for name in dirnames + filenames:
            candidate = Path(current) / name
            if candidate.is_symlink() and not sandbox.contains(Path(os.path.realpath(candidate))):
                raise PathViolation(f"Cannot copy over '{sandbox.relative(candidate)}', it links outside the sandbox")


def _copy(
    source: Path,
    destination: Path,
    sandbox: Sandbox,
    clobber: bool,
    preserve_timestamps: bool,
) -> None:
    if os.path.lexists(destination):
        if not clobber:
            raise FileExistsError(errno.EEXIST, "Destination already exists", str(destination))
        # Replace the link itself, never write through it
        if destination.is_symlink():
            destination.unlink()
        elif destination.is_dir():
            _refuse_escaping_links(destination, sandbox)

    copy_function = shutil.copy2 if preserve_timestamps else shutil.copy
    destination.parent.mkdir(parents=True, exist_ok=True)
    if source.is_dir():
        shutil.copytree(
            source,
            destination,
            symlinks=True,
            copy_function=copy_function,
            dirs_exist_ok=clobber,
        )
    else:
        copy_function(source, destination)


class FileOps:
    def __init__(
        self,
        sandbox: Sandbox,
        reconciler: ConfigWatchReconciler,
        max_read_bytes: int | None = None,
        tail_bytes: int | None = None,
    ) -> None:
        self.sandbox = sandbox
        self.reconciler = reconciler
        self.max_read_bytes = max_read_bytes if max_read_bytes is not None else settings.max_read_bytes
        self.tail_bytes = tail_bytes if tail_bytes is not None else settings.tail_bytes

    async def _regular_file(self, path: str) -> tuple[Path, os.stat_result]:
        target = self.sandbox.resolve(path)
        info = await aiofiles.os.stat(target)
        if not stat.S_ISREG(info.st_mode):
            raise NotAFile()
        return target, info

    async def write(self, path: str, data: str | bytes) -> None:
        """Write the full content of a file, creating parent directories as needed."""
        target = self.sandbox.resolve(path)
        await aiofiles.os.makedirs(target.parent, exist_ok=True)

        if self.reconciler.watches(target):
            self.reconciler.mark_known_write()

        if isinstance(data, bytes):
            async with aiofiles.open(target, "wb") as handle:
                await handle.write(data)
        else:
            async with aiofiles.open(target, "w", encoding="utf-8", newline="") as handle:
                await handle.write(data)

    async def read(self, path: str) -> str:
        target, info = await self._regular_file(path)
        if info.st_size > self.max_read_bytes:
            raise TooLarge()

        async with aiofiles.open(target, encoding="utf-8", errors="replace", newline="") as handle:
            return await handle.read()

    async def read_tail(self, path: str, max_bytes: int | None = None) -> str:
        """Return at most the last ``max_bytes`` bytes of a file as text.

        No size ceiling applies here since the result is bounded by ``max_bytes``.
        """
        if max_bytes is None:
            max_bytes = self.tail_bytes
        target, info = await self._regular_file(path)

        start = max(info.st_size - max_bytes, 0)
        remaining = info.st_size - start
        chunks: list[bytes] = []
        async with aiofiles.open(target, "rb") as handle:
            await handle.seek(start)
            while remaining > 0:
                chunk = await handle.read(min(_CHUNK_SIZE, remaining))
                if not chunk:
                    break
                chunks.append(chunk)
                remaining -= len(chunk)

        return b"".join(chunks).decode("utf-8", errors="replace")

    async def stat(self, path: str) -> FileMetadata:
        target = self.sandbox.resolve(path, follow_symlinks=False)
        return await describe(target, self.sandbox)

    async def delete(self, path: str) -> None:
        target = self.sandbox.resolve(path, follow_symlinks=False)
        if target == self.sandbox.root:
            raise ProtectedPath()

        await asyncio.to_thread(_remove, target)
        logger.debug(f"Deleted {target}")

    async def copy(
        self,
        path: str,
        new_path: str,
        clobber: bool = False,
        preserve_timestamps: bool = False,
    ) -> None:
        source = self.sandbox.resolve(path)
        destination = self.sandbox.resolve(new_path, follow_symlinks=False)
        if source.is_dir() and self.sandbox.is_self(new_path, path):
            raise PathViolation("You cannot copy a folder into itself.")

        await asyncio.to_thread(_copy, source, destination, self.sandbox, clobber, preserve_timestamps)
