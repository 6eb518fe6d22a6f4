"""Move one path, or index-aligned batches of paths, inside a sandbox."""

import asyncio
import errno
import logging
import os
import shutil
from pathlib import Path
from typing import Any

from serverfs.core.errors import LengthMismatch, SelfMove, TypeMismatch
from serverfs.core.sandbox import Sandbox
from serverfs.models.paths import Batch, PathLike, Single, parse_paths
from serverfs.services.filesystem.concurrency import each_limit

logger = logging.getLogger(__name__)


# Filesystems that cannot hard link fall back to a reserved copy
_NO_LINK = {errno.EXDEV, errno.EPERM, errno.EOPNOTSUPP, errno.EMLINK}


def _move_file(source: Path, destination: Path) -> None:
    try:
        os.link(source, destination, follow_symlinks=False)
    except OSError as e:
        if e.errno not in _NO_LINK:
            raise
        # O_EXCL claims the name so a concurrent move cannot take it too
        os.close(os.open(destination, os.O_CREAT | os.O_EXCL | os.O_WRONLY))
        try:
            shutil.move(source, destination)
        except OSError:
            destination.unlink(missing_ok=True)
            raise
        return
    os.unlink(source)


def _move_directory(source: Path, destination: Path) -> None:
    # mkdir claims the name; renaming a directory onto an empty one replaces it
    destination.mkdir()
    try:
        os.rename(source, destination)
    except OSError as e:
        if e.errno != errno.EXDEV:
            destination.rmdir()
            raise
        shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)
        shutil.rmtree(source)


def _move(source: Path, destination: Path) -> None:
    # Never clobber. The kernel enforces it, the check only reports it early.
    if os.path.lexists(destination):
        raise FileExistsError(errno.EEXIST, "Destination already exists", str(destination))
    destination.parent.mkdir(parents=True, exist_ok=True)
    if source.is_dir() and not source.is_symlink():
        _move_directory(source, destination)
    else:
        _move_file(source, destination)


class BatchMover:
    def __init__(self, sandbox: Sandbox, concurrency: int | None = None) -> None:
        self.sandbox = sandbox
        self.concurrency = concurrency

    def _pairs(self, initial: Any, ending: Any) -> list[tuple[PathLike, PathLike]]:
        sources = parse_paths(initial)
        targets = parse_paths(ending)

        if isinstance(sources, Single) and isinstance(targets, Single):
            return [(sources.path, targets.path)]
        if isinstance(sources, Batch) and isinstance(targets, Batch):
            if len(sources) != len(targets):
                raise LengthMismatch()
            return list(zip(sources.paths, targets.paths))
        raise TypeMismatch()

    async def move(self, initial: Any, ending: Any) -> None:
        """Move ``initial`` to ``ending``; both a path, or both equal-length lists.

        Every pair is validated before anything is moved. A destination that
        already exists is skipped as a success. Any other failure stops the
        batch, leaving completed moves in place.
        """
        resolved: list[tuple[Path, Path]] = []
        for from_path, to_path in self._pairs(initial, ending):
            if self.sandbox.is_self(to_path, from_path):
                raise SelfMove()
            resolved.append((
                self.sandbox.resolve(from_path, follow_symlinks=False),
                self.sandbox.resolve(to_path, follow_symlinks=False),
            ))

        await each_limit(resolved, self._move_pair, self.concurrency)

    async def _move_pair(self, pair: tuple[Path, Path]) -> None:
        source, destination = pair
        try:
            await asyncio.to_thread(_move, source, destination)
        except FileExistsError:
            logger.debug(f"Skipping move of {source}, {destination} already exists")
