"""Build FileMetadata records from stat results."""

import asyncio
import os
import stat
from datetime import datetime, timezone
from pathlib import Path

import aiofiles.os

from serverfs.core.sandbox import Sandbox
from serverfs.models.file import FileMetadata
from serverfs.services.filesystem.mime import detect_mime


def _timestamp(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


async def describe(path: Path, sandbox: Sandbox) -> FileMetadata:
    """Stat ``path`` and detect its MIME type.

    Symlinks are followed only when their target stays inside the sandbox;
    otherwise the link itself is described.
    """
    link_info = await aiofiles.os.stat(path, follow_symlinks=False)
    info = link_info
    symlink = stat.S_ISLNK(link_info.st_mode)

    if symlink and sandbox.contains(Path(os.path.realpath(path))):
        try:
            info = await aiofiles.os.stat(path)
        except FileNotFoundError:
            pass

    if info is link_info and symlink:
        mime = "inode/symlink"
    else:
        mime = await asyncio.to_thread(detect_mime, path)

    return FileMetadata(
        name=path.name,
        created=_timestamp(getattr(info, "st_birthtime", None) or info.st_ctime),
        modified=_timestamp(info.st_mtime),
        size=info.st_size,
        directory=stat.S_ISDIR(info.st_mode),
        file=stat.S_ISREG(info.st_mode),
        symlink=symlink,
        mime=mime,
    )
