"""Directory listing with per-entry stat and MIME detection."""

import stat

import aiofiles.os

from serverfs.core.errors import NotADirectory
from serverfs.core.sandbox import Sandbox
from serverfs.models.file import FileMetadata
from serverfs.services.filesystem.concurrency import map_limit
from serverfs.services.filesystem.metadata import describe


class DirectoryLister:
    def __init__(self, sandbox: Sandbox, concurrency: int | None = None) -> None:
        self.sandbox = sandbox
        self.concurrency = concurrency

    async def list(self, path: str = "") -> list[FileMetadata]:
        """List the immediate children of a directory.

        Sorted case-insensitively by name, then by creation time, regardless of
        the order the filesystem returns entries in.
        """
        directory = self.sandbox.resolve(path)
        info = await aiofiles.os.stat(directory)
        if not stat.S_ISDIR(info.st_mode):
            raise NotADirectory()

        names = await aiofiles.os.listdir(directory)
        entries = await map_limit(
            names,
            lambda name: describe(directory / name, self.sandbox),
            self.concurrency,
        )
        return sorted(entries, key=lambda entry: (entry.name.lower(), entry.created))
