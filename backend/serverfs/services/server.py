"""A managed server instance: its sandbox root, config document and filesystem."""

import logging
import os
from pathlib import Path
from typing import Any

from serverfs.core.config import settings
from serverfs.core.sandbox import Sandbox
from serverfs.services.filesystem import FileSystem
from serverfs.services.filesystem.reconciler import dump_document, read_document


class Server:
    def __init__(
        self,
        uuid: str,
        root: str | os.PathLike[str],
        document: dict[str, Any] | None = None,
    ) -> None:
        self.uuid = uuid
        self.sandbox = Sandbox(root)
        self.config_location = self.sandbox.path(settings.config_filename)
        self.json: dict[str, Any] = document if document is not None else {}
        self.log = logging.getLogger(f"serverfs.server.{uuid}")
        self.filesystem = FileSystem(self)

    @classmethod
    async def load(cls, uuid: str, root: str | os.PathLike[str]) -> "Server":
        server = cls(uuid, root)
        server.json = await read_document(server.config_location)
        return server

    @property
    def known_write(self) -> bool:
        return self.filesystem.reconciler.known_write

    def path(self, relative: str = "") -> Path:
        return self.sandbox.path(relative)

    async def save(self) -> None:
        """Persist the in-memory document through the filesystem so the watcher ignores the echo."""
        await self.filesystem.write(settings.config_filename, dump_document(self.json))
