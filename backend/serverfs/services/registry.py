"""Registry of the server instances hosted under the data directory."""

import logging
from pathlib import Path
from typing import Any

from serverfs.core.config import settings
from serverfs.services.filesystem.reconciler import write_document
from serverfs.services.server import Server

logger = logging.getLogger(__name__)


class ServerRegistry:
    def __init__(self, data_dir: Path | None = None, watch: bool | None = None) -> None:
        self.data_dir = Path(data_dir or settings.data_dir)
        self.watch = settings.watch_config if watch is None else watch
        self._servers: dict[str, Server] = {}

    def __contains__(self, uuid: str) -> bool:
        return uuid in self._servers

    def __len__(self) -> int:
        return len(self._servers)

    def get(self, uuid: str) -> Server:
        if uuid not in self._servers:
            raise KeyError(f"Unknown server: {uuid}")
        return self._servers[uuid]

    def all(self) -> list[Server]:
        return list(self._servers.values())

    async def load(self) -> None:
        """Register every sub-directory of the data directory holding a config file."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for child in sorted(self.data_dir.iterdir()):
            if not (child / settings.config_filename).is_file():
                continue
            try:
                server = await Server.load(child.name, child)
            except (OSError, ValueError) as e:
                logger.error(f"Unable to load server {child.name}: {e}")
                continue
            await self._register(server)

        logger.info(f"Loaded {len(self._servers)} servers from {self.data_dir}")

    async def create(self, uuid: str, document: dict[str, Any] | None = None) -> Server:
        if uuid in self._servers:
            raise ValueError(f"Server {uuid} already exists")

        root = self.data_dir / uuid
        root.mkdir(parents=True, exist_ok=True)
        server = Server(uuid, root, document)
        # Written before the watcher starts, so no echo to suppress.
        await write_document(server.config_location, server.json)
        await self._register(server)
        return server

    async def _register(self, server: Server) -> None:
        self._servers[server.uuid] = server
        if self.watch:
            await server.filesystem.reconciler.start()
        server.log.debug(f"Registered server rooted at {server.sandbox.root}")

    async def close(self) -> None:
        for server in self._servers.values():
            await server.filesystem.reconciler.stop()
