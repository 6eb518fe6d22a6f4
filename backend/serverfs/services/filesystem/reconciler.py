"""Keeps a server's in-memory config in step with its JSON file on disk.

Operators may hand-edit the file. Valid edits are adopted; malformed ones are
undone by rewriting the file from memory. Writes made by the daemon itself are
flagged beforehand so the watcher does not treat their echo as a remote edit.
"""

import asyncio
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
from watchfiles import Change, awatch

from serverfs.core.config import settings
from serverfs.services.filesystem.base import ServerContext

logger = logging.getLogger(__name__)


class WatchState(str, Enum):
    IDLE = "idle"
    WRITE_IN_FLIGHT = "write_in_flight"


def dump_document(document: dict[str, Any]) -> str:
    return json.dumps(document, indent=4)


async def read_document(path: Path) -> Any:
    async with aiofiles.open(path, encoding="utf-8") as handle:
        return json.loads(await handle.read())


async def write_document(path: Path, document: dict[str, Any]) -> None:
    await aiofiles.os.makedirs(path.parent, exist_ok=True)
    async with aiofiles.open(path, "w", encoding="utf-8") as handle:
        await handle.write(dump_document(document))


class ConfigWatchReconciler:
    def __init__(self, server: ServerContext, debounce_ms: int | None = None) -> None:
        self.server = server
        self.known_write = False
        self._debounce_ms = debounce_ms if debounce_ms is not None else settings.watch_debounce_ms
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def config_location(self) -> Path:
        return Path(self.server.config_location)

    @property
    def state(self) -> WatchState:
        return WatchState.WRITE_IN_FLIGHT if self.known_write else WatchState.IDLE

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def watches(self, path: Path) -> bool:
        return path == self.config_location

    def mark_known_write(self) -> None:
        self.known_write = True

    async def handle_change(self) -> None:
        """Process one change notification for the config file."""
        if self.known_write:
            self.known_write = False
            return

        log = self.server.log
        log.debug("Detected remote file change, updating JSON object correspondingly.")
        try:
            document = await read_document(self.config_location)
        except (OSError, ValueError) as e:
            log.warning(f"An error was detected with the changed file, attempting to undo the changes: {e}")
            self.known_write = True
            try:
                await write_document(self.config_location, self.server.json)
            except OSError as write_error:
                log.critical(f"Unable to undo those changes, this could break the daemon badly: {write_error}")
            else:
                log.debug("Successfully undid those remote changes.")
            return

        self.server.json = document

    async def start(self) -> None:
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._watch(self._stop_event))

    async def stop(self) -> None:
        if self._task is None:
            return
        if self._stop_event is not None:
            self._stop_event.set()
        try:
            await self._task
        finally:
            self._task = None
            self._stop_event = None

    async def _watch(self, stop_event: asyncio.Event) -> None:
        config = self.config_location

        def only_config(change: Change, path: str) -> bool:
            return change != Change.deleted and Path(path) == config

        self.server.log.debug(f"Watching {config} for remote changes")
        async for _changes in awatch(
            config.parent,
            watch_filter=only_config,
            debounce=self._debounce_ms,
            recursive=False,
            stop_event=stop_event,
        ):
            try:
                await self.handle_change()
            except Exception:
                self.server.log.exception("Config reconciliation failed")

        self.server.log.debug(f"Stopped watching {config}")
