"""Interface the filesystem needs from its owning server instance."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from serverfs.core.sandbox import Sandbox


class ServerContext(Protocol):
    sandbox: Sandbox
    config_location: Path
    json: dict[str, Any]
    log: logging.Logger | logging.LoggerAdapter
