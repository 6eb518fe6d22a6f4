"""Best-effort MIME detection. Never raises; failures degrade to ``unknown``."""

import logging
import mimetypes
import os
from pathlib import Path

from serverfs.models.file import UNKNOWN_MIME

logger = logging.getLogger(__name__)

_SNIFF_BYTES = 512


def detect_mime(path: Path) -> str:
    try:
        if path.is_dir():
            return "inode/directory"
        if not path.exists():
            # Dangling symlink
            return "inode/symlink" if path.is_symlink() else UNKNOWN_MIME

        guessed, _ = mimetypes.guess_type(path.name)
        if guessed:
            return guessed

        if os.path.getsize(path) == 0:
            return "inode/x-empty"

        with path.open("rb") as handle:
            head = handle.read(_SNIFF_BYTES)
    except OSError as e:
        logger.debug(f"MIME detection failed for {path}: {e}")
        return UNKNOWN_MIME

    if b"\x00" in head:
        return "application/octet-stream"
    try:
        head.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multi-byte character cut at the sniff boundary is still text
        if e.start < len(head) - 3:
            return "application/octet-stream"
    return "text/plain"
