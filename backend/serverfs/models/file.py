"""File metadata returned by stat and directory listings."""

from datetime import datetime

from pydantic import BaseModel

UNKNOWN_MIME = "unknown"


class FileMetadata(BaseModel):
    name: str
    created: datetime
    modified: datetime
    size: int
    directory: bool
    file: bool
    symlink: bool
    mime: str = UNKNOWN_MIME
