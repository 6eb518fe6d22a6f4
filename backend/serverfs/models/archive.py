"""Ephemeral state for a single compress call."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ArchiveJob:
    name: str
    destination: Path
    base: Path
    entries: list[str] = field(default_factory=list)  # relative to base

    @property
    def output_path(self) -> Path:
        return self.destination / self.name
