"""Scalar-or-sequence path arguments, classified once at the API boundary."""

import os
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from serverfs.core.errors import InvalidArgumentType

PathLike = str | os.PathLike[str]


@dataclass(frozen=True)
class Single:
    path: PathLike


@dataclass(frozen=True)
class Batch:
    paths: tuple[PathLike, ...]

    def __len__(self) -> int:
        return len(self.paths)


PathArgument = Single | Batch


def parse_paths(value: Any) -> PathArgument:
    """Classify a caller value as a single path or an ordered batch of paths."""
    if isinstance(value, (Single, Batch)):
        return value
    if isinstance(value, (str, os.PathLike)):
        return Single(value)
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        for item in value:
            if not isinstance(item, (str, os.PathLike)):
                raise InvalidArgumentType(f"Invalid path in batch: {item!r}")
        return Batch(tuple(value))
    raise InvalidArgumentType(f"Invalid datatype passed as path argument: {type(value).__name__}")
