"""Sandboxed path resolution - ensures every operation stays inside a server's root directory."""

import os
from pathlib import Path

from serverfs.core.errors import PathViolation


class Sandbox:
    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(os.path.realpath(root))

    def path(self, relative: str | os.PathLike[str] = "") -> Path:
        """Join a caller-supplied path onto the root without touching the disk.

        The path is normalised as if it were rooted at ``/``, so ``..`` segments
        and absolute arguments are re-anchored under the sandbox root.
        """
        normalized = os.path.normpath(os.path.join("/", os.fspath(relative)))
        return self.root / normalized.lstrip("/")

    def contains(self, candidate: Path) -> bool:
        return candidate == self.root or self.root in candidate.parents

    def resolve(self, relative: str | os.PathLike[str] = "", follow_symlinks: bool = True) -> Path:
        """Resolve a path and re-verify it after symlinks are canonicalised.

        With ``follow_symlinks=False`` the final component is left as-is so the
        link itself (not its target) is what gets operated on.
        """
        joined = self.path(relative)
        if follow_symlinks or joined == self.root:
            resolved = Path(os.path.realpath(joined))
        else:
            resolved = Path(os.path.realpath(joined.parent)) / joined.name

        if not self.contains(resolved):
            raise PathViolation(f"Path '{relative}' escapes the sandbox")
        return resolved

    def is_self(self, target: str | os.PathLike[str], source: str | os.PathLike[str]) -> bool:
        """True when ``target`` is ``source`` or nested anywhere beneath it."""
        target_path = Path(os.path.realpath(self.path(target)))
        source_path = Path(os.path.realpath(self.path(source)))
        return target_path == source_path or source_path in target_path.parents

    def relative(self, absolute: Path) -> str:
        return absolute.relative_to(self.root).as_posix()
