"""Pack sandbox paths into tar archives and unpack archives in place."""

import asyncio
import logging
import os
import secrets
import shutil
import string
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import Any

from serverfs.core.config import settings
from serverfs.core.errors import (
    InvalidArgumentType,
    NoValidEntries,
    SelfCompress,
    UnsafeArchiveEntry,
    UnsupportedArchive,
)
from serverfs.core.sandbox import Sandbox
from serverfs.models.archive import ArchiveJob
from serverfs.models.paths import Single, parse_paths
from serverfs.services.filesystem.concurrency import each_limit

logger = logging.getLogger(__name__)

_TOKEN_ALPHABET = string.ascii_letters + string.digits


def _pack(job: ArchiveJob) -> None:
    output = job.output_path
    try:
        with tarfile.open(output, "w") as archive:
            for entry in job.entries:
                archive.add(job.base / entry, arcname=entry)
    except (OSError, tarfile.TarError):
        output.unlink(missing_ok=True)
        raise


def _strip_name(name: str, strip: int, directory: bool = False) -> str | None:
    """Drop up to ``strip`` leading components of an archive member name.

    The last component of a file is never stripped, so loose top-level files
    land next to the stripped folder. Returns None for directories with
    nothing left of their name.
    """
    path = PurePosixPath(name)
    if path.is_absolute() or ".." in path.parts:
        raise UnsafeArchiveEntry(f"Archive entry '{name}' points outside of the extraction directory")
    parts = [part for part in path.parts if part != "."]
    if not parts:
        return None
    if len(parts) <= strip:
        return None if directory else parts[-1]
    return "/".join(parts[strip:])


class _Extraction:
    """Validates stripped member names against the target directory and sandbox."""

    def __init__(self, to_dir: Path, sandbox: Sandbox, strip: int) -> None:
        self.to_dir = to_dir
        self.sandbox = sandbox
        self.strip = strip

    def target(self, name: str) -> Path:
        candidate = Path(os.path.normpath(self.to_dir / name))
        if candidate != self.to_dir and self.to_dir not in candidate.parents:
            raise UnsafeArchiveEntry(f"Archive entry '{name}' points outside of the extraction directory")
        if not self.sandbox.contains(Path(os.path.realpath(candidate))):
            raise UnsafeArchiveEntry(f"Archive entry '{name}' points outside of the sandbox")
        return candidate

    def unpack_tar(self, archive_path: Path) -> None:
        with tarfile.open(archive_path, "r:*") as archive:
            members = []
            for member in archive.getmembers():
                stripped = _strip_name(member.name, self.strip, member.isdir())
                if stripped is None:
                    continue
                target = self.target(stripped)

                if member.issym():
                    if PurePosixPath(member.linkname).is_absolute():
                        raise UnsafeArchiveEntry(f"Archive link '{member.name}' has an absolute target")
                    self.target(os.path.relpath(target.parent / member.linkname, self.to_dir))
                elif member.islnk():
                    link = _strip_name(member.linkname, self.strip)
                    if link is None:
                        raise UnsafeArchiveEntry(f"Archive link '{member.name}' targets a stripped entry")
                    self.target(link)
                    member.linkname = link

                member.name = stripped
                members.append(member)

            try:
                archive.extractall(self.to_dir, members=members, filter="data")
            except tarfile.FilterError as e:
                raise UnsafeArchiveEntry(str(e)) from e

    def unpack_zip(self, archive_path: Path) -> None:
        with zipfile.ZipFile(archive_path) as archive:
            plan = []
            for info in archive.infolist():
                stripped = _strip_name(info.filename, self.strip, info.is_dir())
                if stripped is None:
                    continue
                plan.append((info, self.target(stripped)))

            for info, target in plan:
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(info) as source, target.open("wb") as output:
                    shutil.copyfileobj(source, output)

    def unpack(self, archive_path: Path) -> None:
        if zipfile.is_zipfile(archive_path):
            self.unpack_zip(archive_path)
        elif tarfile.is_tarfile(archive_path):
            self.unpack_tar(archive_path)
        else:
            raise UnsupportedArchive(f"'{archive_path.name}' is not a supported archive")


class ArchiveEngine:
    def __init__(
        self,
        sandbox: Sandbox,
        concurrency: int | None = None,
        prefix: str | None = None,
        token_length: int | None = None,
    ) -> None:
        self.sandbox = sandbox
        self.concurrency = concurrency
        self.prefix = prefix if prefix is not None else settings.archive_prefix
        self.token_length = token_length if token_length is not None else settings.archive_token_length

    def archive_name(self) -> str:
        token = "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(self.token_length))
        return f"{self.prefix}{token}.tar"

    # Unlike the other operations, multiple sources are combined into a single archive.
    async def compress(self, files: Any, to: Any) -> str:
        if not isinstance(parse_paths(to), Single):
            raise InvalidArgumentType(
                "The to field must be a single path for the folder in which the archive should be saved."
            )
        sources = parse_paths(files)
        destination = self.sandbox.resolve(to)

        if isinstance(sources, Single):
            if self.sandbox.is_self(to, sources.path):
                raise SelfCompress()
            source = self.sandbox.resolve(sources.path)
            job = ArchiveJob(name=self.archive_name(), destination=destination, base=source.parent)
            job.entries.append(source.name)
        else:
            job = ArchiveJob(name=self.archive_name(), destination=destination, base=self.sandbox.root)
            for path in sources.paths:
                # The archive would end up inside this source, skip it.
                if self.sandbox.is_self(to, path):
                    logger.debug(f"Skipping {path}, archive destination is inside it")
                    continue
                entry = self.sandbox.relative(self.sandbox.resolve(path))
                if entry not in job.entries:
                    job.entries.append(entry)
            if not job.entries:
                raise NoValidEntries()

        await asyncio.to_thread(_pack, job)
        logger.info(f"Packed {len(job.entries)} entries into {job.output_path}")
        return job.name

    async def decompress(self, files: Any) -> None:
        """Unpack each archive into its own directory, stripping one leading component."""
        archives = parse_paths(files)
        paths = [archives.path] if isinstance(archives, Single) else list(archives.paths)
        resolved = [self.sandbox.resolve(path) for path in paths]
        await each_limit(resolved, self._unpack, self.concurrency)

    async def _unpack(self, archive_path: Path) -> None:
        extraction = _Extraction(archive_path.parent, self.sandbox, strip=1)
        await asyncio.to_thread(extraction.unpack, archive_path)
        logger.info(f"Unpacked {archive_path}")
