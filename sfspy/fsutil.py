"""Thin filesystem helpers used by the storage core."""

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path

from .errors import IOFailureError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirEntry:
    name: str
    is_dir: bool


def is_file(path: str | Path) -> bool:
    return Path(path).is_file()


def is_dir(path: str | Path) -> bool:
    return Path(path).is_dir()


def ensure_parent_dirs(path: Path) -> None:
    """Create every missing directory above path"""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IOFailureError(
            message=f"Cannot create directory {path.parent}: {exc}",
            path=str(path.parent),
            operation="mkdir",
        ) from exc


def list_directory(path: Path) -> list[DirEntry]:
    """
    List a directory, sorted by name.

    Raises OSError as-is; callers decide whether a listing failure is fatal.
    """
    with os.scandir(path) as it:
        entries = [DirEntry(name=entry.name, is_dir=entry.is_dir()) for entry in it]
    entries.sort(key=lambda entry: entry.name)
    return entries


def allocate_temp_path(temp_dir: Path) -> Path:
    """Unique, not yet existing path inside temp_dir"""
    path = temp_dir / uuid.uuid4().hex
    log.debug(f"Allocated temp file {path}")
    return path


def replace(src: Path, dst: Path) -> None:
    """Atomically move src onto dst, overwriting dst if present"""
    try:
        os.replace(src, dst)
    except OSError as exc:
        raise IOFailureError(
            message=f"Cannot publish {src} to {dst}: {exc}",
            path=str(dst),
            operation="rename",
        ) from exc
