"""
Paginated, resumable listing of everything under a storage root.

Identifiers come out in a total order: every V1 blob before every V2 blob,
then by shard path segment by segment in directory-name order. The cursor is
just the last identifier the caller received; listing resumes strictly after
it (or strictly before it, backwards). Nothing is cached between calls, so
the filesystem itself is the index.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from . import fsutil
from .errors import InvalidIdentifierError, IOFailureError, NotFoundError
from .identity import DATA_FILE_NAME, SCHEME_V1, SCHEMES, ContentIdentity
from .layout import derive, identity_from_segments, scheme_root

log = logging.getLogger(__name__)


class Direction(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


# Closes a resume chain: the leaf equal to the cursor is excluded.
GUARD = "<guard>"


@dataclass
class _Frame:
    """One open directory on the walk stack"""

    path: Path
    segments: tuple[str, ...]
    entries: Iterator[fsutil.DirEntry]
    resume: tuple[str, ...] = field(default_factory=tuple)


def _is_data_file(name: str, scheme: int) -> bool:
    if scheme == SCHEME_V1:
        return name.isascii() and name.isdigit() and int(name) > 0
    return name == DATA_FILE_NAME


def _open(path: Path, segments: tuple[str, ...], resume: tuple[str, ...], forward: bool) -> _Frame:
    entries = fsutil.list_directory(path)
    if not forward:
        entries.reverse()
    return _Frame(path=path, segments=segments, entries=iter(entries), resume=resume)


def _walk(scheme_dir: Path, scheme: int, resume: tuple[str, ...], forward: bool, limit: int) -> list[str]:
    """Collect up to limit identifiers from one scheme root."""
    found: list[str] = []
    try:
        stack = [_open(scheme_dir, (), resume, forward)]
    except OSError as exc:
        raise IOFailureError(message=f"Cannot list {scheme_dir}: {exc}", path=str(scheme_dir), operation="list") from exc

    while stack and len(found) < limit:
        frame = stack[-1]
        entry = next(frame.entries, None)
        if entry is None:
            stack.pop()
            continue

        if not entry.is_dir:
            if not _is_data_file(entry.name, scheme):
                continue
            # A shard directory holds one data file; either way it is done.
            stack.pop()
            if frame.resume:
                continue
            try:
                identity = identity_from_segments(frame.segments + (entry.name,), scheme)
            except InvalidIdentifierError as exc:
                log.warning(f"Skipping malformed data file {frame.path / entry.name}: {exc.message}")
                continue
            found.append(identity.encode())
            continue

        child_resume: tuple[str, ...] = ()
        if frame.resume and frame.resume[0] != GUARD:
            pending = frame.resume[0]
            if entry.name == pending:
                child_resume = frame.resume[1:]
                frame.resume = ()
            elif (entry.name < pending) == forward:
                # not yet at the cursor's branch
                continue
            else:
                # the cursor's branch is gone; everything from here on is new
                frame.resume = ()

        try:
            stack.append(_open(frame.path / entry.name, frame.segments + (entry.name,), child_resume, forward))
        except OSError as exc:
            log.warning(f"Skipping unreadable directory {frame.path / entry.name}: {exc}")

    return found


def list_identifiers(
    root: str | Path,
    cursor: str = "",
    direction: Direction = Direction.FORWARD,
    limit: int = 100,
) -> list[str]:
    """
    List up to limit identifiers strictly after (or before) cursor.

    Args:
        root: storage root holding the V1/ and V2/ trees
        cursor: a previously returned identifier, or "" to start at the
            beginning (forward) or the end (backward) of the total order
        direction: FORWARD or BACKWARD
        limit: maximum number of identifiers to return

    Raises:
        NotFoundError: root does not exist
        InvalidIdentifierError, UnknownSchemeError: cursor does not decode
    """
    root = Path(root)
    if limit <= 0:
        return []
    if not fsutil.is_dir(root):
        raise NotFoundError(message=f"Storage root {root} does not exist", path=str(root))

    forward = direction is Direction.FORWARD
    schemes = list(SCHEMES) if forward else list(reversed(SCHEMES))
    resume: tuple[str, ...] = ()
    if cursor:
        identity = ContentIdentity.decode(cursor)
        schemes = schemes[schemes.index(identity.scheme):]
        resume = derive(identity).data_dir + (GUARD,)

    found: list[str] = []
    for scheme in schemes:
        scheme_dir = scheme_root(root, scheme)
        if fsutil.is_dir(scheme_dir):
            found.extend(_walk(scheme_dir, scheme, resume, forward, limit - len(found)))
        else:
            log.debug(f"No {scheme_dir}, nothing stored under scheme V{scheme}")
        resume = ()
        if len(found) >= limit:
            break
    return found


def iter_identifiers(
    root: str | Path,
    direction: Direction = Direction.FORWARD,
    page_size: int = 100,
) -> Iterator[str]:
    """Every stored identifier, fetched page by page"""
    cursor = ""
    while True:
        page = list_identifiers(root, cursor, direction, page_size)
        yield from page
        if not page or len(page) < page_size:
            return
        cursor = page[-1]
