"""
Shard layout of the storage root.

    <root>/V1/<h0>/.../<h7>/<size>            data
    <root>/V1/<h0>/.../<h7>/<.ext|.none>      record marker
    <root>/V2/<size>/<h0>/.../<h7>/_data_     data
    <root>/V2/<size>/<h0>/.../<h7>/<name>     record marker

h0..h7 are the md5 hex digest cut into eight 4-character segments.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import InvalidIdentifierError, UnknownSchemeError
from .identity import (
    DATA_FILE_NAME,
    SCHEME_V1,
    SCHEME_V2,
    ContentIdentity,
    parse_size,
)

SCHEME_DIRS = {
    SCHEME_V1: "V1",
    SCHEME_V2: "V2",
}

HASH_SEGMENT_WIDTH = 4
HASH_SEGMENT_COUNT = 8


def scheme_root(root: str | Path, scheme: int) -> Path:
    """Directory holding every blob of one scheme generation"""
    try:
        return Path(root) / SCHEME_DIRS[scheme]
    except KeyError:
        raise UnknownSchemeError(message=f"Unknown scheme version: {scheme!r}", scheme=scheme) from None


def hash_segments(content_hash: str) -> tuple[str, ...]:
    return tuple(
        content_hash[i:i + HASH_SEGMENT_WIDTH]
        for i in range(0, HASH_SEGMENT_WIDTH * HASH_SEGMENT_COUNT, HASH_SEGMENT_WIDTH)
    )


@dataclass(frozen=True)
class ShardPath:
    """Where one identity lives, relative to its scheme root."""

    scheme: int
    data_dir: tuple[str, ...]
    data_file_name: str
    record_file_name: str

    def directory(self, root: str | Path) -> Path:
        return scheme_root(root, self.scheme).joinpath(*self.data_dir)

    def data_path(self, root: str | Path) -> Path:
        return self.directory(root) / self.data_file_name

    def record_path(self, root: str | Path) -> Path:
        return self.directory(root) / self.record_file_name


def derive(identity: ContentIdentity, scheme: int | None = None) -> ShardPath:
    """
    Derive the shard layout of an identity.

    Args:
        identity: addressed identity
        scheme: derive for this scheme instead of the identity's own

    Raises:
        UnknownSchemeError: scheme is not a supported generation
    """
    if scheme is None:
        scheme = identity.scheme
    segments = hash_segments(identity.content_hash)
    if scheme == SCHEME_V1:
        return ShardPath(
            scheme=scheme,
            data_dir=segments,
            data_file_name=str(identity.size),
            record_file_name=identity.extension,
        )
    if scheme == SCHEME_V2:
        return ShardPath(
            scheme=scheme,
            data_dir=(str(identity.size), *segments),
            data_file_name=DATA_FILE_NAME,
            record_file_name=identity.name,
        )
    raise UnknownSchemeError(message=f"Unknown scheme version: {scheme!r}", scheme=scheme)


def identity_from_segments(segments: Sequence[str], scheme: int) -> ContentIdentity:
    """
    Rebuild an identity from a data file path relative to its scheme root.

    The original name is not recoverable from the data file alone, so the
    identity carries the data file marker as its name.

    Raises:
        InvalidIdentifierError: the path does not have the scheme's shape
    """
    location = "/".join(segments)
    if scheme == SCHEME_V1:
        if len(segments) != HASH_SEGMENT_COUNT + 1:
            raise InvalidIdentifierError(message=f"Unsupported V1 data path: {location}")
        hash_parts = segments[:HASH_SEGMENT_COUNT]
        size = parse_size(segments[-1], location)
    elif scheme == SCHEME_V2:
        if len(segments) != HASH_SEGMENT_COUNT + 2 or segments[-1] != DATA_FILE_NAME:
            raise InvalidIdentifierError(message=f"Unsupported V2 data path: {location}")
        hash_parts = segments[1:-1]
        size = parse_size(segments[0], location)
    else:
        raise UnknownSchemeError(message=f"Unknown scheme version: {scheme!r}", scheme=scheme)

    if any(len(part) != HASH_SEGMENT_WIDTH for part in hash_parts):
        raise InvalidIdentifierError(message=f"Unsupported data path: {location}")
    return ContentIdentity(
        scheme=scheme,
        content_hash="".join(hash_parts),
        size=size,
        name=DATA_FILE_NAME,
    )
