"""
Blob handles: ingest a stream under its content address and query it later.

Publishing is two steps. The data file is renamed into place atomically, then
a zero-length record marker is written next to it. A crash in between leaves
the data present but unmarked, which exists() reports as-is.
"""

import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from . import fsutil
from .errors import (
    AlreadyInitializedError,
    InvalidIdentifierError,
    IOFailureError,
    NotFoundError,
    NotInitializedError,
)
from .identity import (
    DEFAULT_SCHEME,
    SCHEME_V2,
    SCHEMES,
    ContentIdentity,
    PendingIdentity,
)
from .layout import ShardPath, derive, scheme_root

log = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class BlobPresence:
    """What exists() found on disk"""

    data_exists: bool
    record_exists: bool

    @property
    def complete(self) -> bool:
        return self.data_exists and self.record_exists

    @property
    def incomplete(self) -> bool:
        """Data published but record marker missing (interrupted ingestion)"""
        return self.data_exists and not self.record_exists


class Blob:
    """
    One piece of content bound to a storage root and a scratch directory.

    Construct with new() for an upload, from_info() for known fields, or
    from_identifier() for a previously issued identifier.

    Example:
        blob = Blob.new("ab.test", root, temp_dir)
        with open("ab.test", "rb") as f:
            blob.ingest(f)
        blob.write_record()
        print(blob.identifier())
    """

    def __init__(
        self,
        identity: PendingIdentity | ContentIdentity,
        root: str | Path,
        temp_dir: str | Path | None = None,
    ):
        self.root = Path(root)
        self.temp_dir = Path(temp_dir) if temp_dir is not None else None
        self._identity = identity
        self._shard: ShardPath | None = None

    @classmethod
    def new(
        cls,
        name: str,
        root: str | Path,
        temp_dir: str | Path,
        scheme: int = DEFAULT_SCHEME,
    ) -> "Blob":
        """Empty blob for a new upload"""
        return cls(PendingIdentity(scheme=scheme, name=name), root, temp_dir)

    @classmethod
    def from_info(
        cls,
        content_hash: str,
        size: int,
        name: str,
        root: str | Path,
        temp_dir: str | Path | None = None,
        scheme: int = DEFAULT_SCHEME,
    ) -> "Blob":
        """Blob addressed directly by its raw fields"""
        identity = ContentIdentity(scheme=scheme, content_hash=content_hash, size=size, name=name)
        return cls(identity, root, temp_dir)

    @classmethod
    def from_identifier(
        cls,
        identifier: str,
        root: str | Path,
        temp_dir: str | Path | None = None,
    ) -> "Blob":
        """Blob addressed by a previously issued identifier"""
        return cls(ContentIdentity.decode(identifier), root, temp_dir)

    def __repr__(self) -> str:
        return f"Blob({self._identity!r}, root={str(self.root)!r})"

    @property
    def identity(self) -> PendingIdentity | ContentIdentity:
        return self._identity

    @property
    def scheme(self) -> int:
        return self._identity.scheme

    @property
    def is_addressed(self) -> bool:
        return isinstance(self._identity, ContentIdentity)

    def _addressed(self) -> ContentIdentity:
        if not isinstance(self._identity, ContentIdentity):
            raise NotInitializedError(message="Blob has no content hash yet; ingest it first")
        return self._identity

    def shard_path(self, scheme: int | None = None) -> ShardPath:
        """Shard layout for this blob, optionally under another scheme"""
        identity = self._addressed()
        if scheme is not None and scheme != identity.scheme:
            return derive(identity, scheme)
        if self._shard is None:
            self._shard = derive(identity)
        return self._shard

    def data_path(self) -> Path:
        return self.shard_path().data_path(self.root)

    def record_path(self) -> Path:
        return self.shard_path().record_path(self.root)

    def identifier(self) -> str:
        return self._addressed().encode()

    def ingest(self, stream: BinaryIO) -> ContentIdentity:
        """
        Copy stream into storage under its content address.

        The stream is read once; bytes are hashed while they are written to a
        temp file, which is then renamed onto the data path. Re-publishing
        identical content overwrites an identical file.

        Returns:
            The addressed identity

        Raises:
            AlreadyInitializedError: blob was already ingested
            IOFailureError: copy, mkdir or rename failed
        """
        if isinstance(self._identity, ContentIdentity):
            raise AlreadyInitializedError(
                message="Blob already ingested",
                content_hash=self._identity.content_hash,
            )
        if self.temp_dir is None:
            raise IOFailureError(message="No temp directory configured for ingestion", operation="copy")

        temp_path = fsutil.allocate_temp_path(self.temp_dir)
        content_hash, size = self._copy_to_temp(stream, temp_path)

        self._identity = self._identity.address(content_hash, size)
        self._shard = None

        data_path = self.data_path()
        fsutil.ensure_parent_dirs(data_path)
        try:
            fsutil.replace(temp_path, data_path)
        except IOFailureError:
            log.warning(f"Publish failed, leaving temp file {temp_path}")
            raise

        log.info(f"Stored {size} bytes as {self.identifier()}")
        return self._identity

    def _copy_to_temp(self, stream: BinaryIO, temp_path: Path) -> tuple[str, int]:
        md5 = hashlib.md5()
        size = 0
        try:
            with temp_path.open("xb") as out:
                for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
                    md5.update(chunk)
                    out.write(chunk)
                    size += len(chunk)
                out.flush()
                os.fsync(out.fileno())
        except Exception as exc:
            temp_path.unlink(missing_ok=True)
            # ValueError: read from a closed stream
            if not isinstance(exc, (OSError, ValueError)):
                raise
            raise IOFailureError(
                message=f"Cannot copy stream to {temp_path}: {exc}",
                path=str(temp_path),
                operation="copy",
            ) from exc
        return md5.hexdigest(), size

    def write_record(self) -> Path:
        """Write the zero-length record marker next to the data file"""
        identity = self._addressed()
        if identity.scheme == SCHEME_V2 and not identity.name:
            raise InvalidIdentifierError(message="V2 blob needs a name to write its record marker")
        path = self.record_path()
        if path == self.data_path():
            raise InvalidIdentifierError(message=f"Record marker name {identity.name!r} collides with the data file")
        fsutil.ensure_parent_dirs(path)
        try:
            path.write_bytes(b"")
        except OSError as exc:
            raise IOFailureError(
                message=f"Cannot write record marker {path}: {exc}",
                path=str(path),
                operation="write",
            ) from exc
        return path

    def exists(self) -> BlobPresence:
        """Check data file and record marker under this blob's own scheme"""
        return BlobPresence(
            data_exists=fsutil.is_file(self.data_path()),
            record_exists=fsutil.is_file(self.record_path()),
        )

    def exists_in_any_scheme(self) -> bool:
        """True if the data file is present under any scheme generation"""
        for scheme in SCHEMES:
            if fsutil.is_file(self.shard_path(scheme).data_path(self.root)):
                return True
        return False

    def open(self) -> BinaryIO:
        """Open the stored data for reading"""
        path = self.data_path()
        try:
            return path.open("rb")
        except FileNotFoundError:
            raise NotFoundError(message=f"No data stored for {self.identifier()}", path=str(path)) from None


def size_exists(size: int, root: str | Path) -> bool:
    """Whether any V2 content of exactly this many bytes is stored"""
    return fsutil.is_dir(scheme_root(root, SCHEME_V2) / str(size))


def content_exists(content_hash: str, size: int, root: str | Path) -> bool:
    """Whether (hash, size) is stored under any scheme generation"""
    return Blob.from_info(content_hash, size, "", root).exists_in_any_scheme()
