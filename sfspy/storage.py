"""
Storage facade.

Binds a StorageConfig to blob construction and listing so callers only carry
one object around.
"""

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from .blob import Blob, content_exists, size_exists
from .config import StorageConfig
from .listing import Direction, iter_identifiers, list_identifiers

log = logging.getLogger(__name__)


class Storage:
    """
    A storage root plus its scratch directory.

    Example:
        storage = Storage(StorageConfig.from_env())
        with open("photo.jpg", "rb") as f:
            blob = storage.put(f, "photo.jpg")
        page = storage.list(limit=50)
    """

    def __init__(self, config: StorageConfig | None = None):
        self.config = config or StorageConfig.from_env()

    @property
    def root(self) -> Path:
        return self.config.root

    def new_blob(self, name: str, scheme: int | None = None) -> Blob:
        if scheme is None:
            scheme = self.config.default_scheme
        return Blob.new(name, self.config.root, self.config.temp_dir, scheme=scheme)

    def blob(self, identifier: str) -> Blob:
        return Blob.from_identifier(identifier, self.config.root, self.config.temp_dir)

    def put(self, stream: BinaryIO, name: str, scheme: int | None = None) -> Blob:
        """Ingest stream and write its record marker"""
        self.config.ensure_dirs()
        blob = self.new_blob(name, scheme)
        blob.ingest(stream)
        blob.write_record()
        log.debug(f"Recorded {blob.record_path()}")
        return blob

    def list(
        self,
        cursor: str = "",
        direction: Direction = Direction.FORWARD,
        limit: int = 100,
    ) -> list[str]:
        return list_identifiers(self.config.root, cursor, direction, limit)

    def iter_all(self, direction: Direction = Direction.FORWARD, page_size: int = 100) -> Iterator[str]:
        return iter_identifiers(self.config.root, direction, page_size)

    def size_exists(self, size: int) -> bool:
        return size_exists(size, self.config.root)

    def content_exists(self, content_hash: str, size: int) -> bool:
        return content_exists(content_hash, size, self.config.root)
