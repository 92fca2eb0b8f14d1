"""
sfspy - content-addressed blob storage on a plain filesystem

Blobs are stored under a shard path derived from their MD5 and size, and
handed back as compact identifiers that locate them again without any index.
Two layout generations (V1, V2) coexist under one storage root.
"""

from .errors import (
    StorageError,
    InvalidIdentifierError,
    UnknownSchemeError,
    NotInitializedError,
    AlreadyInitializedError,
    NotFoundError,
    IOFailureError,
    ErrorCategory,
)
from .identity import (
    SCHEME_V1,
    SCHEME_V2,
    SCHEMES,
    ContentIdentity,
    PendingIdentity,
    decode_identifier,
)
from .layout import ShardPath, derive
from .blob import Blob, BlobPresence, content_exists, size_exists
from .listing import Direction, iter_identifiers, list_identifiers
from .config import StorageConfig
from .storage import Storage

__version__ = "0.1.0"

__all__ = [
    # Errors
    "StorageError",
    "InvalidIdentifierError",
    "UnknownSchemeError",
    "NotInitializedError",
    "AlreadyInitializedError",
    "NotFoundError",
    "IOFailureError",
    "ErrorCategory",
    # Identity
    "SCHEME_V1",
    "SCHEME_V2",
    "SCHEMES",
    "ContentIdentity",
    "PendingIdentity",
    "decode_identifier",
    # Layout
    "ShardPath",
    "derive",
    # Blobs
    "Blob",
    "BlobPresence",
    "content_exists",
    "size_exists",
    # Listing
    "Direction",
    "iter_identifiers",
    "list_identifiers",
    # Configuration
    "StorageConfig",
    "Storage",
]
