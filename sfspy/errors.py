"""
Typed errors for sfspy

Every failure the storage core can surface is one of these. Errors are
categorized so callers (and the CLI) can handle them uniformly.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Broad classes of storage failure"""

    VALIDATION = "validation"
    STATE = "state"
    NOT_FOUND = "not_found"
    IO = "io"


@dataclass
class StorageError(Exception):
    """Base error for all storage errors"""

    category: ErrorCategory = ErrorCategory.IO
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.category.value}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output"""
        result: dict[str, Any] = {
            "category": self.category.value,
            "error": type(self).__name__,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class InvalidIdentifierError(StorageError):
    """Malformed identifier, hash, size or name"""

    category: ErrorCategory = field(default=ErrorCategory.VALIDATION)
    identifier: str = ""

    def __post_init__(self):
        if self.identifier:
            self.details["identifier"] = self.identifier


@dataclass
class UnknownSchemeError(StorageError):
    """Scheme version outside the supported generations"""

    category: ErrorCategory = field(default=ErrorCategory.VALIDATION)
    scheme: Any = None

    def __post_init__(self):
        if self.scheme is not None:
            self.details["scheme"] = self.scheme


@dataclass
class NotInitializedError(StorageError):
    """Operation needs a content hash, but the blob was never ingested"""

    category: ErrorCategory = field(default=ErrorCategory.STATE)


@dataclass
class AlreadyInitializedError(StorageError):
    """Ingestion attempted on a blob that already has a content hash"""

    category: ErrorCategory = field(default=ErrorCategory.STATE)
    content_hash: str = ""

    def __post_init__(self):
        if self.content_hash:
            self.details["content_hash"] = self.content_hash


@dataclass
class NotFoundError(StorageError):
    """Expected directory or file is absent"""

    category: ErrorCategory = field(default=ErrorCategory.NOT_FOUND)
    path: str = ""

    def __post_init__(self):
        if self.path:
            self.details["path"] = self.path


@dataclass
class IOFailureError(StorageError):
    """Stream copy, directory creation or rename failed"""

    category: ErrorCategory = field(default=ErrorCategory.IO)
    path: str = ""
    operation: str = ""

    def __post_init__(self):
        if self.path:
            self.details["path"] = self.path
        if self.operation:
            self.details["operation"] = self.operation
