"""
Storage configuration.

Read from the environment when not given explicitly:

    SFSPY_ROOT       storage root (default ~/.sfspy/storage)
    SFSPY_TEMP_DIR   scratch directory for in-flight uploads (default <root>/tmp)
    SFSPY_SCHEME     scheme generation for new uploads (default 2)

The scratch directory must live on the same filesystem as the root, or the
publishing rename is not atomic.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import IOFailureError, UnknownSchemeError
from .identity import DEFAULT_SCHEME, check_scheme


def default_root() -> Path:
    """Get the default storage root path"""
    return Path(os.environ.get(
        "SFSPY_ROOT",
        os.path.expanduser("~/.sfspy/storage")
    ))


@dataclass
class StorageConfig:
    """Where and how blobs are stored"""

    root: Path
    temp_dir: Path
    default_scheme: int = DEFAULT_SCHEME

    def __post_init__(self):
        self.root = Path(self.root)
        self.temp_dir = Path(self.temp_dir)
        check_scheme(self.default_scheme)

    @classmethod
    def from_env(cls, root: str | Path | None = None, temp_dir: str | Path | None = None) -> "StorageConfig":
        """Build a config, falling back to SFSPY_* environment variables"""
        root = Path(root) if root is not None else default_root()
        if temp_dir is None:
            temp_dir = os.environ.get("SFSPY_TEMP_DIR") or root / "tmp"
        scheme_text = os.environ.get("SFSPY_SCHEME", str(DEFAULT_SCHEME))
        try:
            scheme = int(scheme_text)
        except ValueError:
            raise UnknownSchemeError(
                message=f"SFSPY_SCHEME must be an integer, got {scheme_text!r}",
                scheme=scheme_text,
            ) from None
        return cls(root=root, temp_dir=Path(temp_dir), default_scheme=scheme)

    def ensure_dirs(self) -> None:
        """Create root and temp directories if missing"""
        for path in (self.root, self.temp_dir):
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise IOFailureError(
                    message=f"Cannot create {path}: {exc}",
                    path=str(path),
                    operation="mkdir",
                ) from exc
