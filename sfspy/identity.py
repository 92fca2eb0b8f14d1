"""
Content identities and their textual identifiers.

A blob is addressed by (scheme, md5, size, name). Two identifier formats
coexist, one per on-disk scheme generation:

    V1  5a8dd3ad0756a93ded72b823b19dd877-6.test
    V2  v2-6-5a8dd3ad0756a93ded72b823b19dd877-ab.test

V1 keeps only the extension of the original name; V2 embeds the whole name
verbatim, so the V2 name may itself contain '-'.
"""

import re
from dataclasses import dataclass

from .errors import InvalidIdentifierError, UnknownSchemeError

SCHEME_V1 = 1
SCHEME_V2 = 2
SCHEMES = (SCHEME_V1, SCHEME_V2)
DEFAULT_SCHEME = SCHEME_V2

HASH_LENGTH = 32

# Record name for V1 blobs whose original name has no extension
NO_EXTENSION = ".none"
# Data file name inside a V2 shard directory
DATA_FILE_NAME = "_data_"
RESERVED_NAME_PREFIX = "rel-"

MAX_SIZE = 2**64 - 1
_MAX_SIZE_DIGITS = len(str(MAX_SIZE))

_TRIM = " \t\r\n"
_HASH_RE = re.compile(r"[0-9a-f]{32}")
_SIZE_RE = re.compile(r"[0-9]+")
_SCHEME_TAG_RE = re.compile(r"v([0-9]+)-")


def check_scheme(scheme: int) -> int:
    """Return scheme unchanged, or raise UnknownSchemeError"""
    if scheme not in SCHEMES:
        raise UnknownSchemeError(message=f"Unknown scheme version: {scheme!r}", scheme=scheme)
    return scheme


def parse_size(text: str, identifier: str = "") -> int:
    """Parse an unsigned decimal byte count."""
    if len(text) > _MAX_SIZE_DIGITS:
        raise InvalidIdentifierError(message=f"Size out of range: {text[:_MAX_SIZE_DIGITS]}...", identifier=identifier)
    if not _SIZE_RE.fullmatch(text):
        raise InvalidIdentifierError(message=f"Invalid size: {text!r}", identifier=identifier)
    size = int(text)
    if size > MAX_SIZE:
        raise InvalidIdentifierError(message=f"Size out of range: {text}", identifier=identifier)
    return size


def extension_of(name: str) -> str:
    """Extension of name including the leading dot, or '.none'"""
    dot = name.rfind(".")
    if dot == -1:
        return NO_EXTENSION
    return name[dot:]


def _check_path_component(value: str, what: str) -> None:
    if "/" in value or "\\" in value or "\0" in value or value in (".", ".."):
        raise InvalidIdentifierError(message=f"Invalid {what}: {value!r}")


def check_name(scheme: int, name: str) -> None:
    """Reject names whose record file would land outside the shard directory"""
    if scheme == SCHEME_V1:
        _check_path_component(extension_of(name), "extension")
    elif name:
        _check_path_component(name, "name")


@dataclass(frozen=True)
class PendingIdentity:
    """Identity of an upload whose bytes have not been hashed yet."""

    scheme: int = DEFAULT_SCHEME
    name: str = ""

    def __post_init__(self):
        check_scheme(self.scheme)
        check_name(self.scheme, self.name)
        if self.scheme == SCHEME_V2 and self.name == DATA_FILE_NAME:
            # its record marker would overwrite the data file
            raise InvalidIdentifierError(message=f"Reserved name: {self.name!r}")

    def address(self, content_hash: str, size: int) -> "ContentIdentity":
        """Finalize into an addressed identity once hash and size are known"""
        return ContentIdentity(
            scheme=self.scheme,
            content_hash=content_hash,
            size=size,
            name=self.name,
        )


@dataclass(frozen=True)
class ContentIdentity:
    """
    Identity of stored content.

    Immutable: an ingested blob swaps its PendingIdentity for one of these
    rather than filling in fields.
    """

    scheme: int
    content_hash: str
    size: int
    name: str = ""

    def __post_init__(self):
        check_scheme(self.scheme)
        content_hash = self.content_hash.strip(_TRIM).lower()
        if not _HASH_RE.fullmatch(content_hash):
            raise InvalidIdentifierError(message=f"Invalid content hash: {self.content_hash!r}")
        object.__setattr__(self, "content_hash", content_hash)
        if not 0 <= self.size <= MAX_SIZE:
            raise InvalidIdentifierError(message=f"Size out of range: {self.size}")
        check_name(self.scheme, self.name)

    @property
    def extension(self) -> str:
        return extension_of(self.name)

    def encode(self) -> str:
        """Canonical identifier string for this identity"""
        if self.scheme == SCHEME_V1:
            return f"{self.content_hash}-{self.size}{self.extension}"
        return f"v2-{self.size}-{self.content_hash}-{self.name}"

    @classmethod
    def decode(cls, identifier: str) -> "ContentIdentity":
        """
        Parse an identifier string.

        Raises:
            InvalidIdentifierError: malformed identifier
            UnknownSchemeError: 'v<N>-' tag for an unsupported N
        """
        text = identifier.strip(_TRIM)
        if text.startswith("v"):
            if text.startswith("v2-"):
                return cls._decode_v2(text)
            tag = _SCHEME_TAG_RE.match(text)
            if tag:
                raise UnknownSchemeError(
                    message=f"Unknown identifier scheme: v{tag.group(1)}",
                    scheme=int(tag.group(1)),
                )
            raise InvalidIdentifierError(message="Invalid identifier", identifier=identifier)
        if len(text) <= HASH_LENGTH + 1 or text[HASH_LENGTH] != "-":
            raise InvalidIdentifierError(message="Invalid identifier", identifier=identifier)
        return cls._decode_v1(text, identifier)

    @classmethod
    def _decode_v1(cls, text: str, identifier: str) -> "ContentIdentity":
        rest = text[HASH_LENGTH + 1:]
        dot = rest.find(".")
        if dot == -1:
            size_text, name = rest, NO_EXTENSION
        else:
            size_text, name = rest[:dot], rest[dot:]
        try:
            return cls(
                scheme=SCHEME_V1,
                content_hash=text[:HASH_LENGTH],
                size=parse_size(size_text, identifier),
                name=name,
            )
        except InvalidIdentifierError as exc:
            exc.details.setdefault("identifier", identifier)
            raise

    @classmethod
    def _decode_v2(cls, text: str) -> "ContentIdentity":
        parts = text.split("-", 3)
        if len(parts) != 4:
            raise InvalidIdentifierError(message="Invalid identifier", identifier=text)
        _, size_text, content_hash, name = parts
        # A name equal to the data file marker would alias the data file
        if name == DATA_FILE_NAME:
            name = RESERVED_NAME_PREFIX + DATA_FILE_NAME
        try:
            return cls(
                scheme=SCHEME_V2,
                content_hash=content_hash,
                size=parse_size(size_text, text),
                name=name,
            )
        except InvalidIdentifierError as exc:
            exc.details.setdefault("identifier", text)
            raise


def decode_identifier(identifier: str) -> ContentIdentity:
    return ContentIdentity.decode(identifier)
