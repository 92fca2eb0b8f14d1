"""
sfs: command-line interface for an sfspy storage root.

Usage:
    sfs put photo.jpg
    sfs put notes --scheme 1 --name notes.txt
    sfs info v2-6-5a8dd3ad0756a93ded72b823b19dd877-ab.test
    sfs ls --limit 20 --cursor <last identifier>
    sfs cat <identifier> -o out.bin
"""

import argparse
import json
import logging
import shutil
import sys
from pathlib import Path
from typing import Any

from .config import StorageConfig
from .errors import StorageError
from .identity import SCHEMES
from .listing import Direction
from .storage import Storage


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s" if verbose else "%(message)s",
    )
    # Quiet down library chatter unless verbose
    if not verbose:
        logging.getLogger("sfspy").setLevel(logging.WARNING)


def output_result(result: dict[str, Any], output_file: Path | None = None) -> None:
    """Output result to file or stdout."""
    if output_file is not None:
        output_file.write_text(json.dumps(result, indent=2))
        print(f"✓ Wrote JSON to {output_file}")
    else:
        print(json.dumps(result, indent=2))


def _storage(args: argparse.Namespace) -> Storage:
    return Storage(StorageConfig.from_env(root=args.root, temp_dir=args.temp_dir))


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────


def cmd_put(args: argparse.Namespace) -> int:
    """Store a file."""
    source = Path(args.file)
    if not source.is_file():
        print(f"Error: Input file not found: {source}", file=sys.stderr)
        return 1

    storage = _storage(args)
    with source.open("rb") as stream:
        blob = storage.put(stream, args.name or source.name, scheme=args.scheme)

    identity = blob.identity
    output_result({
        "identifier": blob.identifier(),
        "content_hash": identity.content_hash,
        "size": identity.size,
        "data_path": str(blob.data_path()),
        "record_path": str(blob.record_path()),
    })
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    """Decode an identifier and report where it lives."""
    blob = _storage(args).blob(args.identifier)
    identity = blob.identity
    presence = blob.exists()
    output_result({
        "identifier": blob.identifier(),
        "scheme": identity.scheme,
        "content_hash": identity.content_hash,
        "size": identity.size,
        "name": identity.name,
        "data_path": str(blob.data_path()),
        "record_path": str(blob.record_path()),
        "data_exists": presence.data_exists,
        "record_exists": presence.record_exists,
    })
    return 0


def cmd_exists(args: argparse.Namespace) -> int:
    """Exit 0 if the blob's data is stored, 1 otherwise."""
    blob = _storage(args).blob(args.identifier)
    if args.any_scheme:
        found = blob.exists_in_any_scheme()
    else:
        found = blob.exists().data_exists
    output_result({"identifier": blob.identifier(), "exists": found})
    return 0 if found else 1


def cmd_ls(args: argparse.Namespace) -> int:
    """List stored identifiers, one per line."""
    storage = _storage(args)
    direction = Direction.BACKWARD if args.backward else Direction.FORWARD
    if args.all:
        identifiers = storage.iter_all(direction, page_size=args.limit)
    else:
        identifiers = storage.list(args.cursor, direction, args.limit)
    for identifier in identifiers:
        print(identifier)
    return 0


def cmd_cat(args: argparse.Namespace) -> int:
    """Write stored bytes to a file or stdout."""
    blob = _storage(args).blob(args.identifier)
    with blob.open() as stream:
        if args.output:
            output = Path(args.output)
            output.parent.mkdir(parents=True, exist_ok=True)
            with output.open("wb") as out:
                shutil.copyfileobj(stream, out)
            print(f"✓ Wrote {blob.identity.size} bytes → {output}", file=sys.stderr)
        else:
            shutil.copyfileobj(stream, sys.stdout.buffer)
    return 0


# ─────────────────────────────────────────────────────────────────────────────
# CLI setup
# ─────────────────────────────────────────────────────────────────────────────


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sfs",
        description="Content-addressed blob storage on a plain filesystem",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--root", type=str, help="Storage root (default: $SFSPY_ROOT or ~/.sfspy/storage)")
    parser.add_argument("--temp-dir", type=str, help="Scratch directory (default: $SFSPY_TEMP_DIR or <root>/tmp)")

    subparsers = parser.add_subparsers(dest="command", help="Command")

    put_parser = subparsers.add_parser("put", help="Store a file")
    put_parser.add_argument("file", help="File to store")
    put_parser.add_argument("--name", type=str, help="Original name to record (default: file name)")
    put_parser.add_argument("--scheme", type=int, choices=SCHEMES, help="Scheme generation (default: $SFSPY_SCHEME or 2)")
    put_parser.set_defaults(func=cmd_put)

    info_parser = subparsers.add_parser("info", help="Show where an identifier lives")
    info_parser.add_argument("identifier")
    info_parser.set_defaults(func=cmd_info)

    exists_parser = subparsers.add_parser("exists", help="Check whether content is stored")
    exists_parser.add_argument("identifier")
    exists_parser.add_argument(
        "--any-scheme", action="store_true",
        help="Look under every scheme generation, not just the identifier's own"
    )
    exists_parser.set_defaults(func=cmd_exists)

    ls_parser = subparsers.add_parser("ls", help="List stored identifiers")
    ls_parser.add_argument("--cursor", type=str, default="", help="Resume after this identifier")
    ls_parser.add_argument("--backward", action="store_true", help="List in reverse order")
    ls_parser.add_argument("--limit", type=int, default=100, help="Page size (default: 100)")
    ls_parser.add_argument("--all", action="store_true", help="Page through the whole store")
    ls_parser.set_defaults(func=cmd_ls)

    cat_parser = subparsers.add_parser("cat", help="Read stored content")
    cat_parser.add_argument("identifier")
    cat_parser.add_argument("-o", "--output", type=str, help="Output file path (default: stdout)")
    cat_parser.set_defaults(func=cmd_cat)

    return parser


def run(argv: list[str] | None = None) -> int:
    """Parse argv and dispatch; returns the exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except StorageError as e:
        if args.verbose:
            logging.exception("Command failed")
        else:
            print(f"Error: {e}", file=sys.stderr)
        return 1


def main() -> None:
    """CLI entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
