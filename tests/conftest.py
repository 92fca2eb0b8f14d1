import pytest

from sfspy import SCHEME_V1, SCHEME_V2
from tests.tools import listed_identifier, listing_key, store


@pytest.fixture
def storage_root(tmp_path):
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture
def temp_dir(tmp_path):
    temp = tmp_path / "temp"
    temp.mkdir()
    return temp


@pytest.fixture
def populated(storage_root, temp_dir):
    """
    Store a mix of V1 and V2 blobs.

    Returns the identifiers in the order a forward listing yields them.
    """
    payloads = [
        (b"hello!!", "ab.test", SCHEME_V1),
        (b"first v1 payload", "one.bin", SCHEME_V1),
        (b"another v1 blob with more bytes", "noext", SCHEME_V1),
        (b"hello!", "ab.test", SCHEME_V2),
        (b"x" * 10, "ten.dat", SCHEME_V2),
        (b"y" * 9, "nine-bytes.txt", SCHEME_V2),
        (b"z" * 9, "other.txt", SCHEME_V2),
    ]
    for data, name, scheme in payloads:
        store(data, name, storage_root, temp_dir, scheme)
    ordered = sorted(payloads, key=lambda p: listing_key(p[0], p[2]))
    return [listed_identifier(data, scheme) for data, _, scheme in ordered]
