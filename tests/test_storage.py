"""Tests for StorageConfig and the Storage facade."""

import io

import pytest

from sfspy import (
    Direction,
    SCHEME_V1,
    SCHEME_V2,
    Storage,
    StorageConfig,
    UnknownSchemeError,
)
from sfspy.config import default_root
from sfspy.errors import ErrorCategory, InvalidIdentifierError, StorageError
from tests.tools import md5_hex


class TestStorageConfig:
    """Test StorageConfig.from_env()."""

    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.delenv("SFSPY_TEMP_DIR", raising=False)
        monkeypatch.delenv("SFSPY_SCHEME", raising=False)
        monkeypatch.setenv("SFSPY_ROOT", str(tmp_path / "store"))

        config = StorageConfig.from_env()
        assert config.root == tmp_path / "store"
        assert config.temp_dir == tmp_path / "store" / "tmp"
        assert config.default_scheme == SCHEME_V2

    def test_default_root_without_env(self, monkeypatch):
        monkeypatch.delenv("SFSPY_ROOT", raising=False)
        assert default_root().parts[-2:] == (".sfspy", "storage")

    def test_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SFSPY_TEMP_DIR", str(tmp_path / "scratch"))
        monkeypatch.setenv("SFSPY_SCHEME", "1")

        config = StorageConfig.from_env(root=tmp_path / "store")
        assert config.root == tmp_path / "store"
        assert config.temp_dir == tmp_path / "scratch"
        assert config.default_scheme == SCHEME_V1

    @pytest.mark.parametrize("value", ["3", "latest"])
    def test_bad_scheme(self, monkeypatch, tmp_path, value):
        monkeypatch.setenv("SFSPY_SCHEME", value)
        with pytest.raises(UnknownSchemeError):
            StorageConfig.from_env(root=tmp_path)

    def test_ensure_dirs(self, tmp_path):
        config = StorageConfig(root=tmp_path / "a" / "root", temp_dir=tmp_path / "a" / "tmp")
        config.ensure_dirs()
        assert config.root.is_dir()
        assert config.temp_dir.is_dir()


class TestStorage:
    """Test the Storage facade."""

    @pytest.fixture
    def storage(self, tmp_path):
        return Storage(StorageConfig(root=tmp_path / "root", temp_dir=tmp_path / "root" / "tmp"))

    def test_put_and_lookup(self, storage):
        blob = storage.put(io.BytesIO(b"hello!"), "ab.test")

        assert blob.identifier() == f"v2-6-{md5_hex(b'hello!')}-ab.test"
        assert storage.blob(blob.identifier()).exists().complete
        assert storage.size_exists(6)
        assert storage.content_exists(md5_hex(b"hello!"), 6)

    def test_put_with_scheme(self, storage):
        blob = storage.put(io.BytesIO(b"hello!!"), "ab.test", scheme=SCHEME_V1)
        assert blob.identifier() == f"{md5_hex(b'hello!!')}-7.test"

    def test_default_scheme_from_config(self, tmp_path):
        storage = Storage(StorageConfig(root=tmp_path, temp_dir=tmp_path / "tmp", default_scheme=SCHEME_V1))
        assert storage.new_blob("x.bin").scheme == SCHEME_V1

    def test_list_and_iterate(self, storage):
        storage.put(io.BytesIO(b"hello!!"), "ab.test", scheme=SCHEME_V1)
        storage.put(io.BytesIO(b"hello!"), "ab.test")

        expected = [
            f"{md5_hex(b'hello!!')}-7.none",
            f"v2-6-{md5_hex(b'hello!')}-_data_",
        ]
        assert storage.list() == expected
        assert storage.list(expected[0]) == expected[1:]
        assert list(storage.iter_all(Direction.BACKWARD, page_size=1)) == list(reversed(expected))


class TestErrors:
    """Errors render and serialize consistently."""

    def test_str(self):
        error = InvalidIdentifierError(message="Invalid identifier", identifier="abc")
        assert str(error) == "[validation] Invalid identifier"

    def test_to_dict(self):
        error = InvalidIdentifierError(message="Invalid identifier", identifier="abc")
        assert error.to_dict() == {
            "category": "validation",
            "error": "InvalidIdentifierError",
            "message": "Invalid identifier",
            "details": {"identifier": "abc"},
        }

    def test_hierarchy(self):
        error = UnknownSchemeError(message="Unknown scheme version: 9", scheme=9)
        assert isinstance(error, StorageError)
        assert error.category is ErrorCategory.VALIDATION
        assert error.details == {"scheme": 9}
