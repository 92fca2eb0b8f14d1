"""Tests for the sfs command-line interface."""

import json

import pytest

from sfspy import cli
from tests.tools import md5_hex


@pytest.fixture
def root_args(tmp_path):
    return ["--root", str(tmp_path / "root"), "--temp-dir", str(tmp_path / "root" / "tmp")]


@pytest.fixture
def sample(tmp_path):
    path = tmp_path / "ab.test"
    path.write_bytes(b"hello!")
    return path


def put(root_args, path, capsys, *extra):
    assert cli.run([*root_args, "put", str(path), *extra]) == 0
    return json.loads(capsys.readouterr().out)


class TestPut:
    """Test `sfs put`."""

    def test_put_v2(self, root_args, sample, capsys):
        result = put(root_args, sample, capsys)
        assert result["identifier"] == f"v2-6-{md5_hex(b'hello!')}-ab.test"
        assert result["size"] == 6

    def test_put_v1_with_name(self, root_args, sample, capsys):
        result = put(root_args, sample, capsys, "--scheme", "1", "--name", "renamed.bin")
        assert result["identifier"] == f"{md5_hex(b'hello!')}-6.bin"

    def test_put_missing_file(self, root_args, tmp_path, capsys):
        assert cli.run([*root_args, "put", str(tmp_path / "missing.txt")]) == 1
        assert "not found" in capsys.readouterr().err


class TestLookup:
    """Test `sfs info`, `sfs exists` and `sfs cat`."""

    def test_info(self, root_args, sample, capsys):
        identifier = put(root_args, sample, capsys)["identifier"]

        assert cli.run([*root_args, "info", identifier]) == 0
        info = json.loads(capsys.readouterr().out)
        assert info["scheme"] == 2
        assert info["name"] == "ab.test"
        assert info["data_exists"] is True
        assert info["record_exists"] is True

    def test_exists(self, root_args, sample, capsys):
        identifier = put(root_args, sample, capsys)["identifier"]
        assert cli.run([*root_args, "exists", identifier]) == 0

        missing = f"v2-7-{md5_hex(b'hello!!')}-other.test"
        assert cli.run([*root_args, "exists", missing]) == 1

    def test_exists_any_scheme(self, root_args, sample, capsys):
        put(root_args, sample, capsys, "--scheme", "1")
        v2_identifier = f"v2-6-{md5_hex(b'hello!')}-ab.test"

        assert cli.run([*root_args, "exists", v2_identifier]) == 1
        assert cli.run([*root_args, "exists", "--any-scheme", v2_identifier]) == 0

    def test_cat_to_file(self, root_args, sample, capsys, tmp_path):
        identifier = put(root_args, sample, capsys)["identifier"]
        output = tmp_path / "out" / "copy.bin"

        assert cli.run([*root_args, "cat", identifier, "-o", str(output)]) == 0
        assert output.read_bytes() == b"hello!"

    def test_invalid_identifier(self, root_args, capsys):
        assert cli.run([*root_args, "info", "garbage"]) == 1
        assert "Error: [validation]" in capsys.readouterr().err


class TestLs:
    """Test `sfs ls`."""

    def test_ls_pages(self, root_args, tmp_path, capsys):
        for i in range(3):
            path = tmp_path / f"file{i}.txt"
            path.write_bytes(f"content {i}".encode())
            put(root_args, path, capsys)

        assert cli.run([*root_args, "ls", "--all", "--limit", "2"]) == 0
        everything = capsys.readouterr().out.split()
        assert len(everything) == 3

        assert cli.run([*root_args, "ls", "--limit", "2"]) == 0
        first_page = capsys.readouterr().out.split()
        assert first_page == everything[:2]

        assert cli.run([*root_args, "ls", "--cursor", first_page[-1]]) == 0
        assert capsys.readouterr().out.split() == everything[2:]

        assert cli.run([*root_args, "ls", "--backward"]) == 0
        assert capsys.readouterr().out.split() == list(reversed(everything))

    def test_ls_missing_root(self, root_args, capsys):
        assert cli.run([*root_args, "ls"]) == 1
        assert "does not exist" in capsys.readouterr().err

    def test_no_command_prints_help(self, capsys):
        assert cli.run([]) == 0
        assert "usage: sfs" in capsys.readouterr().out
