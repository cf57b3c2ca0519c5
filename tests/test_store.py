import os

import pytest

from selfupdate.errors import FilesystemError, MalformedVersionError
from selfupdate.store import read_local_version, write_local_version
from selfupdate.versioning import Version


def test_missing_file_is_absent(tmp_path):
    assert read_local_version(str(tmp_path / "version.txt")) is None


def test_read_trims_whitespace_and_bom(tmp_path):
    path = tmp_path / "version.txt"
    path.write_bytes("\ufeff  V1.2.3\r\n".encode("utf-8"))
    assert read_local_version(str(path)) == Version(1, 2, 3)


def test_read_malformed_raises(tmp_path):
    path = tmp_path / "version.txt"
    path.write_text("2025.11.21.1", encoding="utf-8")
    with pytest.raises(MalformedVersionError):
        read_local_version(str(path))


def test_read_directory_raises_filesystem_error(tmp_path):
    path = tmp_path / "version.txt"
    path.mkdir()
    with pytest.raises(FilesystemError):
        read_local_version(str(path))


def test_write_is_verbatim(tmp_path):
    path = tmp_path / "sub" / "version.txt"
    write_local_version(str(path), "V1.2.0\n")
    assert path.read_bytes() == b"V1.2.0"
    assert read_local_version(str(path)) == Version(1, 2, 0)


def test_write_replaces_existing_and_leaves_no_temp(tmp_path):
    path = tmp_path / "version.txt"
    path.write_text("V1.0.0", encoding="utf-8")

    write_local_version(str(path), "V1.0.1")

    assert path.read_text(encoding="utf-8") == "V1.0.1"
    assert sorted(os.listdir(tmp_path)) == ["version.txt"]


def test_failed_write_keeps_previous_marker(tmp_path, monkeypatch):
    path = tmp_path / "version.txt"
    path.write_text("V1.0.0", encoding="utf-8")

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("selfupdate.store.os.replace", broken_replace)

    with pytest.raises(FilesystemError):
        write_local_version(str(path), "V2.0.0")

    assert path.read_text(encoding="utf-8") == "V1.0.0"
    assert sorted(os.listdir(tmp_path)) == ["version.txt"]
