import io
import zipfile

import pytest

from selfupdate.archive import resolve_source_root, unpack_archive
from selfupdate.errors import UnpackError

from conftest import make_tar, make_zip


def test_unpack_zip(tmp_path):
    data = make_zip({"foo.txt": "hello", "lib/中文子目录/资源.dat": b"\x00\x01"})
    dest = tmp_path / "out"

    unpack_archive(data, str(dest))

    assert (dest / "foo.txt").read_text(encoding="utf-8") == "hello"
    assert (dest / "lib" / "中文子目录" / "资源.dat").read_bytes() == b"\x00\x01"


@pytest.mark.parametrize("mode", ["w", "w:gz", "w:bz2"])
def test_unpack_tar(tmp_path, mode):
    data = make_tar({"bin/app.sh": "echo new"}, mode=mode)
    dest = tmp_path / "out"

    unpack_archive(data, str(dest))

    assert (dest / "bin" / "app.sh").read_text(encoding="utf-8") == "echo new"


def test_unknown_format_raises(tmp_path):
    with pytest.raises(UnpackError) as excinfo:
        unpack_archive(b"definitely not an archive", str(tmp_path / "out"))
    assert excinfo.value.kind == "UnpackError"


def test_zip_path_traversal_rejected(tmp_path):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("../escape.txt", "bad")
    dest = tmp_path / "out"

    with pytest.raises(UnpackError):
        unpack_archive(buf.getvalue(), str(dest))
    assert not (tmp_path / "escape.txt").exists()


def test_tar_path_traversal_rejected(tmp_path):
    data = make_tar({"../../escape.txt": "bad"}, mode="w")
    with pytest.raises(UnpackError):
        unpack_archive(data, str(tmp_path / "out"))


def test_resolve_plain_root(tmp_path):
    (tmp_path / "a.txt").write_text("x", encoding="utf-8")
    assert resolve_source_root(str(tmp_path)) == str(tmp_path)


def test_resolve_strips_single_top_level(tmp_path):
    top = tmp_path / "project-main"
    top.mkdir()
    (top / "a.txt").write_text("x", encoding="utf-8")

    assert resolve_source_root(str(tmp_path), strip_top_level=True) == str(top)


def test_strip_top_level_ignored_with_several_entries(tmp_path):
    (tmp_path / "one").mkdir()
    (tmp_path / "two.txt").write_text("x", encoding="utf-8")

    assert resolve_source_root(str(tmp_path), strip_top_level=True) == str(tmp_path)


def test_resolve_archive_root(tmp_path):
    (tmp_path / "dist" / "app").mkdir(parents=True)
    assert resolve_source_root(str(tmp_path), archive_root="dist/app") == str(
        tmp_path / "dist" / "app"
    )


def test_missing_archive_root_raises(tmp_path):
    with pytest.raises(UnpackError):
        resolve_source_root(str(tmp_path), archive_root="nope")


def test_archive_root_cannot_escape(tmp_path):
    (tmp_path / "inner").mkdir()
    with pytest.raises(UnpackError):
        resolve_source_root(str(tmp_path / "inner"), archive_root="..")
