# -*- coding: utf-8 -*-
"""
压缩包解压（zip / tar）以及同步源目录的定位。
"""
from __future__ import annotations

import io
import os
import tarfile
import zipfile
from typing import Callable

from .errors import UnpackError

Unpacker = Callable[[bytes, str], None]


def _is_within(base_dir: str, name: str) -> bool:
    base = os.path.realpath(base_dir)
    target = os.path.realpath(os.path.join(base_dir, name))
    return target == base or target.startswith(base + os.sep)


def _unpack_zip(data: bytes, dest_dir: str) -> None:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        for name in zf.namelist():
            if not _is_within(dest_dir, name):
                raise UnpackError(f"压缩包成员越界: {name}")
        zf.extractall(dest_dir)


def _unpack_tar(data: bytes, dest_dir: str) -> None:
    with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as tf:
        members = tf.getmembers()
        for member in members:
            if member.issym() or member.islnk():
                raise UnpackError(f"不支持压缩包中的链接: {member.name}")
            if not _is_within(dest_dir, member.name):
                raise UnpackError(f"压缩包成员越界: {member.name}")
        if hasattr(tarfile, "data_filter"):
            tf.extractall(dest_dir, members=members, filter="data")
        else:
            tf.extractall(dest_dir, members=members)


def unpack_archive(data: bytes, dest_dir: str) -> None:
    """将压缩包字节解压到 dest_dir，格式按内容自动识别"""
    try:
        os.makedirs(dest_dir, exist_ok=True)
        if zipfile.is_zipfile(io.BytesIO(data)):
            _unpack_zip(data, dest_dir)
            return

        try:
            _unpack_tar(data, dest_dir)
        except tarfile.ReadError as exc:
            raise UnpackError("无法识别的压缩包格式", exc) from exc
    except UnpackError:
        raise
    except (OSError, EOFError, zipfile.BadZipFile, tarfile.TarError) as exc:
        raise UnpackError(exc) from exc


def resolve_source_root(
    unpacked_dir: str,
    archive_root: str = "",
    strip_top_level: bool = False,
) -> str:
    """
    确定用于同步的源目录。
    strip_top_level: 解压结果只有一个顶层目录时（如 GitHub zipball）进入该目录。
    archive_root: 再进入压缩包内的指定子目录。
    """
    root = unpacked_dir
    if strip_top_level:
        entries = os.listdir(root)
        if len(entries) == 1 and os.path.isdir(os.path.join(root, entries[0])):
            root = os.path.join(root, entries[0])

    if archive_root:
        if not _is_within(root, archive_root):
            raise UnpackError(f"archive_root 越界: {archive_root}")
        root = os.path.join(root, archive_root)

    if not os.path.isdir(root):
        raise UnpackError(f"压缩包中找不到目录: {archive_root or root}")

    return root
