# -*- coding: utf-8 -*-
"""
本地版本标记文件的读写。
"""
from __future__ import annotations

import os
import tempfile
from typing import Optional

from .errors import FilesystemError, MalformedVersionError
from .versioning import Version, parse_version


def read_local_version(file_path: str) -> Optional[Version]:
    """
    读取本地版本文件。
    文件不存在返回 None；内容无法解析时抛出 MalformedVersionError。
    """
    if not os.path.exists(file_path):
        return None

    try:
        with open(file_path, "r", encoding="utf-8-sig") as fp:
            raw = fp.read()
    except UnicodeDecodeError as exc:
        raise MalformedVersionError(file_path, cause=exc) from exc
    except OSError as exc:
        raise FilesystemError(file_path, exc) from exc

    return parse_version(raw.strip())


def write_local_version(file_path: str, raw_version: str) -> None:
    """
    原样写入远程获取到的版本字符串（仅去掉首尾空白）。
    先写同目录临时文件再 os.replace，避免写入中途崩溃导致旧文件损坏。
    """
    directory = os.path.dirname(os.path.abspath(file_path))
    tmp_path = None
    try:
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".version_", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fp:
            fp.write(raw_version.strip())
            fp.flush()
            os.fsync(fp.fileno())
        os.replace(tmp_path, file_path)
        tmp_path = None
    except OSError as exc:
        raise FilesystemError(file_path, exc) from exc
    finally:
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)
