# -*- coding: utf-8 -*-
"""
把解压后的新版本文件合并到目标目录。

只覆盖源目录中存在的文件，目标目录中多出的文件保持不变。
"""
from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from typing import Callable, List, Optional

from .errors import SyncError


@dataclass(frozen=True)
class SyncEntry:
    relative_path: str  # 使用 "/" 分隔
    source_path: str


def build_sync_plan(source: str) -> List[SyncEntry]:
    """递归列出源目录中的所有文件"""
    entries: List[SyncEntry] = []
    for root, _dirs, files in os.walk(source):
        rel_root = os.path.relpath(root, source)
        for file_name in files:
            rel_path = file_name if rel_root == "." else os.path.join(rel_root, file_name)
            entries.append(
                SyncEntry(
                    relative_path=rel_path.replace(os.sep, "/"),
                    source_path=os.path.join(root, file_name),
                )
            )

    entries.sort(key=lambda entry: entry.relative_path)
    return entries


def sync_directory(
    source: str,
    target: str,
    log_fn: Optional[Callable[[str], None]] = None,
) -> int:
    """
    逐个复制文件到目标目录（覆盖同名文件，按需创建父目录）。
    任一文件失败立即抛出 SyncError，已复制的文件保留。
    返回复制的文件数。
    """
    plan = build_sync_plan(source)

    try:
        os.makedirs(target, exist_ok=True)
    except OSError as exc:
        raise SyncError(target, exc) from exc

    for entry in plan:
        dst_file = os.path.join(target, *entry.relative_path.split("/"))
        try:
            os.makedirs(os.path.dirname(dst_file), exist_ok=True)
            # 目标是链接时先删除链接本身，不能写穿到目标目录之外
            if os.path.islink(dst_file):
                os.unlink(dst_file)
            elif os.path.isdir(dst_file):
                raise IsADirectoryError(dst_file)
            shutil.copy2(entry.source_path, dst_file)
        except OSError as exc:
            raise SyncError(entry.relative_path, exc) from exc

        if log_fn:
            log_fn(f"已更新: {entry.relative_path}")

    return len(plan)
