# -*- coding: utf-8 -*-
"""
同步前的目标目录完整备份。

成功后调用 commit() 删除备份；失败时备份保留在磁盘上供人工恢复。
"""
from __future__ import annotations

import os
import shutil
from datetime import datetime
from typing import Optional

from .errors import FilesystemError


def _unique_backup_path(backup_root: str, target_name: str, now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    base = os.path.join(backup_root, f"{target_name}.backup-{stamp}")
    candidate = base
    index = 1
    while os.path.exists(candidate):
        candidate = f"{base}-{index}"
        index += 1
    return candidate


class BackupSnapshot:
    """目标目录的一次性快照"""

    def __init__(self, target_dir: str, path: str):
        self.target_dir = os.path.abspath(target_dir)
        self.path = os.path.abspath(path)
        self.committed = False

    @classmethod
    def take(cls, target_dir: str, backup_root: Optional[str] = None) -> "BackupSnapshot":
        target_dir = os.path.abspath(target_dir)
        if backup_root is None:
            backup_root = os.path.dirname(target_dir)

        path = _unique_backup_path(backup_root, os.path.basename(target_dir))
        try:
            os.makedirs(backup_root, exist_ok=True)
            shutil.copytree(target_dir, path)
        except (OSError, shutil.Error) as exc:
            raise FilesystemError(path, exc) from exc

        return cls(target_dir, path)

    def commit(self) -> None:
        """更新成功，删除备份"""
        try:
            if os.path.exists(self.path):
                shutil.rmtree(self.path)
        except OSError as exc:
            raise FilesystemError(self.path, exc) from exc
        self.committed = True

    def restore(self) -> None:
        """
        人工恢复：用备份内容替换目标目录。
        更新流程本身从不调用。
        """
        if not os.path.isdir(self.path):
            raise FilesystemError(self.path, FileNotFoundError("备份目录不存在"))

        try:
            if os.path.exists(self.target_dir):
                shutil.rmtree(self.target_dir)
            shutil.copytree(self.path, self.target_dir)
        except (OSError, shutil.Error) as exc:
            raise FilesystemError(self.target_dir, exc) from exc
