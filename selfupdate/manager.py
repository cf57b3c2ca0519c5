# -*- coding: utf-8 -*-
"""
版本检测与更新流程编排。

流程（任一步失败立即终止）：
读取本地版本 -> 获取远程版本 -> 比较 ->
[需要更新] 更新说明(可选) -> 下载压缩包 -> 解压 -> 确保目标目录存在 ->
备份 -> 同步 -> 写入版本文件 -> 清理临时文件 -> 删除备份
"""
from __future__ import annotations

import os
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import List, Optional

from .archive import Unpacker, resolve_source_root, unpack_archive
from .backup import BackupSnapshot
from .config import UpdateConfig
from .decision import UpdateStatus, decide
from .errors import (
    FilesystemError,
    MalformedVersionError,
    UnpackError,
    UpdateError,
)
from .log import LogFn, safe_log
from .remote import Fetcher, fetch_bytes, fetch_changelog, make_fetcher, probe_remote_version
from .store import read_local_version, write_local_version
from .sync import sync_directory
from .versioning import Version


class Stage:
    """更新流程的各个阶段"""

    READ_LOCAL_VERSION = "read_local_version"
    FETCH_REMOTE_VERSION = "fetch_remote_version"
    DECIDE = "decide"
    FETCH_CHANGELOG = "fetch_changelog"
    FETCH_ARCHIVE = "fetch_archive"
    UNPACK = "unpack"
    ENSURE_TARGET_DIR = "ensure_target_dir"
    BACKUP = "backup"
    SYNC = "sync"
    COMMIT_VERSION_MARKER = "commit_version_marker"
    CLEANUP_TEMP = "cleanup_temp"
    DELETE_BACKUP = "delete_backup"


class RunStatus:
    UP_TO_DATE = "up_to_date"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass
class UpdateCheck:
    status: str = UpdateStatus.UNKNOWN
    local_version: Optional[Version] = None
    remote_version: Optional[Version] = None
    remote_raw: Optional[str] = None
    stage: Optional[str] = None
    error: Optional[UpdateError] = None


@dataclass
class UpdateResult:
    status: str
    stage: Optional[str] = None
    error: Optional[UpdateError] = None
    local_version: Optional[Version] = None
    remote_version: Optional[Version] = None
    remote_raw: Optional[str] = None
    changelog: List[str] = field(default_factory=list)
    files_synced: int = 0
    # 非 None 表示备份仍保留在磁盘上
    backup_path: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != RunStatus.FAILED


class UpdateManager:
    """负责版本检查与执行更新"""

    def __init__(
        self,
        config: UpdateConfig,
        *,
        fetch: Optional[Fetcher] = None,
        unpack: Optional[Unpacker] = None,
        log_fn: Optional[LogFn] = None,
    ):
        self.config = config
        self.fetch = fetch or make_fetcher(config.timeout)
        self.unpack = unpack or unpack_archive
        self.log_fn = log_fn

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def check(self) -> UpdateCheck:
        """只做版本检查，不修改任何文件"""
        check = UpdateCheck()

        try:
            check.local_version = self._read_local_version()
        except UpdateError as exc:
            check.stage, check.error = Stage.READ_LOCAL_VERSION, exc
            return check

        try:
            remote = probe_remote_version(self.fetch, self.config.version_url)
        except UpdateError as exc:
            check.stage, check.error = Stage.FETCH_REMOTE_VERSION, exc
            return check

        check.remote_raw = remote.raw
        check.remote_version = remote.version
        check.stage = Stage.DECIDE
        check.status = decide(check.local_version, remote.version)
        return check

    def run(self) -> UpdateResult:
        """
        执行完整更新流程。
        失败时返回 status=failed 的结果，并保留已创建的备份。
        """
        check = self.check()
        result = UpdateResult(
            status=RunStatus.FAILED,
            local_version=check.local_version,
            remote_version=check.remote_version,
            remote_raw=check.remote_raw,
        )
        if check.error is not None:
            return self._fail(result, check.stage, check.error)

        local_label = check.local_version or "无"
        if check.status == UpdateStatus.UP_TO_DATE:
            self._log(f"版本已最新: local={local_label}, remote={check.remote_version}")
            result.status = RunStatus.UP_TO_DATE
            return result

        self._log(f"检测到新版本: local={local_label}, remote={check.remote_version}")
        result.changelog = fetch_changelog(
            self.fetch,
            self.config.changelog_url,
            log_fn=lambda msg: self._log(f"[{Stage.FETCH_CHANGELOG}] {msg}"),
        )
        for line in result.changelog:
            self._log(f"  {line}")

        return self._apply_update(result)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _apply_update(self, result: UpdateResult) -> UpdateResult:
        config = self.config
        try:
            if config.temp_dir:
                os.makedirs(config.temp_dir, exist_ok=True)
            scratch_dir = tempfile.mkdtemp(prefix="update_tmp_", dir=config.temp_dir)
        except OSError as exc:
            return self._fail(
                result,
                Stage.FETCH_ARCHIVE,
                FilesystemError(config.temp_dir or tempfile.gettempdir(), exc),
            )

        snapshot = None
        stage = Stage.FETCH_ARCHIVE
        try:
            data = self._download_archive(scratch_dir)

            stage = Stage.UNPACK
            source_root = self._unpack_archive(data, os.path.join(scratch_dir, "unpacked"))

            stage = Stage.ENSURE_TARGET_DIR
            try:
                os.makedirs(config.target_dir, exist_ok=True)
            except OSError as exc:
                raise FilesystemError(config.target_dir, exc) from exc

            stage = Stage.BACKUP
            snapshot = BackupSnapshot.take(config.target_dir, config.backup_root)
            result.backup_path = snapshot.path
            self._log(f"已备份目标目录: {snapshot.path}")

            stage = Stage.SYNC
            result.files_synced = sync_directory(source_root, config.target_dir, log_fn=self._log)

            stage = Stage.COMMIT_VERSION_MARKER
            write_local_version(config.version_file, result.remote_raw)
            self._log(f"版本文件已更新为 {result.remote_raw}")
        except UpdateError as exc:
            if snapshot is not None:
                self._log(f"备份已保留，可用于人工恢复: {snapshot.path}")
            return self._fail(result, stage, exc)
        finally:
            shutil.rmtree(scratch_dir, ignore_errors=True)
            self._log(f"[{Stage.CLEANUP_TEMP}] 已清理临时目录: {scratch_dir}")

        try:
            snapshot.commit()
            result.backup_path = None
        except FilesystemError as exc:
            # 新版本已经生效，备份删不掉只提示
            self._log(f"[{Stage.DELETE_BACKUP}] 删除备份失败，请手动清理: {exc}")

        result.status = RunStatus.UPDATED
        self._log(f"更新完成，共同步 {result.files_synced} 个文件")
        return result

    def _download_archive(self, scratch_dir: str) -> bytes:
        data = fetch_bytes(self.fetch, self.config.archive_url)
        archive_path = os.path.join(scratch_dir, "package.bin")
        try:
            with open(archive_path, "wb") as fp:
                fp.write(data)
        except OSError as exc:
            raise FilesystemError(archive_path, exc) from exc
        self._log(f"已下载更新包: {len(data)} 字节")
        return data

    def _unpack_archive(self, data: bytes, unpack_dir: str) -> str:
        try:
            self.unpack(data, unpack_dir)
            return resolve_source_root(
                unpack_dir,
                archive_root=self.config.archive_root,
                strip_top_level=self.config.strip_top_level,
            )
        except UnpackError:
            raise
        except Exception as exc:
            raise UnpackError(exc) from exc

    def _read_local_version(self) -> Optional[Version]:
        try:
            return read_local_version(self.config.version_file)
        except MalformedVersionError as exc:
            if self.config.strict_local_version:
                raise
            self._log(f"本地版本文件无法解析，按无版本处理: {exc}")
            return None

    def _fail(self, result: UpdateResult, stage: str, error: UpdateError) -> UpdateResult:
        result.status = RunStatus.FAILED
        result.stage = stage
        result.error = error
        self._log(f"更新失败 [{stage}] {error.kind}: {error}")
        return result

    def _log(self, message: str) -> None:
        safe_log(self.log_fn, message)
