# -*- coding: utf-8 -*-
"""
自动更新器的命令行入口：
1. 读取配置（配置文件 + 命令行覆盖）
2. 检查远程版本，必要时下载并同步到目标目录
3. 按结果返回不同的退出码

也可用 --restore-from 从保留的备份人工恢复目标目录。
"""
from __future__ import annotations

import argparse
import sys
from typing import Iterable, Optional

from .backup import BackupSnapshot
from .config import load_config
from .decision import UpdateStatus
from .errors import ConfigError, UpdateError
from .log import make_log_fn
from .manager import RunStatus, Stage, UpdateManager

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_REMOTE_UNAVAILABLE = 3
EXIT_UPDATE_FAILED = 4
EXIT_UPDATE_AVAILABLE = 10

# 这些阶段失败说明远程版本拿不到
_REMOTE_STAGES = (Stage.FETCH_REMOTE_VERSION,)


def parse_args(argv: Optional[Iterable[str]] = None):
    parser = argparse.ArgumentParser(description="程序自动更新器")
    parser.add_argument("--config", default=None, help="JSON 配置文件路径")
    parser.add_argument("--target", dest="target_dir", default=None, help="需要更新的程序子目录")
    parser.add_argument("--version-file", default=None, help="本地版本文件路径")
    parser.add_argument("--version-url", default=None, help="远程版本文件地址（URL 或共享目录路径）")
    parser.add_argument("--archive-url", default=None, help="远程更新包地址")
    parser.add_argument("--changelog-url", default=None, help="更新说明地址（可选）")
    parser.add_argument("--backup-root", default=None, help="备份存放目录")
    parser.add_argument("--temp-dir", default=None, help="临时目录")
    parser.add_argument("--timeout", type=float, default=None, help="网络超时（秒）")
    parser.add_argument("--archive-root", default=None, help="压缩包内用于同步的子目录")
    parser.add_argument(
        "--strip-top-level",
        action="store_true",
        default=None,
        help="解压后只有一个顶层目录时进入该目录",
    )
    parser.add_argument(
        "--strict-local-version",
        action="store_true",
        default=None,
        help="本地版本文件损坏时直接失败",
    )
    parser.add_argument("--log-file", default=None, help="日志文件路径，如 update_log.txt")
    parser.add_argument("--check-only", action="store_true", help="只检查是否有新版本")
    parser.add_argument("--restore-from", default=None, help="从指定备份目录恢复目标目录")
    return parser.parse_args(list(argv) if argv is not None else None)


def _overrides_from_args(args) -> dict:
    keys = (
        "target_dir",
        "version_file",
        "version_url",
        "archive_url",
        "changelog_url",
        "backup_root",
        "temp_dir",
        "timeout",
        "archive_root",
        "strip_top_level",
        "strict_local_version",
        "log_file",
    )
    return {key: getattr(args, key) for key in keys}


def exit_code_for(result) -> int:
    if result.ok:
        return EXIT_OK
    if result.stage in _REMOTE_STAGES:
        return EXIT_REMOTE_UNAVAILABLE
    return EXIT_UPDATE_FAILED


def _run_check_only(manager: UpdateManager, log) -> int:
    check = manager.check()
    if check.error is not None:
        log(f"版本检查失败 [{check.stage}] {check.error.kind}: {check.error}")
        if check.stage in _REMOTE_STAGES:
            return EXIT_REMOTE_UNAVAILABLE
        return EXIT_UPDATE_FAILED

    if check.status == UpdateStatus.UPDATE_AVAILABLE:
        log(f"有新版本可用: {check.local_version or '无'} -> {check.remote_version}")
        return EXIT_UPDATE_AVAILABLE

    log(f"版本已最新: {check.remote_version}")
    return EXIT_OK


def _restore(config, backup_path: str, log) -> int:
    log(f"从备份恢复: {backup_path} -> {config.target_dir}")
    try:
        BackupSnapshot(config.target_dir, backup_path).restore()
    except UpdateError as exc:
        log(f"恢复失败: {exc}")
        return EXIT_UPDATE_FAILED
    log("恢复完成")
    return EXIT_OK


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = load_config(args.config, _overrides_from_args(args))
    except ConfigError as exc:
        print(f"[update] 配置错误: {exc}")
        return EXIT_CONFIG_ERROR

    try:
        log = make_log_fn(config.log_file)
    except OSError as exc:
        print(f"[update] 配置错误: 无法创建日志文件目录 {config.log_file} ({exc})")
        return EXIT_CONFIG_ERROR

    if args.restore_from:
        return _restore(config, args.restore_from, log)

    manager = UpdateManager(config, log_fn=log)
    if args.check_only:
        return _run_check_only(manager, log)

    log("自动更新开始")
    result = manager.run()
    if result.status == RunStatus.UP_TO_DATE:
        log("无需更新")
    elif result.ok:
        log("更新流程完成")
    return exit_code_for(result)


if __name__ == "__main__":
    sys.exit(main())
