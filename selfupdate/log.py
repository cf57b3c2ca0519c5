# -*- coding: utf-8 -*-
"""
更新日志输出：打印到控制台，并可追加写入 update_log.txt 之类的日志文件。
"""
from __future__ import annotations

import os
from datetime import datetime
from typing import Callable, Optional

LogFn = Callable[[str], None]


def default_log(message: str) -> None:
    print(f"[update] {message}")


def make_log_fn(log_file: Optional[str] = None, echo: bool = True) -> LogFn:
    """返回一个日志函数：带时间戳写入 log_file，并按需回显到控制台"""
    if log_file:
        directory = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(directory, exist_ok=True)

    def _log(message: str) -> None:
        if echo:
            default_log(message)
        if not log_file:
            return
        stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        try:
            with open(log_file, "a", encoding="utf-8") as fp:
                fp.write(f"[{stamp}] {message}\n")
        except OSError as exc:
            # 日志写不进去不影响更新流程
            print(f"[update] 写入日志文件失败({log_file}): {exc}")

    return _log


def safe_log(log_fn: Optional[LogFn], message: str) -> None:
    if log_fn is None:
        default_log(message)
        return
    try:
        log_fn(message)
    except Exception:
        default_log(message)
