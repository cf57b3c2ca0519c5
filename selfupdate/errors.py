# -*- coding: utf-8 -*-
"""
自动更新过程中使用的异常类型。

每个异常都带有 kind 字段，便于命令行与日志按类别输出失败原因。
"""
from __future__ import annotations

from typing import Optional


class UpdateError(Exception):
    """所有更新相关异常的基类"""

    kind = "UpdateError"

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConfigError(UpdateError):
    """配置缺失或格式错误"""

    kind = "ConfigError"


class MalformedVersionError(UpdateError):
    """版本标记无法解析（本地或远程）"""

    kind = "MalformedVersion"

    def __init__(self, raw, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"无法解析的版本号: {raw!r}", cause=cause)
        self.raw = raw


class TransportError(UpdateError):
    """远程资源（版本、压缩包、更新说明）获取失败"""

    kind = "TransportError"

    def __init__(self, url: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"获取远程资源失败: {url} ({cause})", cause=cause)
        self.url = url


class UnpackError(UpdateError):
    """压缩包无法解压"""

    kind = "UnpackError"

    def __init__(self, reason, cause: Optional[BaseException] = None) -> None:
        # reason 可以是原始异常，也可以是描述文字
        if cause is None and isinstance(reason, BaseException):
            cause = reason
        super().__init__(f"解压失败: {reason}", cause=cause)


class SyncError(UpdateError):
    """同步过程中某个文件复制失败"""

    kind = "SyncError"

    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"同步文件失败: {path} ({cause})", cause=cause)
        self.path = path


class FilesystemError(UpdateError):
    """目录创建、备份或版本文件写入失败"""

    kind = "FilesystemError"

    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"文件系统操作失败: {path} ({cause})", cause=cause)
        self.path = path
