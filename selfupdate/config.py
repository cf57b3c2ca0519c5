# -*- coding: utf-8 -*-
"""
配置管理模块

提供默认配置和配置文件(JSON)加载功能，结果为显式的 UpdateConfig，
更新流程不依赖当前工作目录。
"""
from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .errors import ConfigError

# 默认配置
DEFAULTS: Dict[str, Any] = {
    # 需要被覆盖的程序子目录（必填）
    "target_dir": None,
    # 本地版本文件，默认放在目标目录的上一级：<parent>/version.txt
    "version_file": None,
    "version_url": None,
    "archive_url": None,
    # 可选，失败不影响更新
    "changelog_url": None,
    # 备份目录的存放位置，默认与目标目录同级
    "backup_root": None,
    # 下载与解压的临时目录，默认使用系统临时目录
    "temp_dir": None,
    "timeout": 30,
    # 压缩包内用于同步的子目录
    "archive_root": "",
    "strip_top_level": False,
    # 本地版本文件损坏时是否直接失败（默认视为无版本，强制更新）
    "strict_local_version": False,
    "log_file": None,
}

REQUIRED_KEYS = ("target_dir", "version_url", "archive_url")
PATH_KEYS = ("target_dir", "version_file", "backup_root", "temp_dir", "log_file")
# 远程地址：URL 原样使用，共享目录路径与 PATH_KEYS 一样处理
LOCATOR_KEYS = ("version_url", "archive_url", "changelog_url")

_URL_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]+://")


def _is_relative_path(key: str, value) -> bool:
    if not isinstance(value, str) or not value or os.path.isabs(value):
        return False
    if key in PATH_KEYS:
        return True
    return key in LOCATOR_KEYS and not _URL_SCHEME.match(value)


@dataclass
class UpdateConfig:
    target_dir: str
    version_url: str
    archive_url: str
    version_file: Optional[str] = None
    changelog_url: Optional[str] = None
    backup_root: Optional[str] = None
    temp_dir: Optional[str] = None
    timeout: float = 30
    archive_root: str = ""
    strip_top_level: bool = False
    strict_local_version: bool = False
    log_file: Optional[str] = None

    def __post_init__(self):
        if self.target_dir:
            self.target_dir = os.path.abspath(self.target_dir)
            if not self.version_file:
                self.version_file = os.path.join(
                    os.path.dirname(self.target_dir), "version.txt"
                )

    def validate(self) -> "UpdateConfig":
        missing = [key for key in REQUIRED_KEYS if not getattr(self, key)]
        if missing:
            raise ConfigError(f"缺少必填配置项: {', '.join(missing)}")

        try:
            self.timeout = float(self.timeout)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"timeout 配置无效: {self.timeout!r}", cause=exc) from exc
        if self.timeout <= 0:
            raise ConfigError(f"timeout 必须大于 0: {self.timeout!r}")

        return self

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _read_config_file(config_path: str) -> Dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise ConfigError(f"配置文件加载失败: {config_path} ({exc})", cause=exc) from exc

    if not isinstance(data, dict):
        raise ConfigError(f"配置文件格式错误（应为 JSON 对象）: {config_path}")
    return data


def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> UpdateConfig:
    """
    加载配置：默认值 <- 配置文件 <- 命令行覆盖项（值为 None 的覆盖项忽略）

    参数:
        config_path: 配置文件路径，不存在时只使用默认值
        overrides: 命令行等来源的覆盖项

    返回:
        校验后的 UpdateConfig
    """
    config = DEFAULTS.copy()

    if config_path and os.path.exists(config_path):
        user_config = _read_config_file(config_path)
        base_dir = os.path.dirname(os.path.abspath(config_path))
        # 只取已知的配置项
        for key in DEFAULTS.keys():
            if key not in user_config:
                continue
            value = user_config[key]
            # 配置文件中的相对路径相对于配置文件所在目录
            if _is_relative_path(key, value):
                value = os.path.join(base_dir, value)
            config[key] = value

    for key, value in (overrides or {}).items():
        if key in DEFAULTS and value is not None:
            config[key] = value

    missing = [key for key in REQUIRED_KEYS if not config.get(key)]
    if missing:
        raise ConfigError(f"缺少必填配置项: {', '.join(missing)}")

    return UpdateConfig(**config).validate()
