# -*- coding: utf-8 -*-
"""
版本号 `V<major>.<minor>.<patch>` 的解析与比较工具。
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

from .errors import MalformedVersionError

VERSION_PATTERN = re.compile(r"V([0-9]+)\.([0-9]+)\.([0-9]+)")


@dataclass(frozen=True, order=True)
class Version:
    """
    结构化版本号。

    按 (major, minor, patch) 逐项比较，分量不受 100 以内的限制。
    """

    major: int
    minor: int
    patch: int

    @property
    def ordinal(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        return f"V{self.major}.{self.minor}.{self.patch}"


ZERO_VERSION = Version(0, 0, 0)


def parse_version(value: str) -> Version:
    """
    解析版本字符串（会先去掉首尾空白）。
    格式不符合 `V<数字>.<数字>.<数字>` 时抛出 MalformedVersionError。
    """
    if not isinstance(value, str):
        raise MalformedVersionError(value)

    match = VERSION_PATTERN.fullmatch(value.strip())
    if not match:
        raise MalformedVersionError(value)

    major, minor, patch = (int(part) for part in match.groups())
    return Version(major, minor, patch)


def compare_versions(a: Version, b: Version) -> int:
    """
    比较两个版本号。
    返回值：
        -1 -> a < b
         0 -> 相等
         1 -> a > b
    """
    if a.ordinal == b.ordinal:
        return 0

    return -1 if a.ordinal < b.ordinal else 1
