# -*- coding: utf-8 -*-
"""
根据本地与远程版本决定是否需要更新（纯函数，无副作用）。
"""
from __future__ import annotations

from typing import Optional

from .versioning import ZERO_VERSION, Version, compare_versions


class UpdateStatus:
    """版本检查结论常量"""

    UP_TO_DATE = "up_to_date"
    UPDATE_AVAILABLE = "update_available"
    # 仅用于检查结果：远程版本无法获取时无法给出结论
    UNKNOWN = "unknown"


def decide(local: Optional[Version], remote: Version) -> str:
    """
    local 为 None 表示本地没有版本文件，按 V0.0.0 处理。
    仅当 remote 严格大于 local 时返回 UPDATE_AVAILABLE。
    """
    baseline = local if local is not None else ZERO_VERSION
    if compare_versions(remote, baseline) > 0:
        return UpdateStatus.UPDATE_AVAILABLE
    return UpdateStatus.UP_TO_DATE
