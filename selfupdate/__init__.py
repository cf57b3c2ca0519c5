# -*- coding: utf-8 -*-
"""
自动更新模块入口。

该包包含：
- versioning / decision: 版本号解析、比较与是否更新的判断
- store: 本地版本文件读写
- remote / archive: 远程资源获取与压缩包解压
- sync / backup: 选择性覆盖同步与同步前备份
- manager: 更新流程编排
- updater_cli: 命令行入口
"""

from .config import UpdateConfig, load_config  # noqa: F401
from .decision import UpdateStatus, decide  # noqa: F401
from .errors import (  # noqa: F401
    ConfigError,
    FilesystemError,
    MalformedVersionError,
    SyncError,
    TransportError,
    UnpackError,
    UpdateError,
)
from .manager import RunStatus, Stage, UpdateManager, UpdateResult  # noqa: F401
from .sync import sync_directory  # noqa: F401
from .versioning import Version, compare_versions, parse_version  # noqa: F401
