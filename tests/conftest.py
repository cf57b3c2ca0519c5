#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
pytest配置文件和共享fixtures
"""
import io
import tarfile
import zipfile

import pytest

from selfupdate.config import UpdateConfig
from selfupdate.errors import TransportError

VERSION_URL = "https://updates.example.com/version.txt"
ARCHIVE_URL = "https://updates.example.com/package.zip"
CHANGELOG_URL = "https://updates.example.com/changelog.txt"


def make_zip(files: dict) -> bytes:
    """files: {相对路径: 内容(str/bytes)}"""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in files.items():
            if isinstance(content, str):
                content = content.encode("utf-8")
            zf.writestr(name, content)
    return buf.getvalue()


def make_tar(files: dict, mode: str = "w:gz") -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode=mode) as tf:
        for name, content in files.items():
            if isinstance(content, str):
                content = content.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(content)
            tf.addfile(info, io.BytesIO(content))
    return buf.getvalue()


class FakeFetcher:
    """按 URL 返回预设内容；值为异常时抛出。记录所有请求。"""

    def __init__(self, resources: dict):
        self.resources = dict(resources)
        self.calls = []

    def __call__(self, url: str) -> bytes:
        self.calls.append(url)
        value = self.resources.get(url)
        if value is None:
            raise TransportError(url, FileNotFoundError(url))
        if isinstance(value, BaseException):
            raise value
        if isinstance(value, str):
            return value.encode("utf-8")
        return value


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


@pytest.fixture
def app_layout(tmp_path):
    """
    模拟安装目录：
        install/
            version.txt      <- 版本文件（控制文件）
            launcher.cfg     <- 同级控制文件，不能被改动
            app/             <- 被更新的目标目录
    """
    install = tmp_path / "install"
    target = install / "app"
    target.mkdir(parents=True)
    (install / "launcher.cfg").write_text("keep me", encoding="utf-8")

    config = UpdateConfig(
        target_dir=str(target),
        version_url=VERSION_URL,
        archive_url=ARCHIVE_URL,
        backup_root=str(tmp_path / "backups"),
        temp_dir=str(tmp_path / "tmp"),
    )
    return {
        "root": tmp_path,
        "install": install,
        "target": target,
        "version_file": install / "version.txt",
        "backups": tmp_path / "backups",
        "temp": tmp_path / "tmp",
        "config": config,
    }
