# -*- coding: utf-8 -*-
"""
远程资源获取：版本标记、压缩包、更新说明。

远程地址既可以是 http(s) URL，也可以是共享目录中的文件路径。
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Callable, List, Optional
from urllib.parse import unquote, urlparse

import requests

from .errors import MalformedVersionError, TransportError
from .versioning import Version, parse_version

DEFAULT_TIMEOUT = 30
CHANGELOG_MAX_LINES = 15

Fetcher = Callable[[str], bytes]

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class RemoteVersion:
    raw: str
    version: Version


def _local_path_from_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme == "file":
        path = unquote(parsed.path)
        # file:///C:/dir -> C:/dir
        if re.match(r"^/[A-Za-z]:", path):
            path = path[1:]
        if parsed.netloc and parsed.netloc != "localhost":
            path = f"//{parsed.netloc}{path}"
        return path
    return url


def fetch_resource(url: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """
    获取远程资源的原始字节。
    http(s) 地址走 requests，其余按本地/共享目录路径读取。
    """
    if not url:
        raise TransportError(str(url), ValueError("未配置远程地址"))

    scheme = urlparse(url).scheme.lower()
    if scheme in ("http", "https"):
        try:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
            return response.content
        except requests.exceptions.RequestException as exc:
            raise TransportError(url, exc) from exc

    path = _local_path_from_url(url)
    try:
        with open(path, "rb") as fp:
            return fp.read()
    except OSError as exc:
        raise TransportError(url, exc) from exc


def make_fetcher(timeout: float = DEFAULT_TIMEOUT) -> Fetcher:
    return lambda url: fetch_resource(url, timeout=timeout)


def fetch_bytes(fetch: Fetcher, url: str) -> bytes:
    try:
        return fetch(url)
    except TransportError:
        raise
    except Exception as exc:
        raise TransportError(url, exc) from exc


def probe_remote_version(fetch: Fetcher, url: str) -> RemoteVersion:
    """获取并解析远程版本标记，保留原始字符串用于写回本地"""
    data = fetch_bytes(fetch, url)
    try:
        raw = data.decode("utf-8-sig").strip()
    except UnicodeDecodeError as exc:
        raise MalformedVersionError(data[:64], cause=exc) from exc

    return RemoteVersion(raw=raw, version=parse_version(raw))


def split_changelog(text: str, max_lines: int = CHANGELOG_MAX_LINES) -> List[str]:
    lines = _LINE_BREAK.split(text)
    # 末尾换行不算一行
    if lines and lines[-1] == "":
        lines.pop()
    return lines[:max_lines]


def fetch_changelog(
    fetch: Fetcher,
    url: Optional[str],
    max_lines: int = CHANGELOG_MAX_LINES,
    log_fn: Optional[Callable[[str], None]] = None,
) -> List[str]:
    """
    尽力获取更新说明，只返回前 max_lines 行。
    任何失败都只记录日志并返回空列表，不影响更新结果。
    """
    if not url:
        return []

    try:
        data = fetch_bytes(fetch, url)
        text = data.decode("utf-8-sig", errors="replace")
    except TransportError as exc:
        if log_fn:
            log_fn(f"更新说明获取失败（忽略）: {exc}")
        return []

    return split_changelog(text, max_lines)
