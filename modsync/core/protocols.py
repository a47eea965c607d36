"""领域协议定义

集中定义引擎与外部协作方之间的接口契约（Protocol）。
引擎只依赖这些抽象，具体实现（jar 解析、Modrinth、版本清单）可替换。
"""

from __future__ import annotations

from typing import Any, Protocol

from modsync.core.models import (
    Loader,
    ModDescriptor,
    ModEntry,
    VersionManifest,
    VersionRecord,
)


class MetadataExtractor(Protocol):
    """归档元数据解析器协议"""

    def parse(self, data: bytes) -> list[ModDescriptor]:
        """解析归档字节，返回零个或多个模组描述

        Raises:
            ParseError: 归档无法解析
        """
        ...


class RegistryClient(Protocol):
    """远程注册表协议，所有方法失败时抛 RegistryError"""

    def find_by_hash(self, sha1: str) -> str | None:
        """按内容哈希查找远程项目 id，无匹配返回 None"""
        ...

    def list_versions(
        self, remote_id: str, *,
        game_version: str | None = None,
        loader: Loader | None = None,
    ) -> list[VersionRecord]:
        """版本历史，按注册表顺序（新版本在前）"""
        ...

    def download(self, remote_id: str, filename: str) -> bytes:
        """下载指定项目中名为 filename 的文件"""
        ...

    def create_entry_for_latest(
        self, remote_id: str, game_version: str, loader: Loader,
    ) -> ModEntry:
        """为最新兼容版本合成一个条目（本地尚无文件）"""
        ...


class ManifestFetcher(Protocol):
    """游戏版本清单获取协议"""

    def fetch(self) -> VersionManifest:
        ...


class EventSink(Protocol):
    """事件观察者：任何接收单个事件的可调用对象"""

    def __call__(self, event: Any) -> None:
        ...
