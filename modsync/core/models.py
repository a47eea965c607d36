"""核心数据模型

所有核心数据类集中定义：模组条目、内容指纹、远程关联、
注册表版本记录、游戏版本清单。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =========================================================================
# 枚举
# =========================================================================


class Loader(str, Enum):
    """模组加载器

    内部唯一的加载器表示，与各外部协作方之间的转换集中在此处，
    遇到未知取值直接报错，不做静默映射。
    """
    FORGE = "forge"
    FABRIC = "fabric"

    def __str__(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_registry(cls, name: str) -> Loader:
        """注册表加载器名 ("forge" / "fabric") → Loader"""
        normalized = name.strip().lower()
        for loader in cls:
            if loader.value == normalized:
                return loader
        raise ValueError(f"不支持的加载器: {name}")

    def to_registry(self) -> str:
        """Loader → 注册表加载器名"""
        return self.value

    @classmethod
    def from_metadata_file(cls, filename: str) -> Loader:
        """归档内的元数据文件名 → Loader"""
        if filename == FORGE_METADATA:
            return cls.FORGE
        if filename == FABRIC_METADATA:
            return cls.FABRIC
        raise ValueError(f"未知的元数据文件: {filename}")


FORGE_METADATA = "META-INF/mods.toml"
FABRIC_METADATA = "fabric.mod.json"


class FileState(str, Enum):
    """条目相对远程注册表的新旧状态"""
    CURRENT = "current"
    OUTDATED = "outdated"
    INVALID = "invalid"
    LOCAL = "local"


class Source(str, Enum):
    """条目权威元数据的来源"""
    LOCAL = "local"
    EXPLICIT_LOCAL = "explicit_local"
    MODRINTH = "modrinth"
    CURSEFORGE = "curseforge"

    def __str__(self) -> str:
        return "".join(part.capitalize() for part in self.value.split("_"))


# =========================================================================
# 模组条目
# =========================================================================

_VERSION_RE = re.compile(r"[0-9]+\.[0-9]+\.[0-9]+")


@dataclass(frozen=True)
class Hashes:
    """内容指纹：sha1 为主哈希（匹配 / 缓存键），sha512 为副哈希"""

    sha1: str
    sha512: str


@dataclass
class RemoteLinkage:
    """与远程注册表项目的关联"""

    remote_id: str
    latest_filename: str | None = None


@dataclass(frozen=True)
class ModDescriptor:
    """元数据解析器输出的单个模组描述"""

    id: str
    version: str
    display_name: str
    loader: Loader


@dataclass
class ModEntry:
    """本地目录中发现的一个模组（一个归档可声明多个）"""

    id: str
    version: str
    display_name: str
    loader: Loader
    hashes: Hashes
    remote: RemoteLinkage | None = None
    state: FileState = FileState.LOCAL
    source: Source = Source.LOCAL

    @classmethod
    def from_descriptor(cls, desc: ModDescriptor, hashes: Hashes) -> ModEntry:
        """扫描器构造入口：来源 / 状态均为 LOCAL，无远程关联"""
        return cls(
            id=desc.id,
            version=desc.version,
            display_name=desc.display_name,
            loader=desc.loader,
            hashes=hashes,
        )

    def normalized_version(self) -> str:
        """提取版本串中的第一个 x.y.z，找不到则原样返回"""
        match = _VERSION_RE.search(self.version)
        return match.group(0) if match else self.version

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "version": self.version,
            "normalized_version": self.normalized_version(),
            "display_name": self.display_name,
            "loader": self.loader.value,
            "sha1": self.hashes.sha1,
            "sha512": self.hashes.sha512,
            "remote_id": self.remote.remote_id if self.remote else None,
            "latest_filename": self.remote.latest_filename if self.remote else None,
            "state": self.state.value,
            "source": self.source.value,
        }


def sort_snapshot(entries: list[ModEntry]) -> list[ModEntry]:
    """按显示名排序（不区分大小写），同名按 id"""
    return sorted(entries, key=lambda e: (e.display_name.casefold(), e.id))


# =========================================================================
# 远程注册表模型
# =========================================================================


@dataclass(frozen=True)
class VersionFile:
    """版本记录中的单个文件"""

    filename: str
    sha1: str
    sha512: str = ""
    url: str = ""
    primary: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VersionFile:
        hashes = data.get("hashes") or {}
        return cls(
            filename=data.get("filename", ""),
            sha1=hashes.get("sha1", ""),
            sha512=hashes.get("sha512", ""),
            url=data.get("url", ""),
            primary=bool(data.get("primary", False)),
        )


@dataclass
class VersionRecord:
    """注册表返回的一条版本记录（文件列表有序）"""

    id: str
    version_number: str = ""
    files: list[VersionFile] = field(default_factory=list)
    game_versions: list[str] = field(default_factory=list)
    loaders: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VersionRecord:
        return cls(
            id=data.get("id", ""),
            version_number=data.get("version_number", ""),
            files=[VersionFile.from_dict(f) for f in data.get("files") or []],
            game_versions=list(data.get("game_versions") or []),
            loaders=list(data.get("loaders") or []),
        )

    @property
    def primary_file(self) -> VersionFile | None:
        """标记为 primary 的文件，没有则取第一个"""
        for f in self.files:
            if f.primary:
                return f
        return self.files[0] if self.files else None


# =========================================================================
# 游戏版本清单
# =========================================================================


@dataclass(frozen=True)
class GameVersion:
    id: str
    type: str
    release_time: str = ""


@dataclass
class VersionManifest:
    """游戏版本清单"""

    latest_release: str = ""
    latest_snapshot: str = ""
    versions: list[GameVersion] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VersionManifest:
        latest = data.get("latest") or {}
        return cls(
            latest_release=latest.get("release", ""),
            latest_snapshot=latest.get("snapshot", ""),
            versions=[
                GameVersion(
                    id=v.get("id", ""),
                    type=v.get("type", ""),
                    release_time=v.get("releaseTime", ""),
                )
                for v in data.get("versions") or []
            ],
        )

    def releases(self) -> list[str]:
        """仅正式版 id，保持清单顺序"""
        return [v.id for v in self.versions if v.type == "release"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "latest_release": self.latest_release,
            "latest_snapshot": self.latest_snapshot,
            "versions": [
                {"id": v.id, "type": v.type, "release_time": v.release_time}
                for v in self.versions
            ],
        }
