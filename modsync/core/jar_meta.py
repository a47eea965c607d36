"""模组归档元数据解析

从 jar（zip）字节中读取加载器元数据:
- Fabric: fabric.mod.json，一个归档对应一个模组
- Forge:  META-INF/mods.toml，每个 [[mods]] 表对应一个模组

两者同时存在时以 Fabric 为准。合法归档中两者都没有时返回空列表。
"""

from __future__ import annotations

import io
import json
import logging
import tomllib
import zipfile
from typing import Any

from modsync.core.exceptions import ParseError
from modsync.core.models import (
    FABRIC_METADATA,
    FORGE_METADATA,
    Loader,
    ModDescriptor,
)

logger = logging.getLogger(__name__)

JAR_MANIFEST = "META-INF/MANIFEST.MF"
JAR_VERSION_PLACEHOLDER = "${file.jarVersion}"


class JarMetadataExtractor:
    """jar 元数据解析器"""

    def parse(self, data: bytes) -> list[ModDescriptor]:
        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except (zipfile.BadZipFile, ValueError) as e:
            raise ParseError(f"不是有效的 jar 归档: {e}") from e

        with archive:
            names = set(archive.namelist())
            if FABRIC_METADATA in names:
                return [self._parse_fabric(self._read_text(archive, FABRIC_METADATA))]
            if FORGE_METADATA in names:
                jar_version = ""
                if JAR_MANIFEST in names:
                    jar_version = _implementation_version(
                        self._read_text(archive, JAR_MANIFEST),
                    )
                return self._parse_forge(
                    self._read_text(archive, FORGE_METADATA), jar_version,
                )

        logger.warning("归档中未找到加载器元数据，跳过")
        return []

    @staticmethod
    def _read_text(archive: zipfile.ZipFile, name: str) -> str:
        try:
            return archive.read(name).decode("utf-8-sig")
        except (zipfile.BadZipFile, KeyError, OSError, UnicodeDecodeError) as e:
            raise ParseError(f"无法读取 {name}: {e}") from e

    @staticmethod
    def _parse_fabric(text: str) -> ModDescriptor:
        try:
            meta = json.loads(text, strict=False)
        except json.JSONDecodeError as e:
            raise ParseError(f"{FABRIC_METADATA} 格式错误: {e}") from e
        if not isinstance(meta, dict) or not meta.get("id"):
            raise ParseError(f"{FABRIC_METADATA} 缺少 id 字段")
        mod_id = str(meta["id"])
        return ModDescriptor(
            id=mod_id,
            version=str(meta.get("version", "")),
            display_name=str(meta.get("name") or mod_id),
            loader=Loader.from_metadata_file(FABRIC_METADATA),
        )

    @staticmethod
    def _parse_forge(text: str, jar_version: str) -> list[ModDescriptor]:
        try:
            meta = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ParseError(f"{FORGE_METADATA} 格式错误: {e}") from e

        mods: list[Any] = meta.get("mods") or []
        if not isinstance(mods, list):
            raise ParseError(f"{FORGE_METADATA} 中 mods 不是数组")

        loader = Loader.from_metadata_file(FORGE_METADATA)
        result: list[ModDescriptor] = []
        for mod in mods:
            if not isinstance(mod, dict) or not mod.get("modId"):
                raise ParseError(f"{FORGE_METADATA} 中存在缺少 modId 的条目")
            mod_id = str(mod["modId"])
            version = str(mod.get("version", ""))
            if version == JAR_VERSION_PLACEHOLDER and jar_version:
                version = jar_version
            result.append(ModDescriptor(
                id=mod_id,
                version=version,
                display_name=str(mod.get("displayName") or mod_id),
                loader=loader,
            ))
        return result


def _implementation_version(manifest_text: str) -> str:
    """从 MANIFEST.MF 中取 Implementation-Version"""
    for line in manifest_text.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip() == "Implementation-Version":
            return value.strip()
    return ""
