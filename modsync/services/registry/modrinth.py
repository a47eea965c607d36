"""Modrinth 注册表客户端

接口:
- GET /version_file/{sha1}?algorithm=sha1   哈希反查项目
- GET /project/{id}/version                  版本历史（新版本在前）
- GET /project/{id}                          项目信息（slug / title）
- GET <file url>                             文件下载
"""

from __future__ import annotations

import json
import logging
from typing import Any

from modsync import __version__
from modsync.core.exceptions import RegistryError
from modsync.core.models import (
    FileState,
    Hashes,
    Loader,
    ModEntry,
    RemoteLinkage,
    Source,
    VersionRecord,
)
from modsync.utils.net import build_url, http_get, http_get_json

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.modrinth.com/v2"


class ModrinthClient:
    """Modrinth v2 API 客户端"""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        user_agent: str = f"modsync/{__version__}",
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url
        self.user_agent = user_agent
        self.timeout = timeout

    def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        url = build_url(self.base_url, path, params)
        logger.debug("GET %s", url)
        return http_get_json(
            url, user_agent=self.user_agent, timeout=self.timeout, context="modrinth",
        )

    def find_by_hash(self, sha1: str) -> str | None:
        try:
            data = self._get_json(f"version_file/{sha1}", {"algorithm": "sha1"})
        except RegistryError as e:
            if e.status == 404:
                return None
            raise
        if not isinstance(data, dict):
            raise RegistryError(f"哈希反查响应格式错误: {sha1}")
        return data.get("project_id") or None

    def list_versions(
        self, remote_id: str, *,
        game_version: str | None = None,
        loader: Loader | None = None,
    ) -> list[VersionRecord]:
        params: dict[str, str] = {}
        if loader is not None:
            params["loaders"] = json.dumps([loader.to_registry()])
        if game_version:
            params["game_versions"] = json.dumps([game_version])
        data = self._get_json(f"project/{remote_id}/version", params or None)
        if not isinstance(data, list):
            raise RegistryError(f"版本列表响应格式错误: {remote_id}")
        return [VersionRecord.from_dict(v) for v in data if isinstance(v, dict)]

    def download(self, remote_id: str, filename: str) -> bytes:
        for record in self.list_versions(remote_id):
            for f in record.files:
                if f.filename == filename and f.url:
                    logger.info("下载: %s (%s)", filename, f.url)
                    return http_get(
                        f.url, user_agent=self.user_agent,
                        timeout=self.timeout, context=f"download {filename}",
                    )
        raise RegistryError(f"项目 {remote_id} 中没有文件 {filename}")

    def create_entry_for_latest(
        self, remote_id: str, game_version: str, loader: Loader,
    ) -> ModEntry:
        project = self._get_json(f"project/{remote_id}")
        if not isinstance(project, dict):
            raise RegistryError(f"项目响应格式错误: {remote_id}")

        versions = self.list_versions(remote_id, game_version=game_version, loader=loader)
        latest = versions[0] if versions else None
        primary = latest.primary_file if latest else None
        if latest is None or primary is None:
            raise RegistryError(f"项目 {remote_id} 没有兼容 {game_version}/{loader} 的版本")

        return ModEntry(
            id=project.get("slug") or remote_id,
            version=latest.version_number,
            display_name=project.get("title") or remote_id,
            loader=loader,
            hashes=Hashes(sha1=primary.sha1, sha512=primary.sha512),
            remote=RemoteLinkage(
                remote_id=project.get("id") or remote_id,
                latest_filename=primary.filename,
            ),
            state=FileState.CURRENT,
            source=Source.MODRINTH,
        )
