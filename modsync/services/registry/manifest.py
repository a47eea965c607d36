"""游戏版本清单客户端"""

from __future__ import annotations

import logging

from modsync import __version__
from modsync.core.exceptions import RegistryError
from modsync.core.models import VersionManifest
from modsync.utils.net import http_get_json

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_URL = "https://piston-meta.mojang.com/mc/game/version_manifest_v2.json"


class ManifestClient:
    """拉取官方游戏版本清单"""

    def __init__(
        self,
        url: str = DEFAULT_MANIFEST_URL,
        user_agent: str = f"modsync/{__version__}",
        timeout: float = 30.0,
    ) -> None:
        self.url = url
        self.user_agent = user_agent
        self.timeout = timeout

    def fetch(self) -> VersionManifest:
        data = http_get_json(
            self.url, user_agent=self.user_agent, timeout=self.timeout,
            context="version manifest",
        )
        if not isinstance(data, dict):
            raise RegistryError(f"版本清单响应格式错误: {self.url}")
        manifest = VersionManifest.from_dict(data)
        logger.info(
            "版本清单已获取: 最新正式版 %s, 共 %d 个版本",
            manifest.latest_release, len(manifest.versions),
        )
        return manifest
