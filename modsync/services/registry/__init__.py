"""远程协作方客户端

- modrinth.py: 模组注册表
- manifest.py: 游戏版本清单
"""

from modsync.services.registry.manifest import ManifestClient
from modsync.services.registry.modrinth import ModrinthClient

__all__ = ["ManifestClient", "ModrinthClient"]
