"""哈希查找缓存

主哈希 → 远程项目 id，进程生命周期内有效。
首次匹配成功时写入，之后永不失效、不淘汰：一个哈希永久绑定到它
第一次解析出的远程 id。
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class HashLookupCache:
    """主哈希到远程 id 的查找缓存"""

    def __init__(self) -> None:
        self._cache: dict[str, str] = {}

    def get(self, sha1: str) -> str | None:
        remote_id = self._cache.get(sha1)
        if remote_id is not None:
            logger.debug("哈希缓存命中: %s -> %s", sha1, remote_id)
        return remote_id

    def put(self, sha1: str, remote_id: str) -> None:
        """记录映射；已存在的映射不会被覆盖"""
        self._cache.setdefault(sha1, remote_id)

    def __len__(self) -> int:
        return len(self._cache)
