"""更新状态解析器

对快照中的每个条目顺序执行:
  1. 主哈希 → 远程 id（先查 HashLookupCache，未命中再调注册表 find_by_hash）
  2. 拉取该远程 id 的版本历史
  3. 只检查第一条版本记录的文件列表：有文件哈希等于主哈希 → CURRENT，否则 OUTDATED
  4. 版本历史拉取失败 → LOCAL

注意: 只看第一条版本记录。若匹配当前文件的是更早的记录，
条目会被判为 OUTDATED 而不是 CURRENT。
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from modsync.core.exceptions import RegistryError
from modsync.core.models import FileState, ModEntry, RemoteLinkage, Source
from modsync.core.protocols import RegistryClient
from modsync.core.sync.cache import HashLookupCache

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


class UpdateResolver:
    """基于注册表的条目状态解析器"""

    def __init__(self, registry: RegistryClient, cache: HashLookupCache) -> None:
        self.registry = registry
        self.cache = cache

    def lookup_remote_id(self, sha1: str) -> str | None:
        """缓存优先的哈希反查；查询失败与无匹配同样返回 None"""
        remote_id = self.cache.get(sha1)
        if remote_id is not None:
            return remote_id
        try:
            remote_id = self.registry.find_by_hash(sha1)
        except RegistryError as e:
            logger.debug("哈希反查失败 %s: %s", sha1, e)
            return None
        if remote_id:
            self.cache.put(sha1, remote_id)
        return remote_id or None

    def resolve_status(
        self, entry: ModEntry, game_version: str | None = None,
    ) -> tuple[ModEntry, RegistryError | None]:
        """解析单个条目的远程关联与状态（原地修改条目）

        返回 (条目, 版本历史拉取错误或 None)。
        哈希反查失败 / 无匹配不视为错误：远程关联清空，状态保持合并结果。
        """
        remote_id = self.lookup_remote_id(entry.hashes.sha1)
        if remote_id is None:
            entry.remote = None
            return entry, None

        if entry.remote is None or entry.remote.remote_id != remote_id:
            entry.remote = RemoteLinkage(remote_id=remote_id)

        try:
            versions = self.registry.list_versions(
                remote_id, game_version=game_version or None, loader=entry.loader,
            )
        except RegistryError as e:
            logger.warning(
                "版本历史拉取失败 %s: %s", entry.display_name, e,
                extra={"mod_id": entry.id, "remote_id": remote_id},
            )
            entry.state = FileState.LOCAL
            return entry, e

        entry.source = Source.MODRINTH
        # 除非证明是最新，否则视为过期
        entry.state = FileState.OUTDATED
        if not versions:
            entry.remote.latest_filename = None
            return entry, None

        latest = versions[0]
        primary = latest.primary_file
        entry.remote.latest_filename = primary.filename if primary else None
        for f in latest.files:
            if f.sha1 == entry.hashes.sha1:
                entry.state = FileState.CURRENT
                break
        return entry, None

    def check_all(
        self,
        entries: list[ModEntry],
        game_version: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[RegistryError]:
        """顺序解析全部条目；每个条目开始前回调进度，单条失败不影响后续"""
        total = len(entries)
        errors: list[RegistryError] = []
        for position, entry in enumerate(entries):
            if on_progress is not None:
                on_progress(entry.display_name, position, total)
            _, err = self.resolve_status(entry, game_version)
            if err is not None:
                errors.append(err)

        if errors:
            logger.warning("更新检查汇总: %d 个条目, %d 个拉取失败", total, len(errors))
        else:
            logger.info("更新检查完成: %d 个条目 (哈希缓存 %d 项)", total, len(self.cache))
        return errors
