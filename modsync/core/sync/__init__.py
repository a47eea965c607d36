"""同步与合并引擎核心

拆分说明:
- scanner.py:   目录快照扫描（整次扫描原子性）
- reconcile.py: 新旧快照合并
- cache.py:     主哈希 → 远程 id 缓存
- resolver.py:  更新状态解析
- installer.py: 下载 / 替换 / 回填事务
"""

from modsync.core.sync.cache import HashLookupCache
from modsync.core.sync.installer import ModInstaller
from modsync.core.sync.reconcile import reconcile
from modsync.core.sync.resolver import UpdateResolver
from modsync.core.sync.scanner import SnapshotScanner

__all__ = [
    "HashLookupCache",
    "ModInstaller",
    "SnapshotScanner",
    "UpdateResolver",
    "reconcile",
]
