"""服务容器：统一依赖注入

CLI 和 Web 层均通过 get_container() 获取引擎与客户端，而非直接构造。
同一容器内的实例共享状态（快照、哈希缓存）。

依赖关系图（→ 表示依赖）:
  engine → extractor, registry, manifest

用法:
    container = ServiceContainer(config=Config.from_file("modsync.yml"))
    engine = container.engine            # 懒加载

    from modsync.services.container import get_container
    get_container().engine.submit(ScanFolder())
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modsync.core.config import Config
    from modsync.core.jar_meta import JarMetadataExtractor
    from modsync.services.engine import SyncEngine
    from modsync.services.registry import ManifestClient, ModrinthClient

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器"""

    def __init__(self, config: Config | None = None) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from modsync.core.config import get_config
            config = get_config()
        self._config = config

    @property
    def config(self) -> Config:
        return self._config

    @property
    def extractor(self) -> JarMetadataExtractor:
        if "extractor" not in self._instances:
            from modsync.core.jar_meta import JarMetadataExtractor
            self._instances["extractor"] = JarMetadataExtractor()
        return self._instances["extractor"]  # type: ignore[return-value]

    @property
    def registry(self) -> ModrinthClient:
        if "registry" not in self._instances:
            from modsync.services.registry import ModrinthClient
            self._instances["registry"] = ModrinthClient(
                base_url=self._config.registry_url,
                user_agent=self._config.user_agent,
                timeout=self._config.http_timeout,
            )
        return self._instances["registry"]  # type: ignore[return-value]

    @property
    def manifest(self) -> ManifestClient:
        if "manifest" not in self._instances:
            from modsync.services.registry import ManifestClient
            self._instances["manifest"] = ManifestClient(
                url=self._config.manifest_url,
                user_agent=self._config.user_agent,
                timeout=self._config.http_timeout,
            )
        return self._instances["manifest"]  # type: ignore[return-value]

    @property
    def engine(self) -> SyncEngine:
        if "engine" not in self._instances:
            from modsync.services.engine import SyncEngine
            mods_dir = self._config.resolve_mods_dir()
            logger.info("模组目录: %s", mods_dir)
            self._instances["engine"] = SyncEngine(
                mods_dir=mods_dir,
                extractor=self.extractor,
                registry=self.registry,
                manifest=self.manifest,
                max_events=self._config.event_backlog,
            )
        return self._instances["engine"]  # type: ignore[return-value]


# ---- 全局单例 ----

_global: ServiceContainer | None = None
_global_lock = threading.Lock()


def get_container() -> ServiceContainer:
    """获取全局 ServiceContainer 单例（线程安全）"""
    global _global  # noqa: PLW0603
    if _global is not None:
        return _global
    with _global_lock:
        if _global is None:
            _global = ServiceContainer()
        return _global


def set_container(container: ServiceContainer) -> None:
    """替换全局容器（CLI 按配置文件初始化 / 测试注入）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = container


def reset_container() -> None:
    """重置全局容器（仅用于测试）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        if _global is not None and "engine" in _global._instances:
            _global.engine.stop(timeout=5)
        _global = None
