"""集中配置管理

支持从 YAML 文件加载 + 编程式覆盖。
模组目录在启动时解析一次并显式传入引擎，引擎本身不读取全局配置。
"""

from __future__ import annotations

import logging
import platform
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from modsync import __version__
from modsync.core.exceptions import ConfigError
from modsync.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


def default_mods_dir(home: Path | None = None, system: str | None = None) -> Path:
    """各操作系统下官方启动器的默认 mods 目录"""
    home = home if home is not None else Path.home()
    system = system or platform.system()
    if system == "Windows":
        return home / "AppData" / "Roaming" / ".minecraft" / "mods"
    if system == "Darwin":
        return home / "Library" / "Application Support" / "minecraft" / "mods"
    return home / ".minecraft" / "mods"


@dataclass
class Config:
    """全局配置"""

    # 目录（为空则按操作系统推导）
    mods_dir: str = ""

    # 目标游戏版本 / 加载器
    game_version: str = ""
    loader: str = "fabric"

    # 远程
    registry_url: str = "https://api.modrinth.com/v2"
    manifest_url: str = "https://piston-meta.mojang.com/mc/game/version_manifest_v2.json"
    user_agent: str = f"modsync/{__version__}"
    http_timeout: float = 30.0

    # Web 看板
    web_host: str = "127.0.0.1"
    web_port: int = 8888
    # 未被拉取的事件最多保留条数，超出后丢弃最早的
    event_backlog: int = 1000

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = "modsync.yml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        try:
            data = load_yaml(path)
        except (yaml.YAMLError, OSError, ValueError) as e:
            raise ConfigError(f"配置文件无法读取: {path} - {e}") from e
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known and k != "extra"}
        extra = {k: v for k, v in data.items() if k not in known}
        try:
            cfg = cls(**matched)
        except TypeError as e:
            raise ConfigError(f"配置项无效: {path} - {e}") from e
        cfg.extra = extra
        return cfg

    def resolve_mods_dir(self) -> Path:
        """解析模组目录：显式配置优先，否则使用操作系统默认值"""
        if self.mods_dir:
            return Path(self.mods_dir).expanduser()
        return default_mods_dir()


# 全局单例，首次 import 时不加载文件；由 CLI / Web 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "modsync.yml") -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
