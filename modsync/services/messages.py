"""引擎请求 / 事件 DTO

请求按 FIFO 顺序处理；事件与请求不一定一一对应。
错误总是成对发布：先 BackendErrorContext，再 BackendError。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from modsync.core.exceptions import ModSyncError
from modsync.core.models import Loader, ModEntry, VersionManifest

# =========================================================================
# 请求
# =========================================================================


@dataclass(frozen=True)
class ScanFolder:
    """扫描 + 合并 + 发布"""


@dataclass(frozen=True)
class CheckForUpdates:
    """扫描 + 合并 + 逐条解析状态 + 发布"""

    game_version: str = ""


@dataclass(frozen=True)
class GetVersionMetadata:
    """获取游戏版本清单"""


@dataclass(frozen=True)
class UpdateMod:
    """更新已有条目"""

    entry: ModEntry


@dataclass(frozen=True)
class AddMod:
    """按远程 id 新增模组"""

    remote_id: str
    game_version: str
    loader: Loader


Request = Union[ScanFolder, CheckForUpdates, GetVersionMetadata, UpdateMod, AddMod]

# =========================================================================
# 事件
# =========================================================================


@dataclass(frozen=True)
class UpdateModList:
    """完整快照（已排序）重新发布"""

    mods: tuple[ModEntry, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"type": "update_mod_list", "mods": [m.to_dict() for m in self.mods]}


@dataclass(frozen=True)
class CheckForUpdatesProgress:
    display_name: str
    position: int
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "check_for_updates_progress",
            "display_name": self.display_name,
            "position": self.position,
            "total": self.total,
        }


@dataclass(frozen=True)
class SetVersionMetadata:
    manifest: VersionManifest

    def to_dict(self) -> dict[str, Any]:
        return {"type": "set_version_metadata", "manifest": self.manifest.to_dict()}


@dataclass(frozen=True)
class BackendErrorContext:
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "backend_error_context", "message": self.message}


@dataclass(frozen=True)
class BackendError:
    error: ModSyncError

    def to_dict(self) -> dict[str, Any]:
        return {"type": "backend_error", "error": self.error.to_dict()}


Event = Union[
    UpdateModList, CheckForUpdatesProgress, SetVersionMetadata,
    BackendErrorContext, BackendError,
]
