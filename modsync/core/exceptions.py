"""统一异常体系

所有业务异常继承 ModSyncError。引擎在请求边界把它们转换为
BackendErrorContext + BackendError 事件，不向调用方抛出。
CLI 层据此设置退出码，Web 层据此映射 HTTP 状态码。
"""

from __future__ import annotations

from pathlib import Path


class ModSyncError(Exception):
    """同步引擎基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": str(self)}


class ConfigError(ModSyncError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(ModSyncError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"


class ParseError(ModSyncError):
    """模组归档元数据无法解析"""

    code = "PARSE_ERROR"


class ScanError(ModSyncError):
    """目录扫描失败，整次扫描作废，附带出错路径"""

    code = "SCAN_ERROR"

    def __init__(self, message: str, path: Path | str) -> None:
        super().__init__(message)
        self.path = Path(path)

    def to_dict(self) -> dict[str, str]:
        return {**super().to_dict(), "path": str(self.path)}


class RegistryError(ModSyncError):
    """远程注册表查询 / 列表 / 下载失败"""

    code = "REGISTRY_ERROR"

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class TransactionError(ModSyncError):
    """安装事务中的文件系统失败，仅中止当前事务"""

    code = "TRANSACTION_ERROR"

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None

    def to_dict(self) -> dict[str, str]:
        data = super().to_dict()
        if self.path is not None:
            data["path"] = str(self.path)
        return data
