"""modsync 日志配置

提供统一的日志配置，支持普通文本和结构化 JSON 两种输出格式。

同步相关的日志通过 extra 附带业务上下文，两种格式都会输出:
    logger.error("解析失败", extra={"path": str(path)})
    logger.warning("版本历史拉取失败", extra={"mod_id": "sodium", "remote_id": "AANobbMI"})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

# extra 中识别的上下文字段，按输出顺序排列
CONTEXT_FIELDS = ("request", "mod_id", "remote_id", "path", "error_code")


def record_context(record: logging.LogRecord) -> dict[str, str]:
    """提取日志记录上携带的上下文字段（未设置的字段省略）"""
    context = {}
    for name in CONTEXT_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            context[name] = str(value)
    return context


class ContextFormatter(logging.Formatter):
    """人类可读格式，末尾追加 [key=value ...] 上下文"""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        context = record_context(record)
        if not context:
            return text
        pairs = " ".join(f"{k}={v}" for k, v in context.items())
        head, sep, tail = text.partition("\n")
        # 异常堆栈保持在上下文之后
        return f"{head} [{pairs}]{sep}{tail}"


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器

    输出格式:
        {
            "timestamp": "2024-01-01T12:00:00+00:00",
            "level": "ERROR",
            "logger": "modsync.services.engine",
            "message": "扫描模组目录失败: ...",
            "module": "engine",
            "function": "_report",
            "line": 42,
            "context": {"request": "ScanFolder", "path": "..."} (仅在有上下文时),
            "exception": "traceback..." (仅在有异常时)
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        context = record_context(record)
        if context:
            log_entry["context"] = context
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器

    参数:
        level: 日志级别字符串（DEBUG, INFO, WARNING, ERROR, CRITICAL）
        json_output: 为 True 时使用 JSON 格式，否则使用带上下文的文本格式

    说明:
        - 输出到 stderr，stdout 留给 CLI 结果
        - 自动清理已有 handlers，避免重复输出
    """
    reset_logging()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(ContextFormatter("%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"))
    root.addHandler(handler)


def reset_logging() -> None:
    """重置根日志器配置（常用于测试环境）"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
