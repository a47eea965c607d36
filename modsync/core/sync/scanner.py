"""快照扫描器

职责:
- 枚举目录下的直接文件（不递归，子目录与 .part 临时文件跳过）
- 逐个计算指纹并交给元数据解析器
- 任一文件解析失败 → 丢弃本次已累积的全部条目，立即终止

扫描结果要么是完整快照，要么什么都没有。
"""

from __future__ import annotations

import logging
from pathlib import Path

from modsync.core.exceptions import ParseError, ScanError
from modsync.core.hashing import fingerprint
from modsync.core.models import ModEntry
from modsync.core.protocols import MetadataExtractor

logger = logging.getLogger(__name__)

# 安装事务的临时文件后缀；进程中途退出时可能残留，扫描时忽略
PART_SUFFIX = ".part"


class SnapshotScanner:
    """目录快照扫描器"""

    def __init__(self, extractor: MetadataExtractor) -> None:
        self.extractor = extractor

    def scan(self, directory: Path) -> list[ModEntry]:
        """扫描目录，返回新构造的条目列表

        Raises:
            ScanError: 目录不可读、文件不可读或任一文件解析失败
        """
        try:
            files = sorted(p for p in directory.iterdir() if p.is_file())
        except OSError as e:
            raise ScanError(f"无法枚举目录: {directory} - {e}", directory) from e

        stale = [p for p in files if p.suffix == PART_SUFFIX]
        if stale:
            logger.warning("忽略未完成的临时文件: %s", ", ".join(p.name for p in stale))
            files = [p for p in files if p.suffix != PART_SUFFIX]

        entries: list[ModEntry] = []
        for path in files:
            entries.extend(self.parse_file(path))

        logger.info("扫描完成: %s (%d 个文件, %d 个模组)", directory, len(files), len(entries))
        return entries

    def parse_file(self, path: Path) -> list[ModEntry]:
        """解析单个文件为零或多个条目（同一归档的条目共享指纹）

        Raises:
            ScanError: 文件不可读或解析失败
        """
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ScanError(f"无法读取文件: {path} - {e}", path) from e

        hashes = fingerprint(data)
        try:
            descriptors = self.extractor.parse(data)
        except ParseError as e:
            logger.error("解析失败，本次扫描作废: %s (%s)", path.name, e, extra={"path": str(path)})
            raise ScanError(f"解析失败: {path.name} - {e}", path) from e

        return [ModEntry.from_descriptor(d, hashes) for d in descriptors]
