"""安装事务

两个入口共用同一段「替换并回填」流程:
- update: 下载条目最新版本文件，按主哈希找到目录中的旧文件并替换
- add:    让注册表为最新兼容版本合成条目，下载并写入（无旧文件）

写入顺序: 同目录临时文件 → os.replace 到目标路径 → 删除旧文件。
替换失败时清理临时文件、旧文件保持不动，并抛 TransactionError。
"""

from __future__ import annotations

import copy
import logging
import os
import tempfile
from pathlib import Path

from werkzeug.utils import secure_filename

from modsync.core.exceptions import ParseError, RegistryError, ScanError, TransactionError
from modsync.core.hashing import fingerprint
from modsync.core.models import Loader, ModEntry
from modsync.core.protocols import RegistryClient
from modsync.core.sync.scanner import PART_SUFFIX, SnapshotScanner

logger = logging.getLogger(__name__)


class ModInstaller:
    """模组安装 / 更新事务"""

    def __init__(
        self,
        mods_dir: Path,
        registry: RegistryClient,
        scanner: SnapshotScanner,
    ) -> None:
        self.mods_dir = mods_dir
        self.registry = registry
        self.scanner = scanner

    # ------------------------------------------------------------------
    # 入口
    # ------------------------------------------------------------------

    def update(self, entry: ModEntry, snapshot: list[ModEntry]) -> list[ModEntry]:
        """把已有条目更新到其远程关联记录的最新文件，返回回填后的快照

        Raises:
            TransactionError: 无可用远程版本或文件系统失败
            RegistryError: 下载失败
        """
        if entry.remote is None or not entry.remote.latest_filename:
            raise TransactionError(f"模组 '{entry.display_name}' 没有可用的远程版本，请先检查更新")

        filename = entry.remote.latest_filename
        data = self.registry.download(entry.remote.remote_id, filename)
        old_path = self.find_file_by_hash(entry.hashes.sha1)
        if old_path is None:
            logger.info("目录中没有匹配旧哈希的文件，直接写入: %s", filename)
        return self._replace_and_fold(entry, filename, data, old_path, snapshot)

    def add(
        self,
        remote_id: str,
        game_version: str,
        loader: Loader,
        snapshot: list[ModEntry],
    ) -> list[ModEntry]:
        """按远程 id 安装最新兼容版本，返回回填后的快照"""
        origin = self.registry.create_entry_for_latest(remote_id, game_version, loader)
        if origin.remote is None or not origin.remote.latest_filename:
            raise RegistryError(f"项目 {remote_id} 没有兼容 {game_version}/{loader} 的版本")

        filename = origin.remote.latest_filename
        data = self.registry.download(origin.remote.remote_id, filename)
        actual = fingerprint(data).sha1
        if origin.hashes.sha1 and actual != origin.hashes.sha1:
            raise RegistryError(
                f"校验和不匹配 {filename}: 期望 {origin.hashes.sha1}, 实际 {actual}",
            )
        return self._replace_and_fold(origin, filename, data, None, snapshot)

    # ------------------------------------------------------------------
    # 文件定位 / 写入
    # ------------------------------------------------------------------

    def find_file_by_hash(self, sha1: str) -> Path | None:
        """逐个读取目录文件重新计算哈希，返回第一个主哈希匹配的路径"""
        try:
            files = sorted(p for p in self.mods_dir.iterdir() if p.is_file())
            for path in files:
                if fingerprint(path.read_bytes()).sha1 == sha1:
                    return path
        except OSError as e:
            raise TransactionError(f"定位旧文件失败: {e}", self.mods_dir) from e
        return None

    def _write(self, target: Path, data: bytes, old_path: Path | None) -> None:
        """临时文件写入 → 原子替换到目标路径 → 删除旧文件

        替换失败时旧文件保持原样；替换成功后旧文件删除失败同样视为事务失败，
        此时新旧文件并存，由调用方重新扫描同步快照。
        """
        try:
            fd, tmp = tempfile.mkstemp(dir=str(self.mods_dir), suffix=PART_SUFFIX)
        except OSError as e:
            raise TransactionError(f"无法创建临时文件: {e}", self.mods_dir) from e
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, str(target))
        except OSError as e:
            try:
                os.unlink(tmp)
            except OSError:
                # 临时文件清理失败不影响原异常抛出
                pass
            raise TransactionError(f"写入失败: {target} - {e}", target) from e
        logger.info("已写入: %s (%d 字节)", target.name, len(data))

        if old_path is not None and old_path != target:
            try:
                old_path.unlink()
            except OSError as e:
                raise TransactionError(f"删除旧文件失败: {old_path} - {e}", old_path) from e
            logger.info("已删除旧文件: %s", old_path.name, extra={"path": str(old_path)})

    # ------------------------------------------------------------------
    # 替换并回填
    # ------------------------------------------------------------------

    def _replace_and_fold(
        self,
        origin: ModEntry,
        filename: str,
        data: bytes,
        old_path: Path | None,
        snapshot: list[ModEntry],
    ) -> list[ModEntry]:
        safe_name = secure_filename(filename)
        if not safe_name:
            raise TransactionError(f"非法的目标文件名: {filename!r}")

        # 下载内容必须可解析才允许落盘
        try:
            self.scanner.extractor.parse(data)
        except ParseError as e:
            raise TransactionError(f"下载的归档无法解析: {filename} - {e}") from e

        target = self.mods_dir / safe_name
        self._write(target, data, old_path)

        try:
            new_entries = self.scanner.parse_file(target)
        except ScanError as e:
            raise TransactionError(f"回读新文件失败: {e}", target) from e

        for new in new_entries:
            new.remote = copy.deepcopy(origin.remote)
            new.source = origin.source

        result = list(snapshot)
        old_sha1 = origin.hashes.sha1
        for new in new_entries:
            for i, current in enumerate(result):
                if current.hashes.sha1 == old_sha1 and current.id == new.id:
                    result[i] = new
                    break
            else:
                result.append(new)

        logger.info(
            "安装完成: %s -> %s (%d 个模组)", origin.display_name, safe_name, len(new_entries),
            extra={"mod_id": origin.id, "remote_id": origin.remote.remote_id if origin.remote else None},
        )
        return result
