"""同步引擎：单消费者请求循环

引擎独占快照与哈希缓存，请求按 FIFO 逐个处理到结束。
观察者只会看到最近一次发布的快照副本（深拷贝组成的 tuple），
处理中途的快照不对外可见，因此快照本身不需要任何锁。

默认事件缓冲有上限，写满后丢弃最早的事件并记录警告。

用法:
    engine = SyncEngine(mods_dir, JarMetadataExtractor(), ModrinthClient())

    # 同步处理（CLI / 测试）
    engine.process(ScanFolder())
    events = engine.drain_events()

    # 后台线程（Web）
    engine.start()
    engine.submit(CheckForUpdates(game_version="1.20.1"))
    engine.stop()

不支持中途取消：请求要么完成，要么失败。
"""

from __future__ import annotations

import copy
import logging
import queue
import threading
from collections import deque
from collections.abc import Callable
from pathlib import Path
from typing import Any

from modsync.core.exceptions import (
    ConfigError,
    ModSyncError,
    ScanError,
    TransactionError,
    ValidationError,
)
from modsync.core.models import ModEntry, sort_snapshot
from modsync.core.protocols import (
    EventSink,
    ManifestFetcher,
    MetadataExtractor,
    RegistryClient,
)
from modsync.core.sync import (
    HashLookupCache,
    ModInstaller,
    SnapshotScanner,
    UpdateResolver,
    reconcile,
)
from modsync.services.messages import (
    AddMod,
    BackendError,
    BackendErrorContext,
    CheckForUpdates,
    CheckForUpdatesProgress,
    Event,
    GetVersionMetadata,
    Request,
    ScanFolder,
    SetVersionMetadata,
    UpdateMod,
    UpdateModList,
)

logger = logging.getLogger(__name__)

_STOP = object()

DEFAULT_MAX_EVENTS = 1000


class SyncEngine:
    """模组目录同步引擎"""

    def __init__(
        self,
        mods_dir: Path,
        extractor: MetadataExtractor,
        registry: RegistryClient,
        manifest: ManifestFetcher | None = None,
        sink: EventSink | None = None,
        cache: HashLookupCache | None = None,
        max_events: int = DEFAULT_MAX_EVENTS,
    ) -> None:
        if max_events < 1:
            raise ConfigError(f"事件缓冲上限必须为正整数: {max_events}")
        self.mods_dir = Path(mods_dir)
        self.cache = cache if cache is not None else HashLookupCache()
        self.scanner = SnapshotScanner(extractor)
        self.resolver = UpdateResolver(registry, self.cache)
        self.installer = ModInstaller(self.mods_dir, registry, self.scanner)
        self.manifest = manifest

        self._events: deque[Event] = deque(maxlen=max_events)
        self._dropped = 0
        self._sink: EventSink = sink if sink is not None else self._buffer_event
        self._requests: queue.Queue[Any] = queue.Queue()
        self._worker: threading.Thread | None = None
        self._stop_requested = False
        self._mods: list[ModEntry] = []
        # 仅由 _publish 整体替换，其他线程只读
        self._published: tuple[ModEntry, ...] = ()

        self._handlers: dict[type, Callable[[Any], None]] = {
            ScanFolder: self._scan_folder,
            CheckForUpdates: self._check_for_updates,
            GetVersionMetadata: self._get_version_metadata,
            UpdateMod: self._update_mod,
            AddMod: self._add_mod,
        }

    # ------------------------------------------------------------------
    # 对外接口
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> tuple[ModEntry, ...]:
        """最近一次发布的快照副本（已排序）"""
        return copy.deepcopy(self._published)

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def submit(self, request: Request) -> None:
        """请求入队，由后台线程按 FIFO 处理"""
        self._requests.put(request)

    def start(self) -> None:
        """启动后台消费线程（重复调用无副作用）"""
        if self.running:
            return
        self._stop_requested = False
        self._worker = threading.Thread(target=self._run, name="modsync-engine", daemon=True)
        self._worker.start()
        logger.info("同步引擎已启动: %s", self.mods_dir)

    def stop(self, timeout: float | None = None) -> None:
        """处理完已入队的请求后停止后台线程

        超时后线程仍在处理时保留线程引用，running 保持为 True，
        之后再次 start() 不会启动第二个消费线程；再次 stop() 继续等待。
        """
        if self._worker is None:
            return
        # 每个线程只投递一次停止标记，避免残留标记让下一个线程立即退出
        if self._worker.is_alive() and not self._stop_requested:
            self._requests.put(_STOP)
            self._stop_requested = True
        self._worker.join(timeout)
        if self._worker.is_alive():
            logger.warning("同步引擎未在 %s 秒内停止，当前请求仍在处理", timeout)
            return
        self._worker = None
        self._stop_requested = False
        logger.info("同步引擎已停止")

    def join(self) -> None:
        """阻塞直到已入队的请求全部处理完"""
        self._requests.join()

    def drain_events(self) -> list[Event]:
        """取出默认事件缓冲中的全部事件（自定义 sink 时始终为空）"""
        events: list[Event] = []
        while True:
            try:
                events.append(self._events.popleft())
            except IndexError:
                break
        if self._dropped:
            logger.warning("自上次读取以来有 %d 个事件因缓冲已满被丢弃", self._dropped)
            self._dropped = 0
        return events

    def process(self, request: Request) -> None:
        """同步处理单个请求；任何失败都转换为错误事件，不向外抛出"""
        handler = self._handlers.get(type(request))
        if handler is None:
            self._report(
                "无法处理请求",
                ValidationError(f"未知请求类型: {type(request).__name__}"),
            )
            return
        try:
            handler(request)
        except ModSyncError as e:
            self._report(_context_for(request), e, request)
        except Exception as e:  # noqa: BLE001
            logger.exception("处理请求时发生未预期异常: %s", type(request).__name__)
            self._report(_context_for(request), ModSyncError(f"内部错误: {e}"), request)

    # ------------------------------------------------------------------
    # 请求处理
    # ------------------------------------------------------------------

    def _scan_folder(self, request: ScanFolder) -> None:
        self._rescan()
        self._publish()

    def _check_for_updates(self, request: CheckForUpdates) -> None:
        self._rescan()
        self.resolver.check_all(
            self._mods,
            request.game_version or None,
            on_progress=self._progress,
        )
        self._publish()

    def _get_version_metadata(self, request: GetVersionMetadata) -> None:
        if self.manifest is None:
            raise ConfigError("未配置游戏版本清单来源")
        self._emit(SetVersionMetadata(manifest=self.manifest.fetch()))

    def _update_mod(self, request: UpdateMod) -> None:
        try:
            self._mods = self.installer.update(request.entry, self._mods)
        except TransactionError:
            self._resync()
            raise
        self._rescan()
        self._publish()

    def _add_mod(self, request: AddMod) -> None:
        try:
            self._mods = self.installer.add(
                request.remote_id, request.game_version, request.loader, self._mods,
            )
        except TransactionError:
            self._resync()
            raise
        self._rescan()
        self._publish()

    # ------------------------------------------------------------------
    # 内部
    # ------------------------------------------------------------------

    def _rescan(self) -> None:
        """全量扫描并与当前快照合并；扫描失败时快照清空并发布"""
        try:
            fresh = self.scanner.scan(self.mods_dir)
        except ScanError:
            self._mods = []
            self._publish()
            raise
        self._mods = sort_snapshot(reconcile(fresh, self._mods))

    def _resync(self) -> None:
        """事务失败后按磁盘实际内容重建快照"""
        try:
            self._rescan()
        except ScanError as e:
            self._report("事务失败后重新扫描失败", e)
            return
        self._publish()

    def _progress(self, display_name: str, position: int, total: int) -> None:
        self._emit(CheckForUpdatesProgress(display_name, position, total))

    def _publish(self) -> None:
        self._published = tuple(copy.deepcopy(m) for m in sort_snapshot(self._mods))
        self._emit(UpdateModList(mods=copy.deepcopy(self._published)))

    def _report(self, message: str, error: ModSyncError, request: Any = None) -> None:
        context = {"error_code": error.code}
        if getattr(error, "path", None) is not None:
            context["path"] = str(error.path)  # type: ignore[attr-defined]
        if request is not None:
            context["request"] = type(request).__name__
        logger.error("%s: %s", message, error, extra=context)
        self._emit(BackendErrorContext(message=message))
        self._emit(BackendError(error=error))

    def _emit(self, event: Event) -> None:
        self._sink(event)

    def _buffer_event(self, event: Event) -> None:
        """默认 sink：写满时 deque 自动挤出最早的事件"""
        if len(self._events) == self._events.maxlen:
            if self._dropped == 0:
                logger.warning("事件缓冲已满 (%d)，开始丢弃最早的事件", self._events.maxlen)
            self._dropped += 1
        self._events.append(event)

    def _run(self) -> None:
        while True:
            request = self._requests.get()
            try:
                if request is _STOP:
                    return
                self.process(request)
            finally:
                self._requests.task_done()


def _context_for(request: Request) -> str:
    """错误上下文描述"""
    if isinstance(request, ScanFolder):
        return "扫描模组目录失败"
    if isinstance(request, CheckForUpdates):
        return "检查更新失败"
    if isinstance(request, GetVersionMetadata):
        return "获取游戏版本清单失败"
    if isinstance(request, UpdateMod):
        return f"更新模组失败: {request.entry.display_name}"
    if isinstance(request, AddMod):
        return f"安装模组失败: {request.remote_id}"
    return "处理请求失败"
