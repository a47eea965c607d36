"""跨层契约测试：exceptions / 事件序列化 / 日志"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from modsync.core.exceptions import (
    ConfigError,
    ModSyncError,
    ParseError,
    RegistryError,
    ScanError,
    TransactionError,
    ValidationError,
)
from modsync.core.models import (
    FileState,
    GameVersion,
    Hashes,
    Loader,
    ModEntry,
    RemoteLinkage,
    Source,
    VersionManifest,
)
from modsync.services.messages import (
    BackendError,
    BackendErrorContext,
    CheckForUpdatesProgress,
    SetVersionMetadata,
    UpdateModList,
)
from modsync.utils.logger import ContextFormatter, JSONFormatter, reset_logging, setup_logging

# =========================================================================
# exceptions.py
# =========================================================================


class TestExceptions:
    @pytest.mark.parametrize("cls", [ConfigError, ParseError, RegistryError, ValidationError])
    def test_hierarchy(self, cls: type) -> None:
        assert issubclass(cls, ModSyncError)

    def test_validation_error_code(self) -> None:
        e = ValidationError("未知请求类型: str")
        assert e.to_dict() == {"code": "VALIDATION_ERROR", "message": "未知请求类型: str"}

    def test_scan_error_carries_path(self) -> None:
        e = ScanError("解析失败: a.jar", Path("/mods/a.jar"))
        assert e.to_dict() == {"code": "SCAN_ERROR", "message": "解析失败: a.jar", "path": "/mods/a.jar"}

    def test_transaction_error_path_optional(self) -> None:
        assert "path" not in TransactionError("失败").to_dict()
        assert TransactionError("失败", "/mods/x.jar").to_dict()["path"] == "/mods/x.jar"

    def test_registry_error_status(self) -> None:
        assert RegistryError("HTTP 错误 404", status=404).status == 404
        assert RegistryError("网络错误").status is None


# =========================================================================
# messages.py
# =========================================================================


class TestEventSerialization:
    def test_mod_list(self) -> None:
        entry = ModEntry(
            "sodium", "mc1.20.1-0.5.3", "Sodium", Loader.FABRIC, Hashes("a1", "b2"),
            remote=RemoteLinkage("AANobbMI", "sodium-0.5.4.jar"),
            state=FileState.OUTDATED, source=Source.MODRINTH,
        )
        data = UpdateModList(mods=(entry,)).to_dict()
        assert data["type"] == "update_mod_list"
        assert data["mods"][0] == {
            "id": "sodium",
            "version": "mc1.20.1-0.5.3",
            "normalized_version": "1.20.1",
            "display_name": "Sodium",
            "loader": "fabric",
            "sha1": "a1",
            "sha512": "b2",
            "remote_id": "AANobbMI",
            "latest_filename": "sodium-0.5.4.jar",
            "state": "outdated",
            "source": "modrinth",
        }

    def test_progress_and_errors(self) -> None:
        assert CheckForUpdatesProgress("Sodium", 2, 5).to_dict()["position"] == 2
        assert BackendErrorContext("检查更新失败").to_dict()["message"] == "检查更新失败"
        err = BackendError(RegistryError("超时")).to_dict()
        assert err == {"type": "backend_error", "error": {"code": "REGISTRY_ERROR", "message": "超时"}}

    def test_manifest_round_trips_through_json(self) -> None:
        manifest = VersionManifest("1.20.1", "23w31a", [GameVersion("1.20.1", "release", "2023-06-12")])
        data = json.loads(json.dumps(SetVersionMetadata(manifest).to_dict(), ensure_ascii=False))
        assert data["manifest"]["latest_release"] == "1.20.1"


# =========================================================================
# logger.py
# =========================================================================


class TestLogging:
    def test_json_formatter(self) -> None:
        record = logging.LogRecord("modsync.test", logging.INFO, __file__, 10, "扫描完成: %d", (3,), None)
        data = json.loads(JSONFormatter().format(record))
        assert data["message"] == "扫描完成: 3"
        assert data["level"] == "INFO"
        assert data["logger"] == "modsync.test"
        assert "exception" not in data
        assert "context" not in data

    def test_json_formatter_includes_context(self) -> None:
        logger = logging.getLogger("modsync.test")
        record = logger.makeRecord(
            "modsync.test", logging.ERROR, __file__, 10, "解析失败", (), None,
            extra={"path": "/mods/a.jar", "error_code": "SCAN_ERROR", "mod_id": None},
        )
        data = json.loads(JSONFormatter().format(record))
        assert data["context"] == {"path": "/mods/a.jar", "error_code": "SCAN_ERROR"}

    def test_text_formatter_appends_context(self) -> None:
        logger = logging.getLogger("modsync.test")
        record = logger.makeRecord(
            "modsync.test", logging.WARNING, __file__, 10, "版本历史拉取失败 %s", ("Sodium",), None,
            extra={"mod_id": "sodium", "remote_id": "AANobbMI"},
        )
        text = ContextFormatter("%(levelname)s %(message)s").format(record)
        assert text == "WARNING 版本历史拉取失败 Sodium [mod_id=sodium remote_id=AANobbMI]"

    def test_engine_error_log_carries_request_context(
        self, engine, write_mod, caplog: pytest.LogCaptureFixture,
    ) -> None:
        from modsync.services.messages import ScanFolder

        bad = write_mod("bad.jar", raw=b"BROKEN")
        with caplog.at_level(logging.ERROR, logger="modsync.services.engine"):
            engine.process(ScanFolder())

        [record] = [r for r in caplog.records if r.name == "modsync.services.engine"]
        assert record.request == "ScanFolder"
        assert record.error_code == "SCAN_ERROR"
        assert record.path == str(bad)

    def test_setup_replaces_handlers(self) -> None:
        try:
            setup_logging(level="debug", json_output=True)
            setup_logging(level="warning", json_output=True)
            root = logging.getLogger()
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
            assert root.level == logging.WARNING
        finally:
            reset_logging()
