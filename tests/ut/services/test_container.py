"""ServiceContainer 单元测试"""

from __future__ import annotations

from pathlib import Path

import pytest

import modsync.core.config as cfgmod
from modsync.services.container import (
    ServiceContainer,
    get_container,
    reset_container,
    set_container,
)


@pytest.fixture(autouse=True)
def _setup_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """确保测试有独立的配置和模组目录"""
    cfg = cfgmod.Config(
        mods_dir=str(tmp_path / "mods"),
        registry_url="https://registry.example.test/v2",
        user_agent="modsync-test",
        http_timeout=3.0,
    )
    monkeypatch.setattr(cfgmod, "_current", cfg)
    reset_container()
    yield
    reset_container()


class TestServiceContainer:
    def test_lazy_instances_are_shared(self) -> None:
        c = ServiceContainer()
        assert c._instances == {}
        assert c.registry is c.registry
        assert c.engine.installer.registry is c.registry
        assert c.engine.scanner.extractor is c.extractor
        assert c.engine.manifest is c.manifest

    def test_config_flows_into_clients(self, tmp_path: Path) -> None:
        c = ServiceContainer()
        assert c.registry.base_url == "https://registry.example.test/v2"
        assert c.registry.user_agent == "modsync-test"
        assert c.manifest.timeout == 3.0
        assert c.engine.mods_dir == tmp_path / "mods"

    def test_explicit_config_wins(self, tmp_path: Path) -> None:
        c = ServiceContainer(cfgmod.Config(mods_dir=str(tmp_path / "other")))
        assert c.engine.mods_dir == tmp_path / "other"

    def test_event_backlog_flows_into_engine(self, tmp_path: Path) -> None:
        c = ServiceContainer(cfgmod.Config(mods_dir=str(tmp_path / "mods"), event_backlog=3))
        assert c.engine._events.maxlen == 3


class TestGlobalContainer:
    def test_singleton(self) -> None:
        assert get_container() is get_container()

    def test_set_and_reset(self) -> None:
        custom = ServiceContainer()
        set_container(custom)
        assert get_container() is custom
        reset_container()
        assert get_container() is not custom

    def test_reset_stops_running_engine(self) -> None:
        c = ServiceContainer()
        set_container(c)
        c.engine.start()
        assert c.engine.running
        reset_container()
        assert not c.engine.running
