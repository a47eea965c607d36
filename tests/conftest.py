"""测试共享 fixture：伪元数据解析器 + 内存注册表

伪解析器约定（避免在大多数测试中构造真实 jar）:
  每行一个模组: "id|version|显示名"，加载器固定为 Fabric
  内容以 "BROKEN" 开头 → ParseError

内存注册表按方法名统计调用次数，用于验证缓存是否生效。
"""

from __future__ import annotations

import copy
from collections import Counter
from pathlib import Path

import pytest

from modsync.core.exceptions import ParseError, RegistryError
from modsync.core.models import Loader, ModDescriptor, ModEntry, VersionRecord
from modsync.services.engine import SyncEngine


class FakeExtractor:
    def __init__(self) -> None:
        self.calls = 0

    def parse(self, data: bytes) -> list[ModDescriptor]:
        self.calls += 1
        text = data.decode("utf-8", errors="replace")
        if text.startswith("BROKEN"):
            raise ParseError("损坏的归档")
        result = []
        for line in text.splitlines():
            if not line.strip():
                continue
            mod_id, version, name = line.split("|")
            result.append(ModDescriptor(mod_id, version, name, Loader.FABRIC))
        return result


class FakeRegistry:
    def __init__(self) -> None:
        self.by_hash: dict[str, str] = {}
        self.versions: dict[str, list[VersionRecord] | Exception] = {}
        self.files: dict[tuple[str, str], bytes] = {}
        self.latest: dict[str, ModEntry] = {}
        self.lookup_error: Exception | None = None
        self.calls: Counter[str] = Counter()
        self.list_args: list[tuple[str, str | None, Loader | None]] = []

    def find_by_hash(self, sha1: str) -> str | None:
        self.calls["find_by_hash"] += 1
        if self.lookup_error is not None:
            raise self.lookup_error
        return self.by_hash.get(sha1)

    def list_versions(self, remote_id, *, game_version=None, loader=None):
        self.calls["list_versions"] += 1
        self.list_args.append((remote_id, game_version, loader))
        versions = self.versions.get(remote_id, [])
        if isinstance(versions, Exception):
            raise versions
        return list(versions)

    def download(self, remote_id: str, filename: str) -> bytes:
        self.calls["download"] += 1
        try:
            return self.files[(remote_id, filename)]
        except KeyError:
            raise RegistryError(f"没有文件 {filename}", status=404) from None

    def create_entry_for_latest(self, remote_id, game_version, loader):
        self.calls["create_entry_for_latest"] += 1
        if remote_id not in self.latest:
            raise RegistryError(f"项目不存在: {remote_id}", status=404)
        return copy.deepcopy(self.latest[remote_id])


def mod_content(*mods: tuple[str, str, str]) -> bytes:
    return "\n".join("|".join(m) for m in mods).encode("utf-8")


@pytest.fixture()
def make_content():
    """归档内容工厂: make_content(("alpha", "2.0", "Alpha")) → bytes"""
    return mod_content


@pytest.fixture()
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture()
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture()
def mods_dir(tmp_path: Path) -> Path:
    d = tmp_path / "mods"
    d.mkdir()
    return d


@pytest.fixture()
def write_mod(mods_dir: Path):
    """文件工厂: write_mod("a.jar", ("alpha", "1.0", "Alpha")) → Path"""

    def _write(filename: str, *mods: tuple[str, str, str], raw: bytes | None = None) -> Path:
        path = mods_dir / filename
        path.write_bytes(raw if raw is not None else mod_content(*mods))
        return path

    return _write


@pytest.fixture()
def engine(mods_dir: Path, extractor: FakeExtractor, registry: FakeRegistry) -> SyncEngine:
    eng = SyncEngine(mods_dir=mods_dir, extractor=extractor, registry=registry)
    yield eng
    eng.stop(timeout=5)
