"""快照扫描器测试：整次扫描原子性"""

from __future__ import annotations

from pathlib import Path

import pytest

from modsync.core.exceptions import ScanError
from modsync.core.hashing import fingerprint_file
from modsync.core.models import FileState, Source
from modsync.core.sync import SnapshotScanner


class TestScan:
    def test_entries_from_files(self, mods_dir: Path, extractor, write_mod) -> None:
        path = write_mod("a.jar", ("alpha", "1.0", "Alpha"))
        write_mod("b.jar", ("bravo", "2.0", "Bravo"))

        entries = SnapshotScanner(extractor).scan(mods_dir)

        assert [e.id for e in entries] == ["alpha", "bravo"]
        alpha = entries[0]
        assert alpha.hashes == fingerprint_file(path)
        assert alpha.state is FileState.LOCAL
        assert alpha.source is Source.LOCAL
        assert alpha.remote is None

    def test_archive_with_multiple_mods_shares_hashes(self, mods_dir: Path, extractor, write_mod) -> None:
        write_mod("pack.jar", ("create", "0.5", "Create"), ("flywheel", "0.6", "Flywheel"))
        entries = SnapshotScanner(extractor).scan(mods_dir)
        assert [e.id for e in entries] == ["create", "flywheel"]
        assert entries[0].hashes == entries[1].hashes

    def test_subdirectories_skipped(self, mods_dir: Path, extractor, write_mod) -> None:
        write_mod("a.jar", ("alpha", "1.0", "Alpha"))
        nested = mods_dir / "disabled"
        nested.mkdir()
        (nested / "b.jar").write_text("bravo|1.0|Bravo")

        entries = SnapshotScanner(extractor).scan(mods_dir)
        assert [e.id for e in entries] == ["alpha"]

    def test_leftover_part_files_skipped(self, mods_dir: Path, extractor, write_mod) -> None:
        write_mod("a.jar", ("alpha", "1.0", "Alpha"))
        write_mod("tmpk3j9x.part", raw=b"BROKEN half-written download")

        entries = SnapshotScanner(extractor).scan(mods_dir)

        assert [e.id for e in entries] == ["alpha"]
        assert extractor.calls == 1

    def test_empty_directory(self, mods_dir: Path, extractor) -> None:
        assert SnapshotScanner(extractor).scan(mods_dir) == []

    def test_missing_directory(self, tmp_path: Path, extractor) -> None:
        with pytest.raises(ScanError, match="无法枚举目录") as exc_info:
            SnapshotScanner(extractor).scan(tmp_path / "missing")
        assert exc_info.value.path == tmp_path / "missing"


class TestScanAtomicity:
    """任一文件解析失败 → 整次扫描作废"""

    @pytest.mark.parametrize("bad_name", ["0-bad.jar", "b-bad.jar", "z-bad.jar"])
    def test_one_bad_file_aborts_scan(self, mods_dir: Path, extractor, write_mod, bad_name: str) -> None:
        write_mod("a.jar", ("alpha", "1.0", "Alpha"))
        write_mod("c.jar", ("charlie", "1.0", "Charlie"))
        bad = write_mod(bad_name, raw=b"BROKEN archive")

        with pytest.raises(ScanError) as exc_info:
            SnapshotScanner(extractor).scan(mods_dir)
        assert exc_info.value.path == bad

    def test_first_failure_stops_enumeration(self, mods_dir: Path, extractor, write_mod) -> None:
        write_mod("a.jar", ("alpha", "1.0", "Alpha"))
        first = write_mod("b.jar", raw=b"BROKEN one")
        write_mod("c.jar", raw=b"BROKEN two")
        write_mod("d.jar", ("delta", "1.0", "Delta"))

        with pytest.raises(ScanError) as exc_info:
            SnapshotScanner(extractor).scan(mods_dir)
        assert exc_info.value.path == first
        # a.jar 与 b.jar 之后不再解析
        assert extractor.calls == 2
