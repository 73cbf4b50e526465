"""Tests for snapshot persistence."""

import json
from pathlib import Path

from launchdex.indexer.models import KIND_APPLICATION, KIND_FILE, Item
from launchdex.indexer.store import load_snapshot, merge_items, read_snapshot, save_snapshot


def make_items() -> dict[str, Item]:
    items = [
        Item(path="/menu/foo.lnk", name="foo", ext=".lnk", kind=KIND_APPLICATION,
             launch_count=3, last_used=1700000000000),
        Item(path="/docs/bar.txt", name="bar", ext=".txt", kind=KIND_FILE,
             size=42, mtime=1690000000000.5),
    ]
    return {item.path: item for item in items}


class TestLoadSnapshot:
    def test_missing_file_returns_empty(self, tmp_path: Path):
        assert load_snapshot(tmp_path / "missing.json") == {}
        assert read_snapshot(tmp_path / "missing.json") is None

    def test_corrupt_file_returns_empty(self, tmp_path: Path, caplog):
        location = tmp_path / "index.json"
        location.write_text("{ not json")

        assert load_snapshot(location) == {}
        assert any("Corrupt index snapshot" in r.message for r in caplog.records)

    def test_non_array_is_corrupt(self, tmp_path: Path):
        location = tmp_path / "index.json"
        location.write_text('{"file": "/a.lnk"}')

        assert read_snapshot(location) is None

    def test_binary_garbage_returns_empty(self, tmp_path: Path):
        location = tmp_path / "index.json"
        location.write_bytes(b"\xff\xfe\x00garbage")

        assert load_snapshot(location) == {}

    def test_empty_array_is_valid(self, tmp_path: Path):
        location = tmp_path / "index.json"
        location.write_text("[]")

        assert read_snapshot(location) == {}

    def test_skips_malformed_records(self, tmp_path: Path):
        location = tmp_path / "index.json"
        location.write_text(json.dumps([
            "not a record",
            {"name": "no path"},
            {"file": "/menu/bad.lnk", "launchCount": "many"},
            {"file": "/menu/good.lnk", "type": "application"},
        ]))

        items = load_snapshot(location)

        assert list(items) == ["/menu/good.lnk"]

    def test_reads_windows_snapshot_records(self, tmp_path: Path):
        location = tmp_path / "index.json"
        location.write_text(json.dumps([{
            "name": "Notepad",
            "file": "C:\\Start Menu\\Notepad.lnk",
            "ext": ".lnk",
            "type": "application",
            "launchCount": 7,
            "lastUsed": 1712345678901,
        }]))

        item = load_snapshot(location)["C:\\Start Menu\\Notepad.lnk"]

        assert item.kind == KIND_APPLICATION
        assert item.launch_count == 7
        assert item.last_used == 1712345678901


class TestSaveSnapshot:
    def test_round_trip(self, tmp_path: Path):
        location = tmp_path / "index.json"
        items = make_items()

        assert save_snapshot(location, items) is True

        assert load_snapshot(location) == items

    def test_creates_parent_directory(self, tmp_path: Path):
        location = tmp_path / "profile" / "data" / "index.json"

        assert save_snapshot(location, make_items()) is True
        assert location.exists()

    def test_overwrites_corrupt_file(self, tmp_path: Path):
        location = tmp_path / "index.json"
        location.write_text("garbage")

        save_snapshot(location, make_items())

        assert len(load_snapshot(location)) == 2

    def test_leaves_no_temp_files(self, tmp_path: Path):
        location = tmp_path / "index.json"
        save_snapshot(location, make_items())
        save_snapshot(location, {})

        assert [p.name for p in tmp_path.iterdir()] == ["index.json"]

    def test_write_failure_is_swallowed(self, tmp_path: Path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")

        assert save_snapshot(blocker / "index.json", make_items()) is False
        assert any("Failed to write index snapshot" in r.message for r in caplog.records)

    def test_omits_unknown_stat_fields(self, tmp_path: Path):
        location = tmp_path / "index.json"
        save_snapshot(location, make_items())

        records = {r["file"]: r for r in json.loads(location.read_text())}

        assert "size" not in records["/menu/foo.lnk"]
        assert records["/docs/bar.txt"]["size"] == 42


class TestMergeItems:
    def test_first_occurrence_wins(self):
        first = Item(path="/a.lnk", name="first", ext=".lnk", kind=KIND_APPLICATION)
        second = Item(path="/a.lnk", name="second", ext=".lnk", kind=KIND_APPLICATION)

        merged = merge_items([first, second])

        assert list(merged.values()) == [first]
