"""Tests for the index service."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from launchdex.config import Config
from launchdex.indexer import KIND_APPLICATION, KIND_FILE, Item, load_snapshot
from launchdex.service import IndexService, index_stats


@pytest.fixture
def config(tmp_path: Path, monkeypatch) -> Config:
    menu = tmp_path / "menu"
    docs = tmp_path / "docs"
    (menu / "Tools").mkdir(parents=True)
    docs.mkdir()
    (menu / "Tools" / "Editor.lnk").write_text("")
    (menu / "readme.txt").write_text("")
    (docs / "report.pdf").write_text("")

    monkeypatch.delenv("LAUNCHDEX_PROFILE", raising=False)
    monkeypatch.setenv("LAUNCHDEX_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("LAUNCHDEX_SHORTCUT_DIRS", str(menu))
    monkeypatch.setenv("LAUNCHDEX_FILE_DIRS", str(docs))
    monkeypatch.setenv("LAUNCHDEX_SETTLE_MS", "100")
    return Config.from_env()


@pytest.fixture
def opener() -> MagicMock:
    return MagicMock()


@pytest.fixture
def service(config: Config, opener: MagicMock):
    svc = IndexService(config, opener=opener)
    yield svc
    svc.stop()


class TestGetIndex:
    def test_builds_on_first_use(self, service: IndexService, config: Config):
        items = service.get_index()

        names = sorted(item.name for item in items)
        assert names == ["Editor", "report"]
        assert config.index_path.exists()

    def test_shortcut_sweep_ignores_documents(self, service: IndexService):
        kinds = {item.name: item.kind for item in service.get_index()}
        assert "readme" not in kinds
        assert kinds["Editor"] == KIND_APPLICATION
        assert kinds["report"] == KIND_FILE


class TestLaunch:
    def test_launch_records_usage(self, service: IndexService, config: Config, opener):
        target = str(config.shortcut_dirs[0] / "Tools" / "Editor.lnk")
        service.get_index()

        result = service.launch(target)

        assert result.ok is True
        opener.assert_called_once_with(target)
        item = load_snapshot(config.index_path)[target]
        assert item.launch_count == 1
        assert item.last_used > 0

    def test_launch_unknown_path_still_opens(self, service: IndexService, config: Config, opener):
        service.get_index()
        before = config.index_path.read_text()

        result = service.launch("/somewhere/else.lnk")

        assert result.ok is True
        opener.assert_called_once()
        assert config.index_path.read_text() == before

    def test_launch_empty_path(self, service: IndexService, opener):
        result = service.launch("")
        assert result.ok is False
        assert result.error == "no-file"
        opener.assert_not_called()

    def test_launch_failure_leaves_usage(self, service: IndexService, config: Config, opener):
        target = str(config.shortcut_dirs[0] / "Tools" / "Editor.lnk")
        service.get_index()
        opener.side_effect = OSError("no handler")

        result = service.launch(target)

        assert result.ok is False
        assert "no handler" in result.error
        assert load_snapshot(config.index_path)[target].launch_count == 0


class TestIndexChanged:
    def test_rebuild_notifies_subscribers(self, service: IndexService):
        listener = MagicMock()
        service.on_index_changed(listener)

        service.rebuild()

        listener.assert_called_once()
        assert len(listener.call_args.args[0]) == 2

    def test_first_use_rebuild_notifies_subscribers(self, service: IndexService):
        listener = MagicMock()
        service.on_index_changed(listener)

        service.get_index()
        service.get_index()

        listener.assert_called_once()
        assert len(listener.call_args.args[0]) == 2

    def test_loading_snapshot_does_not_notify(self, service: IndexService, config: Config):
        service.get_index()
        listener = MagicMock()
        fresh = IndexService(config, opener=MagicMock())
        fresh.on_index_changed(listener)

        fresh.get_index()

        listener.assert_not_called()

    def test_unsubscribe(self, service: IndexService):
        listener = MagicMock()
        unsubscribe = service.on_index_changed(listener)
        unsubscribe()
        unsubscribe()

        service.rebuild()

        listener.assert_not_called()

    def test_failing_listener_does_not_block_others(self, service: IndexService):
        broken = MagicMock(side_effect=RuntimeError("boom"))
        healthy = MagicMock()
        service.on_index_changed(broken)
        service.on_index_changed(healthy)

        service.rebuild()

        healthy.assert_called_once()

    def test_watcher_flush_pushes_fresh_snapshot(self, service: IndexService, config: Config):
        service.get_index()
        listener = MagicMock()
        service.on_index_changed(listener)
        # Keep observer-driven flushes out of the way of the manual one
        service.config.settle_ms = 60_000
        watcher = service.start_watching()

        new_doc = config.file_dirs[0] / "notes.txt"
        new_doc.write_text("")
        watcher.notify(str(new_doc))
        watcher.flush()

        listener.assert_called_once()
        paths = {item.path for item in listener.call_args.args[0]}
        assert str(new_doc) in paths

    def test_stop_is_idempotent(self, service: IndexService):
        service.start_watching()
        service.stop()
        service.stop()


def test_index_stats():
    items = [
        Item(path="/a.lnk", name="a", ext=".lnk", kind=KIND_APPLICATION),
        Item(path="/b.lnk", name="b", ext=".lnk", kind=KIND_APPLICATION),
        Item(path="/c.pdf", name="c", ext=".pdf", kind=KIND_FILE),
    ]

    assert index_stats(items) == {
        "total": 3,
        "applications": 2,
        "files": 1,
        "by_extension": {".lnk": 2, ".pdf": 1},
    }
