"""Tests for indexer data models."""

from launchdex.indexer.models import (
    KIND_APPLICATION,
    KIND_FILE,
    ExtensionSets,
    Item,
    normalize_extension,
)


class TestExtensionSets:
    def test_classify_shortcut_ignores_include_flag(self):
        sets = ExtensionSets()
        assert sets.classify(".lnk", include_documents=False) == KIND_APPLICATION

    def test_classify_document_requires_include_flag(self):
        sets = ExtensionSets()
        assert sets.classify(".pdf") == KIND_FILE
        assert sets.classify(".pdf", include_documents=False) is None

    def test_classify_unknown_extension(self):
        assert ExtensionSets().classify(".exe") is None
        assert ExtensionSets().classify("") is None

    def test_from_lists_normalizes(self):
        sets = ExtensionSets.from_lists(["LNK", ".Url"], ["txt"])
        assert sets.shortcuts == frozenset({".lnk", ".url"})
        assert sets.allowed == frozenset({".lnk", ".url", ".txt"})

    def test_normalize_extension(self):
        assert normalize_extension(" .PDF ") == ".pdf"
        assert normalize_extension("doc") == ".doc"
        assert normalize_extension("") == ""


class TestItem:
    def test_from_path(self):
        item = Item.from_path("/menu/My App.LNK", KIND_APPLICATION)
        assert item.name == "My App"
        assert item.ext == ".lnk"
        assert item.launch_count == 0
        assert item.last_used == 0
        assert item.size is None

    def test_to_dict_uses_snapshot_field_names(self):
        item = Item(path="/docs/a.txt", name="a", ext=".txt", kind=KIND_FILE, launch_count=2)
        assert item.to_dict() == {
            "name": "a",
            "file": "/docs/a.txt",
            "ext": ".txt",
            "type": "file",
            "launchCount": 2,
            "lastUsed": 0,
        }

    def test_to_dict_includes_stat_fields_when_known(self):
        item = Item(
            path="/docs/a.txt", name="a", ext=".txt", kind=KIND_FILE, size=10, mtime=1500.0
        )
        data = item.to_dict()
        assert data["size"] == 10
        assert data["mtime"] == 1500.0

    def test_from_dict_fills_defaults(self):
        item = Item.from_dict({"file": "/menu/Editor.lnk"})
        assert item.name == "Editor"
        assert item.ext == ".lnk"
        assert item.kind == KIND_FILE
        assert item.launch_count == 0

    def test_from_dict_without_path(self):
        assert Item.from_dict({"name": "orphan"}) is None
        assert Item.from_dict({"file": ""}) is None
