"""
Indexer module for launchdex.

This module maintains the JSON snapshot of launchable items: the crawler that
discovers them, the store that persists them, and the indexer that rebuilds
and reconciles the snapshot as the filesystem changes.
"""

from launchdex.indexer.indexer import Indexer
from launchdex.indexer.models import (
    KIND_APPLICATION,
    KIND_FILE,
    CrawlOptions,
    CrawlRoot,
    ExtensionSets,
    Item,
)
from launchdex.indexer.store import load_snapshot, merge_items, save_snapshot
from launchdex.indexer.walker import crawl, walk_root

__all__ = [
    "KIND_APPLICATION",
    "KIND_FILE",
    "CrawlOptions",
    "CrawlRoot",
    "ExtensionSets",
    "Indexer",
    "Item",
    "crawl",
    "load_snapshot",
    "merge_items",
    "save_snapshot",
    "walk_root",
]
