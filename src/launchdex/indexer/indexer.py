"""Main indexer that coordinates crawling, reconciliation and persistence."""

import logging
import os
import stat
import threading
import time
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

from launchdex.indexer.models import CrawlRoot, ExtensionSets, Item
from launchdex.indexer.store import merge_items, read_snapshot, save_snapshot
from launchdex.indexer.walker import crawl

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class Indexer:
    """
    Indexer that keeps a JSON snapshot of launchable items in sync with the
    filesystem.

    The filesystem is the source of truth for which items exist; the snapshot
    additionally carries usage metadata (launch_count, last_used) that only
    exists in the index. The in-memory mapping is authoritative for the
    lifetime of the process, and every mutation is written through to the
    snapshot. A failed write is logged and retried implicitly by the next
    mutation.

    Thread Safety:
        Every operation that reads or mutates the mapping (rebuild,
        load_or_rebuild, reconcile_add, reconcile_remove, record_launch) holds
        a single lock, so mutations against the snapshot are serialized and a
        pending mutation queues behind an in-flight one.
    """

    def __init__(
        self,
        snapshot_path: Path,
        roots: list[CrawlRoot],
        extensions: ExtensionSets | None = None,
        preserve_usage: bool = True,
    ):
        """
        Initialize the indexer.

        Args:
            snapshot_path: Path to the JSON snapshot file
            roots: Directories to crawl on a full rebuild, with their policies
            extensions: Shortcut and document extension sets
            preserve_usage: Carry launch_count/last_used across rebuilds for
                paths present in the prior snapshot. When False, a rebuild
                resets them to zero.
        """
        self.snapshot_path = snapshot_path
        self.roots = roots
        self.extensions = extensions or ExtensionSets()
        self.preserve_usage = preserve_usage
        self._items: dict[str, Item] | None = None
        self._write_lock = threading.Lock()

    def _current(self) -> dict[str, Item]:
        """Return the authoritative mapping, loading the snapshot on first use."""
        if self._items is None:
            self._items = read_snapshot(self.snapshot_path) or {}
        return self._items

    def _commit(self, items: dict[str, Item]) -> None:
        self._items = items
        save_snapshot(self.snapshot_path, items)

    def rebuild(self) -> dict[str, Item]:
        """
        Perform a full crawl of all roots and replace the index.

        Returns the new path-keyed mapping.
        """
        with self._write_lock:
            return self._rebuild()

    def _rebuild(self) -> dict[str, Item]:
        logger.info("Starting full rebuild over %d roots", len(self.roots))

        if self.preserve_usage:
            prior = self._items
            if prior is None:
                prior = read_snapshot(self.snapshot_path) or {}
        else:
            prior = {}

        items = merge_items(crawl(self.roots, self.extensions))
        for path, item in items.items():
            previous = prior.get(path)
            if previous is not None:
                items[path] = replace(
                    item,
                    launch_count=previous.launch_count,
                    last_used=previous.last_used,
                )

        self._commit(items)
        logger.info("Rebuild complete: %d items indexed", len(items))
        return dict(items)

    def load_or_rebuild(
        self,
        on_rebuild: Callable[[dict[str, Item]], None] | None = None,
    ) -> dict[str, Item]:
        """
        Return the current index, building it if no usable snapshot exists.

        If a rebuild happens here, on_rebuild is called with the new mapping
        after the lock is released.
        """
        with self._write_lock:
            if self._items is not None:
                return dict(self._items)

            items = read_snapshot(self.snapshot_path)
            if items is not None:
                self._items = items
                return dict(items)

            logger.info("No usable snapshot at %s, rebuilding", self.snapshot_path)
            rebuilt = self._rebuild()

        if on_rebuild is not None:
            on_rebuild(dict(rebuilt))
        return rebuilt

    def reconcile_add(self, path: str | Path) -> bool:
        """
        Add or update a single file in the index.

        Existing usage metadata for the path is preserved. Returns False
        without touching the index if the path is not a regular file or its
        extension is not indexable.
        """
        path = os.path.abspath(path)
        try:
            st = os.stat(path)
        except OSError:
            return False
        if not stat.S_ISREG(st.st_mode):
            return False

        ext = os.path.splitext(path)[1].lower()
        kind = self.extensions.classify(ext)
        if kind is None:
            return False

        with self._write_lock:
            items = dict(self._current())
            existing = items.get(path)
            item = replace(
                Item.from_path(path, kind),
                size=st.st_size,
                mtime=st.st_mtime * 1000,
            )
            if existing is not None:
                item = replace(
                    item,
                    launch_count=existing.launch_count,
                    last_used=existing.last_used,
                )
            items[path] = item
            self._commit(items)

        logger.debug("Indexed %s", path)
        return True

    def reconcile_remove(self, path: str | Path) -> bool:
        """Remove a path from the index. Returns False if it was not indexed."""
        path = os.path.abspath(path)
        with self._write_lock:
            items = self._current()
            if path not in items:
                return False
            items = dict(items)
            del items[path]
            self._commit(items)

        logger.debug("Removed %s from index", path)
        return True

    def record_launch(self, path: str | Path) -> bool:
        """
        Increment the launch counter for a path and stamp its last use.

        Returns False (and changes nothing) if the path is not indexed.
        """
        path = os.path.abspath(path)
        with self._write_lock:
            items = self._current()
            existing = items.get(path)
            if existing is None:
                return False
            items = dict(items)
            items[path] = replace(
                existing,
                launch_count=existing.launch_count + 1,
                last_used=_now_ms(),
            )
            self._commit(items)
        return True
