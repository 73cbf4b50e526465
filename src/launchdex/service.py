"""Index service: the narrow interface the UI and launch layer call into.

The service owns the indexer and the change watcher for the lifetime of the
process and fans index changes out to subscribers.
"""

import logging
import threading
from collections import Counter
from collections.abc import Callable, Iterable

from launchdex.config import Config
from launchdex.indexer import KIND_APPLICATION, KIND_FILE, Indexer, Item
from launchdex.launcher import LaunchResult, launch_path, open_path
from launchdex.watcher import ChangeWatcher

logger = logging.getLogger(__name__)

IndexListener = Callable[[list[Item]], None]


def index_stats(items: Iterable[Item]) -> dict:
    """Summarize an index by kind and by extension."""
    items = list(items)
    by_extension = Counter(item.ext for item in items)
    return {
        "total": len(items),
        "applications": sum(1 for item in items if item.kind == KIND_APPLICATION),
        "files": sum(1 for item in items if item.kind == KIND_FILE),
        "by_extension": dict(sorted(by_extension.items())),
    }


class IndexService:
    """Stateful controller around the indexer and its watcher."""

    def __init__(
        self,
        config: Config,
        indexer: Indexer | None = None,
        opener: Callable[[str], None] = open_path,
    ):
        self.config = config
        self.indexer = indexer or Indexer(
            config.index_path,
            config.crawl_roots(),
            extensions=config.extensions,
            preserve_usage=config.preserve_usage,
        )
        self._opener = opener
        self._listeners: list[IndexListener] = []
        self._listeners_lock = threading.Lock()
        self._watcher: ChangeWatcher | None = None

    def get_index(self) -> list[Item]:
        """Return the current index, building it on first use."""
        items = self.indexer.load_or_rebuild(
            on_rebuild=lambda rebuilt: self._notify(list(rebuilt.values()))
        )
        return list(items.values())

    def rebuild(self) -> list[Item]:
        """Force a full rebuild and notify subscribers."""
        items = list(self.indexer.rebuild().values())
        self._notify(items)
        return items

    def launch(self, path: str) -> LaunchResult:
        """Start an item and record the launch in its usage metadata."""
        result = launch_path(path, opener=self._opener)
        if not result.ok:
            return result
        try:
            if not self.indexer.record_launch(path):
                logger.debug("Launched path not in index: %s", path)
        except Exception:
            logger.exception("Failed to update launch metadata for %s", path)
        return result

    def on_index_changed(self, callback: IndexListener) -> Callable[[], None]:
        """Subscribe to index changes. Returns a function that unsubscribes."""
        with self._listeners_lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def start_watching(self) -> ChangeWatcher:
        """Start the change watcher over all configured roots."""
        if self._watcher is None:
            self._watcher = ChangeWatcher(
                self.indexer,
                self.config.crawl_roots(),
                on_change=self._handle_flush,
                settle_delay=self.config.settle_ms / 1000,
                use_polling=self.config.watch_polling,
            )
            self._watcher.start()
        return self._watcher

    def stop(self) -> None:
        """Stop the watcher if running. Safe to call more than once."""
        watcher = self._watcher
        self._watcher = None
        if watcher is not None:
            watcher.close()

    def _handle_flush(self) -> None:
        self._notify(self.get_index())

    def _notify(self, items: list[Item]) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(list(items))
            except Exception:
                logger.exception("Index change listener failed")
