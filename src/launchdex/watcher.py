"""Filesystem watcher that keeps the index in sync incrementally.

Events from watchdog are filtered, collected into a pending set and flushed
once the watched roots have been quiet for a settle window. A flush
reconciles each pending path against the index and then notifies the caller
once for the whole batch.
"""

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from launchdex.indexer import CrawlRoot, Indexer

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY = 0.7  # seconds
DEFAULT_MAX_PENDING = 10_000

NOISE_FILES = frozenset({"Thumbs.db", "desktop.ini", ".DS_Store"})

_HANDLED_EVENTS = frozenset({"created", "modified", "deleted", "moved"})

STATE_IDLE = "idle"
STATE_ACCUMULATING = "accumulating"
STATE_FLUSHING = "flushing"


def is_ignored(path: str, root: CrawlRoot) -> bool:
    """
    Check whether an event path under root should be ignored.

    Only the part of the path below the root is inspected, so a root that
    itself lives under a dot-directory is still watched.
    """
    try:
        parts = Path(path).relative_to(root.path).parts
    except ValueError:
        return True
    for part in parts:
        if part.startswith(".") or part in NOISE_FILES:
            return True
        if part in root.options.excluded_dirs:
            return True
    # Depth of the containing directory, matching what a crawl would read
    return len(parts) - 1 > root.options.max_depth


def create_observer(use_polling: bool = False):
    """Create a watchdog observer, optionally the polling variant."""
    if use_polling:
        logger.info("Using polling observer for filesystem events")
        return PollingObserver()
    return Observer()


class _RootEventHandler(FileSystemEventHandler):
    """Forwards qualifying events under one root to the watcher."""

    def __init__(self, watcher: "ChangeWatcher", root: CrawlRoot):
        super().__init__()
        self._watcher = watcher
        self._root = root

    def on_any_event(self, event: FileSystemEvent) -> None:
        try:
            self._dispatch(event)
        except Exception:
            # Never let a handler error kill the observer thread
            logger.exception("Error handling filesystem event %r", event)

    def _dispatch(self, event: FileSystemEvent) -> None:
        if event.event_type not in _HANDLED_EVENTS:
            return
        # Directory mtime changes are implied by the child events
        if event.is_directory and event.event_type == "modified":
            return

        paths = [os.fsdecode(event.src_path)]
        if event.event_type == "moved":
            paths.append(os.fsdecode(event.dest_path))

        for path in paths:
            if not is_ignored(path, self._root):
                self._watcher.notify(path)


class ChangeWatcher:
    """
    Watches the configured roots and reconciles changed paths into the index.

    Bursts of events collapse into a single flush: every event restarts a
    single-shot settle timer, and the pending paths are processed only after
    the timer fires with no further events. At most one flush runs at a time.
    """

    def __init__(
        self,
        indexer: Indexer,
        roots: list[CrawlRoot],
        on_change: Callable[[], None] | None = None,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        max_pending: int = DEFAULT_MAX_PENDING,
        use_polling: bool = False,
    ):
        """Initialize the watcher.

        Args:
            indexer: The indexer to reconcile changes into.
            roots: Roots to watch; their options bound depth and exclusions.
            on_change: Called once after each flushed batch.
            settle_delay: Quiet period in seconds before a flush. Must be > 0.
            max_pending: Pending paths kept before a batch falls back to a
                full rebuild.
            use_polling: Use the polling observer instead of native events.
        """
        if settle_delay <= 0:
            raise ValueError(f"Settle delay must be positive, got {settle_delay}")

        self._indexer = indexer
        self._roots = roots
        self._on_change = on_change
        self._settle_delay = settle_delay
        self._max_pending = max_pending
        self._use_polling = use_polling

        self._lock = threading.Lock()
        self._flush_lock = threading.Lock()
        self._pending: set[str] = set()
        self._overflow = False
        self._timer: threading.Timer | None = None
        self._flushing = False
        self._observer = None
        self._closed = False

    @property
    def state(self) -> str:
        if self._flushing:
            return STATE_FLUSHING
        if self._timer is not None:
            return STATE_ACCUMULATING
        return STATE_IDLE

    @property
    def watched_roots(self) -> list[CrawlRoot]:
        """Roots that exist and are readable."""
        valid = []
        for root in self._roots:
            if not os.path.isdir(root.path):
                continue
            if not os.access(root.path, os.R_OK):
                logger.warning("Skipping unreadable watch root %s", root.path)
                continue
            valid.append(root)
        return valid

    def start(self) -> None:
        """Subscribe to filesystem events for every valid root."""
        if self._observer is not None:
            logger.warning("Watcher already running")
            return

        roots = self.watched_roots
        if not roots:
            logger.info("No valid paths to watch")
            return

        self._closed = False
        self._observer = create_observer(self._use_polling)
        self._observer.start()

        # Schedule roots one by one so a failing root does not stop the others
        watched = 0
        for root in roots:
            try:
                self._observer.schedule(
                    _RootEventHandler(self, root), str(root.path), recursive=True
                )
                watched += 1
            except OSError as e:
                logger.warning("Failed to watch %s: %s", root.path, e)
        logger.info("Watching %d of %d roots for changes", watched, len(roots))

    def notify(self, path: str) -> None:
        """Schedule a changed path and restart the settle timer."""
        if self._closed:
            return
        # The whole subtree may have just vanished
        if not os.access(os.path.dirname(path), os.R_OK):
            logger.debug("Skipping event with unreadable parent: %s", path)
            return

        with self._lock:
            if len(self._pending) < self._max_pending:
                self._pending.add(path)
            elif not self._overflow:
                logger.warning(
                    "More than %d pending changes, next flush will rebuild",
                    self._max_pending,
                )
                self._overflow = True

            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._settle_delay, self._flush)
            self._timer.name = "launchdex-flush"
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> None:
        """Process pending paths now instead of waiting for the timer."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        self._flush()

    def _flush(self) -> None:
        with self._flush_lock:
            with self._lock:
                if self._timer is threading.current_thread():
                    self._timer = None
                paths = sorted(self._pending)
                overflow = self._overflow
                self._pending = set()
                self._overflow = False
            if not paths and not overflow:
                return

            self._flushing = True
            try:
                self._process(paths, overflow)
            finally:
                self._flushing = False

    def _process(self, paths: list[str], overflow: bool) -> None:
        if overflow:
            try:
                self._indexer.rebuild()
            except Exception:
                logger.exception("Rebuild after pending overflow failed")
        else:
            logger.debug("Flushing %d changed paths", len(paths))
            for path in paths:
                try:
                    if os.path.isfile(path):
                        self._indexer.reconcile_add(path)
                    else:
                        self._indexer.reconcile_remove(path)
                except Exception as e:
                    logger.warning("Error processing path %s: %s", path, e)

        if self._on_change is not None:
            try:
                self._on_change()
            except Exception:
                logger.exception("Index change callback failed")

    def close(self) -> None:
        """Stop watching. Safe to call more than once or before start()."""
        self._closed = True
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = set()
            self._overflow = False

        observer = self._observer
        self._observer = None
        if observer is None:
            return
        try:
            observer.stop()
            observer.join(timeout=5)
        except RuntimeError as e:
            logger.warning("Error stopping watcher: %s", e)
        else:
            logger.info("Watcher stopped")
