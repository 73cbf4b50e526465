"""Example: keep an index current and print every change.

This example builds (or loads) the index for the configured roots, starts the
change watcher and prints a summary each time the index changes. Create or
delete a shortcut or a document in one of the roots to see it update.
Run with: uv run python examples/watch_index.py
"""

import logging
import time

from launchdex.config import Config
from launchdex.service import IndexService, index_stats


def print_summary(items) -> None:
    stats = index_stats(items)
    print(f"Index: {stats['total']} items ({stats['applications']} apps, {stats['files']} files)")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    service = IndexService(Config.from_env())
    print_summary(service.get_index())

    service.on_index_changed(print_summary)
    service.start_watching()

    print("\nWatching for changes, press Ctrl+C to stop")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        service.stop()
