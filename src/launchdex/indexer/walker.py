"""Directory crawler for discovering launchable items."""

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from launchdex.indexer.models import CrawlOptions, CrawlRoot, ExtensionSets, Item

logger = logging.getLogger(__name__)


def walk_root(
    root: Path,
    options: CrawlOptions,
    extensions: ExtensionSets | None = None,
) -> Iterator[Item]:
    """
    Walk a single root and yield an Item for each indexable file.

    The root itself is depth 0. A directory whose depth exceeds
    options.max_depth is never read, so nothing below it is yielded, but its
    siblings are unaffected. Directories named in options.excluded_dirs are
    skipped entirely. Symlinked directories are not followed.

    A directory that cannot be read is logged and treated as empty.
    """
    extensions = extensions or ExtensionSets()
    root = Path(os.path.abspath(root))
    if not os.path.isdir(root):
        logger.debug("Skipping missing or unusable crawl root: %s", root)
        return

    # Explicit worklist instead of recursion; each entry carries its depth
    stack: list[tuple[Path, int]] = [(root, 0)]
    while stack:
        directory, depth = stack.pop()
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.warning("Failed to read directory %s: %s", directory, e)
            continue

        subdirs: list[Path] = []
        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                is_dir = False

            if is_dir:
                if entry.name in options.excluded_dirs:
                    continue
                if depth + 1 <= options.max_depth:
                    subdirs.append(Path(entry.path))
                continue

            ext = os.path.splitext(entry.name)[1].lower()
            kind = extensions.classify(ext, include_documents=options.include_files)
            if kind is not None:
                yield Item.from_path(entry.path, kind)

        # Reverse so the sorted order is preserved when popping
        stack.extend((d, depth + 1) for d in reversed(subdirs))


def crawl(
    roots: Iterable[CrawlRoot],
    extensions: ExtensionSets | None = None,
) -> list[Item]:
    """Crawl every root and return the flat list of candidate items.

    Duplicates across overlapping roots are kept here; callers merge by path.
    """
    items: list[Item] = []
    for root in roots:
        found = list(walk_root(root.path, root.options, extensions))
        logger.debug("Crawled %s: %d items", root.path, len(found))
        items.extend(found)
    return items
