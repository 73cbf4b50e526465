"""JSON snapshot persistence for the index.

The snapshot is a single JSON array of item records, rewritten in full on
every mutation. It is a derived artifact: a missing or corrupt snapshot is
never fatal, the caller falls back to an empty index or a full rebuild.
"""

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from launchdex.indexer.models import Item

logger = logging.getLogger(__name__)

SNAPSHOT_FILENAME = "app-index.json"


def merge_items(items: Iterable[Item]) -> dict[str, Item]:
    """Merge items into a path-keyed mapping. The first occurrence of a path wins."""
    mapping: dict[str, Item] = {}
    for item in items:
        if item.path not in mapping:
            mapping[item.path] = item
    return mapping


def read_snapshot(location: Path) -> dict[str, Item] | None:
    """
    Read a snapshot file.

    Returns None when the file is missing or cannot be parsed, so callers can
    tell "no usable snapshot" apart from a valid empty one.
    """
    try:
        raw = location.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read index snapshot %s: %s", location, e)
        return None

    try:
        records = json.loads(raw)
    except ValueError as e:
        logger.warning("Corrupt index snapshot %s: %s", location, e)
        return None

    if not isinstance(records, list):
        logger.warning("Corrupt index snapshot %s: expected a JSON array", location)
        return None

    items: list[Item] = []
    for record in records:
        if not isinstance(record, dict):
            continue
        try:
            item = Item.from_dict(record)
        except (TypeError, ValueError) as e:
            logger.debug("Skipping malformed record in %s: %s", location, e)
            continue
        if item is not None:
            items.append(item)
    return merge_items(items)


def load_snapshot(location: Path) -> dict[str, Item]:
    """Load a snapshot, returning an empty mapping if missing or corrupt."""
    mapping = read_snapshot(location)
    return mapping if mapping is not None else {}


def save_snapshot(location: Path, mapping: dict[str, Item]) -> bool:
    """
    Persist the full mapping, replacing any previous snapshot atomically.

    Failures are logged and reported through the return value; the caller's
    in-memory mapping stays authoritative.
    """
    records = [item.to_dict() for item in mapping.values()]
    tmp_path = None
    try:
        location.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=location.name + ".", suffix=".tmp", dir=location.parent
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2)
        os.replace(tmp_path, location)
        return True
    except OSError as e:
        logger.warning("Failed to write index snapshot %s: %s", location, e)
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        return False
