"""Opens indexed items with the platform's default handler."""

import logging
import os
import subprocess
import sys
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class LaunchResult:
    """Outcome of a launch attempt."""

    ok: bool
    error: str | None = None

    def to_dict(self) -> dict:
        data: dict = {"ok": self.ok}
        if self.error is not None:
            data["error"] = self.error
        return data


def open_path(path: str) -> None:
    """Hand a path to the OS opener without waiting for it. Raises OSError."""
    if sys.platform == "win32":
        os.startfile(path)  # type: ignore[attr-defined]
    elif sys.platform == "darwin":
        subprocess.Popen(["open", path])
    else:
        subprocess.Popen(["xdg-open", path])


def launch_path(path: str, opener=open_path) -> LaunchResult:
    """Start an item. Does not touch the index."""
    if not path:
        return LaunchResult(ok=False, error="no-file")
    try:
        opener(path)
    except OSError as e:
        logger.error("Launch error for %s: %s", path, e)
        return LaunchResult(ok=False, error=str(e))
    return LaunchResult(ok=True)
