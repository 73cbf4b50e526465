"""Configuration module for launchdex.

Loads configuration from environment variables with platform-specific
defaults. An optional YAML profile (LAUNCHDEX_PROFILE) can override the
defaults; environment variables override the profile.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

import yaml

from launchdex.indexer.models import (
    DEFAULT_DOCUMENT_EXTENSIONS,
    DEFAULT_EXCLUDED_DIRS,
    DEFAULT_SHORTCUT_EXTENSIONS,
    CrawlOptions,
    CrawlRoot,
    ExtensionSets,
)
from launchdex.indexer.store import SNAPSHOT_FILENAME

USER_CONTENT_DIRS = ("Desktop", "Documents", "Downloads", "Pictures", "Music", "Videos")

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _home() -> Path:
    if sys.platform == "win32" and os.getenv("USERPROFILE"):
        return Path(os.environ["USERPROFILE"])
    return Path.home()


def default_data_dir() -> Path:
    """Per-user data directory for the snapshot."""
    if sys.platform == "win32":
        base = os.getenv("APPDATA") or str(_home() / "AppData" / "Roaming")
        return Path(base) / "launchdex"
    if sys.platform == "darwin":
        return _home() / "Library" / "Application Support" / "launchdex"
    base = os.getenv("XDG_DATA_HOME") or str(_home() / ".local" / "share")
    return Path(base) / "launchdex"


def default_shortcut_dirs() -> list[Path]:
    """Application menu folders for the current platform."""
    if sys.platform == "win32":
        program_data = os.getenv("ProgramData", r"C:\ProgramData")
        dirs = [Path(program_data) / "Microsoft" / "Windows" / "Start Menu" / "Programs"]
        if os.getenv("APPDATA"):
            dirs.append(
                Path(os.environ["APPDATA"]) / "Microsoft" / "Windows" / "Start Menu" / "Programs"
            )
        return dirs
    return [
        Path("/usr/share/applications"),
        _home() / ".local" / "share" / "applications",
    ]


def default_file_dirs() -> list[Path]:
    """User content folders (documents, downloads, pictures, ...)."""
    home = _home()
    return [home / name for name in USER_CONTENT_DIRS]


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid {name} value '{value}': expected true or false")


def _parse_int(name: str, value, minimum: int) -> int:
    try:
        parsed = int(value)
        if parsed < minimum:
            raise ValueError(f"must be >= {minimum}, got {parsed}")
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid {name} value '{value}': {e}") from e
    return parsed


def _parse_dirs(value) -> list[Path]:
    if isinstance(value, str):
        value = [part for part in value.split(os.pathsep) if part.strip()]
    return [Path(str(part)).expanduser().absolute() for part in value]


def _parse_names(value) -> frozenset[str]:
    if isinstance(value, str):
        return frozenset([value])
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise ValueError(
            f"Invalid excluded_dirs value '{value}': expected a name or a list of names"
        )
    return frozenset(str(name) for name in value)


def load_profile(path: Path) -> dict:
    """Load a YAML profile. Raises ValueError if it is unreadable or not a mapping."""
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ValueError(f"Invalid LAUNCHDEX_PROFILE '{path}': {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid LAUNCHDEX_PROFILE '{path}': expected a mapping")
    return raw


@dataclass
class Config:
    """Application configuration."""

    data_dir: Path
    index_path: Path
    host: str
    port: int
    shortcut_dirs: list[Path]
    file_dirs: list[Path]
    shortcut_depth: int
    file_depth: int
    extensions: ExtensionSets
    excluded_dirs: frozenset[str]
    settle_ms: int
    preserve_usage: bool
    watch_enabled: bool
    watch_polling: bool

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from the profile and environment variables."""
        profile: dict = {}
        profile_path = os.getenv("LAUNCHDEX_PROFILE")
        if profile_path:
            profile = load_profile(Path(profile_path).expanduser())

        data_dir = Path(os.getenv("LAUNCHDEX_DATA_DIR", str(default_data_dir()))).expanduser()
        default_index = str(data_dir / SNAPSHOT_FILENAME)
        index_path = Path(os.getenv("LAUNCHDEX_INDEX", default_index)).expanduser()

        host = os.getenv("LAUNCHDEX_HOST", "127.0.0.1")
        port_str = os.getenv("LAUNCHDEX_PORT", "8080")
        try:
            port = int(port_str)
            if not 1 <= port <= 65535:
                raise ValueError(f"Port must be between 1 and 65535, got {port}")
        except ValueError as e:
            raise ValueError(f"Invalid LAUNCHDEX_PORT value '{port_str}': {e}") from e

        shortcut_dirs = _parse_dirs(
            os.getenv("LAUNCHDEX_SHORTCUT_DIRS")
            or profile.get("shortcut_dirs")
            or default_shortcut_dirs()
        )
        file_dirs = _parse_dirs(
            os.getenv("LAUNCHDEX_FILE_DIRS") or profile.get("file_dirs") or default_file_dirs()
        )

        shortcut_depth = _parse_int(
            "LAUNCHDEX_SHORTCUT_DEPTH",
            os.getenv("LAUNCHDEX_SHORTCUT_DEPTH", profile.get("shortcut_depth", 5)),
            minimum=0,
        )
        file_depth = _parse_int(
            "LAUNCHDEX_FILE_DEPTH",
            os.getenv("LAUNCHDEX_FILE_DEPTH", profile.get("file_depth", 3)),
            minimum=0,
        )
        settle_ms = _parse_int(
            "LAUNCHDEX_SETTLE_MS",
            os.getenv("LAUNCHDEX_SETTLE_MS", profile.get("settle_ms", 700)),
            minimum=1,
        )

        extensions = ExtensionSets.from_lists(
            profile.get("shortcut_extensions", DEFAULT_SHORTCUT_EXTENSIONS),
            profile.get("document_extensions", DEFAULT_DOCUMENT_EXTENSIONS),
        )
        excluded_dirs = _parse_names(profile.get("excluded_dirs", DEFAULT_EXCLUDED_DIRS))

        preserve_env = os.getenv("LAUNCHDEX_PRESERVE_USAGE")
        preserve_usage = profile.get("preserve_usage", True)
        if preserve_env is not None:
            preserve_usage = _parse_bool("LAUNCHDEX_PRESERVE_USAGE", preserve_env)
        elif isinstance(preserve_usage, str):
            preserve_usage = _parse_bool("preserve_usage", preserve_usage)

        watch_enabled = _parse_bool("LAUNCHDEX_WATCH", os.getenv("LAUNCHDEX_WATCH", "true"))
        watch_polling = _parse_bool(
            "LAUNCHDEX_WATCH_POLLING", os.getenv("LAUNCHDEX_WATCH_POLLING", "false")
        )

        return cls(
            data_dir=data_dir,
            index_path=index_path,
            host=host,
            port=port,
            shortcut_dirs=shortcut_dirs,
            file_dirs=file_dirs,
            shortcut_depth=shortcut_depth,
            file_depth=file_depth,
            extensions=extensions,
            excluded_dirs=excluded_dirs,
            settle_ms=settle_ms,
            preserve_usage=preserve_usage,
            watch_enabled=watch_enabled,
            watch_polling=watch_polling,
        )

    def crawl_roots(self) -> list[CrawlRoot]:
        """Roots for a full rebuild: a shortcuts-only sweep and a files sweep."""
        shortcut_options = CrawlOptions(
            max_depth=self.shortcut_depth,
            include_files=False,
            excluded_dirs=self.excluded_dirs,
        )
        file_options = CrawlOptions(
            max_depth=self.file_depth,
            include_files=True,
            excluded_dirs=self.excluded_dirs,
        )
        return [CrawlRoot(d, shortcut_options) for d in self.shortcut_dirs] + [
            CrawlRoot(d, file_options) for d in self.file_dirs
        ]
