"""Data models for the indexer."""

from dataclasses import dataclass, field
from pathlib import Path

KIND_APPLICATION = "application"
KIND_FILE = "file"

DEFAULT_SHORTCUT_EXTENSIONS = frozenset({".lnk", ".url", ".appref-ms", ".desktop"})

DEFAULT_DOCUMENT_EXTENSIONS = frozenset(
    {
        ".txt", ".pdf", ".doc", ".docx", ".xls", ".xlsx",
        ".ppt", ".pptx", ".jpg", ".jpeg", ".png", ".gif",
        ".mp3", ".mp4", ".wav", ".zip", ".rar",
    }
)

DEFAULT_EXCLUDED_DIRS = frozenset({"node_modules", ".git", "AppData"})


def normalize_extension(ext: str) -> str:
    """Lower-case an extension and make sure it has a leading dot."""
    ext = ext.strip().lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext


@dataclass(frozen=True)
class ExtensionSets:
    """Extensions that make a file indexable, split by item kind."""

    shortcuts: frozenset[str] = DEFAULT_SHORTCUT_EXTENSIONS
    documents: frozenset[str] = DEFAULT_DOCUMENT_EXTENSIONS

    @classmethod
    def from_lists(cls, shortcuts, documents) -> "ExtensionSets":
        return cls(
            shortcuts=frozenset(normalize_extension(e) for e in shortcuts),
            documents=frozenset(normalize_extension(e) for e in documents),
        )

    @property
    def allowed(self) -> frozenset[str]:
        return self.shortcuts | self.documents

    def classify(self, ext: str, include_documents: bool = True) -> str | None:
        """Return the item kind for an extension, or None if not indexable.

        Shortcuts always classify as applications. Documents only classify
        when include_documents is set.
        """
        if ext in self.shortcuts:
            return KIND_APPLICATION
        if include_documents and ext in self.documents:
            return KIND_FILE
        return None


@dataclass
class CrawlOptions:
    """Per-root crawl policy."""

    max_depth: int = 5
    include_files: bool = False
    excluded_dirs: frozenset[str] = DEFAULT_EXCLUDED_DIRS


@dataclass
class CrawlRoot:
    """A directory to crawl together with its policy."""

    path: Path
    options: CrawlOptions = field(default_factory=CrawlOptions)


@dataclass
class Item:
    """One indexed launchable entry.

    last_used and mtime are epoch milliseconds. size and mtime are None for
    records produced by a crawl, which does not stat files.
    """

    path: str
    name: str
    ext: str
    kind: str
    launch_count: int = 0
    last_used: int = 0
    size: int | None = None
    mtime: float | None = None

    @classmethod
    def from_path(cls, path: str, kind: str) -> "Item":
        p = Path(path)
        return cls(path=str(path), name=p.stem, ext=p.suffix.lower(), kind=kind)

    def to_dict(self) -> dict:
        """Serialize to the durable snapshot record shape."""
        data = {
            "name": self.name,
            "file": self.path,
            "ext": self.ext,
            "type": self.kind,
            "launchCount": self.launch_count,
            "lastUsed": self.last_used,
        }
        if self.size is not None:
            data["size"] = self.size
        if self.mtime is not None:
            data["mtime"] = self.mtime
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Item | None":
        """Parse a snapshot record. Returns None for records without a path."""
        path = data.get("file")
        if not isinstance(path, str) or not path:
            return None
        p = Path(path)
        return cls(
            path=path,
            name=str(data.get("name") or p.stem),
            ext=str(data.get("ext") or p.suffix.lower()),
            kind=str(data.get("type") or KIND_FILE),
            launch_count=int(data.get("launchCount") or 0),
            last_used=int(data.get("lastUsed") or 0),
            size=data.get("size"),
            mtime=data.get("mtime"),
        )
