"""Data models and fixed messages for repository evidence collection."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional, Tuple

SOURCE_EXTENSIONS: Tuple[str, ...] = (
    "ts", "tsx", "js", "jsx", "py", "java", "c", "cpp", "html", "css", "json", "md",
)

NO_VALID_URL = "No valid GitHub URL provided."
INVALID_URL_FORMAT = "Invalid GitHub URL format."
EMPTY_REPOSITORY = "Repository appears empty."
FILE_START = "--- START OF FILE: {name} ---"
FILE_END = "--- END OF FILE ---"
DOWNLOAD_ERROR = "[Error downloading file: {name}]"
LISTING_HEADER = "ROOT DIRECTORY LISTING:"


@dataclass(frozen=True)
class RepositoryPolicy:
    """Caps and knobs that keep repository evidence small and predictable."""

    api_base: str = "https://api.github.com"
    host_marker: str = "github.com"
    max_source_files: int = 3
    max_file_chars: int = 5000
    timeout_seconds: float = 30.0
    source_extensions: Tuple[str, ...] = SOURCE_EXTENSIONS

    @classmethod
    def from_overrides(cls, overrides: Optional[Mapping[str, Any]]) -> "RepositoryPolicy":
        """Apply configuration overrides to the default policy, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in (overrides or {}).items():
            if key in known:
                kwargs[key] = tuple(value) if key == "source_extensions" else value
        return cls(**kwargs)


@dataclass
class RepositoryEntry:
    """One item from the repository root listing."""

    name: str
    type: str
    download_url: Optional[str] = None

    @property
    def extension(self) -> str:
        return self.name.rsplit(".", 1)[-1].lower() if "." in self.name else ""


@dataclass
class FetchedFile:
    name: str
    content: Optional[str] = None

    def as_block(self) -> str:
        if self.content is None:
            return DOWNLOAD_ERROR.format(name=self.name)
        return "\n".join([
            FILE_START.format(name=self.name),
            self.content,
            FILE_END,
        ])


@dataclass
class RepositorySnapshot:
    """Selected files plus the full root listing of a repository."""

    owner: str
    repo: str
    entries: List[RepositoryEntry] = field(default_factory=list)
    files: List[FetchedFile] = field(default_factory=list)

    def render(self) -> str:
        """Render the snapshot as evidence text: file blocks, then the root listing."""
        blocks = [f.as_block() for f in self.files]
        if self.entries:
            listing = "\n".join(f"- {entry.name} ({entry.type})" for entry in self.entries)
        else:
            listing = EMPTY_REPOSITORY
        blocks.append(f"{LISTING_HEADER}\n{listing}")
        return "\n\n".join(blocks)
