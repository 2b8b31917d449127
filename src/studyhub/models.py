"""Core StudyHub data models."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

UNCATEGORIZED = "Uncategorized"


class MaterialKind(str, Enum):
    """Coarse content type of a material."""

    IMAGE = "image"
    PDF = "pdf"
    VIDEO = "video"
    DOCUMENT = "document"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class RepositoryCoordinate:
    """Identifies the remote content tree to crawl."""

    owner: str
    repository: str
    branch: str = "main"
    root_path: str = "materials"

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repository}"


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """One element of a single directory listing."""

    name: str
    path: str
    entry_kind: str
    size: int = 0
    sha: str = ""
    download_url: Optional[str] = None

    @property
    def is_dir(self) -> bool:
        return self.entry_kind == "dir"

    @property
    def is_file(self) -> bool:
        return self.entry_kind == "file"

    @classmethod
    def from_payload(cls, item: Dict[str, Any]) -> "DirectoryEntry":
        return cls(
            name=str(item.get("name", "")),
            path=str(item.get("path", "")),
            entry_kind=str(item.get("type", "")),
            size=int(item.get("size") or 0),
            sha=str(item.get("sha") or ""),
            download_url=item.get("download_url"),
        )


@dataclass(frozen=True, slots=True)
class MaterialDescriptor:
    """A single file of the catalog.

    ``subject`` stays ``None`` until the catalog builder attaches it.
    """

    name: str
    path: str
    size: int
    download_url: Optional[str]
    sha: str
    kind: MaterialKind
    subject: Optional[str] = None

    def with_subject(self, subject: str) -> "MaterialDescriptor":
        return replace(self, subject=subject)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "size": self.size,
            "download_url": self.download_url,
            "sha": self.sha,
            "kind": self.kind.value,
            "subject": self.subject,
        }
