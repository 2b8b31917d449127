"""Text helpers for search terms and repository paths."""

from __future__ import annotations

from typing import List, Optional


def normalize_search_text(text: Optional[str]) -> str:
    """Lowercase and trim free-text search input."""
    return (text or "").lower().strip()


def normalize_root_path(path: Optional[str]) -> str:
    """Strip surrounding slashes; an empty result means the repository root."""
    return (path or "").strip().strip("/")


def split_path(path: str) -> List[str]:
    """Split a repository path on ``/`` dropping empty segments."""
    return [part for part in path.split("/") if part]
