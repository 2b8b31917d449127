"""Visibility rules combining search text, subject and kind."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from studyhub.models import MaterialDescriptor, MaterialKind
from studyhub.utils.text import normalize_search_text

# pdf and generic documents share one filter bucket
_KIND_BUCKETS = {
    MaterialKind.PDF: frozenset({MaterialKind.PDF, MaterialKind.DOCUMENT}),
    MaterialKind.IMAGE: frozenset({MaterialKind.IMAGE}),
    MaterialKind.VIDEO: frozenset({MaterialKind.VIDEO}),
    MaterialKind.OTHER: frozenset({MaterialKind.OTHER}),
    MaterialKind.DOCUMENT: frozenset({MaterialKind.DOCUMENT}),
}


@dataclass(frozen=True, slots=True)
class FilterState:
    search_text: str = ""
    subject: Optional[str] = None
    kind: Optional[MaterialKind] = None

    @classmethod
    def from_raw(
        cls,
        search_text: Optional[str] = None,
        subject: Optional[str] = None,
        kind: Optional[str] = None,
    ) -> "FilterState":
        """Build a state from form values, treating blanks as unset.

        Raises ``ValueError`` for an unknown kind.
        """
        subject = (subject or "").strip() or None
        kind_value = (kind or "").strip().lower()
        return cls(
            search_text=search_text or "",
            subject=subject,
            kind=MaterialKind(kind_value) if kind_value else None,
        )

    @property
    def is_empty(self) -> bool:
        return not normalize_search_text(self.search_text) and not self.subject and self.kind is None


def matches_text(item: MaterialDescriptor, search_text: str) -> bool:
    query = normalize_search_text(search_text)
    return not query or query in item.name.lower()


def matches_subject(item: MaterialDescriptor, subject: Optional[str]) -> bool:
    return not subject or item.subject == subject


def matches_kind(item: MaterialDescriptor, kind: Optional[MaterialKind]) -> bool:
    if kind is None:
        return True
    return item.kind in _KIND_BUCKETS[MaterialKind(kind)]


def is_visible(item: MaterialDescriptor, state: FilterState) -> bool:
    return (
        matches_text(item, state.search_text)
        and matches_subject(item, state.subject)
        and matches_kind(item, state.kind)
    )


def filter_catalog(catalog: Iterable[MaterialDescriptor], state: FilterState) -> List[MaterialDescriptor]:
    """Return the visible entries, keeping catalog order."""
    return [item for item in catalog if is_visible(item, state)]
