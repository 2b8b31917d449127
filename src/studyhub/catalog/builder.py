"""Subject derivation and catalog ordering."""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Sequence, Tuple

from studyhub.models import UNCATEGORIZED, MaterialDescriptor
from studyhub.utils.files import format_bytes
from studyhub.utils.text import normalize_root_path, split_path

ALL_SUBJECTS_LABEL = "All subjects"


def derive_subject(path: str, root_path: str) -> str:
    """Return the first folder below ``root_path``, or ``Uncategorized``."""
    root = normalize_root_path(root_path)
    remainder = path
    if root and (path == root or path.startswith(root + "/")):
        remainder = path[len(root) :]
    parts = split_path(remainder)
    # the last segment is the file itself
    if len(parts) <= 1:
        return UNCATEGORIZED
    return parts[0]


def attach_subjects(
    descriptors: Iterable[MaterialDescriptor], root_path: str
) -> Tuple[List[MaterialDescriptor], FrozenSet[str]]:
    catalog = [item.with_subject(derive_subject(item.path, root_path)) for item in descriptors]
    return catalog, collect_subjects(catalog)


def collect_subjects(descriptors: Iterable[MaterialDescriptor]) -> FrozenSet[str]:
    return frozenset(item.subject for item in descriptors if item.subject is not None)


def build_catalog(
    descriptors: Sequence[MaterialDescriptor], root_path: str
) -> Tuple[List[MaterialDescriptor], List[str]]:
    """Attach subjects and order the catalog for presentation.

    Entries are sorted by subject then name; subjects are sorted
    lexicographically. An empty input gives an empty catalog.
    """
    catalog, subjects = attach_subjects(descriptors, root_path)
    catalog.sort(key=lambda item: (item.subject, item.name))
    return catalog, sorted(subjects)


def subject_options(subjects: Iterable[str]) -> List[Tuple[str, str]]:
    """Subject choices for a selector, with the unconstrained option first."""
    return [("", ALL_SUBJECTS_LABEL)] + [(subject, subject) for subject in sorted(subjects)]


def describe(item: MaterialDescriptor) -> str:
    """Meta line shown under a material name."""
    subject = item.subject or UNCATEGORIZED
    return f"{subject} • {item.kind.value.upper()} • {format_bytes(item.size)}"


def status_message(count: int) -> str:
    if not count:
        return "No materials found in the repository path."
    return f"{count} material(s) available"
