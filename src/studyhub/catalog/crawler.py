"""Recursive crawler over a repository folder."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

from studyhub.models import MaterialDescriptor, RepositoryCoordinate
from studyhub.remote.contents import GitHubContentsClient, MalformedListingError
from studyhub.utils.files import classify_file
from studyhub.utils.text import normalize_root_path

LOGGER = logging.getLogger(__name__)


class CrawlCancelled(RuntimeError):
    """Raised when a crawl is cancelled before it finished."""


@dataclass(slots=True)
class CrawlStats:
    directories: int = 0
    files: int = 0
    skipped: int = 0


class Crawler:
    """Depth-first traversal producing a flat list of material descriptors."""

    def __init__(self, client: GitHubContentsClient, *, strict: bool = False) -> None:
        self.client = client
        self.strict = strict
        self.last_stats: Optional[CrawlStats] = None

    def crawl(
        self,
        coordinate: RepositoryCoordinate,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[MaterialDescriptor]:
        """Crawl ``coordinate.root_path`` and return every file found under it.

        Directories are visited pre-order, in the order the API lists them.
        Any listing failure aborts the crawl; nothing collected so far is
        returned.
        """
        results: List[MaterialDescriptor] = []
        stats = CrawlStats()
        root = normalize_root_path(coordinate.root_path)

        LOGGER.info(
            "Crawling %s@%s starting at '%s'", coordinate.slug, coordinate.branch, root or "/"
        )
        self._walk(coordinate, root, results, stats, cancel_event)

        self.last_stats = stats
        LOGGER.info(
            "Crawl finished: %d file(s) in %d folder(s), %d skipped listing(s)",
            stats.files,
            stats.directories,
            stats.skipped,
        )
        return results

    def _walk(
        self,
        coordinate: RepositoryCoordinate,
        path: str,
        results: List[MaterialDescriptor],
        stats: CrawlStats,
        cancel_event: Optional[threading.Event],
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise CrawlCancelled(f"Crawl of {coordinate.slug} cancelled at '{path}'")

        LOGGER.debug("Listing %s", path or "/")
        entries = self.client.list_directory(
            coordinate.owner, coordinate.repository, path, coordinate.branch
        )
        stats.directories += 1

        if entries is None:
            if self.strict:
                raise MalformedListingError(
                    None, "malformed directory payload", path=path
                )
            LOGGER.warning("Listing of '%s' is not a directory, skipping", path)
            stats.skipped += 1
            return

        for entry in entries:
            if entry.is_dir:
                self._walk(coordinate, entry.path, results, stats, cancel_event)
            elif entry.is_file:
                results.append(
                    MaterialDescriptor(
                        name=entry.name,
                        path=entry.path,
                        size=entry.size,
                        download_url=entry.download_url,
                        sha=entry.sha,
                        kind=classify_file(entry.name),
                    )
                )
                stats.files += 1
