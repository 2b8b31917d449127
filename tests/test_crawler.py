"""Tests for the repository crawler."""

from __future__ import annotations

import logging
import threading
from unittest.mock import MagicMock

import httpx
import pytest

from conftest import dir_entry, file_entry
from studyhub.catalog.crawler import CrawlCancelled, Crawler, CrawlStats
from studyhub.models import MaterialKind, RepositoryCoordinate
from studyhub.remote.contents import MalformedListingError, RemoteListingError

COORDINATE = RepositoryCoordinate(owner="octo", repository="notes", branch="main", root_path="materials")


class TestCrawlStats:
    def test_init_defaults(self) -> None:
        stats = CrawlStats()
        assert (stats.directories, stats.files, stats.skipped) == (0, 0, 0)


class TestCrawler:
    """Test Crawler traversal."""

    def test_scenario_tree(self, fake_api, make_client, sample_tree) -> None:
        """Should collect every file with its kind and no subject yet."""
        crawler = Crawler(make_client(fake_api(sample_tree)))

        results = crawler.crawl(COORDINATE)

        assert [item.name for item in results] == ["notes.png", "algebra.pdf", "readme.txt"]
        assert [item.kind for item in results] == [
            MaterialKind.IMAGE,
            MaterialKind.PDF,
            MaterialKind.DOCUMENT,
        ]
        assert all(item.subject is None for item in results)
        assert results[1].size == 1536
        assert results[1].download_url.endswith("materials/Math/algebra.pdf")
        assert results[1].sha == "sha-algebra.pdf"

    def test_pre_order_keeps_listing_order(self, fake_api, make_client) -> None:
        """Should descend into a folder before its later siblings."""
        tree = {
            "materials": [
                file_entry("materials/z-first.txt"),
                dir_entry("materials/B"),
                file_entry("materials/a-last.txt"),
                dir_entry("materials/A"),
            ],
            "materials/B": [dir_entry("materials/B/deep"), file_entry("materials/B/b.pdf")],
            "materials/B/deep": [file_entry("materials/B/deep/d.png")],
            "materials/A": [file_entry("materials/A/a.mp4")],
        }
        api = fake_api(tree)

        results = Crawler(make_client(api)).crawl(COORDINATE)

        assert [item.path for item in results] == [
            "materials/z-first.txt",
            "materials/B/deep/d.png",
            "materials/B/b.pdf",
            "materials/a-last.txt",
            "materials/A/a.mp4",
        ]
        assert api.listed_paths == ["materials", "materials/B", "materials/B/deep", "materials/A"]

    def test_one_call_per_directory(self, fake_api, make_client, sample_tree) -> None:
        api = fake_api(sample_tree)
        crawler = Crawler(make_client(api))

        crawler.crawl(COORDINATE)

        assert len(api.requests) == 2
        assert crawler.last_stats == CrawlStats(directories=2, files=3, skipped=0)

    def test_paths_start_with_root_and_are_unique(self, fake_api, make_client, sample_tree) -> None:
        results = Crawler(make_client(fake_api(sample_tree))).crawl(COORDINATE)

        paths = [item.path for item in results]
        assert all(path.startswith("materials") for path in paths)
        assert len(paths) == len(set(paths))

    def test_empty_root(self, fake_api, make_client) -> None:
        """Should return an empty list, not fail."""
        results = Crawler(make_client(fake_api({"materials": []}))).crawl(COORDINATE)

        assert results == []

    def test_ignores_other_entry_types(self, fake_api, make_client) -> None:
        tree = {
            "materials": [
                {"name": "link", "path": "materials/link", "type": "symlink", "size": 4},
                file_entry("materials/a.pdf"),
            ]
        }

        results = Crawler(make_client(fake_api(tree))).crawl(COORDINATE)

        assert [item.name for item in results] == ["a.pdf"]

    def test_non_array_listing_is_skipped(self, fake_api, make_client, caplog) -> None:
        """Should treat a non-directory payload as an empty branch."""
        tree = {
            "materials": [dir_entry("materials/odd"), file_entry("materials/a.pdf")],
            "materials/odd": {"message": "This is not a folder"},
        }
        crawler = Crawler(make_client(fake_api(tree)))

        with caplog.at_level(logging.WARNING, logger="studyhub.catalog.crawler"):
            results = crawler.crawl(COORDINATE)

        assert [item.name for item in results] == ["a.pdf"]
        assert crawler.last_stats.skipped == 1
        assert "materials/odd" in caplog.text

    def test_strict_mode_rejects_non_array_listing(self, fake_api, make_client) -> None:
        tree = {"materials": {"type": "file", "name": "materials"}}
        crawler = Crawler(make_client(fake_api(tree)), strict=True)

        with pytest.raises(MalformedListingError, match="malformed directory payload"):
            crawler.crawl(COORDINATE)

    def test_root_not_found_aborts(self, fake_api, make_client) -> None:
        """Should propagate a 404 on the root listing."""
        crawler = Crawler(make_client(fake_api({})))

        with pytest.raises(RemoteListingError) as excinfo:
            crawler.crawl(COORDINATE)

        assert excinfo.value.status_code == 404
        assert crawler.last_stats is None

    def test_nested_failure_aborts_whole_crawl(self, fake_api, make_client) -> None:
        """Should discard files found before the failing folder."""
        tree = {
            "materials": [
                file_entry("materials/a.pdf"),
                dir_entry("materials/Broken"),
                file_entry("materials/b.pdf"),
            ],
            "materials/Broken": httpx.Response(500, text="boom"),
        }
        api = fake_api(tree)

        with pytest.raises(RemoteListingError, match="500"):
            Crawler(make_client(api)).crawl(COORDINATE)

        assert api.listed_paths == ["materials", "materials/Broken"]

    def test_root_path_slashes_normalized(self, fake_api, make_client, sample_tree) -> None:
        api = fake_api(sample_tree)
        coordinate = RepositoryCoordinate("octo", "notes", "main", "/materials/")

        results = Crawler(make_client(api)).crawl(coordinate)

        assert api.listed_paths[0] == "materials"
        assert len(results) == 3

    def test_uses_branch_as_ref(self) -> None:
        client = MagicMock()
        client.list_directory.return_value = []
        coordinate = RepositoryCoordinate("octo", "notes", "dev", "docs")

        Crawler(client).crawl(coordinate)

        client.list_directory.assert_called_once_with("octo", "notes", "docs", "dev")

    def test_cancelled_before_start(self, fake_api, make_client, sample_tree) -> None:
        api = fake_api(sample_tree)
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(CrawlCancelled):
            Crawler(make_client(api)).crawl(COORDINATE, cancel_event=cancel)

        assert api.requests == []

    def test_cancelled_mid_crawl(self) -> None:
        """Should stop before the next remote call once cancelled."""
        cancel = threading.Event()
        client = MagicMock()

        def list_directory(owner, repository, path, ref):
            cancel.set()
            return [MagicMock(is_dir=True, is_file=False, path="materials/Math")]

        client.list_directory.side_effect = list_directory

        with pytest.raises(CrawlCancelled):
            Crawler(client).crawl(COORDINATE, cancel_event=cancel)

        assert client.list_directory.call_count == 1
