"""Shared fixtures: an in-memory GitHub contents API."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List

import httpx
import pytest

from studyhub.remote.contents import GitHubContentsClient


def file_entry(path: str, size: int = 100) -> Dict[str, Any]:
    name = path.rsplit("/", 1)[-1]
    return {
        "name": name,
        "path": path,
        "type": "file",
        "size": size,
        "sha": f"sha-{name}",
        "download_url": f"https://raw.githubusercontent.com/octo/notes/main/{path}",
    }


def dir_entry(path: str) -> Dict[str, Any]:
    return {
        "name": path.rsplit("/", 1)[-1],
        "path": path,
        "type": "dir",
        "size": 0,
        "sha": f"sha-{path}",
        "download_url": None,
    }


class FakeContentsApi:
    """Serves listings from a ``{path: payload}`` mapping.

    A payload may be a list of entries, any other JSON value, or an
    ``httpx.Response`` returned as is. Unknown paths answer 404.
    """

    def __init__(self, tree: Dict[str, Any]) -> None:
        self.tree = tree
        self.requests: List[httpx.Request] = []

    @property
    def listed_paths(self) -> List[str]:
        return [_contents_path(request) for request in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = _contents_path(request)
        if path not in self.tree:
            return httpx.Response(404, json={"message": "Not Found"})
        payload = self.tree[path]
        if isinstance(payload, httpx.Response):
            return payload
        return httpx.Response(200, json=payload)


def _contents_path(request: httpx.Request) -> str:
    return request.url.path.split("/contents", 1)[1].strip("/")


@pytest.fixture
def fake_api() -> Callable[[Dict[str, Any]], FakeContentsApi]:
    return FakeContentsApi


@pytest.fixture
def make_client() -> Iterator[Callable[[FakeContentsApi], GitHubContentsClient]]:
    clients: List[GitHubContentsClient] = []

    def _make(api: FakeContentsApi) -> GitHubContentsClient:
        client = GitHubContentsClient(transport=httpx.MockTransport(api))
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def sample_tree() -> Dict[str, Any]:
    return {
        "materials": [
            dir_entry("materials/Math"),
            file_entry("materials/readme.txt", size=12),
        ],
        "materials/Math": [
            file_entry("materials/Math/notes.png", size=2048),
            file_entry("materials/Math/algebra.pdf", size=1536),
        ],
    }
