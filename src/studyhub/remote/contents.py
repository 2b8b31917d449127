"""Client for the GitHub repository contents API."""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import quote

import httpx

from studyhub.models import DirectoryEntry

LOGGER = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
GITHUB_MEDIA_TYPE = "application/vnd.github+json"


class RemoteListingError(RuntimeError):
    """A directory listing call failed (bad status or transport failure)."""

    def __init__(
        self,
        status_code: Optional[int],
        status_text: str,
        body: str = "",
        *,
        path: str = "",
    ) -> None:
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        self.path = path
        message = f"GitHub API error: {status_text}"
        if status_code is not None:
            message = f"GitHub API error: {status_code} {status_text}"
        if body:
            message = f"{message} - {body}"
        super().__init__(message)

    def to_detail(self) -> dict:
        return {
            "status_code": self.status_code,
            "status_text": self.status_text,
            "body": self.body,
            "path": self.path,
            "message": str(self),
        }


class MalformedListingError(RemoteListingError):
    """A listing call succeeded but did not return an array of entries."""


class GitHubContentsClient:
    """Thin wrapper around ``GET /repos/{owner}/{repo}/contents/{path}``."""

    def __init__(
        self,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        user_agent: str = "studyhub",
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self._client = httpx.Client(
            headers={"Accept": GITHUB_MEDIA_TYPE, "User-Agent": user_agent},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubContentsClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def contents_url(self, owner: str, repository: str, path: str) -> str:
        quoted = quote(path.strip("/"), safe="/")
        return f"{self.api_url}/repos/{quote(owner, safe='')}/{quote(repository, safe='')}/contents/{quoted}"

    def list_directory(
        self, owner: str, repository: str, path: str, ref: str = "main"
    ) -> Optional[List[DirectoryEntry]]:
        """List one directory.

        Returns ``None`` when the payload is not an array, which happens when
        ``path`` points at a single file or the API answered with an object.
        """
        url = self.contents_url(owner, repository, path)
        try:
            response = self._client.get(url, params={"ref": ref})
        except httpx.HTTPError as exc:
            raise RemoteListingError(None, str(exc) or type(exc).__name__, path=path) from exc

        if not response.is_success:
            raise RemoteListingError(
                response.status_code,
                response.reason_phrase,
                response.text,
                path=path,
            )

        try:
            payload = response.json()
        except ValueError:
            LOGGER.warning("Listing of %s is not valid JSON", path or "/")
            return None

        if not isinstance(payload, list):
            return None
        return [DirectoryEntry.from_payload(item) for item in payload if isinstance(item, dict)]
