"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urlparse

from studyhub import __version__
from studyhub.models import RepositoryCoordinate
from studyhub.remote.contents import DEFAULT_API_URL

PAGES_DOMAIN = "github.io"


class ConfigurationMissing(ValueError):
    """Owner or repository are not configured and cannot be inferred."""


def infer_owner_repo(pages_url: Optional[str]) -> Optional[Tuple[str, str]]:
    """Infer owner and repository from a GitHub Pages address.

    ``https://owner.github.io/repo/`` gives ``("owner", "repo")``; a user site
    served from the host root maps to the ``owner.github.io`` repository.
    """
    if not pages_url:
        return None
    parsed = urlparse(pages_url if "//" in pages_url else f"//{pages_url}")
    host = (parsed.hostname or "").lower()
    if not host.endswith(f".{PAGES_DOMAIN}"):
        return None
    owner = host.split(".")[0]
    parts = [part for part in parsed.path.split("/") if part]
    repository = parts[0] if parts else f"{owner}.{PAGES_DOMAIN}"
    return owner, repository


@dataclass(slots=True)
class AppConfig:
    owner: Optional[str] = None
    repository: Optional[str] = None
    branch: str = "main"
    materials_path: str = "materials"
    api_url: str = DEFAULT_API_URL
    timeout: float = 30.0
    user_agent: str = f"studyhub/{__version__}"

    def coordinate(self, pages_url: Optional[str] = None) -> RepositoryCoordinate:
        """Resolve the repository to crawl.

        Missing owner or repository are inferred from ``pages_url`` when it is a
        GitHub Pages address; otherwise ``ConfigurationMissing`` is raised.
        """
        owner, repository = self.owner, self.repository
        if not owner or not repository:
            inferred = infer_owner_repo(pages_url)
            if inferred is None:
                raise ConfigurationMissing(
                    "Repository details not found. Provide an owner and a repository name."
                )
            owner = owner or inferred[0]
            repository = repository or inferred[1]
        return RepositoryCoordinate(
            owner=owner,
            repository=repository,
            branch=self.branch or "main",
            root_path=self.materials_path,
        )
