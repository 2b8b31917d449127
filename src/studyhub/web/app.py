"""FastAPI application backing the StudyHub web UI."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from studyhub import __version__
from studyhub.catalog.builder import build_catalog, describe, status_message, subject_options
from studyhub.catalog.crawler import CrawlCancelled, Crawler
from studyhub.catalog.filters import FilterState, filter_catalog
from studyhub.config import AppConfig, ConfigurationMissing
from studyhub.models import MaterialDescriptor, RepositoryCoordinate
from studyhub.remote.contents import GitHubContentsClient, RemoteListingError
from studyhub.utils.files import format_bytes, preview_mode
from studyhub.web.frontend import router as frontend_router

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="StudyHub Web", version=__version__)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(frontend_router)


class CrawlPayload(BaseModel):
    owner: str | None = None
    repository: str | None = None
    branch: str | None = None
    path: str | None = None
    pages_url: str | None = None
    strict: bool = False


@dataclass
class CatalogSession:
    """Catalog currently shown by the UI.

    Starting a crawl cancels the one in flight; a crawl that finishes after a
    newer one started is discarded.
    """

    coordinate: Optional[RepositoryCoordinate] = None
    catalog: List[MaterialDescriptor] = field(default_factory=list)
    subjects: List[str] = field(default_factory=list)
    generation: int = 0
    _cancel_event: Optional[threading.Event] = None
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def begin(self) -> Tuple[int, threading.Event]:
        with self._lock:
            if self._cancel_event is not None:
                self._cancel_event.set()
            self.generation += 1
            self._cancel_event = threading.Event()
            return self.generation, self._cancel_event

    def publish(
        self,
        generation: int,
        coordinate: RepositoryCoordinate,
        catalog: List[MaterialDescriptor],
        subjects: List[str],
    ) -> bool:
        with self._lock:
            if generation != self.generation:
                return False
            self.coordinate = coordinate
            self.catalog = catalog
            self.subjects = subjects
            self._cancel_event = None
            return True

    @property
    def loaded(self) -> bool:
        return self.coordinate is not None

    def reset(self) -> None:
        """Cancel any crawl in flight and forget the published catalog."""
        with self._lock:
            if self._cancel_event is not None:
                self._cancel_event.set()
            self.coordinate = None
            self.catalog = []
            self.subjects = []
            self._cancel_event = None


session = CatalogSession()


def _resolve_config(payload: CrawlPayload) -> AppConfig:
    defaults = AppConfig()
    return AppConfig(
        owner=payload.owner or None,
        repository=payload.repository or None,
        branch=payload.branch or defaults.branch,
        materials_path=payload.path if payload.path is not None else defaults.materials_path,
    )


def _serialize(item: MaterialDescriptor) -> dict[str, Any]:
    data = item.to_dict()
    data["size_label"] = format_bytes(item.size)
    data["meta"] = describe(item)
    data["preview"] = preview_mode(item.kind)
    return data


def _run_crawl_job(
    coordinate: RepositoryCoordinate,
    config: AppConfig,
    strict: bool,
    cancel_event: threading.Event,
) -> Tuple[List[MaterialDescriptor], List[str]]:
    client = GitHubContentsClient(
        api_url=config.api_url, timeout=config.timeout, user_agent=config.user_agent
    )
    try:
        descriptors = Crawler(client, strict=strict).crawl(coordinate, cancel_event=cancel_event)
    finally:
        client.close()
    return build_catalog(descriptors, coordinate.root_path)


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.post("/crawl")
async def crawl_materials(payload: CrawlPayload) -> dict[str, Any]:
    config = _resolve_config(payload)
    try:
        coordinate = config.coordinate(payload.pages_url)
    except ConfigurationMissing as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    generation, cancel_event = session.begin()
    try:
        catalog, subjects = await asyncio.to_thread(
            _run_crawl_job, coordinate, config, payload.strict, cancel_event
        )
    except RemoteListingError as exc:
        LOGGER.error("Crawl of %s failed: %s", coordinate.slug, exc)
        raise HTTPException(status_code=502, detail=exc.to_detail()) from exc
    except CrawlCancelled as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    if not session.publish(generation, coordinate, catalog, subjects):
        LOGGER.info("Discarding stale crawl of %s", coordinate.slug)
        raise HTTPException(status_code=409, detail="Crawl superseded by a newer one")

    return {
        "status": "ok",
        "repository": coordinate.slug,
        "branch": coordinate.branch,
        "path": coordinate.root_path,
        "count": len(catalog),
        "message": status_message(len(catalog)),
        "materials": [_serialize(item) for item in catalog],
        "subjects": subjects,
    }


@app.get("/materials")
async def list_materials(
    q: str = "", subject: str | None = None, type: str | None = None
) -> dict[str, Any]:
    """Filter the current catalog without crawling again."""
    if not session.loaded:
        raise HTTPException(status_code=404, detail="No catalog loaded, crawl a repository first")
    try:
        state = FilterState.from_raw(q, subject, type)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Unknown type: {type}") from exc

    visible = session.catalog if state.is_empty else filter_catalog(session.catalog, state)
    return {
        "filtered": not state.is_empty,
        "count": len(visible),
        "total": len(session.catalog),
        "materials": [_serialize(item) for item in visible],
    }


@app.get("/subjects")
async def list_subjects() -> dict[str, Any]:
    return {
        "subjects": session.subjects,
        "options": [{"value": value, "label": label} for value, label in subject_options(session.subjects)],
    }
