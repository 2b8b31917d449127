"""Static HTML frontend for the StudyHub web UI."""

from __future__ import annotations

from html import escape
from importlib.resources import files
from typing import Dict, Optional

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from studyhub.config import AppConfig

router = APIRouter()


def _load_template() -> str:
    template = files("studyhub.web").joinpath("templates", "index.html")
    return template.read_text(encoding="utf-8")


def render_index(values: Dict[str, Optional[str]]) -> str:
    """Fill ``{{ name }}`` placeholders of the page with escaped values."""
    html = _load_template()
    for name, value in values.items():
        html = html.replace("{{ %s }}" % name, escape(value or "", quote=True))
    return html


@router.get("/", response_class=HTMLResponse)
async def index(
    owner: str | None = None,
    repository: str | None = None,
    branch: str | None = None,
    path: str | None = None,
) -> HTMLResponse:
    defaults = AppConfig()
    html = render_index(
        {
            "owner": owner,
            "repository": repository,
            "branch": branch or defaults.branch,
            "path": path if path is not None else defaults.materials_path,
        }
    )
    return HTMLResponse(content=html)
