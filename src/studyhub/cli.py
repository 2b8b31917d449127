"""Command line interface for StudyHub."""

from __future__ import annotations

import json
import logging
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from studyhub.catalog.builder import build_catalog, status_message
from studyhub.catalog.crawler import Crawler
from studyhub.catalog.filters import FilterState, filter_catalog
from studyhub.config import AppConfig, ConfigurationMissing
from studyhub.models import MaterialDescriptor
from studyhub.remote.contents import GitHubContentsClient, RemoteListingError
from studyhub.utils.files import format_bytes
from studyhub.web.app import app as web_app


console = Console()
app = typer.Typer(help="StudyHub - browse study materials stored in a GitHub repository")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _load_catalog(
    config: AppConfig, *, strict: bool = False, quiet: bool = False
) -> Tuple[List[MaterialDescriptor], List[str]]:
    try:
        coordinate = config.coordinate()
    except ConfigurationMissing as exc:
        raise typer.BadParameter(str(exc)) from exc

    if not quiet:
        console.print(
            f"Loading materials from [bold]{escape(coordinate.slug)}[/bold] ({escape(coordinate.branch)})..."
        )
    client = GitHubContentsClient(
        api_url=config.api_url, timeout=config.timeout, user_agent=config.user_agent
    )
    try:
        descriptors = Crawler(client, strict=strict).crawl(coordinate)
    except RemoteListingError as exc:
        console.print(f"Error loading materials: {exc}", style="red", markup=False)
        console.print("Check repository path, branch, and that the repository is public.")
        raise typer.Exit(code=1) from exc
    finally:
        client.close()
    return build_catalog(descriptors, coordinate.root_path)


@app.command()
def crawl(
    owner: str = typer.Argument(..., help="Repository owner"),
    repository: str = typer.Argument(..., help="Repository name"),
    branch: str = typer.Option(AppConfig().branch, help="Branch or ref to read"),
    path: str = typer.Option(AppConfig().materials_path, help="Folder holding the materials"),
    search: str = typer.Option("", "--search", "-s", help="Only names containing this text"),
    subject: Optional[str] = typer.Option(None, help="Only this subject"),
    kind: Optional[str] = typer.Option(
        None, "--type", "-t", help="Only this type: image, pdf, video, document or other"
    ),
    strict: bool = typer.Option(False, help="Fail on listings that are not directories"),
    as_json: bool = typer.Option(False, "--json", help="Print the catalog as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Crawl a repository folder and list its materials."""
    _setup_logging(verbose)
    try:
        state = FilterState.from_raw(search, subject, kind)
    except ValueError as exc:
        raise typer.BadParameter(f"Unknown type: {kind}") from exc

    config = AppConfig(owner=owner, repository=repository, branch=branch, materials_path=path)
    catalog, subjects = _load_catalog(config, strict=strict, quiet=as_json)
    visible = filter_catalog(catalog, state)

    if as_json:
        typer.echo(
            json.dumps(
                {"subjects": subjects, "materials": [item.to_dict() for item in visible]},
                indent=2,
            )
        )
        return

    if not catalog:
        console.print(f"[yellow]{status_message(0)}[/yellow]")
        return

    console.print(status_message(len(catalog)))
    if not visible:
        console.print("[yellow]No materials match the current filters.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Subject")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Size", justify="right")

    for item in visible:
        table.add_row(
            escape(item.subject or ""), escape(item.name), item.kind.value.upper(), format_bytes(item.size)
        )

    console.print(table)


@app.command()
def subjects(
    owner: str = typer.Argument(..., help="Repository owner"),
    repository: str = typer.Argument(..., help="Repository name"),
    branch: str = typer.Option(AppConfig().branch, help="Branch or ref to read"),
    path: str = typer.Option(AppConfig().materials_path, help="Folder holding the materials"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """List the subjects found under the materials folder."""
    _setup_logging(verbose)
    config = AppConfig(owner=owner, repository=repository, branch=branch, materials_path=path)
    _, found = _load_catalog(config)
    if not found:
        console.print("[yellow]No subjects found.[/yellow]")
        return
    for name in found:
        console.print(name, markup=False, highlight=False)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Start the web interface."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install it with \"python -m pip install uvicorn\""
        ) from exc

    console.print(f"Starting web interface on http://{host}:{port}")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
