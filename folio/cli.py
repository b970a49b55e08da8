"""Command-line interface for Folio.

This module defines the CLI commands using Click framework.

Commands:
- serve: Build the site index and serve the project over HTTP.
- index: Print the site index as JSON.
- render: Render a single request path and print the body.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from . import __version__
from .errors import ConfigError
from .site import Site

_root_option = click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Project directory holding config, static/ and templates/",
)


def _load_site(root: Path) -> Site:
    try:
        return Site.from_project(root.resolve())
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from None


@click.group()
@click.version_option(version=__version__, prog_name="folio")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Folio content server."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@_root_option
@click.option(
    "--port", type=int, required=False, help="Port to listen on (overrides config port)"
)
@click.option("--host", default=None, help="Interface to bind (overrides config host)")
def serve(root: Path, port: int | None, host: str | None):
    """Build the index, then serve the site."""
    from .server import serve as run_server

    site = _load_site(root)
    bind = host if host is not None else str(site.config.get("host") or "")
    run_server(site, bind, port)


@cli.command()
@_root_option
def index(root: Path):
    """Print the site index as JSON."""
    site = _load_site(root)
    click.echo(json.dumps(site.build_index().to_dict(), indent=2))


@cli.command()
@click.argument("path")
@_root_option
@click.option(
    "--method", default="GET", show_default=True, help="Request method to expose"
)
def render(path: str, root: Path, method: str):
    """Render PATH as a request would and print the body."""
    site = _load_site(root)
    site.build_index()
    response = site.handle(method.upper(), path)
    if response.status_code != 200:
        click.echo(click.style(response.status, fg="red", bold=True), err=True)
    click.echo(response.body.decode("utf-8", errors="replace"), nl=False)
    if response.status_code != 200:
        raise SystemExit(1)


def main():
    """Entry point for the CLI application."""
    cli()
