"""Command-line interface for Canopy.

This module defines the CLI commands using Click framework.

Commands:
- build: Build the site into the output directory.
- watch: Build once, then rebuild incrementally on every source change.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _report_failure(exc, project_root: Path) -> None:
    """Display a user-friendly BuildError and exit with status 1."""
    try:
        rel_path = exc.source_path.relative_to(project_root)
    except ValueError:
        rel_path = exc.source_path
    click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
    click.echo(click.style(f"  File: {rel_path}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
    raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="canopy")
def cli():
    """Canopy static site generator."""


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft content")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output")
def build(drafts: bool, verbose: bool):
    """Build the site into the output directory."""
    _configure_logging(verbose)
    project_root = Path.cwd()
    from .build import BuildError, build_site

    try:
        result = build_site(project_root, include_drafts=drafts)
    except BuildError as exc:
        _report_failure(exc, project_root)
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc)) from None
    click.echo(
        f"Built {len(result.pages)} pages ({len(result.written)} written) into {result.output_dir}"
    )


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft content")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output")
def watch(drafts: bool, verbose: bool):
    """Build the site, then rebuild incrementally when sources change."""
    _configure_logging(verbose)
    project_root = Path.cwd()
    from .build import BuildError, SiteBuilder
    from .watcher import SiteWatcher

    try:
        builder = SiteBuilder(project_root, include_drafts=drafts)
        result = builder.build()
    except BuildError as exc:
        _report_failure(exc, project_root)
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc)) from None
    click.echo(f"Built {len(result.pages)} pages into {result.output_dir}")

    def report(rebuilt):
        click.echo(f"Rebuilt: {len(rebuilt.written)} pages written")

    SiteWatcher(builder, on_rebuild=report).run_forever()


def main():
    """Entry point for the CLI application."""
    cli()
