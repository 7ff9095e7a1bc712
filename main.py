"""
main.py — command-line entry point.

  inspect-vision analyze photo.jpg --frames 3
  inspect-vision plan floorplan.png
  inspect-vision material siding.jpg
  inspect-vision health

Every command prints JSON to stdout; logs go to stderr.
"""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import asdict

import click

import config
from analysis import AnalysisContext
from providers.errors import InspectionError


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def _print(obj) -> None:
    click.echo(json.dumps(asdict(obj), indent=2, ensure_ascii=False))


def _orchestrator():
    from providers.manager import build_orchestrator
    try:
        return build_orchestrator()
    except RuntimeError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Building-code inspection from photos."""
    setup_logging(verbose)


@cli.command()
@click.argument("image", type=click.Path(dir_okay=False))
@click.option("--project-type", default=None, help="e.g. residential, commercial")
@click.option("--jurisdiction", default=None, help="Building code jurisdiction")
@click.option("--frames", default=1, show_default=True, type=click.IntRange(min=1),
              help="Analyse the image this many times as consecutive frames")
def analyze(image: str, project_type, jurisdiction, frames: int) -> None:
    """Live-frame analysis with retry and fallback."""
    orchestrator = _orchestrator()
    context = AnalysisContext(
        project_type=project_type or config.DEFAULT_PROJECT_TYPE,
        jurisdiction=jurisdiction or config.DEFAULT_JURISDICTION,
    )

    async def _run():
        for _ in range(frames):
            _print(await orchestrator.analyze(image, context))

    asyncio.run(_run())


@cli.command()
@click.argument("image", type=click.Path(dir_okay=False))
@click.option("--jurisdiction", default=None, help="Building code jurisdiction")
def plan(image: str, jurisdiction) -> None:
    """Single-shot building plan compliance review."""
    orchestrator = _orchestrator()
    context = AnalysisContext(jurisdiction=jurisdiction or config.DEFAULT_JURISDICTION)
    try:
        _print(asyncio.run(orchestrator.analyze_plan(image, context)))
    except InspectionError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command()
@click.argument("image", type=click.Path(dir_okay=False))
def material(image: str) -> None:
    """Identify construction materials in a photo."""
    orchestrator = _orchestrator()
    try:
        _print(asyncio.run(orchestrator.identify_material(image)))
    except InspectionError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command()
def health() -> None:
    """Report configuration and backend reachability."""
    from providers.manager import build_primary
    status = dict(config.is_config_valid())
    try:
        primary = build_primary()
    except RuntimeError:
        status["mcp_status"] = 0
    else:
        status["mcp_status"] = asyncio.run(primary.health())
    click.echo(json.dumps(status, indent=2))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
