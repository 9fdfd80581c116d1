"""Command line interface for Code Analysis AI."""

import asyncio
import json
from pathlib import Path

import click

from . import __version__
from .config.settings import get_settings
from .exceptions import AnalysisServiceException
from .providers.orchestrator import FallbackOrchestrator
from .providers.registry import build_default_registry
from .schemas.analysis import ANALYSIS_TYPES, PROVIDER_CHOICES, SUPPORTED_LANGUAGES
from .services.analysis_service import AnalysisService
from .telemetry.logger import setup_logging
from .utils.analysis_utils import (
    extract_json_from_analysis,
    language_from_filename,
    summarize_analysis,
)
from .utils.validation import build_analysis_request


def get_version():
    return __version__


def run_server(host=None, port=None, reload=False):
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "code_analysis_ai.server.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


async def run_analysis(code, language, analysis_type, provider):
    settings = get_settings()
    request = build_analysis_request(
        code, language, analysis_type, provider, max_code_size=settings.max_code_size
    )
    registry = build_default_registry(settings)
    try:
        service = AnalysisService(FallbackOrchestrator(registry))
        return await service.analyze_code(request)
    finally:
        await registry.aclose()


def print_outcome(outcome):
    click.echo(f"Provider: {outcome.provider}")
    click.echo(f"Language: {outcome.metadata.language}")
    click.echo(f"Analysis type: {outcome.metadata.analysis_type}")
    click.echo("")

    parsed = extract_json_from_analysis(outcome.analysis)
    if not isinstance(parsed, dict):
        click.echo(outcome.analysis)
        return

    summary = summarize_analysis(parsed)
    if summary["quality_score"] is not None:
        click.echo(f"Quality score: {summary['quality_score']}/10")
    if summary["summary"]:
        click.echo(f"Summary: {summary['summary']}")
    click.echo(f"Issues: {summary['total_issues']} ({summary['critical_issues']} critical/high)")
    if summary["recommendations"]:
        click.echo("Recommendations:")
        for recommendation in summary["recommendations"]:
            click.echo(f"  - {recommendation}")


@click.group()
def cli():
    pass


@cli.command()
@click.option("--format", default="text", type=click.Choice(["text", "json"]))
def version(format):
    if format == "json":
        click.echo(json.dumps({"version": get_version()}))
    else:
        click.echo(f"v{get_version()}")


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to HOST)")
@click.option("--port", default=None, type=int, help="Port (defaults to PORT)")
@click.option("--reload", is_flag=True)
def serve(host, port, reload):
    run_server(host, port, reload)


@cli.command()
def providers():
    """List registered providers in priority order and whether they are configured."""
    registry = build_default_registry(get_settings())
    for descriptor in sorted(registry, key=lambda d: d.priority):
        state = "configured" if descriptor.is_available() else "missing API key"
        capabilities = ", ".join(sorted(c.value for c in descriptor.capabilities))
        click.echo(f"{descriptor.priority}. {descriptor.name} ({state}) [{capabilities}]")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--type", "analysis_type", default="general", type=click.Choice(list(ANALYSIS_TYPES))
)
@click.option("--provider", default="auto", type=click.Choice(list(PROVIDER_CHOICES)))
@click.option(
    "--language",
    default=None,
    type=click.Choice(list(SUPPORTED_LANGUAGES)),
    help="Override the language inferred from the file extension",
)
def analyze(file, analysis_type, provider, language):
    """Analyze a source file with the first provider that succeeds."""
    setup_logging(level="WARNING")
    code = file.read_text(encoding="utf-8", errors="replace")
    language = language or language_from_filename(file.name)

    try:
        outcome = asyncio.run(run_analysis(code, language, analysis_type, provider))
    except AnalysisServiceException as e:
        raise click.ClickException(e.message) from e

    print_outcome(outcome)


if __name__ == "__main__":
    cli()
