"""CLI principal (Typer).

Comandos:
- `scan`: auditoría completa (fetch → validate → PR).
- `publish`: reintenta el PR desde un reporte JSON guardado.
- `doctor`: diagnóstico de configuración y conectividad.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.github_publisher import GitHubPublisher
from adapters.json_exporter import load_report_json
from adapters.report_exporter import export_report_markdown
from cli import doctor
from cli.ui_components import build_invalid_table, build_summary_panel, print_banner
from core.config import AppSettings
from core.domain.errors import FetchError, PublishError
from core.domain.models import RunContext
from core.logging_utils import configure_logging
from core.services.cleanup_pipeline import PipelineHooks, run_default_cleanup
from core.services.validator import ValidationPolicy

app = typer.Typer(no_args_is_help=True, help="Audit the domain registry and propose removals of dead entries.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
logger = logging.getLogger("registry_cleanup")


def _setup_logging(verbose: bool) -> None:
    configure_logging(
        verbose=verbose,
        handler=RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True),
    )


@app.command()
def scan(
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate only; do not fork or open a pull request."),
    report: Optional[Path] = typer.Option(None, "--report", help="Write the validation report (JSON) here."),
    markdown: Optional[Path] = typer.Option(None, "--markdown", help="Write the pull request body (Markdown) here."),
    skip_domain: list[str] = typer.Option([], "--skip-domain", help="Subdomain to exclude (repeatable)."),
    skip_owner: list[str] = typer.Option([], "--skip-owner", help="Owner username to exclude (repeatable)."),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", min=1, max=100, help="Concurrent probes."),
    no_banner: bool = typer.Option(False, "--no-banner", help="Hide the banner."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """Run one audit pass over the registry."""

    _setup_logging(verbose)
    if not no_banner:
        print_banner(_console)

    settings = AppSettings()
    policy = ValidationPolicy.from_settings(settings)
    policy.domain_skip_list.update(skip_domain)
    policy.owner_skip_list.update(skip_owner)
    if concurrency is not None:
        policy.probe_concurrency = concurrency

    hooks = PipelineHooks(fetched=lambda total: _console.print(f"[blue]Scanning {total} domains...[/blue]"))

    try:
        result = asyncio.run(
            run_default_cleanup(
                settings,
                policy=policy,
                dry_run=dry_run,
                report_path=report,
                hooks=hooks,
            )
        )
    except FetchError as exc:
        logger.error("Fetching registry failed: %s", exc)
        raise typer.Exit(code=1) from exc
    except PublishError as exc:
        logger.error("Publishing cleanup failed: %s", exc)
        if report:
            _console.print(f"[yellow]Report kept at {report}; retry with `publish {report}`.[/yellow]")
        raise typer.Exit(code=1) from exc

    if result.report.invalid:
        _console.print(build_invalid_table(result.report))
    if markdown:
        export_report_markdown(report=result.report, output_path=markdown)
    _console.print(build_summary_panel(result.report, result.pull_request))
    for note in result.notes:
        _console.print(f"[green]{note}[/green]")


@app.command()
def publish(
    report_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Report written by `scan --report`."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """Open the cleanup pull request from a saved report, without re-scanning."""

    _setup_logging(verbose)
    try:
        saved = load_report_json(report_path)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if not saved.invalid:
        _console.print("[green]No invalid domains in report; nothing to publish.[/green]")
        return

    settings = AppSettings()
    context = RunContext()
    try:
        handle = asyncio.run(GitHubPublisher(settings).publish(saved, context=context))
    except PublishError as exc:
        logger.error("Publishing cleanup failed: %s", exc)
        raise typer.Exit(code=1) from exc

    _console.print(build_summary_panel(saved, handle))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
