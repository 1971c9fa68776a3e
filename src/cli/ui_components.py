"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `scan` y `publish`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import PullRequestHandle, ValidationReport


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("registry-cleanup", style="bold cyan")
    subtitle = Text("Registry audit • Reachability • Pull requests", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_invalid_table(report: ValidationReport) -> Table:
    table = Table(title=f"Invalid domains ({len(report.invalid)}/{report.scanned})")
    table.add_column("Domain", style="cyan", no_wrap=True)
    table.add_column("Owner", style="white")
    table.add_column("Kind", style="magenta")
    table.add_column("Reason", style="red")
    for item in report.invalid:
        table.add_row(
            item.entry.domain,
            f"@{item.entry.owner.username}",
            item.kind.value,
            item.reason,
        )
    return table


def build_summary_panel(report: ValidationReport, pull_request: PullRequestHandle | None) -> Panel:
    body = Text()
    body.append(f"Scanned: {report.scanned}\n")
    body.append(f"Probed: {len(report.probed)}\n")
    body.append(f"Skipped: {len(report.skipped)}\n")
    body.append(f"Invalid: {len(report.invalid)}", style="bold red" if report.invalid else "bold green")
    if pull_request:
        body.append(f"\n\nPull request: {pull_request.url}", style="bold")
        body.append(f"\nRemoved: {len(pull_request.removed)}  Failed: {len(pull_request.failed)}")
        if pull_request.failed:
            body.append("\nNot removed: " + ", ".join(pull_request.failed), style="yellow")
    return Panel(body, title="Summary", border_style="green" if not report.invalid else "yellow")
