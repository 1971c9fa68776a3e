"""Exportación del resumen como Markdown (cuerpo del pull request).

Por qué está en adapters:
- El formato del PR es un detalle de infraestructura (Jinja2).
- El Core solo conoce el `ValidationReport`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from core.domain.models import InvalidEntry, ValidationReport


_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _md_cell(value: object) -> str:
    # Una celda de tabla no admite saltos de línea ni `|` sin escapar.
    text = " ".join(str(value).split())
    return text.replace("|", "\\|").replace("`", "'")


def _get_env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["md_cell"] = _md_cell
    return env


def render_pull_request_body(
    *,
    report: ValidationReport,
    rows: Iterable[InvalidEntry] | None = None,
) -> str:
    """Renderiza el resumen: dominios escaneados, inválidos y la tabla de motivos.

    `rows` solo filtra la tabla; el encabezado siempre cuenta todos los inválidos.
    """

    listed = list(report.invalid if rows is None else rows)
    template = _get_env().get_template("pull_request.md.j2")
    return template.render(
        scanned=report.scanned,
        invalid_count=len(report.invalid),
        rows=listed,
    )


def export_report_markdown(*, report: ValidationReport, output_path: Path) -> Path:
    """Exporta el cuerpo del PR a disco (útil con `--dry-run`)."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_pull_request_body(report=report), encoding="utf-8")
    return output_path
