"""Exportación JSON del reporte de validación.

Por qué JSON:
- Persistir la lista de inválidos antes de publicar permite reintentar el PR
  sin volver a escanear todo el registry.
- Interoperabilidad con otras herramientas y pipelines.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from core.domain.models import ValidationReport


def export_report_json(*, report: ValidationReport, output_path: Path) -> Path:
    """Exporta `ValidationReport` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = report.model_dump(mode="json", by_alias=True)
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path


def load_report_json(path: Path) -> ValidationReport:
    """Carga un reporte exportado previamente; `ValueError` si no es válido."""

    raw = path.read_text(encoding="utf-8")
    try:
        return ValidationReport.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ValueError(f"{path} is not a valid cleanup report: {exc}") from exc
