"""Contrato del probe de alcanzabilidad.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- El Validator se testea con un probe falso sin tocar la red.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ProbeOutcome:
    """Resultado de comprobar una URL (ya incluido el reintento)."""

    reachable: bool
    attempts: int
    error: str | None = None


@runtime_checkable
class ReachabilityProbe(Protocol):
    """Contrato mínimo para comprobar si un sitio responde.

    Reglas de diseño:
    - `check` es asíncrono porque hace I/O (HTTP).
    - Nunca lanza por fallos de transporte: los devuelve en `ProbeOutcome`.
    """

    async def check(self, url: str) -> ProbeOutcome:
        ...
