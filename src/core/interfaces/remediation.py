"""Contratos de las fases de entrada/salida del pipeline."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from core.domain.models import DomainEntry, PullRequestHandle, RunContext, ValidationReport


@runtime_checkable
class RegistrySource(Protocol):
    """Devuelve el dataset completo o lanza `FetchError`."""

    async def fetch(self) -> Sequence[DomainEntry]:
        ...


@runtime_checkable
class RemediationPublisher(Protocol):
    """Propone el borrado de las entradas inválidas o lanza `PublishError`."""

    async def publish(self, report: ValidationReport, *, context: RunContext) -> PullRequestHandle:
        ...
