"""Descarga del dataset del registry.

Una sola petición GET, sin reintentos: si falla, la ejecución entera aborta.
Un dataset vacío o parcial nunca debe interpretarse como "cero dominios inválidos".
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.errors import FetchError
from core.domain.models import DomainEntry
from core.logging_utils import log_event

logger = logging.getLogger(__name__)


def parse_registry(payload: object, *, base_domain: str) -> list[DomainEntry]:
    if not isinstance(payload, list):
        raise FetchError(f"Registry payload is not a JSON array (got {type(payload).__name__})")

    entries: list[DomainEntry] = []
    seen: set[str] = set()
    for position, item in enumerate(payload):
        try:
            entry = DomainEntry.model_validate(item, context={"base_domain": base_domain})
        except ValidationError as exc:
            raise FetchError(f"Invalid registry entry at index {position}: {exc.errors()[0]['msg']}") from exc
        if entry.domain in seen:
            raise FetchError(f"Duplicate domain in registry: {entry.domain}")
        seen.add(entry.domain)
        entries.append(entry)
    return entries


class HttpRegistrySource:
    """Lee el registry desde su endpoint JSON."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport

    async def fetch(self) -> list[DomainEntry]:
        url = self._settings.registry_url
        try:
            async with build_async_client(
                self._settings,
                extra_headers={"Accept": "application/json"},
                transport=self._transport,
            ) as client:
                resp = await client.get(url)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as exc:
            raise FetchError(f"Registry returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Fetching registry failed: {exc}") from exc
        except ValueError as exc:
            raise FetchError(f"Registry response is not valid JSON: {exc}") from exc

        entries = parse_registry(payload, base_domain=self._settings.base_domain)
        log_event(logger, logging.INFO, "registry_fetched", url=url, total=len(entries))
        return entries


async def fetch_registry(
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[DomainEntry]:
    return await HttpRegistrySource(settings, transport=transport).fetch()
