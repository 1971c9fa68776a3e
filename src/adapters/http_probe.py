"""Probe de alcanzabilidad vía HTTP HEAD.

Reglas:
- Cualquier status HTTP (incluidos 4xx/5xx) cuenta como alcanzable.
- Solo los fallos de transporte (DNS, conexión, timeout, TLS) cuentan como fallo.
- Un fallo se reintenta exactamente una vez con el mismo target y timeout.
"""

from __future__ import annotations

import logging
import ssl
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.errors import ProbeError
from core.interfaces.probe import ProbeOutcome

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2


def is_tls_hostname_mismatch(exc: BaseException) -> bool:
    """True si la cadena de causas contiene un error de hostname del certificado."""

    current: BaseException | None = exc
    seen: set[int] = set()
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ssl.SSLCertVerificationError):
            message = (getattr(current, "verify_message", None) or "").lower()
            if "hostname mismatch" in message:
                return True
        if "hostname mismatch" in str(current).lower():
            return True
        current = current.__cause__ or current.__context__
    return False


def describe_error(exc: BaseException) -> str:
    # Algunos timeouts de httpx llegan sin mensaje.
    message = str(exc).strip()
    return message or type(exc).__name__


class HttpReachabilityProbe:
    """HEAD con un reintento; no lanza por fallos de transporte."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout: float = 5.0,
        suppress_tls_hostname_mismatch: bool = True,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._suppress_tls_mismatch = suppress_tls_hostname_mismatch

    async def _head(self, url: str) -> None:
        try:
            await self._client.head(url, timeout=self._timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ProbeError(describe_error(exc)) from exc

    async def check(self, url: str) -> ProbeOutcome:
        last_error: ProbeError | None = None
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                await self._head(url)
                return ProbeOutcome(reachable=True, attempts=attempt)
            except ProbeError as exc:
                if self._suppress_tls_mismatch and is_tls_hostname_mismatch(exc):
                    logger.debug("TLS hostname mismatch on %s treated as reachable", url)
                    return ProbeOutcome(reachable=True, attempts=attempt, error=str(exc))
                last_error = exc
                logger.debug("Probe attempt %d for %s failed: %s", attempt, url, exc)

        return ProbeOutcome(
            reachable=False,
            attempts=MAX_ATTEMPTS,
            error=str(last_error) if last_error else None,
        )


@asynccontextmanager
async def open_probe(
    settings: AppSettings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[HttpReachabilityProbe]:
    """Abre un cliente compartido por todos los probes de la ejecución."""

    async with build_async_client(
        settings,
        timeout=settings.probe_timeout_seconds,
        transport=transport,
    ) as client:
        yield HttpReachabilityProbe(
            client,
            timeout=settings.probe_timeout_seconds,
            suppress_tls_hostname_mismatch=settings.suppress_tls_hostname_mismatch,
        )
