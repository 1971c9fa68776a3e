"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- El payload del registry trae campos extra (proxied, TXT, etc.) que ignoramos.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
- Las entradas son snapshots: el Validator nunca las muta, acumula resultados aparte.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, model_validator
from pydantic.config import ConfigDict


_WEBSITE_RECORDS = ("A", "AAAA", "CNAME", "URL")
_DELEGATED_RECORDS = ("MX", "NS")

DEFAULT_BASE_DOMAIN = "is-a.dev"


class DomainOwner(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: str = Field(
        ...,
        min_length=1,
        description="Identidad del registrante (username de GitHub).",
    )


class DomainRecord(BaseModel):
    """Registros DNS de una entrada.

    Solo importa la *presencia* de cada tipo; los valores se conservan tal
    cual llegan. `URL` es la excepción: es un destino de redirección que se
    usa en lugar del dominio al hacer el probe.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    a: Any = Field(default=None, alias="A")
    aaaa: Any = Field(default=None, alias="AAAA")
    cname: Any = Field(default=None, alias="CNAME")
    url: str | None = Field(default=None, alias="URL")
    mx: Any = Field(default=None, alias="MX")
    ns: Any = Field(default=None, alias="NS")

    def has(self, record_type: str) -> bool:
        # Presente = la clave existe; una lista vacía cuenta, un string vacío no.
        value = getattr(self, record_type.lower())
        return value is not None and value != ""

    def present(self) -> list[str]:
        return [name for name in (*_WEBSITE_RECORDS, *_DELEGATED_RECORDS) if self.has(name)]


class DomainEntry(BaseModel):
    """Una fila del dataset del registry."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    domain: str = Field(
        default="",
        description="FQDN (subdominio + dominio base).",
    )
    subdomain: str = Field(
        ...,
        min_length=1,
        description="Label elegido por el registrante; puede contener puntos (anidado).",
    )
    owner: DomainOwner
    record: DomainRecord = Field(default_factory=DomainRecord)

    @model_validator(mode="before")
    @classmethod
    def _derive_domain(cls, data: Any, info: ValidationInfo) -> Any:
        if isinstance(data, dict) and not data.get("domain") and data.get("subdomain"):
            base = (info.context or {}).get("base_domain") or DEFAULT_BASE_DOMAIN
            data = {**data, "domain": f"{data['subdomain']}.{base}"}
        return data

    @property
    def is_nested(self) -> bool:
        return "." in self.subdomain

    @property
    def root_subdomain(self) -> str:
        return self.subdomain.split(".")[-1]

    @property
    def is_website(self) -> bool:
        return any(self.record.has(name) for name in _WEBSITE_RECORDS)

    @property
    def has_delegated_services(self) -> bool:
        return any(self.record.has(name) for name in _DELEGATED_RECORDS)

    @property
    def has_nameservers(self) -> bool:
        return self.record.has("NS")

    @property
    def probe_url(self) -> str:
        if self.record.url:
            return self.record.url
        return f"https://{self.domain}"


class InvalidKind(str, Enum):
    STRUCTURAL = "structural"
    UNREACHABLE = "unreachable"


class SkipReason(str, Enum):
    DOMAIN_SKIP_LIST = "domain_skip_list"
    OWNER_SKIP_LIST = "owner_skip_list"
    NOT_A_WEBSITE = "not_a_website"
    DELEGATED_SERVICES = "delegated_services"


class InvalidEntry(BaseModel):
    entry: DomainEntry
    reason: str = Field(..., min_length=1)
    kind: InvalidKind


class SkippedEntry(BaseModel):
    entry: DomainEntry
    reason: SkipReason


class ValidationReport(BaseModel):
    """Resultado de una pasada de validación.

    Por qué un modelo separado:
    - Se puede persistir a JSON y reintentar la publicación sin re-escanear.
    """

    scanned: int = Field(..., ge=0, description="Tamaño del dataset auditado.")
    invalid: list[InvalidEntry] = Field(default_factory=list)
    skipped: list[SkippedEntry] = Field(default_factory=list)
    probed: list[str] = Field(
        default_factory=list,
        description="Subdominios a los que se les hizo probe, en orden.",
    )
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def invalid_subdomains(self) -> list[str]:
        return [item.entry.subdomain for item in self.invalid]


class PullRequestHandle(BaseModel):
    number: int
    url: str
    branch: str
    removed: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)


class RunContext(BaseModel):
    """Valores de una ejecución (timestamp de inicio), pasados de forma explícita."""

    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def timestamp_ms(self) -> int:
        return int(self.started_at.timestamp() * 1000)

    def branch_name(self) -> str:
        return f"cleanup-{self.timestamp_ms}"
