"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (registry/probe/GitHub) lean config de forma consistente.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from core.domain.models import DEFAULT_BASE_DOMAIN


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "registry-cleanup"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "registry-cleanup"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "registry-cleanup"
    return Path.home() / ".config" / "registry-cleanup"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# registry-cleanup user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class BranchStrategy(str, Enum):
    """Where the cleanup commits land inside the fork."""

    TIMESTAMPED = "timestamped"
    FIXED = "fixed"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="REGISTRY_CLEANUP_",
        extra="ignore",
        case_sensitive=False,
        # Los archivos posteriores pisan a los anteriores: el .env global del
        # usuario tiene prioridad sobre el .env del proyecto.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    registry_url: str = Field(
        default="https://raw-api.is-a.dev",
        min_length=8,
        description="Endpoint que devuelve el dataset completo como array JSON.",
    )
    base_domain: str = Field(
        default=DEFAULT_BASE_DOMAIN,
        min_length=1,
        description="Dominio base usado para derivar el FQDN cuando falta `domain`.",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request para registry y API de GitHub (segundos).",
    )
    user_agent: str = Field(
        default="registry-cleanup/0.1 (+https://github.com/is-a-dev/register)",
        min_length=1,
        description="User-Agent para todas las peticiones salientes.",
    )

    github_api_url: str = Field(
        default="https://api.github.com",
        min_length=8,
        description="Base URL de la API REST de GitHub.",
    )
    github_token: str | None = Field(
        default=None,
        description="Personal access token con permisos de fork/contents/pull requests.",
    )
    github_username: str | None = Field(
        default=None,
        description="Cuenta bajo la que se crea el fork.",
    )
    upstream_owner: str = Field(default="is-a-dev", min_length=1)
    upstream_repo: str = Field(default="register", min_length=1)
    base_branch: str = Field(default="main", min_length=1)
    domains_dir: str = Field(
        default="domains",
        description="Directorio del repo que contiene un JSON por subdominio.",
    )
    pr_title: str = Field(default="[no-rm] domain cleanup", min_length=1)

    domain_skip_list: Annotated[set[str], NoDecode] = Field(
        default_factory=set,
        description="Subdominios excluidos de la auditoría (match exacto).",
    )
    owner_skip_list: Annotated[set[str], NoDecode] = Field(
        default_factory=set,
        description="Usernames cuyos dominios se excluyen de la auditoría.",
    )

    probe_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Timeout del HEAD de alcanzabilidad (segundos).",
    )
    probe_concurrency: int = Field(
        default=1,
        ge=1,
        le=100,
        description="Probes simultáneos; 1 = estrictamente secuencial.",
    )
    suppress_tls_hostname_mismatch: bool = Field(
        default=True,
        description="Un certificado con hostname distinto no prueba que el sitio esté caído.",
    )
    skip_delegated_services: bool = Field(
        default=True,
        description="Excluir del probe las entradas con registros MX o NS.",
    )

    branch_strategy: BranchStrategy = Field(default=BranchStrategy.TIMESTAMPED)
    report_only_removed: bool = Field(
        default=False,
        description="Listar en el PR solo los dominios cuyo borrado tuvo éxito.",
    )
    fork_poll_attempts: int = Field(default=10, ge=1, le=60)
    fork_poll_interval_seconds: float = Field(default=2.0, ge=0)

    @field_validator("domain_skip_list", "owner_skip_list", mode="before")
    @classmethod
    def _split_skip_list(cls, value: object) -> object:
        # Env vars llegan como texto: "a,b" o '["a", "b"]'.
        if isinstance(value, str):
            text = value.strip()
            if text.startswith("["):
                return set(json.loads(text))
            return {part.strip() for part in text.split(",") if part.strip()}
        return value
