"""Errores del dominio.

Todos heredan de `CleanupError` para que la CLI los capture de forma uniforme.
Los fatales (`FetchError`, `PublishError`) abortan la ejecución; `ProbeError`
y `DeleteFileError` se recuperan localmente.
"""

from __future__ import annotations


class CleanupError(Exception):
    """Base de los errores de la auditoría."""


class FetchError(CleanupError):
    """El registry no respondió o devolvió un payload inválido."""


class ProbeError(CleanupError):
    """Fallo de transporte al comprobar un dominio (transitorio hasta el reintento)."""


class StructuralError(CleanupError):
    """Un subdominio anidado no cumple la relación con su raíz."""


class PublishError(CleanupError):
    """Fallo en fork/branch/PR: aborta la fase de publicación."""


class DeleteFileError(CleanupError):
    """No se pudo borrar un fichero concreto del registry."""

    def __init__(self, subdomain: str, message: str) -> None:
        super().__init__(f"{subdomain}: {message}")
        self.subdomain = subdomain
