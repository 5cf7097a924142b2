"""Contrato del almacén de credenciales."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import Credentials


@runtime_checkable
class CredentialStore(Protocol):
    """Persistencia segura del par consumer key/secret.

    Reglas de diseño:
    - `store` sobrescribe cualquier valor previo.
    - `retrieve` va siempre al backend; no hay caché en memoria.
    - Errores: `CredentialStoreError` al escribir; `CredentialsNotFoundError`
      o `CredentialBackendUnavailableError` al leer.
    """

    def store(self, consumer_key: str, consumer_secret: str) -> None:
        ...

    def retrieve(self) -> Credentials:
        ...
