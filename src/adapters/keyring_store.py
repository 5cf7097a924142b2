"""Almacén de credenciales sobre el keychain del sistema (`keyring`).

Responsabilidad:
- Guardar consumer key y consumer secret como dos secretos independientes
  bajo el servicio `mpesa-cli`.
- Traducir los fallos del backend (macOS Keychain, Windows Credential Locker,
  Secret Service) a los errores tipados del Core.
"""

from __future__ import annotations

import keyring
from keyring.errors import KeyringError

from core.domain.models import Credentials
from core.errors import (
    CredentialBackendUnavailableError,
    CredentialsNotFoundError,
    CredentialStoreError,
)
from core.interfaces.credential_store import CredentialStore
from core.logging import get_logger

SERVICE_NAME = "mpesa-cli"
CONSUMER_KEY_ENTRY = "consumer_key"
CONSUMER_SECRET_ENTRY = "consumer_secret"

logger = get_logger(__name__)


class KeyringCredentialStore(CredentialStore):
    """Credenciales en el keychain nativo. Cada llamada va al backend."""

    def __init__(self, service_name: str = SERVICE_NAME) -> None:
        self._service = service_name

    def store(self, consumer_key: str, consumer_secret: str) -> None:
        """Escribe key y secret. No es atómico: si falla la segunda escritura,
        `details["written"]` lista las entradas que ya quedaron actualizadas.
        """

        written: list[str] = []
        for entry, value in ((CONSUMER_KEY_ENTRY, consumer_key), (CONSUMER_SECRET_ENTRY, consumer_secret)):
            try:
                keyring.set_password(self._service, entry, value)
            except KeyringError as exc:
                if written:
                    logger.warning("credentials.partial_write", service=self._service, written=written, failed=entry)
                raise CredentialStoreError(
                    f"failed to store {entry.replace('_', ' ')} in keychain: {exc}",
                    details={"entry": entry, "written": written},
                ) from exc
            written.append(entry)
        logger.debug("credentials.stored", service=self._service)

    def retrieve(self) -> Credentials:
        consumer_key = self._get(CONSUMER_KEY_ENTRY)
        consumer_secret = self._get(CONSUMER_SECRET_ENTRY)
        return Credentials(consumer_key=consumer_key, consumer_secret=consumer_secret)

    def _get(self, entry: str) -> str:
        try:
            value = keyring.get_password(self._service, entry)
        except KeyringError as exc:
            raise CredentialBackendUnavailableError(
                f"keychain unavailable while reading {entry.replace('_', ' ')}: {exc}",
                details={"entry": entry},
            ) from exc
        if not value:
            raise CredentialsNotFoundError(entry)
        return value
