"""Errores tipados de la CLI.

Cada subsistema (keychain, config, token, consulta) expone su propia familia
de errores; todos heredan de `MpesaCLIError` para que la CLI los convierta en
un mensaje corto y un código de salida distinto de cero.
"""

from __future__ import annotations

from typing import Any

LOGIN_HINT = "Please run 'mpesa-cli login' again"


class MpesaCLIError(Exception):
    """Base error class for CLI errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Credential store
# =============================================================================


class CredentialStoreError(MpesaCLIError):
    """The keychain refused the write or is not available."""


class CredentialRetrieveError(MpesaCLIError):
    """Base class for read failures."""


class CredentialsNotFoundError(CredentialRetrieveError):
    """One of the two secrets is missing from the keychain."""

    def __init__(self, entry: str):
        super().__init__(
            f"could not retrieve {entry.replace('_', ' ')}. {LOGIN_HINT}",
            details={"entry": entry},
        )
        self.entry = entry


class CredentialBackendUnavailableError(CredentialRetrieveError):
    """The platform keychain failed while reading."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(MpesaCLIError):
    """Configuration could not be loaded."""


class ConfigParseError(ConfigError):
    """The config file exists but is not a valid YAML mapping."""


class ConfigValidationError(ConfigError):
    """A resolved value breaks a configuration rule."""

    def __init__(self, message: str, field: str):
        super().__init__(message, details={"field": field})
        self.field = field


# =============================================================================
# HTTP services
# =============================================================================


class _HTTPRejectedMixin:
    status: int
    body: str

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()  # type: ignore[misc]
        result["status"] = self.status
        return result


class AuthError(MpesaCLIError):
    """Token acquisition failed."""


class AuthRejectedError(_HTTPRejectedMixin, AuthError):
    """The token endpoint answered with a non-200 status."""

    def __init__(self, status: int, body: str):
        super().__init__(f"authentication failed with status {status}: {body}")
        self.status = status
        self.body = body


class AuthTransportError(AuthError):
    """DNS, TCP, TLS or timeout failure talking to the token endpoint."""

    def __init__(self, cause: Exception):
        super().__init__(f"could not reach the token endpoint: {_describe(cause)}")
        self.__cause__ = cause


class AuthMalformedResponseError(AuthError):
    """A 200 response without a usable `access_token`."""


class QueryError(MpesaCLIError):
    """Transaction status query failed."""


class QueryRejectedError(_HTTPRejectedMixin, QueryError):
    """The transaction status endpoint answered with a non-200 status."""

    def __init__(self, status: int, body: str):
        super().__init__(f"api request failed with status {status}: {body}")
        self.status = status
        self.body = body


class QueryTransportError(QueryError):
    """DNS, TCP, TLS or timeout failure talking to the query endpoint."""

    def __init__(self, cause: Exception):
        super().__init__(f"error sending request: {_describe(cause)}")
        self.__cause__ = cause


class QueryMalformedResponseError(QueryError):
    """The query response body is not a JSON object."""


def _describe(cause: Exception) -> str:
    return str(cause) or type(cause).__name__
