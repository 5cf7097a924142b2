"""Token Service: intercambia consumer key/secret por un bearer token.

Protocolo (OAuth client credentials de Daraja):
- `GET <base>/oauth/v1/generate?grant_type=client_credentials`
- `Authorization: Basic base64(key:secret)`
- 200 → `{"access_token": "...", "expires_in": "3599"}`

El servicio no conoce sandbox ni producción: la URL llega como parámetro
(ver `core.domain.environment.Environment.token_url`).
"""

from __future__ import annotations

import base64
from contextlib import nullcontext

import httpx
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from adapters.http_client import build_client
from core.config import AppSettings
from core.domain.models import AccessToken
from core.errors import AuthMalformedResponseError, AuthRejectedError, AuthTransportError
from core.logging import get_logger

logger = get_logger(__name__)


class _TokenPayload(BaseModel):
    access_token: str = Field(..., min_length=1)
    expires_in: int | None = None

    @field_validator("expires_in", mode="before")
    @classmethod
    def _lenient_expires_in(cls, value: object) -> int | None:
        # Daraja sends a string; anything that is not a non-negative integer is unknown.
        try:
            seconds = int(str(value).strip())
        except (TypeError, ValueError):
            return None
        return seconds if seconds >= 0 else None


def basic_auth_header(consumer_key: str, consumer_secret: str) -> str:
    raw = f"{consumer_key}:{consumer_secret}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def get_access_token(
    consumer_key: str,
    consumer_secret: str,
    token_url: str,
    *,
    client: httpx.Client | None = None,
    settings: AppSettings | None = None,
) -> AccessToken:
    """Pide un token a `token_url`.

    Raises:
        AuthRejectedError: status distinto de 200 (incluye el body de Daraja).
        AuthTransportError: DNS/TCP/TLS o timeout.
        AuthMalformedResponseError: 200 sin JSON válido o sin `access_token`.

    Un `expires_in` ausente, vacío, negativo o no numérico queda como `None`.
    """

    settings = settings or AppSettings()
    headers = {"Authorization": basic_auth_header(consumer_key, consumer_secret)}

    logger.debug("token.requested", url=token_url)
    try:
        with nullcontext(client) if client is not None else build_client(settings) as http:
            response = http.get(token_url, headers=headers, timeout=settings.http_timeout_seconds)
    except httpx.TransportError as exc:
        logger.debug("token.transport_error", url=token_url, error=type(exc).__name__)
        raise AuthTransportError(exc) from exc

    if response.status_code != httpx.codes.OK:
        logger.debug("token.rejected", url=token_url, status=response.status_code)
        raise AuthRejectedError(response.status_code, response.text)

    try:
        payload = _TokenPayload.model_validate_json(response.content)
    except PydanticValidationError as exc:
        raise AuthMalformedResponseError(f"failed to parse auth response: {exc}") from exc

    logger.debug("token.acquired", url=token_url, expires_in=payload.expires_in)
    return AccessToken(value=payload.access_token, expires_in=payload.expires_in)
