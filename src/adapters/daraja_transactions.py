"""Transaction Query Service: consulta de estado de una transacción M-Pesa.

- `POST <base>/mpesa/transactionstatus/v1/query` con `Bearer <token>`.
- Timeout explícito de 10 segundos y un único intento (sin reintentos).
- La URL sale de `config.environment` salvo que se pase `url` (tests).
"""

from __future__ import annotations

import json
from contextlib import nullcontext

import httpx
from pydantic import ValidationError as PydanticValidationError

from adapters.http_client import build_client
from core.config import AppSettings
from core.domain.models import AccessToken, MpesaConfig, TransactionStatus, TransactionStatusRequest
from core.errors import QueryError, QueryMalformedResponseError, QueryRejectedError, QueryTransportError
from core.logging import get_logger

QUERY_TIMEOUT_SECONDS = 10.0

logger = get_logger(__name__)


def query_transaction(
    access_token: AccessToken | str,
    transaction_id: str,
    config: MpesaConfig,
    *,
    url: str | None = None,
    client: httpx.Client | None = None,
    settings: AppSettings | None = None,
    timeout: float = QUERY_TIMEOUT_SECONDS,
) -> TransactionStatus:
    """Envía la consulta y devuelve la respuesta síncrona de Daraja.

    Raises:
        QueryRejectedError: status distinto de 200.
        QueryTransportError: DNS/TCP/TLS o timeout.
        QueryError: la petición no se puede construir (p.ej. ID vacío); no sale ninguna request.
        QueryMalformedResponseError: el body no es un objeto JSON.
    """

    token = access_token.value if isinstance(access_token, AccessToken) else access_token
    target = url or config.api_environment.transaction_status_url
    try:
        body = TransactionStatusRequest.from_config(transaction_id, config).to_payload()
    except PydanticValidationError as exc:
        field = ".".join(str(part) for part in exc.errors()[0].get("loc", ())) or "request"
        raise QueryError(
            f"invalid transaction status request: {field} must not be empty",
            details={"field": field},
        ) from exc
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    }

    logger.debug("query.issued", url=target, transaction_id=transaction_id)
    try:
        with nullcontext(client) if client is not None else build_client(settings, timeout=timeout) as http:
            response = http.post(target, json=body, headers=headers, timeout=timeout)
    except httpx.TransportError as exc:
        logger.debug("query.transport_error", url=target, error=type(exc).__name__)
        raise QueryTransportError(exc) from exc

    if response.status_code != httpx.codes.OK:
        logger.debug("query.rejected", url=target, status=response.status_code)
        raise QueryRejectedError(response.status_code, response.text)

    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise QueryMalformedResponseError(f"failed to parse transaction status response: {exc}") from exc

    if not isinstance(data, dict):
        raise QueryMalformedResponseError(
            f"failed to parse transaction status response: expected an object, got {type(data).__name__}"
        )

    try:
        status = TransactionStatus.model_validate(data)
    except PydanticValidationError as exc:
        raise QueryMalformedResponseError(f"failed to parse transaction status response: {exc}") from exc

    logger.debug("query.succeeded", transaction_id=transaction_id, response_code=status.response_code)
    return status
