"""Wrapper de httpx.

Estandariza timeouts y headers para las llamadas a Daraja y permite que los
tests inyecten un `httpx.MockTransport` sin tocar los servicios.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_client(
    settings: AppSettings | None = None,
    *,
    timeout: float | None = None,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` con defaults seguros.

    `timeout` sustituye a `settings.http_timeout_seconds` cuando una llamada
    necesita un límite propio.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.Client(
        timeout=httpx.Timeout(timeout if timeout is not None else settings.http_timeout_seconds),
        follow_redirects=False,
        headers=headers,
        transport=transport,
    )
