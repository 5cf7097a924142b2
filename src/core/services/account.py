"""Login and health-check flows.

Both flows only compose the credential store, the config resolver and the
token service; printing and prompting stay in the CLI layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import httpx

from adapters.daraja_auth import get_access_token
from core.config import AppSettings, resolve_config
from core.domain.environment import Environment
from core.domain.models import AccessToken, Credentials, MpesaConfig
from core.errors import AuthError, ConfigError, CredentialRetrieveError
from core.interfaces.credential_store import CredentialStore
from core.logging import get_logger

logger = get_logger(__name__)

TokenFetcher = Callable[[Credentials, str], AccessToken]


def login(
    consumer_key: str,
    consumer_secret: str,
    store: CredentialStore,
    token_url: str,
    *,
    settings: AppSettings | None = None,
    client: httpx.Client | None = None,
) -> AccessToken:
    """Validate the pair against Daraja, then persist it.

    Nothing is written to the keychain when authentication fails.
    """

    credentials = Credentials(consumer_key=consumer_key.strip(), consumer_secret=consumer_secret.strip())
    token = get_access_token(
        credentials.consumer_key,
        credentials.consumer_secret,
        token_url,
        client=client,
        settings=settings,
    )
    store.store(credentials.consumer_key, credentials.consumer_secret)
    logger.info("login.completed", token_url=token_url)
    return token


@dataclass
class HealthCheck:
    name: str
    ok: bool
    detail: str
    required: bool = True


def run_health_checks(
    store: CredentialStore,
    *,
    config_path: Path | None = None,
    settings: AppSettings | None = None,
    fetch_token: TokenFetcher | None = None,
) -> list[HealthCheck]:
    """Diagnose config, keychain and token acquisition on both environments.

    `fetch_token` receives the credentials and a token URL; it defaults to the
    real token service so tests can inject a fake without touching URLs.
    """

    settings = settings or AppSettings()
    if fetch_token is None:
        def fetch_token(creds: Credentials, url: str) -> AccessToken:
            return get_access_token(creds.consumer_key, creds.consumer_secret, url, settings=settings)

    checks: list[HealthCheck] = []

    config: MpesaConfig | None = None
    try:
        config = resolve_config(config_path)
        checks.append(HealthCheck("Configuration", True, f"environment={config.environment}"))
    except ConfigError as exc:
        checks.append(HealthCheck("Configuration", False, exc.message))

    try:
        credentials = store.retrieve()
    except CredentialRetrieveError as exc:
        checks.append(HealthCheck("Keychain credentials", False, exc.message))
        return checks
    checks.append(HealthCheck("Keychain credentials", True, "Credentials found in keychain"))

    for env in Environment:
        name = f"{env.label()} token"
        # Only the configured environment is required to work.
        required = config is not None and config.environment == env.value
        try:
            token = fetch_token(credentials, env.token_url)
        except AuthError as exc:
            checks.append(HealthCheck(name, False, exc.message, required=required))
            continue
        detail = "Auth token fetched successfully"
        if token.expires_in is not None:
            detail += f" (expires in {token.expires_in}s)"
        checks.append(HealthCheck(name, True, detail, required=required))

    return checks


def checks_passed(checks: list[HealthCheck]) -> bool:
    return all(check.ok for check in checks if check.required)
