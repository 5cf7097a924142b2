"""Shared fixtures: in-memory keychain, mocked Daraja endpoints, clean env."""

from __future__ import annotations

import json
import os
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError, PasswordSetError

from core.config import AppSettings
from core.domain.models import Credentials
from core.errors import CredentialsNotFoundError

SANDBOX_TOKEN_URL = "https://sandbox.safaricom.co.ke/oauth/v1/generate?grant_type=client_credentials"
SANDBOX_QUERY_URL = "https://sandbox.safaricom.co.ke/mpesa/transactionstatus/v1/query"
PRODUCTION_TOKEN_URL = "https://api.safaricom.co.ke/oauth/v1/generate?grant_type=client_credentials"

Handler = Callable[[httpx.Request], httpx.Response]


# =============================================================================
# Keychain
# =============================================================================


class InMemoryKeyring(KeyringBackend):
    """Keyring backend that keeps passwords in a dict."""

    priority = 1  # type: ignore[assignment]

    def __init__(self) -> None:
        super().__init__()
        self.passwords: dict[tuple[str, str], str] = {}

    def get_password(self, service: str, username: str) -> str | None:
        return self.passwords.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        self.passwords[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        self.passwords.pop((service, username), None)


class BrokenKeyring(KeyringBackend):
    """Keyring backend whose every operation fails."""

    priority = 1  # type: ignore[assignment]

    def get_password(self, service: str, username: str) -> str | None:
        raise KeyringError("secret service is locked")

    def set_password(self, service: str, username: str, password: str) -> None:
        raise PasswordSetError("write denied")

    def delete_password(self, service: str, username: str) -> None:
        raise KeyringError("secret service is locked")


@pytest.fixture
def memory_keyring() -> Iterator[InMemoryKeyring]:
    previous = keyring.get_keyring()
    backend = InMemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


@pytest.fixture
def broken_keyring() -> Iterator[BrokenKeyring]:
    previous = keyring.get_keyring()
    backend = BrokenKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


class MemoryCredentialStore:
    """`CredentialStore` implementation without any keychain."""

    def __init__(self, credentials: Credentials | None = None) -> None:
        self.credentials = credentials
        self.retrieve_calls = 0

    def store(self, consumer_key: str, consumer_secret: str) -> None:
        self.credentials = Credentials(consumer_key=consumer_key, consumer_secret=consumer_secret)

    def retrieve(self) -> Credentials:
        self.retrieve_calls += 1
        if self.credentials is None:
            raise CredentialsNotFoundError("consumer_key")
        return self.credentials


# =============================================================================
# Environment isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """No MPESA_* variables, no config files from the developer machine."""

    for name in list(os.environ):
        if name.startswith("MPESA_"):
            monkeypatch.delenv(name, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(http_timeout_seconds=5.0)


# =============================================================================
# HTTP
# =============================================================================


def json_response(status_code: int, payload: Any) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


def mock_client(handler: Handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def daraja_handler(
    *,
    token_status: int = 200,
    token_body: Any = None,
    query_status: int = 200,
    query_body: Any = None,
    seen: list[httpx.Request] | None = None,
) -> Handler:
    """Fake Daraja: token endpoint on GET, transaction status on POST."""

    token_body = {"access_token": "tok-123", "expires_in": "3599"} if token_body is None else token_body
    query_body = (
        {
            "ConversationID": "C1",
            "OriginatorConversationID": "O1",
            "ResponseCode": "0",
            "ResponseDescription": "OK",
        }
        if query_body is None
        else query_body
    )

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.path == "/oauth/v1/generate":
            if isinstance(token_body, str):
                return httpx.Response(token_status, text=token_body)
            return json_response(token_status, token_body)
        if request.url.path == "/mpesa/transactionstatus/v1/query":
            if isinstance(query_body, str):
                return httpx.Response(query_status, text=query_body)
            return json_response(query_status, query_body)
        return httpx.Response(404, text="not found")

    return handler
