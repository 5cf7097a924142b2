"""Daraja environments supported by the CLI.

Endpoint selection is a pure function of the environment value, so both the
services and the doctor checks derive URLs from here instead of sharing a
mutable module-level URL.
"""

from __future__ import annotations

from enum import Enum

TOKEN_PATH = "/oauth/v1/generate?grant_type=client_credentials"
TRANSACTION_STATUS_PATH = "/mpesa/transactionstatus/v1/query"


class Environment(str, Enum):
    """Daraja API environment."""

    SANDBOX = "sandbox"
    PRODUCTION = "production"

    @classmethod
    def default(cls) -> "Environment":
        return cls.SANDBOX

    @property
    def base_url(self) -> str:
        if self is Environment.PRODUCTION:
            return "https://api.safaricom.co.ke"
        return "https://sandbox.safaricom.co.ke"

    @property
    def token_url(self) -> str:
        return f"{self.base_url}{TOKEN_PATH}"

    @property
    def transaction_status_url(self) -> str:
        return f"{self.base_url}{TRANSACTION_STATUS_PATH}"

    def label(self) -> str:
        """Human readable label for tables and logging."""

        return "Production" if self is Environment.PRODUCTION else "Sandbox"
