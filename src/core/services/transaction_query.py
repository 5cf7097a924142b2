"""Transaction query orchestration.

The pipeline walks one invocation through its states:

    UNAUTHENTICATED → CREDENTIALS_LOADED → TOKEN_ACQUIRED → QUERY_ISSUED
                                                           → SUCCEEDED | FAILED

Every step either advances or terminates in FAILED; there are no retry
transitions. Side effects for the UI (spinner text, verbose output) are
delegated to optional hooks so the CLI keeps presentation concerns out of
this module.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

import httpx

from adapters.daraja_auth import get_access_token
from adapters.daraja_transactions import query_transaction
from core.config import AppSettings
from core.domain.models import MpesaConfig, TransactionStatus
from core.errors import MpesaCLIError
from core.interfaces.credential_store import CredentialStore
from core.logging import get_logger

logger = get_logger(__name__)


class QueryState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    CREDENTIALS_LOADED = "credentials_loaded"
    TOKEN_ACQUIRED = "token_acquired"
    QUERY_ISSUED = "query_issued"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (QueryState.SUCCEEDED, QueryState.FAILED)


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers."""

    state_changed: Callable[[QueryState], None] | None = None


@dataclass
class QueryOutcome:
    """Final state of one pipeline run."""

    transaction_id: str
    state: QueryState
    status: TransactionStatus | None = None
    error: MpesaCLIError | None = None
    history: list[QueryState] = field(default_factory=list)


class TransactionQueryPipeline:
    """Credentials → token → transaction status, strictly in order."""

    def __init__(
        self,
        store: CredentialStore,
        config: MpesaConfig,
        *,
        settings: AppSettings | None = None,
        client: httpx.Client | None = None,
        token_url: str | None = None,
        query_url: str | None = None,
        hooks: PipelineHooks | None = None,
    ) -> None:
        self._store = store
        self._config = config
        self._settings = settings or AppSettings()
        self._client = client
        self._token_url = token_url or config.api_environment.token_url
        self._query_url = query_url
        self._hooks = hooks or PipelineHooks()
        self.outcome: QueryOutcome | None = None

    def _advance(self, outcome: QueryOutcome, state: QueryState) -> None:
        outcome.state = state
        outcome.history.append(state)
        logger.debug("pipeline.state", state=state.value, transaction_id=outcome.transaction_id)
        if self._hooks.state_changed:
            self._hooks.state_changed(state)

    def run(self, transaction_id: str) -> TransactionStatus:
        """Run the full chain; re-raises the typed error after recording FAILED."""

        outcome = QueryOutcome(
            transaction_id=transaction_id,
            state=QueryState.UNAUTHENTICATED,
            history=[QueryState.UNAUTHENTICATED],
        )
        self.outcome = outcome

        try:
            credentials = self._store.retrieve()
            self._advance(outcome, QueryState.CREDENTIALS_LOADED)

            token = get_access_token(
                credentials.consumer_key,
                credentials.consumer_secret,
                self._token_url,
                client=self._client,
                settings=self._settings,
            )
            self._advance(outcome, QueryState.TOKEN_ACQUIRED)

            self._advance(outcome, QueryState.QUERY_ISSUED)
            status = query_transaction(
                token,
                transaction_id,
                self._config,
                url=self._query_url,
                client=self._client,
                settings=self._settings,
            )
        except MpesaCLIError as exc:
            outcome.error = exc
            self._advance(outcome, QueryState.FAILED)
            raise

        outcome.status = status
        self._advance(outcome, QueryState.SUCCEEDED)
        return status
