"""Unit tests for the transaction query pipeline (state machine)."""

import httpx
import pytest

from conftest import MemoryCredentialStore, daraja_handler, mock_client
from core.domain.models import Credentials, MpesaConfig
from core.errors import (
    AuthRejectedError,
    CredentialsNotFoundError,
    QueryError,
    QueryRejectedError,
    QueryTransportError,
)
from core.services.transaction_query import PipelineHooks, QueryState, TransactionQueryPipeline


@pytest.fixture
def store() -> MemoryCredentialStore:
    return MemoryCredentialStore(Credentials(consumer_key="AbC123", consumer_secret="Secr3t"))


@pytest.fixture
def config() -> MpesaConfig:
    return MpesaConfig(business_shortcode="600986", security_credential="cred")


class TestTransactionQueryPipeline:
    """Tests for TransactionQueryPipeline."""

    def test_success_walks_every_state_in_order(self, store, config, settings):
        seen: list[httpx.Request] = []
        states: list[QueryState] = []
        pipeline = TransactionQueryPipeline(
            store,
            config,
            settings=settings,
            client=mock_client(daraja_handler(seen=seen)),
            hooks=PipelineHooks(state_changed=states.append),
        )

        status = pipeline.run("TX99")

        assert status.conversation_id == "C1"
        assert pipeline.outcome.state is QueryState.SUCCEEDED
        assert pipeline.outcome.history == [
            QueryState.UNAUTHENTICATED,
            QueryState.CREDENTIALS_LOADED,
            QueryState.TOKEN_ACQUIRED,
            QueryState.QUERY_ISSUED,
            QueryState.SUCCEEDED,
        ]
        assert states == pipeline.outcome.history[1:]
        # Token first, then the query, carrying that token.
        assert [r.method for r in seen] == ["GET", "POST"]
        assert seen[1].headers["Authorization"] == "Bearer tok-123"

    def test_missing_credentials_fail_before_any_request(self, config, settings):
        seen: list[httpx.Request] = []
        pipeline = TransactionQueryPipeline(
            MemoryCredentialStore(),
            config,
            settings=settings,
            client=mock_client(daraja_handler(seen=seen)),
        )

        with pytest.raises(CredentialsNotFoundError):
            pipeline.run("TX99")

        assert seen == []
        assert pipeline.outcome.state is QueryState.FAILED
        assert isinstance(pipeline.outcome.error, CredentialsNotFoundError)

    def test_rejected_token_never_issues_query(self, store, config, settings):
        seen: list[httpx.Request] = []
        pipeline = TransactionQueryPipeline(
            store,
            config,
            settings=settings,
            client=mock_client(daraja_handler(token_status=401, token_body="invalid credentials", seen=seen)),
        )

        with pytest.raises(AuthRejectedError):
            pipeline.run("TX99")

        assert [r.method for r in seen] == ["GET"]
        assert pipeline.outcome.history[-2:] == [QueryState.CREDENTIALS_LOADED, QueryState.FAILED]

    def test_query_rejection_is_terminal_without_retry(self, store, config, settings):
        seen: list[httpx.Request] = []
        pipeline = TransactionQueryPipeline(
            store,
            config,
            settings=settings,
            client=mock_client(daraja_handler(query_status=400, query_body="bad request", seen=seen)),
        )

        with pytest.raises(QueryRejectedError):
            pipeline.run("TX99")

        assert [r.method for r in seen] == ["GET", "POST"]
        assert pipeline.outcome.state is QueryState.FAILED
        assert pipeline.outcome.state.is_terminal

    def test_query_timeout_surfaces_transport_error(self, store, config, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                raise httpx.ReadTimeout("timed out", request=request)
            return daraja_handler()(request)

        pipeline = TransactionQueryPipeline(store, config, settings=settings, client=mock_client(handler))

        with pytest.raises(QueryTransportError):
            pipeline.run("TX99")

        assert pipeline.outcome.history[-2:] == [QueryState.QUERY_ISSUED, QueryState.FAILED]

    def test_credentials_read_on_every_run(self, store, config, settings):
        pipeline = TransactionQueryPipeline(
            store, config, settings=settings, client=mock_client(daraja_handler())
        )

        pipeline.run("TX1")
        pipeline.run("TX2")

        assert store.retrieve_calls == 2

    def test_token_url_follows_config_environment(self, store, settings):
        seen: list[httpx.Request] = []
        production = MpesaConfig(environment="production", business_shortcode="1", security_credential="c")
        pipeline = TransactionQueryPipeline(
            store, production, settings=settings, client=mock_client(daraja_handler(seen=seen))
        )

        pipeline.run("TX99")

        assert {r.url.host for r in seen} == {"api.safaricom.co.ke"}

    def test_blank_transaction_id_ends_in_failed(self, store, config, settings):
        seen: list[httpx.Request] = []
        pipeline = TransactionQueryPipeline(
            store, config, settings=settings, client=mock_client(daraja_handler(seen=seen))
        )

        with pytest.raises(QueryError):
            pipeline.run("")

        assert [r.method for r in seen] == ["GET"]
        assert pipeline.outcome.state is QueryState.FAILED
        assert pipeline.outcome.history[-2:] == [QueryState.QUERY_ISSUED, QueryState.FAILED]
