"""Transaction commands."""

from __future__ import annotations

import json

import typer
from rich.console import Console

from cli.context import get_state
from cli.ui_components import build_status_table, print_error, spinner
from core.config import resolve_config
from core.errors import ConfigError, MpesaCLIError
from core.services.transaction_query import PipelineHooks, QueryState, TransactionQueryPipeline

app = typer.Typer(no_args_is_help=True, help="Manage M-Pesa transactions.")

_console = Console()
_err_console = Console(stderr=True)

_STATE_MESSAGES = {
    QueryState.CREDENTIALS_LOADED: "Requesting access token...",
    QueryState.TOKEN_ACQUIRED: "Access token acquired...",
    QueryState.QUERY_ISSUED: "Querying transaction status...",
}


def _transaction_id_callback(value: str) -> str:
    value = value.strip()
    if not value:
        raise typer.BadParameter("transaction ID must not be empty")
    return value


@app.command()
def query(
    ctx: typer.Context,
    transaction_id: str = typer.Option(
        ...,
        "--id",
        "-i",
        callback=_transaction_id_callback,
        help="The ID of the transaction to query.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw Daraja response as JSON."),
) -> None:
    """Query the status of an M-Pesa transaction by its ID."""

    state = get_state(ctx)

    try:
        config = resolve_config(state.config_path)
    except ConfigError as exc:
        print_error(_err_console, "Could not load configuration.", exc)
        raise typer.Exit(code=1)

    try:
        with spinner(_err_console, f"Querying status for transaction ID: {transaction_id}") as status_line:
            def on_state(new_state: QueryState) -> None:
                if new_state in _STATE_MESSAGES:
                    status_line.update(_STATE_MESSAGES[new_state])

            pipeline = TransactionQueryPipeline(
                state.store,
                config,
                settings=state.settings,
                client=state.client,
                hooks=PipelineHooks(state_changed=on_state),
            )
            result = pipeline.run(transaction_id)
    except MpesaCLIError as exc:
        print_error(_err_console, "Query failed.", exc)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result.model_dump(by_alias=True), indent=2))
        return

    _console.print("[green]✔ Query successful![/green]")
    _console.print(build_status_table(transaction_id, result))
