"""Entry point de la CLI (Typer).

Comandos:
- `login`: pide consumer key/secret, los valida contra Daraja y los guarda
  en el keychain.
- `doctor`: diagnósticos de configuración, keychain y tokens.
- `transactions query --id <ID>`: estado de una transacción.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from cli import __version__, doctor, transactions
from cli.context import CLIState, get_state
from cli.ui_components import print_banner, print_error, spinner
from core.config import resolve_config
from core.domain.environment import Environment
from core.errors import CredentialStoreError, MpesaCLIError
from core.logging import setup_logging
from core.services.account import login as login_service

app = typer.Typer(
    name="mpesa-cli",
    no_args_is_help=True,
    help="A command-line interface for M-Pesa (Daraja) API operations.\n\n"
    "Get started by running: mpesa-cli login",
)
app.add_typer(doctor.app, name="doctor")
app.add_typer(transactions.app, name="transactions")

_console = Console()
_err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"mpesa-cli {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Config file (default: mpesa-cli.yaml in ., ~/.config/mpesa-cli or /etc/mpesa-cli).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging on stderr."),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    state = get_state(ctx)
    if config is not None:
        state.config_path = config
    setup_logging("DEBUG" if verbose else state.settings.log_level, state.settings.log_json)


@app.command()
def login(
    ctx: typer.Context,
    environment: Optional[Environment] = typer.Option(
        None,
        "--environment",
        "-e",
        case_sensitive=False,
        help="Environment to validate against (default: from configuration).",
    ),
) -> None:
    """Authenticate with the M-Pesa API and store credentials in the keychain."""

    state: CLIState = get_state(ctx)

    if environment is None:
        try:
            environment = resolve_config(state.config_path).api_environment
        except MpesaCLIError as exc:
            print_error(_err_console, "Could not load configuration.", exc)
            raise typer.Exit(code=1)

    print_banner(_console)
    _console.print("First, please enter your credentials from the Daraja Portal.")
    consumer_key = typer.prompt("? Consumer Key").strip()
    consumer_secret = typer.prompt("? Consumer Secret", hide_input=True).strip()
    if not consumer_key or not consumer_secret:
        raise typer.BadParameter("consumer key and consumer secret are required")

    try:
        with spinner(_err_console, f"Authenticating with M-Pesa ({environment.label()})..."):
            login_service(
                consumer_key,
                consumer_secret,
                state.store,
                environment.token_url,
                settings=state.settings,
                client=state.client,
            )
    except CredentialStoreError as exc:
        print_error(_err_console, "Failed to store credentials.", exc)
        raise typer.Exit(code=1)
    except MpesaCLIError as exc:
        print_error(_err_console, "Authentication failed.", exc)
        raise typer.Exit(code=1)

    _console.print("[green]✔ Authentication successful![/green]")
    _console.print("✅ Your credentials have been securely stored.")
    _console.print("💡 Tip: Run `mpesa-cli doctor` to check your connection.")


def run() -> None:
    # Windows consoles default to cp1252 and cannot print the status emoji.
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")
    app()


if __name__ == "__main__":
    run()
