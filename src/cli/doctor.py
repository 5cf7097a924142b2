"""Doctor command for environment diagnostics."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from adapters.daraja_auth import get_access_token
from cli.context import get_state
from cli.ui_components import build_health_table, spinner
from core.config import CONFIG_NAME, write_config_template
from core.domain.models import AccessToken, Credentials
from core.services.account import checks_passed, run_health_checks

app = typer.Typer(
    invoke_without_command=True,
    help="Run environment and credential health checks.",
)

_console = Console()
_err_console = Console(stderr=True)


@app.callback()
def run(ctx: typer.Context) -> None:
    """Check configuration, keychain credentials and token acquisition for sandbox and production."""

    if ctx.invoked_subcommand is not None:
        return

    state = get_state(ctx)
    _console.print("🔎 Running M-Pesa CLI Environment Health Check...")

    def fetch_token(creds: Credentials, url: str) -> AccessToken:
        return get_access_token(
            creds.consumer_key,
            creds.consumer_secret,
            url,
            client=state.client,
            settings=state.settings,
        )

    with spinner(_err_console, "Contacting Daraja..."):
        checks = run_health_checks(
            state.store,
            config_path=state.config_path,
            settings=state.settings,
            fetch_token=fetch_token,
        )

    _console.print(build_health_table(checks))

    if not checks_passed(checks):
        _console.print("\n[yellow]Note:[/yellow] Run `mpesa-cli login` or fix your configuration, then try again.")
        raise typer.Exit(code=1)

    _console.print("\nHealth check complete.")


@app.command(name="init-config")
def init_config(
    path: Optional[Path] = typer.Argument(
        None,
        help="Where to write the template (default: ~/.config/mpesa-cli/mpesa-cli.yaml).",
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file."),
) -> None:
    """Write a commented sample configuration file."""

    target = path or Path.home() / ".config" / CONFIG_NAME / f"{CONFIG_NAME}.yaml"
    if target.exists() and not force:
        _console.print(f"[yellow]{target} already exists.[/yellow] Use --force to overwrite it.")
        raise typer.Exit(code=1)

    write_config_template(target)
    _console.print(f"[green]Saved config template to:[/green] {target}")
