"""Componentes de UI para CLI (Rich).

Tablas, paneles y el spinner viven aquí para que los comandos solo orquesten.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from rich.align import Align
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.status import Status
from rich.table import Table
from rich.text import Text

from core.domain.models import TransactionStatus
from core.errors import CredentialsNotFoundError, MpesaCLIError
from core.services.account import HealthCheck


def print_banner(console: Console) -> None:
    title = Text("M-Pesa CLI", style="bold green")
    subtitle = Text("Daraja API • Credentials • Transaction status", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="green", padding=(1, 4)))


@contextmanager
def spinner(console: Console, message: str) -> Iterator[Status]:
    """Spinner en segundo plano ligado a un bloque `with`.

    El hilo de refresco de Rich se detiene al salir del bloque, tanto si el
    cuerpo termina bien como si lanza una excepción.
    """

    status = console.status(escape(message), spinner="dots")
    status.start()
    try:
        yield status
    finally:
        status.stop()


def build_status_table(transaction_id: str, status: TransactionStatus) -> Table:
    table = Table(title=f"Transaction {transaction_id}", show_header=False)
    table.add_column("Field", style="bright_green", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Response Code", status.response_code)
    table.add_row("Description", status.response_description)
    table.add_row("Conversation ID", status.conversation_id)
    table.add_row("Originator Conversation ID", status.originator_conversation_id)
    return table


def build_health_table(checks: list[HealthCheck]) -> Table:
    table = Table(title="M-Pesa CLI Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    for check in checks:
        if check.ok:
            label = "[green]OK[/green]"
        elif check.required:
            label = "[red]FAIL[/red]"
        else:
            label = "[yellow]WARN[/yellow]"
        table.add_row(check.name, label, escape(check.detail))
    return table


def print_error(console: Console, headline: str, error: MpesaCLIError) -> None:
    """Una línea de diagnóstico más la causa; pista de login si faltan credenciales."""

    console.print(f"[red]❌ {escape(headline)}[/red]")
    console.print(f"Error: {escape(error.message)}", soft_wrap=True)
    if isinstance(error, CredentialsNotFoundError):
        console.print("💡 Tip: Run `mpesa-cli login` to store your Daraja credentials.")
