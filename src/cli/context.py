"""Estado compartido entre comandos de una invocación."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import httpx
import typer

from adapters.keyring_store import KeyringCredentialStore
from core.config import AppSettings
from core.interfaces.credential_store import CredentialStore


@dataclass
class CLIState:
    """Dependencias de la invocación actual.

    `client` permite inyectar un `httpx.Client` (p.ej. con `MockTransport`);
    si es `None` cada servicio abre y cierra su propio cliente.
    """

    config_path: Path | None = None
    settings: AppSettings = field(default_factory=AppSettings)
    store: CredentialStore = field(default_factory=KeyringCredentialStore)
    client: httpx.Client | None = None


def get_state(ctx: typer.Context) -> CLIState:
    root = ctx.find_root()
    if not isinstance(root.obj, CLIState):
        root.obj = CLIState()
    return root.obj
