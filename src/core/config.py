"""Configuración del Core.

Dos piezas distintas:
- `AppSettings` (pydantic-settings): ajustes de ejecución de la propia CLI
  (timeouts HTTP, User-Agent, logging) con prefijo `MPESA_CLI_`.
- `resolve_config`: construye la `MpesaConfig` de Daraja a partir de defaults,
  un fichero YAML y variables `MPESA_*`. Es una función pura: recibe las rutas
  de búsqueda y una instantánea del entorno, y devuelve un valor nuevo.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path

import yaml
from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.environment import Environment
from core.domain.models import MpesaConfig
from core.errors import ConfigError, ConfigParseError, ConfigValidationError
from core.logging import get_logger

CONFIG_NAME = "mpesa-cli"
CONFIG_EXTENSIONS = (".yaml", ".yml")
ENV_PREFIX = "MPESA_"

# Explicit bindings: config key -> environment variable.
ENV_BINDINGS: dict[str, str] = {
    key: f"{ENV_PREFIX}{key.upper()}"
    for key in (
        "environment",
        "business_shortcode",
        "security_credential",
        "initiator",
        "result_url",
        "queue_timeout_url",
    )
}

CONFIG_TEMPLATE = """\
# M-Pesa CLI Configuration File
# Copy this file to ~/.config/mpesa-cli/mpesa-cli.yaml and customize

# Your M-Pesa environment: "sandbox" or "production"
environment: sandbox

# Your business shortcode (required for production)
# business_shortcode: "123456"

# Your security credential (required for production)
# security_credential: "your-encrypted-credential"

# API initiator name (optional, defaults to "testapi")
# initiator: "your-initiator-name"

# Callback URLs for transaction results (optional)
# result_url: "https://yourdomain.com/mpesa/result"
# queue_timeout_url: "https://yourdomain.com/mpesa/timeout"
"""

logger = get_logger(__name__)


class AppSettings(BaseSettings):
    """Ajustes de ejecución de la CLI (no de la cuenta Daraja)."""

    model_config = SettingsConfigDict(
        env_prefix="MPESA_CLI_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout por request contra Daraja (segundos).",
    )
    user_agent: str = Field(
        default="mpesa-cli/0.1",
        min_length=1,
        description="User-Agent para las peticiones HTTP.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging (DEBUG, INFO, WARNING, ERROR).",
    )
    log_json: bool = Field(
        default=False,
        description="Emitir logs como JSON en lugar de formato consola.",
    )


def default_search_paths(home: Path | None = None) -> list[Path]:
    """Directorios donde se busca `mpesa-cli.yaml`, en orden de prioridad."""

    home = home or Path.home()
    return [
        Path("."),
        home / ".config" / CONFIG_NAME,
        Path("/etc") / CONFIG_NAME,
    ]


def find_config_file(search_paths: Sequence[Path]) -> Path | None:
    for directory in search_paths:
        for ext in CONFIG_EXTENSIONS:
            candidate = directory / f"{CONFIG_NAME}{ext}"
            if candidate.is_file():
                return candidate
    return None


def load_config_file(path: Path) -> dict[str, object]:
    """Lee un YAML clave/valor. Un documento vacío equivale a `{}`."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to read config file {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigParseError(f"failed to read config file {path}: {exc}", details={"path": str(path)}) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigParseError(
            f"failed to read config file {path}: expected a mapping, got {type(data).__name__}",
            details={"path": str(path)},
        )
    return {str(k): v for k, v in data.items()}


def env_overrides(environ: Mapping[str, str]) -> dict[str, str]:
    # Empty variables count as unset.
    return {key: environ[var] for key, var in ENV_BINDINGS.items() if environ.get(var)}


def validate_config(config: MpesaConfig) -> None:
    """Reglas de negocio sobre una configuración ya fusionada."""

    valid = {env.value for env in Environment}
    if config.environment not in valid:
        raise ConfigValidationError(
            f"environment must be either 'sandbox' or 'production', got: {config.environment}",
            field="environment",
        )

    if config.environment == Environment.PRODUCTION.value:
        if not config.business_shortcode:
            raise ConfigValidationError(
                "business_shortcode is required for production environment",
                field="business_shortcode",
            )
        if not config.security_credential:
            raise ConfigValidationError(
                "security_credential is required for production environment",
                field="security_credential",
            )


def resolve_config(
    explicit_path: Path | str | None = None,
    *,
    search_paths: Sequence[Path] | None = None,
    environ: Mapping[str, str] | None = None,
) -> MpesaConfig:
    """Resuelve defaults → fichero → variables de entorno → validación.

    - `explicit_path` (p.ej. `--config`) debe existir; sin él se usa el primer
      fichero encontrado en `search_paths`. No encontrar ninguno no es error.
    - `environ` es la instantánea de variables; por defecto `os.environ`.
    """

    environ = os.environ if environ is None else environ
    merged: dict[str, object] = {}

    if explicit_path is not None:
        path: Path | None = Path(explicit_path)
        if not path.is_file():
            raise ConfigError(f"config file not found: {path}", details={"path": str(path)})
    else:
        path = find_config_file(default_search_paths() if search_paths is None else search_paths)

    if path is not None:
        logger.debug("config.file_loaded", path=str(path))
        merged.update({k: v for k, v in load_config_file(path).items() if v is not None})

    overrides = env_overrides(environ)
    if overrides:
        logger.debug("config.env_overrides", keys=sorted(overrides))
    merged.update(overrides)

    try:
        config = MpesaConfig.model_validate(merged)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "config"
        raise ConfigValidationError(f"invalid value for {field}: {first.get('msg')}", field=field) from exc

    validate_config(config)
    return config


def write_config_template(path: Path) -> Path:
    """Crea un fichero de configuración de ejemplo (permisos 0600)."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    path.chmod(0o600)
    return path
