"""Modelos del dominio (Pydantic v2).

Nota:
- Estos modelos describen *qué* intercambia la CLI con Daraja, no *cómo* se
  obtiene (HTTP/keyring viven en `adapters`).
- Los modelos de petición/respuesta usan alias con las claves JSON exactas de
  la API (`ConversationID`, `QueueTimeOutURL`, ...).
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from core.domain.environment import Environment

COMMAND_ID = "TransactionStatusQuery"
IDENTIFIER_TYPE = "4"
DEFAULT_REMARKS = "Status Check"
DEFAULT_OCCASION = "Verification"

DEFAULT_INITIATOR = "testapi"
DEFAULT_RESULT_URL = "https://domain.com/result"
DEFAULT_QUEUE_TIMEOUT_URL = "https://domain.com/timeout"
SANDBOX_SHORTCODE = "600986"
SANDBOX_SECURITY_CREDENTIAL = "YourSecurityCredential"


class Credentials(BaseModel):
    """Par consumer key/secret emitido por el portal Daraja."""

    model_config = ConfigDict(frozen=True)

    consumer_key: str = Field(
        ...,
        min_length=1,
        description="Consumer Key de la app en el portal Daraja.",
    )
    consumer_secret: str = Field(
        ...,
        min_length=1,
        repr=False,
        description="Consumer Secret asociado a la key.",
    )


class AccessToken(BaseModel):
    """Bearer token de vida corta. Solo vive en memoria durante una invocación."""

    value: str = Field(
        ...,
        min_length=1,
        repr=False,
        description="Valor del bearer token (`access_token`).",
    )
    expires_in: int | None = Field(
        default=None,
        description="Segundos de validez declarados por la API (`expires_in`).",
    )


class MpesaConfig(BaseModel):
    """Configuración resuelta para una invocación de la CLI."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    business_shortcode: str = Field(
        default="",
        description="Paybill/Buygoods shortcode de la organización (PartyA).",
    )
    security_credential: str = Field(
        default="",
        description="Credencial cifrada del iniciador de la consulta.",
    )
    environment: str = Field(
        default=Environment.SANDBOX.value,
        description="Entorno Daraja: 'sandbox' o 'production'.",
    )
    initiator: str = Field(
        default=DEFAULT_INITIATOR,
        description="Nombre del iniciador de la petición.",
    )
    result_url: str = Field(
        default=DEFAULT_RESULT_URL,
        description="Callback donde Daraja publica el resultado.",
    )
    queue_timeout_url: str = Field(
        default=DEFAULT_QUEUE_TIMEOUT_URL,
        description="Callback para peticiones que expiran en cola.",
    )

    @property
    def api_environment(self) -> Environment:
        """Environment enum for endpoint selection (requires a validated config)."""

        return Environment(self.environment)


def default_config() -> MpesaConfig:
    """Configuración por defecto para pruebas contra sandbox."""

    return MpesaConfig(
        business_shortcode=SANDBOX_SHORTCODE,
        security_credential=SANDBOX_SECURITY_CREDENTIAL,
        environment=Environment.SANDBOX.value,
        initiator=DEFAULT_INITIATOR,
        result_url=DEFAULT_RESULT_URL,
        queue_timeout_url=DEFAULT_QUEUE_TIMEOUT_URL,
    )


class TransactionStatusRequest(BaseModel):
    """Cuerpo JSON de `POST /mpesa/transactionstatus/v1/query`."""

    model_config = ConfigDict(populate_by_name=True)

    initiator: str = Field(..., alias="Initiator")
    security_credential: str = Field(..., alias="SecurityCredential")
    command_id: str = Field(default=COMMAND_ID, alias="CommandID")
    transaction_id: str = Field(..., min_length=1, pattern=r"\S", alias="TransactionID")
    party_a: str = Field(..., alias="PartyA")
    identifier_type: str = Field(default=IDENTIFIER_TYPE, alias="IdentifierType")
    result_url: str = Field(..., alias="ResultURL")
    queue_timeout_url: str = Field(..., alias="QueueTimeOutURL")
    remarks: str = Field(default=DEFAULT_REMARKS, alias="Remarks")
    occasion: str = Field(default=DEFAULT_OCCASION, alias="Occasion")

    @classmethod
    def from_config(cls, transaction_id: str, config: MpesaConfig) -> "TransactionStatusRequest":
        """En sandbox, shortcode y credencial vacíos toman los valores de prueba
        de `default_config()`; en producción la validación ya los exige.
        """

        shortcode = config.business_shortcode
        credential = config.security_credential
        if config.environment == Environment.SANDBOX.value:
            defaults = default_config()
            shortcode = shortcode or defaults.business_shortcode
            credential = credential or defaults.security_credential

        # TODO: derive SecurityCredential by encrypting the initiator password
        # with the Daraja public certificate instead of sending it as configured.
        return cls(
            initiator=config.initiator,
            security_credential=credential,
            transaction_id=transaction_id,
            party_a=shortcode,
            result_url=config.result_url,
            queue_timeout_url=config.queue_timeout_url,
        )

    def to_payload(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class TransactionStatus(BaseModel):
    """Respuesta síncrona de Daraja a la consulta de estado."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    conversation_id: str = Field(default="", alias="ConversationID")
    originator_conversation_id: str = Field(default="", alias="OriginatorConversationID")
    response_code: str = Field(default="", alias="ResponseCode")
    response_description: str = Field(default="", alias="ResponseDescription")
