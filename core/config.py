"""Configuration models and loading."""

import os
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Annotated, Literal

from dotenv import dotenv_values
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError

from core.exceptions import ConfigurationError

ENV_FILE = Path.cwd() / ".env"
WEBHOOK_PREFIX = "MAKE_WEBHOOK_"

DEFAULT_CORS_ORIGINS = (
    "https://www.monsalonfidele.com",
    "http://localhost:3000",
    "http://localhost:8000",
)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ServerSettings(_Frozen):
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS


class AirtableSettings(_Frozen):
    api_url: str = "https://api.airtable.com/v0"
    base_id: str = ""
    token: str = ""


class WebhookSettings(_Frozen):
    urls: Annotated[Mapping[str, str], AfterValidator(MappingProxyType)] = Field(
        default_factory=lambda: MappingProxyType({})
    )

    def resolve(self, name: str) -> tuple[str, str | None]:
        """Return (config key, URL or None) for a webhook name, case-insensitively."""
        key = webhook_key(name)
        return key, self.urls.get(key)


class GatewaySettings(_Frozen):
    record_response: Literal["record", "envelope"] = "record"


class Config(_Frozen):
    server: ServerSettings = Field(default_factory=ServerSettings)
    airtable: AirtableSettings = Field(default_factory=AirtableSettings)
    webhooks: WebhookSettings = Field(default_factory=WebhookSettings)
    gateway: GatewaySettings = Field(default_factory=GatewaySettings)


def webhook_key(name: str) -> str:
    return f"{WEBHOOK_PREFIX}{name.upper()}"


def load_config(
    environ: Mapping[str, str] | None = None,
    env_file: Path | None = ENV_FILE,
) -> Config:
    """Build the process configuration from a .env file and the environment.

    Values in ``environ`` (``os.environ`` by default) win over the .env file.
    """
    values: dict[str, str] = {}
    if env_file is not None and env_file.exists():
        values.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    values.update(os.environ if environ is None else environ)

    server: dict[str, object] = {}
    if values.get("HOST"):
        server["host"] = values["HOST"]
    if values.get("PORT"):
        server["port"] = values["PORT"]
    if values.get("CORS_ORIGINS"):
        server["cors_origins"] = tuple(
            origin.strip() for origin in values["CORS_ORIGINS"].split(",") if origin.strip()
        )

    airtable: dict[str, str] = {
        "base_id": values.get("AIRTABLE_BASE", ""),
        "token": values.get("AIRTABLE_TOKEN", ""),
    }
    if values.get("AIRTABLE_API_URL"):
        airtable["api_url"] = values["AIRTABLE_API_URL"].rstrip("/")

    gateway: dict[str, str] = {}
    if values.get("GATEWAY_RECORD_RESPONSE"):
        gateway["record_response"] = values["GATEWAY_RECORD_RESPONSE"].strip().lower()

    try:
        return Config(
            server=ServerSettings.model_validate(server),
            airtable=AirtableSettings.model_validate(airtable),
            webhooks=WebhookSettings(urls=_collect_webhooks(values)),
            gateway=GatewaySettings.model_validate(gateway),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _collect_webhooks(values: Mapping[str, str]) -> dict[str, str]:
    """Collect every non-empty MAKE_WEBHOOK_<NAME> setting, keyed in upper case."""
    urls = {}
    for key, value in values.items():
        upper = key.upper()
        if upper.startswith(WEBHOOK_PREFIX) and len(upper) > len(WEBHOOK_PREFIX) and value:
            urls[upper] = value.strip()
    return urls
