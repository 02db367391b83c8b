from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from idrepo.constants import CREATE, DEACTIVATE, READ, REACTIVATE, UPDATE


def _default_response_ids() -> dict[str, str]:
    return {
        READ: "mosip.id.read",
        CREATE: "mosip.id.create",
        UPDATE: "mosip.id.update",
        DEACTIVATE: "mosip.id.deactivate",
        REACTIVATE: "mosip.id.reactivate",
    }


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Pydantic Settings automatically reads env vars matching field names (case-insensitive).
    In development, it also reads from .env file if present.

    response_ids is replaced as a whole, either with RESPONSE_IDS='{"read": "..."}'
    or with one variable per key (RESPONSE_IDS__READ=..., RESPONSE_IDS__CREATE=...).
    """

    # Version marker written into every response envelope
    app_version: str = "v1"

    # Operation name -> response identifier
    response_ids: dict[str, str] = Field(default_factory=_default_response_ids)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )


@dataclass(frozen=True)
class ResponseConfig:
    """Read-only view of the settings the response builder needs.

    Built once at startup and shared by every request; ``ids`` is a
    read-only mapping so no request can change it.
    """

    ids: Mapping[str, str]
    version: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResponseConfig":
        return cls(ids=MappingProxyType(dict(settings.response_ids)), version=settings.app_version)


settings = Settings()
