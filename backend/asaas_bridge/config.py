from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_ASAAS_BASE_URL = "https://api.asaas.com/v3"


class ConfigurationError(RuntimeError):
    """Raised when the process environment cannot produce valid settings."""


class LinkStrategy(str, Enum):
    payment_link = "payment_link"
    first_payment = "first_payment"


@dataclass(frozen=True)
class PlanConfig:
    value: Decimal
    description: str


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=(".env", "../.env"), extra="ignore", frozen=True)

    asaas_token: str = Field(
        min_length=1,
        validation_alias=AliasChoices("ASAAS_TOKEN", "ASAAS_API_KEY"),
    )
    plan_value: Decimal = Field(gt=0, validation_alias="PLAN_VALUE")
    plan_description: str = Field(min_length=1, validation_alias="PLAN_DESCRIPTION")
    port: int = Field(default=4000, validation_alias="PORT")
    asaas_base_url: str = Field(
        default=DEFAULT_ASAAS_BASE_URL, validation_alias="ASAAS_BASE_URL"
    )
    asaas_timeout_seconds: float = Field(
        default=10.0, gt=0, validation_alias="ASAAS_TIMEOUT_SECONDS"
    )
    checkout_link_strategy: LinkStrategy = Field(
        default=LinkStrategy.payment_link, validation_alias="CHECKOUT_LINK_STRATEGY"
    )
    cors_allow_origins: Annotated[list[str], NoDecode] = Field(
        default=["*"], validation_alias="CORS_ALLOW_ORIGINS"
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    sentry_dsn: str | None = Field(
        default=None, validation_alias=AliasChoices("SENTRY_DSN", "BACKEND_SENTRY_DSN")
    )
    sentry_traces_sample_rate: float = Field(
        default=0.0,
        validation_alias=AliasChoices(
            "SENTRY_TRACES_SAMPLE_RATE",
            "BACKEND_SENTRY_TRACES_SAMPLE_RATE",
        ),
    )

    @field_validator("asaas_token", "plan_description", mode="before")
    @classmethod
    def _strip(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("asaas_base_url", mode="after")
    @classmethod
    def _trim_base_url(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level", mode="after")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def plan(self) -> PlanConfig:
        return PlanConfig(value=self.plan_value, description=self.plan_description)


def _describe_errors(exc: ValidationError) -> list[str]:
    problems: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "settings"
        if error.get("type") == "missing":
            problems.append(f"{location} is required")
        else:
            problems.append(f"{location}: {error.get('msg')}")
    return problems


def load_settings(**overrides) -> Settings:
    """
    Build settings from the environment, turning validation failures into a
    single diagnostic that names every missing or invalid variable.
    """
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        problems = "; ".join(_describe_errors(exc))
        raise ConfigurationError(f"Invalid configuration: {problems}") from exc


__all__ = [
    "ConfigurationError",
    "DEFAULT_ASAAS_BASE_URL",
    "LinkStrategy",
    "PlanConfig",
    "Settings",
    "load_settings",
]
