"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from energy_balance.domain.energy import BalancePolicy

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from ``CRONO_*`` environment variables."""

    api_key: str = ""
    allow_no_api_key: bool = False
    bin: str = "/app/runtime/node_modules/.bin/crono"
    package_json: str = "/app/runtime/node_modules/@milldr/crono/package.json"
    cli_timeout_ms: int = 180_000
    kernel_api_key: str | None = None
    default_calorie_target: float | None = None
    scrape_url: str | None = None
    scrape_token: str | None = None
    scrape_timeout_seconds: float = 240.0
    timezone: str = "UTC"
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3
    balance_ratio_min: float = 0.7
    balance_ratio_max: float = 1.8
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="CRONO_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def requires_api_key(settings: Settings) -> bool:
    """Return True when requests must present the configured API key."""
    return not settings.allow_no_api_key and bool(settings.api_key.strip())


def balance_policy(settings: Settings) -> BalancePolicy:
    """Build the reconciliation policy from settings."""
    return BalancePolicy(
        balance_ratio_min=settings.balance_ratio_min,
        balance_ratio_max=settings.balance_ratio_max,
        default_calorie_target=settings.default_calorie_target,
    )


def cli_environment(settings: Settings) -> dict[str, str] | None:
    """Return the subprocess environment for the export CLI."""
    if not settings.kernel_api_key:
        return None
    return {**os.environ, "KERNEL_API_KEY": settings.kernel_api_key}
