"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from energy_balance.adapters.crono_cli import (
    NutritionExportClient,
    SubprocessCronoClient,
)
from energy_balance.adapters.scrape_client import (
    EnergyScraper,
    HttpxEnergyScrapeClient,
)
from energy_balance.config import Settings, balance_policy, cli_environment
from energy_balance.services.energy import EnergyBalanceService
from energy_balance.services.records import RecordsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    export_client: NutritionExportClient
    scraper: EnergyScraper | None
    energy_service: EnergyBalanceService
    records_service: RecordsService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    export_client = SubprocessCronoClient.create(
        resolved_settings.bin,
        timeout_ms=resolved_settings.cli_timeout_ms,
        env=cli_environment(resolved_settings),
        package_json=resolved_settings.package_json,
    )
    scraper = None
    if resolved_settings.scrape_url:
        scraper = HttpxEnergyScrapeClient.create(
            resolved_settings.scrape_url,
            token=resolved_settings.scrape_token,
            timeout_seconds=resolved_settings.scrape_timeout_seconds,
        )
    energy_service = EnergyBalanceService(
        export_client=export_client,
        scraper=scraper,
        policy=balance_policy(resolved_settings),
        timezone_name=resolved_settings.timezone,
        retry_attempts=resolved_settings.retry_attempts,
        retry_delay_seconds=resolved_settings.retry_delay_seconds,
    )

    async def close_resources() -> None:
        await export_client.close()
        if scraper is not None:
            await scraper.close()

    return AppContainer(
        settings=resolved_settings,
        export_client=export_client,
        scraper=scraper,
        energy_service=energy_service,
        records_service=RecordsService(export_client=export_client),
        close_resources=close_resources,
    )
