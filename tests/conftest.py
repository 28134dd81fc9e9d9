"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import date

import pytest

from energy_balance.adapters.crono_cli import NutritionExportClient
from energy_balance.adapters.scrape_client import EnergyScraper
from energy_balance.config import Settings, balance_policy
from energy_balance.containers import AppContainer
from energy_balance.domain.errors import CronoCommandError
from energy_balance.services.energy import EnergyBalanceService
from energy_balance.services.records import RecordsService

TODAY = date(2026, 3, 5)


@dataclass
class FakeExportClient(NutritionExportClient):
    """Export client returning canned rows per export type."""

    rows: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    failures: dict[str, Exception] = field(default_factory=dict)
    calls: list[tuple[str, str | None, str | None]] = field(default_factory=list)
    records: dict[str, object] = field(default_factory=dict)
    csv_text: str = ""
    crono_version: str | None = None

    async def export_rows(
        self,
        export_type: str,
        *,
        date: str | None = None,
        range_expr: str | None = None,
    ) -> list[dict[str, object]]:
        self.calls.append((export_type, date, range_expr))
        if export_type in self.failures:
            raise self.failures[export_type]
        return self.rows.get(export_type, [])

    async def export_json(
        self,
        export_type: str,
        *,
        date: str | None = None,
        range_expr: str | None = None,
    ) -> object:
        return await self.export_rows(export_type, date=date, range_expr=range_expr)

    async def export_csv(
        self,
        export_type: str,
        *,
        date: str | None = None,
        range_expr: str | None = None,
    ) -> str:
        self.calls.append((f"{export_type}.csv", date, range_expr))
        return self.csv_text

    async def read_records(
        self,
        command: str,
        *,
        date: str | None = None,
        range_expr: str | None = None,
    ) -> object:
        self.calls.append((command, date, range_expr))
        if command in self.failures:
            raise self.failures[command]
        return self.records.get(command)

    def version(self) -> str | None:
        return self.crono_version


@dataclass
class FakeScraper(EnergyScraper):
    """Scraper returning canned entries and recording requested dates."""

    entries: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None
    requested: list[list[str]] = field(default_factory=list)

    async def scrape_energy(self, dates: list[str]) -> list[dict[str, object]]:
        self.requested.append(list(dates))
        if self.error is not None:
            raise self.error
        return [entry for entry in self.entries if entry.get("date") in dates]


def nutrition_row(day: str, calories: float, **fields: object) -> dict[str, object]:
    """Build a completed nutrition export row."""
    return {"date": day, "calories": calories, "Completed": "true", **fields}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_key="test-key",
        bin="/usr/bin/false",
        timezone="UTC",
    )


@pytest.fixture
def export_client() -> FakeExportClient:
    return FakeExportClient()


@pytest.fixture
def scraper() -> FakeScraper:
    return FakeScraper()


@pytest.fixture
def energy_service(
    settings: Settings, export_client: FakeExportClient, scraper: FakeScraper
) -> EnergyBalanceService:
    return EnergyBalanceService(
        export_client=export_client,
        scraper=scraper,
        policy=balance_policy(settings),
        today=lambda: TODAY,
        retry_delay_seconds=0,
    )


@pytest.fixture
def records_service(export_client: FakeExportClient) -> RecordsService:
    return RecordsService(export_client=export_client)


@pytest.fixture
def container(
    settings: Settings,
    export_client: FakeExportClient,
    scraper: FakeScraper,
    energy_service: EnergyBalanceService,
    records_service: RecordsService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        export_client=export_client,
        scraper=scraper,
        energy_service=energy_service,
        records_service=records_service,
        close_resources=close_resources,
    )


@pytest.fixture
def crono_failure() -> CronoCommandError:
    return CronoCommandError(502, "crono command failed", {"exitCode": 1})


@pytest.fixture
def make_row():  # type: ignore[no-untyped-def]
    return nutrition_row


@pytest.fixture
def today() -> date:
    return TODAY
