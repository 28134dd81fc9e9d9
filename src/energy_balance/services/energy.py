"""Energy balance service combining export, scrape and exercise sources."""

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from energy_balance.adapters.crono_cli import NutritionExportClient
from energy_balance.adapters.scrape_client import EnergyScraper
from energy_balance.domain.energy import (
    BalancePolicy,
    CalorieBalanceSummary,
    EnergyBalanceReport,
    MacroSummary,
    NormalizedScrapedDay,
)
from energy_balance.domain.errors import NoExportDataError, UnreconciledDaysError
from energy_balance.services.aggregate import aggregate_range
from energy_balance.services.balance import compute_calorie_balance, summarize_macros
from energy_balance.services.reconcile import aggregate_exercise_by_date, reconcile_day
from energy_balance.services.scrape_text import (
    normalize_dates,
    normalize_scraped_entry,
    scraped_entry_from_record,
)

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable

Rows = list[dict[str, object]]


@dataclass
class EnergyBalanceService:
    """Service that fetches day records and reconciles them into summaries."""

    export_client: NutritionExportClient
    scraper: EnergyScraper | None = None
    policy: BalancePolicy = field(default_factory=BalancePolicy)
    timezone_name: str = "UTC"
    today: Callable[[], date] | None = None
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def weekly_average_deficit(
        self, days: int = 7, range_expr: str | None = None, *, use_scrape: bool = True
    ) -> EnergyBalanceReport:
        """Return the average daily net calories over completed past days."""
        resolved_range = range_expr or f"{days}d"
        source_errors: dict[str, str] = {}

        nutrition, exercises = await asyncio.gather(
            self._call_with_retry(
                lambda: self.export_client.export_rows(
                    "nutrition", range_expr=resolved_range
                ),
                action="export nutrition",
            ),
            self._call_with_retry(
                lambda: self.export_client.export_rows(
                    "exercises", range_expr=resolved_range
                ),
                action="export exercises",
            ),
            return_exceptions=True,
        )
        if isinstance(nutrition, BaseException):
            raise nutrition
        if isinstance(exercises, BaseException):
            if not isinstance(exercises, Exception):
                raise exercises
            _logger.warning("Exercise export unavailable: %s", exercises)
            source_errors["exercises"] = str(exercises)
            exercises = []

        today = self._today().isoformat()
        completed = [
            entry
            for entry in nutrition
            if _is_completed(entry) and entry.get("date") != today
        ]

        scraped: dict[str, NormalizedScrapedDay] = {}
        if use_scrape and self.scraper is not None:
            scraped, scrape_error = await self._scrape(
                [entry.get("date") for entry in completed]
            )
            if scrape_error:
                source_errors["scrape"] = scrape_error

        exercise_totals = aggregate_exercise_by_date(exercises)
        reconciled = []
        for entry in completed:
            day = entry.get("date")
            key = day if isinstance(day, str) else ""
            reconciled.append(
                reconcile_day(entry, scraped.get(key), exercise_totals.get(key))
            )

        try:
            summary = aggregate_range(reconciled)
        except UnreconciledDaysError as exc:
            raise exc.with_diagnostics(
                range=resolved_range,
                attemptedSources=_attempted_sources(
                    self.scraper is not None and use_scrape
                ),
                sourceErrors=dict(source_errors),
            ) from exc

        return EnergyBalanceReport(
            range_expr=resolved_range,
            days_requested=days,
            summary=summary,
            scraped_days=len(scraped),
            source_errors=source_errors,
        )

    async def calorie_balance(
        self, days: int = 7, range_expr: str | None = None, target: float | None = None
    ) -> tuple[str, float | None, CalorieBalanceSummary]:
        """Return intake versus target per day for a range."""
        resolved_range = range_expr or f"{days}d"
        explicit_target = (
            target if target is not None else self.policy.default_calorie_target
        )
        rows = await self._call_with_retry(
            lambda: self.export_client.export_rows(
                "nutrition", range_expr=resolved_range
            ),
            action="export nutrition",
        )
        return (
            resolved_range,
            explicit_target,
            compute_calorie_balance(rows, explicit_target),
        )

    async def today_macros(self, day: str | None = None) -> MacroSummary:
        """Return calories and macros for one day (today by default)."""
        rows = await self._call_with_retry(
            lambda: self.export_client.export_rows("nutrition", date=day),
            action="export nutrition",
        )
        if not rows:
            raise NoExportDataError("No nutrition data returned")
        return summarize_macros(rows[0], day)

    async def _scrape(
        self, dates: list[object]
    ) -> tuple[dict[str, NormalizedScrapedDay], str | None]:
        """Scrape dates newest first; failures leave the scrape tiers empty."""
        ordered = normalize_dates(dates)
        if not ordered or self.scraper is None:
            return {}, None
        try:
            raw_entries = await self.scraper.scrape_energy(ordered)
        except Exception as exc:
            _logger.warning("Energy scrape failed for %s dates: %s", len(ordered), exc)
            return {}, str(exc)

        scraped: dict[str, NormalizedScrapedDay] = {}
        for raw in raw_entries:
            normalized = normalize_scraped_entry(
                scraped_entry_from_record(raw), self.policy
            )
            if normalized.date:
                scraped[normalized.date] = normalized
        _logger.info("Scraped %s of %s requested days", len(scraped), len(ordered))
        return scraped, None

    def _today(self) -> date:
        if self.today is not None:
            return self.today()
        return datetime.now(tz=ZoneInfo(self.timezone_name)).date()

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[Rows]]", *, action: str
    ) -> Rows:
        """Call an upstream fetch with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Upstream %s failed (attempt %s/%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _is_completed(entry: Mapping[str, object]) -> bool:
    return str(entry.get("Completed", "")).strip().lower() == "true"


def _attempted_sources(scrape_enabled: bool) -> list[str]:
    sources = ["nutrition_components", "nutrition_burned_field", "exercise_export"]
    return ["scrape", *sources] if scrape_enabled else sources
