"""Per-day reconciliation of burned calories across data sources."""

import logging
from collections.abc import Iterable, Mapping

from energy_balance.domain.energy import (
    BMR,
    TEF,
    ExerciseDayTotals,
    ExpenditureComponents,
    NormalizedScrapedDay,
    ReconciledDay,
)
from energy_balance.services.components import extract_components
from energy_balance.services.fields import parse_number
from energy_balance.services.inference import infer_burned, parse_intake

SCRAPE_ENERGY_BURNED_TOTAL = "scrape_energy_burned_total"
SCRAPE_COMPONENTS_COMPLETE = "scrape_components_complete"
SCRAPE_COMPONENTS_PARTIAL = "scrape_components_partial"
NUTRITION_COMPONENTS_COMPLETE = "nutrition_components_complete"
NUTRITION_COMPONENTS_PARTIAL = "nutrition_components_partial"
EXERCISE_EXPORT_ABS = "exercise_export_abs"
NO_SOURCE = "none"

COMPLETE_SOURCES = frozenset(
    {
        SCRAPE_ENERGY_BURNED_TOTAL,
        SCRAPE_COMPONENTS_COMPLETE,
        NUTRITION_COMPONENTS_COMPLETE,
    }
)

_logger = logging.getLogger(__name__)


def aggregate_exercise_by_date(
    exercises: Iterable[Mapping[str, object]],
) -> dict[str, ExerciseDayTotals]:
    """Sum exercise-log calories per date, keeping magnitude and sign.

    Rows without a date or without a numeric calorie figure are skipped, so a
    date only appears when at least one row carried a usable number.
    """
    totals: dict[str, ExerciseDayTotals] = {}
    for entry in exercises:
        day = entry.get("date")
        if not isinstance(day, str) or not day:
            continue
        raw = parse_number(entry.get("caloriesBurned"))
        if raw is None:
            continue
        existing = totals.get(day)
        if existing is None:
            existing = ExerciseDayTotals(
                date=day, burned_calories=0.0, burned_raw_calories=0.0, entries=0
            )
        totals[day] = ExerciseDayTotals(
            date=day,
            burned_calories=existing.burned_calories + abs(raw),
            burned_raw_calories=existing.burned_raw_calories + raw,
            entries=existing.entries + 1,
        )
    return totals


def reconcile_day(
    export_record: Mapping[str, object],
    scraped: NormalizedScrapedDay | None = None,
    exercise: ExerciseDayTotals | None = None,
) -> ReconciledDay:
    """Choose one burned-calorie figure for a day and record where it came from.

    Sources are tried in order: scraped burned total, scraped components
    (complete, then partial), export components (complete, then partial),
    the export's direct burned column, then the summed exercise log.
    """
    day = _resolve_date(export_record, scraped, exercise)
    consumed = parse_intake(export_record) or 0.0

    if scraped is not None:
        if scraped.energy_burned and scraped.energy_burned.total_burned_magnitude > 0:
            signal = scraped.energy_burned
            return _build_day(
                day,
                consumed,
                burned=signal.total_burned_magnitude,
                burned_raw=signal.raw_signed_total,
                source=SCRAPE_ENERGY_BURNED_TOTAL,
                breakdown={
                    "energyBurned": signal.total_burned_magnitude,
                    "burnCandidates": dict(scraped.burn_candidates),
                    "resolvedBurnedSource": scraped.resolved_burned_source,
                    "resolvedBurnedTotal": scraped.resolved_burned_total,
                    **_component_breakdown(scraped.components),
                },
                missing=[],
            )
        from_scrape = _from_components(
            day,
            consumed,
            scraped.components,
            complete_source=SCRAPE_COMPONENTS_COMPLETE,
            partial_source=SCRAPE_COMPONENTS_PARTIAL,
        )
        if from_scrape is not None:
            return from_scrape

    from_export = _from_components(
        day,
        consumed,
        extract_components(export_record),
        complete_source=NUTRITION_COMPONENTS_COMPLETE,
        partial_source=NUTRITION_COMPONENTS_PARTIAL,
    )
    if from_export is not None:
        return from_export

    inferred = infer_burned(export_record)
    if inferred is not None:
        return _build_day(
            day,
            consumed,
            burned=abs(inferred.burned),
            burned_raw=inferred.burned,
            source=inferred.source,
            breakdown={"field": inferred.source.removeprefix("entry:")},
            missing=[],
        )

    if exercise is not None and exercise.entries > 0:
        return _build_day(
            day,
            consumed,
            burned=exercise.burned_calories,
            burned_raw=exercise.burned_raw_calories,
            source=EXERCISE_EXPORT_ABS,
            breakdown={
                "exerciseEntries": exercise.entries,
                "exerciseCalories": exercise.burned_calories,
            },
            missing=[BMR, TEF],
        )

    _logger.warning("No burned-calorie source for day %s", day)
    return ReconciledDay(
        date=day,
        consumed_calories=consumed,
        burned_calories=None,
        burned_raw_calories=None,
        burned_source=NO_SOURCE,
        burned_breakdown={},
        missing_burn_components=[],
        net_calories=None,
        status="unknown",
    )


def balance_status(net: float) -> str:
    """Return the balance status label for a net calorie value."""
    if net < 0:
        return "deficit"
    if net > 0:
        return "surplus"
    return "at_target"


def _from_components(
    day: str | None,
    consumed: float,
    components: ExpenditureComponents,
    *,
    complete_source: str,
    partial_source: str,
) -> ReconciledDay | None:
    if components.component_total_core <= 0:
        return None
    total = components.component_total_with_baseline
    return _build_day(
        day,
        consumed,
        burned=total,
        burned_raw=total,
        source=complete_source if components.has_all_core_components else partial_source,
        breakdown=_component_breakdown(components),
        missing=components.missing_components,
    )


def _component_breakdown(components: ExpenditureComponents) -> dict[str, object]:
    return {
        "components": dict(components.components),
        "componentTotalCore": components.component_total_core,
        "componentTotalWithBaseline": components.component_total_with_baseline,
    }


def _build_day(  # noqa: PLR0913
    day: str | None,
    consumed: float,
    *,
    burned: float,
    burned_raw: float,
    source: str,
    breakdown: dict[str, object],
    missing: list[str],
) -> ReconciledDay:
    net = consumed - burned
    return ReconciledDay(
        date=day,
        consumed_calories=consumed,
        burned_calories=burned,
        burned_raw_calories=burned_raw,
        burned_source=source,
        burned_breakdown=breakdown,
        missing_burn_components=list(missing),
        net_calories=net,
        status=balance_status(net),
    )


def _resolve_date(
    export_record: Mapping[str, object],
    scraped: NormalizedScrapedDay | None,
    exercise: ExerciseDayTotals | None,
) -> str | None:
    value = export_record.get("date")
    if isinstance(value, str) and value:
        return value
    if scraped is not None and scraped.date:
        return scraped.date
    return exercise.date if exercise is not None else None
