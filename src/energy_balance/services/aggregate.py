"""Range statistics over reconciled days."""

from collections import Counter
from collections.abc import Sequence

from energy_balance.domain.energy import RangeSummary, ReconciledDay
from energy_balance.domain.errors import UnreconciledDaysError
from energy_balance.services.reconcile import (
    COMPLETE_SOURCES,
    NO_SOURCE,
    balance_status,
)

COMPONENT_COMPLETE = "component_complete"
COMPONENT_INCOMPLETE = "component_incomplete"
NO_COMPLETED_DAYS = "no_completed_days"

_PRECISION = 2


def aggregate_range(days: Sequence[ReconciledDay]) -> RangeSummary:
    """Fold reconciled days into totals, averages and data-quality counts.

    Raises ``UnreconciledDaysError`` if any day has no burned source; such a
    day is never counted as zero.
    """
    unreconciled = [day for day in days if day.burned_source == NO_SOURCE]
    if unreconciled:
        raise UnreconciledDaysError(
            [day.date for day in unreconciled],
            {"daysRequested": len(days), "daysUnreconciled": len(unreconciled)},
        )

    days_used = len(days)
    consumed = sum(day.consumed_calories for day in days)
    burned = sum(day.burned_calories or 0.0 for day in days)
    burned_raw = sum(day.burned_raw_calories or 0.0 for day in days)
    net = consumed - burned
    average = round(net / days_used, _PRECISION) if days_used else 0.0

    complete_days = sum(1 for day in days if day.burned_source in COMPLETE_SOURCES)
    incomplete_days = days_used - complete_days
    if not days_used:
        quality = NO_COMPLETED_DAYS
    elif incomplete_days:
        quality = COMPONENT_INCOMPLETE
    else:
        quality = COMPONENT_COMPLETE

    missing_counts = Counter(
        name for day in days for name in day.missing_burn_components
    )
    most_missing = missing_counts.most_common(1)[0][0] if missing_counts else None

    return RangeSummary(
        days_used=days_used,
        consumed_calories=round(consumed, _PRECISION),
        burned_calories=round(burned, _PRECISION),
        burned_raw_calories=round(burned_raw, _PRECISION),
        net_calories=round(net, _PRECISION),
        average_net_calories_per_day=average,
        average_deficit_per_day=abs(average) if average < 0 else 0.0,
        average_surplus_per_day=average if average > 0 else 0.0,
        average_status=balance_status(average),
        data_quality=quality,
        complete_component_days=complete_days,
        incomplete_component_days=incomplete_days,
        days_by_source=dict(Counter(day.burned_source for day in days)),
        missing_component_counts=dict(missing_counts),
        most_missing_component=most_missing,
        per_day=list(days),
    )
