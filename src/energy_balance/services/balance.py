"""Intake-versus-target summaries and daily macro readouts."""

from collections.abc import Iterable, Mapping

from energy_balance.domain.energy import (
    CalorieBalanceDay,
    CalorieBalanceSummary,
    MacroSummary,
)
from energy_balance.services.fields import parse_number
from energy_balance.services.inference import infer_target, parse_intake


def compute_calorie_balance(
    entries: Iterable[Mapping[str, object]], explicit_target: float | None = None
) -> CalorieBalanceSummary:
    """Compare each day's intake with an explicit or inferred target."""
    per_day: list[CalorieBalanceDay] = []
    for entry in entries:
        intake = parse_intake(entry)
        inferred = infer_target(entry)
        if explicit_target is not None:
            target: float | None = explicit_target
            target_source = "explicit"
        elif inferred is not None:
            target = inferred.target
            target_source = inferred.source
        else:
            target = None
            target_source = "none"
        net = intake - target if intake is not None and target is not None else None
        per_day.append(
            CalorieBalanceDay(
                date=_entry_date(entry),
                calories=intake,
                target_calories=target,
                net_calories=net,
                status=_status(net),
                target_source=target_source,
            )
        )

    nets = [day.net_calories for day in per_day if day.net_calories is not None]
    total_net = sum(nets)
    return CalorieBalanceSummary(
        days=len(per_day),
        days_with_target=len(nets),
        total_net_calories=total_net,
        total_deficit_calories=sum(abs(net) for net in nets if net < 0),
        total_surplus_calories=sum(net for net in nets if net > 0),
        trend=_status(total_net),
        per_day=per_day,
    )


def summarize_macros(entry: Mapping[str, object], day: str | None = None) -> MacroSummary:
    """Return calories and macros for a single export row."""
    return MacroSummary(
        date=_entry_date(entry) or day,
        calories=parse_number(entry.get("calories")),
        protein=parse_number(entry.get("protein")),
        carbs=parse_number(entry.get("carbs")),
        fat=parse_number(entry.get("fat")),
        raw=dict(entry),
    )


def _status(net: float | None) -> str:
    if net is None:
        return "unknown"
    if net > 0:
        return "surplus"
    if net < 0:
        return "deficit"
    return "at_target"


def _entry_date(entry: Mapping[str, object]) -> str | None:
    value = entry.get("date")
    return value if isinstance(value, str) and value else None
