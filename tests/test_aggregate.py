"""Tests for range aggregation."""

import pytest

from energy_balance.domain.errors import UnreconciledDaysError
from energy_balance.services.aggregate import aggregate_range
from energy_balance.services.reconcile import aggregate_exercise_by_date, reconcile_day


def _day(day: str, consumed: float, burned: float | None = None, **fields: object):  # type: ignore[no-untyped-def]
    record: dict[str, object] = {"date": day, "calories": consumed, **fields}
    if burned is not None:
        record["Energy Burned (kcal)"] = burned
    return reconcile_day(record)


def test_end_to_end_three_day_deficit() -> None:
    days = [
        _day("2026-03-01", 2200, 2500),
        _day("2026-03-02", 2000, 1800),
        _day("2026-03-03", 2100, 2100),
    ]

    summary = aggregate_range(days)

    assert [day.net_calories for day in summary.per_day] == [-300, 200, 0]
    assert summary.net_calories == -100
    assert summary.average_net_calories_per_day == -33.33
    assert summary.average_deficit_per_day == 33.33
    assert summary.average_surplus_per_day == 0
    assert summary.average_status == "deficit"
    assert summary.days_used == 3


def test_aggregate_fails_on_unreconciled_day() -> None:
    days = [_day("2026-03-01", 2200, 2500), _day("2026-03-02", 2000)]

    with pytest.raises(UnreconciledDaysError) as excinfo:
        aggregate_range(days)

    assert excinfo.value.dates == ["2026-03-02"]
    assert excinfo.value.diagnostics["daysUnreconciled"] == 1


def test_exercise_rows_without_numbers_leave_day_unreconciled() -> None:
    exercises = aggregate_exercise_by_date(
        [{"date": "2026-03-01", "caloriesBurned": None}]
    )
    day = reconcile_day(
        {"date": "2026-03-01", "calories": 2000}, None, exercises.get("2026-03-01")
    )

    with pytest.raises(UnreconciledDaysError) as excinfo:
        aggregate_range([day])

    assert excinfo.value.dates == ["2026-03-01"]


def test_empty_window_has_no_completed_days() -> None:
    summary = aggregate_range([])

    assert summary.data_quality == "no_completed_days"
    assert summary.average_net_calories_per_day == 0
    assert summary.average_status == "at_target"


def test_quality_complete_when_every_day_has_components() -> None:
    complete = {"BMR": 1500, "TEF": 200, "Exercise": 100, "Tracker Activity": 50}
    days = [
        _day("2026-03-01", 2000, **complete),
        _day("2026-03-02", 2000, **complete),
    ]

    summary = aggregate_range(days)

    assert summary.data_quality == "component_complete"
    assert summary.complete_component_days == 2
    assert summary.days_by_source == {"nutrition_components_complete": 2}
    assert summary.most_missing_component is None


def test_quality_incomplete_and_missing_counts() -> None:
    days = [
        _day("2026-03-01", 2000, BMR=1500, Exercise=100),
        _day("2026-03-02", 2000, BMR=1500, TEF=150),
        _day("2026-03-03", 2000, 2400),
    ]

    summary = aggregate_range(days)

    assert summary.data_quality == "component_incomplete"
    assert summary.incomplete_component_days == 3
    assert summary.missing_component_counts == {
        "tef": 1,
        "trackerActivity": 2,
        "exercise": 1,
    }
    assert summary.most_missing_component == "trackerActivity"


def test_surplus_average() -> None:
    summary = aggregate_range([_day("2026-03-01", 2500, 2000)])

    assert summary.average_net_calories_per_day == 500
    assert summary.average_surplus_per_day == 500
    assert summary.average_deficit_per_day == 0
    assert summary.average_status == "surplus"
