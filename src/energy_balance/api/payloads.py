"""JSON payload builders for API responses."""

from energy_balance.domain.energy import (
    CalorieBalanceSummary,
    EnergyBalanceReport,
    MacroSummary,
    ReconciledDay,
)

WEEKLY_DEFICIT_FORMULA = (
    "(trailing calories consumed total - trailing calories burned total) / daysUsed"
)
WEEKLY_DEFICIT_NOTES = [
    "completed days only are included; today is excluded",
    "burnedCalories prefers scraped diary figures, then nutrition export "
    "components, then the export burned column, then absolute exercise "
    "caloriesBurned",
    "burnedRawCalories preserves raw source sign/value",
    "if averageNetCaloriesPerDay is positive, that is an average surplus",
]


def reconciled_day_payload(day: ReconciledDay) -> dict[str, object]:
    """Serialize one reconciled day."""
    return {
        "date": day.date,
        "consumedCalories": day.consumed_calories,
        "burnedCalories": day.burned_calories,
        "burnedRawCalories": day.burned_raw_calories,
        "burnedSource": day.burned_source,
        "burnedBreakdown": dict(day.burned_breakdown),
        "missingBurnComponents": day.missing_burn_components,
        "netCalories": day.net_calories,
        "status": day.status,
    }


def weekly_deficit_payload(report: EnergyBalanceReport) -> dict[str, object]:
    """Serialize a weekly average deficit report."""
    summary = report.summary
    return {
        "range": report.range_expr,
        "daysRequested": report.days_requested,
        "daysUsed": summary.days_used,
        "completedOnly": True,
        "formula": WEEKLY_DEFICIT_FORMULA,
        "totals": {
            "consumedCalories": summary.consumed_calories,
            "burnedCalories": summary.burned_calories,
            "burnedRawCalories": summary.burned_raw_calories,
            "netCalories": summary.net_calories,
        },
        "averageNetCaloriesPerDay": summary.average_net_calories_per_day,
        "averageDeficitPerDay": summary.average_deficit_per_day,
        "averageSurplusPerDay": summary.average_surplus_per_day,
        "averageStatus": summary.average_status,
        "dataQuality": {
            "tier": summary.data_quality,
            "completeComponentDays": summary.complete_component_days,
            "incompleteComponentDays": summary.incomplete_component_days,
            "daysBySource": dict(summary.days_by_source),
            "missingComponentCounts": dict(summary.missing_component_counts),
            "mostMissingComponent": summary.most_missing_component,
            "scrapedDays": report.scraped_days,
            "sourceErrors": dict(report.source_errors),
        },
        "notes": WEEKLY_DEFICIT_NOTES,
        "perDay": [reconciled_day_payload(day) for day in summary.per_day],
    }


def calorie_balance_payload(
    range_expr: str, explicit_target: float | None, summary: CalorieBalanceSummary
) -> dict[str, object]:
    """Serialize an intake-versus-target summary."""
    if explicit_target is None:
        notes = (
            "No explicit target provided. API attempts to infer target calories "
            "from export columns when possible."
        )
    else:
        notes = "Using explicit calorie target for all days."
    return {
        "range": range_expr,
        "explicitTargetCalories": explicit_target,
        "notes": notes,
        "days": summary.days,
        "daysWithTarget": summary.days_with_target,
        "totalNetCalories": summary.total_net_calories,
        "totalDeficitCalories": summary.total_deficit_calories,
        "totalSurplusCalories": summary.total_surplus_calories,
        "trend": summary.trend,
        "perDay": [
            {
                "date": day.date,
                "calories": day.calories,
                "targetCalories": day.target_calories,
                "netCalories": day.net_calories,
                "status": day.status,
                "targetSource": day.target_source,
            }
            for day in summary.per_day
        ],
    }


def macros_payload(macros: MacroSummary) -> dict[str, object]:
    """Serialize a daily macro readout."""
    return {
        "date": macros.date,
        "calories": macros.calories,
        "protein": macros.protein,
        "carbs": macros.carbs,
        "fat": macros.fat,
        "raw": dict(macros.raw),
    }
