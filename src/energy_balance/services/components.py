"""Expenditure component extraction from export rows and scraped entries."""

from collections.abc import Mapping

from energy_balance.domain.energy import (
    ALL_COMPONENTS,
    BASELINE,
    BMR,
    CORE_COMPONENTS,
    EXERCISE,
    TEF,
    TRACKER_ACTIVITY,
    ExpenditureComponents,
)
from energy_balance.services.fields import extract_field

# Export labels first, then the scraped-entry field name.
COMPONENT_ALIASES: Mapping[str, tuple[str, ...]] = {
    BMR: (
        "BMR (kcal)",
        "Basal Metabolic Rate",
        "BMR",
        "Resting Metabolic Rate",
        "RMR",
        BMR,
    ),
    TEF: (
        "TEF (kcal)",
        "Thermic Effect of Food",
        "Thermal Effect of Food",
        "TEF",
        TEF,
    ),
    EXERCISE: (
        "Exercise (kcal)",
        "Exercise",
        "Exercises",
        "Active Exercise",
        "Workout",
        EXERCISE,
    ),
    TRACKER_ACTIVITY: (
        "Tracker Activity (kcal)",
        "Tracker Activity",
        "Tracker Calories",
        "Daily Activity",
        "Activity",
        TRACKER_ACTIVITY,
    ),
    BASELINE: (
        "Baseline Activity (kcal)",
        "Baseline",
        "Baseline Activity",
        "Resting Expenditure",
        BASELINE,
    ),
}


def extract_components(
    record: object,
    aliases: Mapping[str, tuple[str, ...]] = COMPONENT_ALIASES,
) -> ExpenditureComponents:
    """Extract the five expenditure components from a daily record."""
    values: dict[str, float | None] = {}
    for name in ALL_COMPONENTS:
        match = extract_field(record, aliases.get(name, ()))
        values[name] = abs(match.value) if match else None
    return build_components(values)


def build_components(values: Mapping[str, float | None]) -> ExpenditureComponents:
    """Compute totals and missing components for component magnitudes."""
    components = {name: values.get(name) for name in ALL_COMPONENTS}
    missing = [name for name in CORE_COMPONENTS if components[name] is None]
    total_core = sum(components[name] or 0.0 for name in CORE_COMPONENTS)
    return ExpenditureComponents(
        components=components,
        missing_components=missing,
        has_all_core_components=not missing,
        component_total_core=total_core,
        component_total_with_baseline=total_core + (components[BASELINE] or 0.0),
    )
