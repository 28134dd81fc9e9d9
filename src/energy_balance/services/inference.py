"""Target and direct burned-calorie inference from export rows."""

from energy_balance.domain.energy import BurnedInference, TargetInference
from energy_balance.services.fields import extract_field, parse_number

TARGET_KEYS: tuple[str, ...] = (
    "Energy Target (kcal)",
    "Calorie Target (kcal)",
    "Calories Target",
    "Target Calories",
    "Energy Budget (kcal)",
)
REMAINING_KEYS: tuple[str, ...] = (
    "Energy Remaining (kcal)",
    "Calories Remaining",
    "Remaining Calories",
)
BURNED_KEYS: tuple[str, ...] = (
    "Energy Burned (kcal)",
    "Calories Burned (kcal)",
    "Expenditure (kcal)",
    "Total Burned (kcal)",
    "Burned (kcal)",
    "TDEE (kcal)",
    "Total Energy Expenditure (kcal)",
)
INTAKE_KEY = "calories"


def infer_target(record: object) -> TargetInference | None:
    """Infer a calorie target from explicit or remaining-budget fields."""
    direct = extract_field(record, TARGET_KEYS)
    if direct:
        return TargetInference(target=direct.value, source=f"entry:{direct.matched_key}")

    remaining = extract_field(record, REMAINING_KEYS)
    intake = parse_intake(record)
    if remaining and intake is not None:
        return TargetInference(
            target=intake + remaining.value,
            source=f"derived:{INTAKE_KEY}+{remaining.matched_key}",
        )
    return None


def infer_burned(record: object) -> BurnedInference | None:
    """Return an explicit aggregate burned figure, if the export has one."""
    direct = extract_field(record, BURNED_KEYS)
    if direct:
        return BurnedInference(burned=direct.value, source=f"entry:{direct.matched_key}")
    return None


def parse_intake(record: object) -> float | None:
    """Return the day's calorie intake from an export row."""
    match = extract_field(record, (INTAKE_KEY,))
    return match.value if match else None
