"""Domain models for daily energy expenditure and balance."""

from collections.abc import Mapping
from dataclasses import dataclass, field

BMR = "bmr"
TEF = "tef"
EXERCISE = "exercise"
TRACKER_ACTIVITY = "trackerActivity"
BASELINE = "baseline"

CORE_COMPONENTS: tuple[str, ...] = (BMR, TEF, EXERCISE, TRACKER_ACTIVITY)
ALL_COMPONENTS: tuple[str, ...] = (*CORE_COMPONENTS, BASELINE)


@dataclass(frozen=True)
class FieldMatch:
    """Numeric value found under one of several alias keys."""

    value: float
    matched_key: str


@dataclass(frozen=True)
class ExpenditureComponents:
    """Expenditure components extracted for one calendar day.

    Values are magnitudes; an absent component is ``None``.
    """

    components: Mapping[str, float | None]
    missing_components: list[str]
    has_all_core_components: bool
    component_total_core: float
    component_total_with_baseline: float

    def get(self, name: str) -> float | None:
        """Return the magnitude of a component, if present."""
        return self.components.get(name)


@dataclass(frozen=True)
class DirectExpenditureSignal:
    """A single aggregate expenditure figure reported by a source."""

    total_burned_magnitude: float
    raw_signed_total: float


@dataclass(frozen=True)
class TargetInference:
    """Energy target inferred from an export record."""

    target: float
    source: str


@dataclass(frozen=True)
class BurnedInference:
    """Direct burned figure inferred from an export record."""

    burned: float
    source: str


@dataclass(frozen=True)
class ScrapedEnergyEntry:
    """Raw figures read from a rendered diary page for one day."""

    date: str | None
    bmr: float | None = None
    tef: float | None = None
    exercise: float | None = None
    tracker_activity: float | None = None
    baseline: float | None = None
    energy_burned: float | None = None
    energy_balance: float | None = None

    def as_record(self) -> dict[str, object]:
        """Return the entry keyed by its wire field names."""
        return {
            "date": self.date,
            BMR: self.bmr,
            TEF: self.tef,
            EXERCISE: self.exercise,
            TRACKER_ACTIVITY: self.tracker_activity,
            BASELINE: self.baseline,
            "energyBurned": self.energy_burned,
            "energyBalance": self.energy_balance,
        }


@dataclass(frozen=True)
class NormalizedScrapedDay:
    """Scraped day with component totals and a resolved burn candidate."""

    date: str | None
    components: ExpenditureComponents
    energy_burned: DirectExpenditureSignal | None
    energy_balance: float | None
    burn_candidates: Mapping[str, float | None]
    resolved_burned_source: str | None
    resolved_burned_total: float


@dataclass(frozen=True)
class ExerciseDayTotals:
    """Exercise-log calories summed for one date."""

    date: str
    burned_calories: float
    burned_raw_calories: float
    entries: int


@dataclass(frozen=True)
class ReconciledDay:
    """Best-estimate energy balance for one day, with provenance."""

    date: str | None
    consumed_calories: float
    burned_calories: float | None
    burned_raw_calories: float | None
    burned_source: str
    burned_breakdown: Mapping[str, object]
    missing_burn_components: list[str]
    net_calories: float | None
    status: str


@dataclass(frozen=True)
class RangeSummary:
    """Totals, averages and data-quality counts over reconciled days."""

    days_used: int
    consumed_calories: float
    burned_calories: float
    burned_raw_calories: float
    net_calories: float
    average_net_calories_per_day: float
    average_deficit_per_day: float
    average_surplus_per_day: float
    average_status: str
    data_quality: str
    complete_component_days: int
    incomplete_component_days: int
    days_by_source: Mapping[str, int]
    missing_component_counts: Mapping[str, int]
    most_missing_component: str | None
    per_day: list[ReconciledDay] = field(default_factory=list)


@dataclass(frozen=True)
class BalancePolicy:
    """Explicit tuning values for reconciliation and balance summaries."""

    balance_ratio_min: float = 0.7
    balance_ratio_max: float = 1.8
    default_calorie_target: float | None = None


@dataclass(frozen=True)
class CalorieBalanceDay:
    """Intake compared with a calorie target for one day."""

    date: str | None
    calories: float | None
    target_calories: float | None
    net_calories: float | None
    status: str
    target_source: str


@dataclass(frozen=True)
class CalorieBalanceSummary:
    """Intake-versus-target rollup over a range."""

    days: int
    days_with_target: int
    total_net_calories: float
    total_deficit_calories: float
    total_surplus_calories: float
    trend: str
    per_day: list[CalorieBalanceDay]


@dataclass(frozen=True)
class MacroSummary:
    """Calories and macronutrients for one export day."""

    date: str | None
    calories: float | None
    protein: float | None
    carbs: float | None
    fat: float | None
    raw: Mapping[str, object]


@dataclass(frozen=True)
class EnergyBalanceReport:
    """Range summary together with the request and upstream context."""

    range_expr: str
    days_requested: int
    summary: RangeSummary
    scraped_days: int
    source_errors: Mapping[str, str]
