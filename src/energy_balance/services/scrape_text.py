"""Label-driven number extraction from scraped diary pages.

Page layouts vary, so a metric is located in two passes: a scan of the whole
page text, then a scan of small visible elements that mention the label (and
their enclosing block). Matchers and label lists are plain data so each label
set can be tested on its own.
"""

import math
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date as date_type

from energy_balance.domain.energy import (
    BASELINE,
    BMR,
    EXERCISE,
    TEF,
    TRACKER_ACTIVITY,
    BalancePolicy,
    DirectExpenditureSignal,
    NormalizedScrapedDay,
    ScrapedEnergyEntry,
)
from energy_balance.domain.scrape import DomCandidate, ScrapeMatchConfig
from energy_balance.services.components import build_components
from energy_balance.services.fields import parse_number

ENERGY_BURNED = "energyBurned"
ENERGY_BALANCE = "energyBalance"
COMPONENT_TOTAL_WITH_BASELINE = "componentTotalWithBaseline"

SCRAPE_LABELS: Mapping[str, tuple[str, ...]] = {
    BMR: ("Basal Metabolic Rate", "BMR", "Resting Metabolic Rate", "RMR"),
    TEF: ("Thermic Effect of Food", "Thermal Effect of Food", "TEF"),
    EXERCISE: ("Exercise", "Exercises", "Active Exercise", "Workout"),
    TRACKER_ACTIVITY: (
        "Tracker Activity",
        "Tracker Calories",
        "Daily Activity",
        "Activity",
    ),
    BASELINE: ("Baseline", "Baseline Activity", "Base", "Resting Expenditure"),
    ENERGY_BURNED: (
        "Energy Burned",
        "Calories Burned",
        "Total Burned",
        "Burned",
        "Expenditure",
        "Energy Expenditure",
        "Total Expenditure",
    ),
    ENERGY_BALANCE: ("Energy Balance", "Calorie Balance"),
}

_NUMBER = r"([−–—-]?\d[\d,]*(?:\.\d+)?)"
_UNIT = r"\s*(?:k?cal(?:ories)?)?"
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

Matcher = Callable[[str, str, ScrapeMatchConfig], float | None]


def number_after_label(text: str, label: str, config: ScrapeMatchConfig) -> float | None:
    """Return the first number shortly after ``label`` on the same line."""
    window = config.label_window_chars
    pattern = re.compile(
        re.escape(label) + rf"[^\n\r]{{0,{window}}}?" + _NUMBER + _UNIT,
        re.IGNORECASE,
    )
    match = pattern.search(text)
    return parse_number(match.group(1)) if match else None


def number_before_label(
    text: str, label: str, config: ScrapeMatchConfig
) -> float | None:
    """Return a number shortly before ``label`` on the same line."""
    window = config.label_window_chars
    pattern = re.compile(
        _NUMBER + _UNIT + rf"[^\n\r]{{0,{window}}}?" + re.escape(label),
        re.IGNORECASE,
    )
    match = pattern.search(text)
    return parse_number(match.group(1)) if match else None


DEFAULT_MATCHERS: tuple[Matcher, ...] = (number_after_label, number_before_label)


def extract_from_text(
    text: str | None,
    labels: Iterable[str],
    config: ScrapeMatchConfig = ScrapeMatchConfig(),
    matchers: Sequence[Matcher] = DEFAULT_MATCHERS,
) -> float | None:
    """Try every matcher for each label in order and return the first hit."""
    if not text:
        return None
    for label in labels:
        for matcher in matchers:
            value = matcher(text, label, config)
            if value is not None:
                return value
    return None


def extract_metric(
    page_text: str | None,
    dom_candidates: Iterable[DomCandidate],
    labels: Sequence[str],
    config: ScrapeMatchConfig = ScrapeMatchConfig(),
    matchers: Sequence[Matcher] = DEFAULT_MATCHERS,
) -> float | None:
    """Locate the number labelled by any of ``labels`` on a rendered page."""
    direct = extract_from_text(_clean(page_text), labels, config, matchers)
    if direct is not None:
        return direct

    lowered_labels = [label.lower() for label in labels]
    for candidate in dom_candidates:
        if not candidate.visible:
            continue
        text = _clean(candidate.text)
        if not text or len(text) > config.max_candidate_text_chars:
            continue
        lowered = text.lower()
        if not any(label in lowered for label in lowered_labels):
            continue

        from_self = extract_from_text(text, labels, config, matchers)
        if from_self is not None:
            return from_self

        ancestor = _clean(candidate.ancestor_text)[: config.max_ancestor_text_chars]
        from_ancestor = extract_from_text(ancestor, labels, config, matchers)
        if from_ancestor is not None:
            return from_ancestor
    return None


def extract_energy_summary(
    date: str | None,
    page_text: str | None,
    dom_candidates: Sequence[DomCandidate],
    labels: Mapping[str, Sequence[str]] = SCRAPE_LABELS,
    config: ScrapeMatchConfig = ScrapeMatchConfig(),
) -> ScrapedEnergyEntry:
    """Read the expenditure components, total and balance off one page."""

    def metric(name: str) -> float | None:
        return extract_metric(page_text, dom_candidates, labels.get(name, ()), config)

    return ScrapedEnergyEntry(
        date=date,
        bmr=metric(BMR),
        tef=metric(TEF),
        exercise=metric(EXERCISE),
        tracker_activity=metric(TRACKER_ACTIVITY),
        baseline=metric(BASELINE),
        energy_burned=metric(ENERGY_BURNED),
        energy_balance=metric(ENERGY_BALANCE),
    )


def scraped_entry_from_record(record: Mapping[str, object]) -> ScrapedEnergyEntry:
    """Build a scraped entry from the scrape worker's JSON shape."""
    raw_date = record.get("date")
    return ScrapedEnergyEntry(
        date=raw_date if isinstance(raw_date, str) else None,
        bmr=parse_number(record.get(BMR)),
        tef=parse_number(record.get(TEF)),
        exercise=parse_number(record.get(EXERCISE)),
        tracker_activity=parse_number(record.get(TRACKER_ACTIVITY)),
        baseline=parse_number(record.get(BASELINE)),
        energy_burned=parse_number(record.get(ENERGY_BURNED)),
        energy_balance=parse_number(record.get(ENERGY_BALANCE)),
    )


def normalize_scraped_entry(
    entry: ScrapedEnergyEntry, policy: BalancePolicy = BalancePolicy()
) -> NormalizedScrapedDay:
    """Compute component totals and pick a resolved burned total.

    The resolved total is the largest positive candidate among the scraped
    burned figure, a plausible scraped balance and the component total. This
    favours the most complete-looking figure; it is a heuristic policy, not a
    derivation.
    """
    components = build_components(
        {
            BMR: _magnitude(entry.bmr),
            TEF: _magnitude(entry.tef),
            EXERCISE: _magnitude(entry.exercise),
            TRACKER_ACTIVITY: _magnitude(entry.tracker_activity),
            BASELINE: _magnitude(entry.baseline),
        }
    )
    total = components.component_total_with_baseline

    burned_signal = None
    if entry.energy_burned is not None:
        burned_signal = DirectExpenditureSignal(
            total_burned_magnitude=abs(entry.energy_burned),
            raw_signed_total=entry.energy_burned,
        )

    balance_candidate = None
    if entry.energy_balance is not None and entry.energy_balance > 0:
        balance_candidate = abs(entry.energy_balance)
        if total > 0:
            ratio = balance_candidate / total
            if ratio < policy.balance_ratio_min or ratio > policy.balance_ratio_max:
                balance_candidate = None

    candidates: dict[str, float | None] = {
        ENERGY_BURNED: burned_signal.total_burned_magnitude if burned_signal else None,
        ENERGY_BALANCE: balance_candidate,
        COMPONENT_TOTAL_WITH_BASELINE: total,
    }
    usable = [
        (name, value)
        for name, value in candidates.items()
        if value is not None and math.isfinite(value) and value > 0
    ]
    resolved = max(usable, key=lambda item: item[1]) if usable else None

    return NormalizedScrapedDay(
        date=entry.date,
        components=components,
        energy_burned=burned_signal,
        energy_balance=entry.energy_balance,
        burn_candidates=candidates,
        resolved_burned_source=resolved[0] if resolved else None,
        resolved_burned_total=resolved[1] if resolved else 0.0,
    )


def normalize_dates(dates: Iterable[object]) -> list[str]:
    """Return unique valid ``YYYY-MM-DD`` dates, newest first."""
    unique: set[str] = set()
    for value in dates:
        if not isinstance(value, str):
            continue
        trimmed = value.strip()
        if not _DATE_RE.match(trimmed):
            continue
        try:
            date_type.fromisoformat(trimmed)
        except ValueError:
            continue
        unique.add(trimmed)
    return sorted(unique, reverse=True)


def _magnitude(value: float | None) -> float | None:
    return None if value is None else abs(value)


def _clean(text: str | None) -> str:
    return (text or "").replace("\u00a0", " ").strip()
