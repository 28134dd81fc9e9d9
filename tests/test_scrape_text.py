"""Tests for scraped page parsing and scraped-day normalization."""

from energy_balance.domain.energy import BalancePolicy, ScrapedEnergyEntry
from energy_balance.domain.scrape import DomCandidate, ScrapeMatchConfig
from energy_balance.services.scrape_text import (
    SCRAPE_LABELS,
    extract_energy_summary,
    extract_metric,
    normalize_dates,
    normalize_scraped_entry,
    number_after_label,
    scraped_entry_from_record,
)

PAGE_TEXT = """Energy Summary
Basal Metabolic Rate 1,650 kcal
Thermic Effect of Food 210 kcal
Exercise 300 kcal
Tracker Activity 250 kcal
Energy Burned 2,410 kcal
Energy Balance -410 kcal"""


def test_extract_metric_finds_number_after_label() -> None:
    value = extract_metric("Summary\nBMR 1,650 kcal\n", [], SCRAPE_LABELS["bmr"])

    assert value == 1650


def test_extract_metric_finds_number_before_label() -> None:
    value = extract_metric("1,820 kcal Energy Burned", [], ["Energy Burned"])

    assert value == 1820


def test_extract_metric_is_case_insensitive_and_reads_unicode_minus() -> None:
    value = extract_metric("energy balance: −250 kcal", [], ["Energy Balance"])

    assert value == -250


def test_extract_metric_respects_label_window() -> None:
    far = "Exercise " + "x" * 150 + " 300"

    assert extract_metric(far, [], ["Exercise"]) is None


def test_extract_metric_does_not_cross_lines() -> None:
    assert extract_metric("Exercise\n300", [], ["Exercise"]) is None


def test_extract_metric_window_size_is_configurable() -> None:
    text = "Exercise total: 300"

    assert extract_metric(text, [], ["Exercise"]) == 300
    narrow = ScrapeMatchConfig(label_window_chars=5)
    assert extract_metric(text, [], ["Exercise"], config=narrow) is None


def test_extract_metric_matchers_are_pluggable() -> None:
    text = "1,820 kcal Energy Burned"

    assert (
        extract_metric(text, [], ["Energy Burned"], matchers=(number_after_label,))
        is None
    )


def test_extract_metric_falls_back_to_visible_dom_candidates() -> None:
    candidates = [
        DomCandidate(text="Energy Balance 999", width=0, height=0),
        DomCandidate(
            text="Energy Balance 888", width=10, height=10, display="none"
        ),
        DomCandidate(
            text="Energy Balance 777", width=10, height=10, visibility="hidden"
        ),
        DomCandidate(text="Energy Balance " + "y" * 400 + " 666", width=5, height=5),
        DomCandidate(
            text="Energy Balance",
            width=10,
            height=10,
            ancestor_text="Energy Balance: -250 kcal",
        ),
    ]

    value = extract_metric("Energy Balance\nnothing here", candidates, ["Energy Balance"])

    assert value == -250


def test_extract_metric_prefers_candidate_own_text() -> None:
    candidates = [
        DomCandidate(
            text="Exercise 320 kcal",
            width=10,
            height=10,
            ancestor_text="Exercise 999 kcal",
        )
    ]

    assert extract_metric("", candidates, ["Exercise"]) == 320


def test_extract_metric_truncates_ancestor_text() -> None:
    candidates = [
        DomCandidate(
            text="Exercise",
            width=10,
            height=10,
            ancestor_text="Exercise" + "\n" * 1000 + "Exercise 300",
        )
    ]

    assert extract_metric("", candidates, ["Exercise"]) is None


def test_extract_metric_returns_none_when_label_absent() -> None:
    candidates = [DomCandidate(text="Protein 120 g", width=10, height=10)]

    assert extract_metric("Protein 120 g", candidates, ["Energy Burned"]) is None


def test_extract_energy_summary_reads_all_figures() -> None:
    entry = extract_energy_summary("2026-03-01", PAGE_TEXT, [])

    assert entry.date == "2026-03-01"
    assert entry.bmr == 1650
    assert entry.tef == 210
    assert entry.exercise == 300
    assert entry.tracker_activity == 250
    assert entry.baseline is None
    assert entry.energy_burned == 2410
    assert entry.energy_balance == -410


def test_scraped_entry_from_record_parses_wire_values() -> None:
    entry = scraped_entry_from_record(
        {
            "date": "2026-03-01",
            "bmr": "1,500",
            "trackerActivity": None,
            "energyBurned": "−2,000",
        }
    )

    assert entry.bmr == 1500
    assert entry.tracker_activity is None
    assert entry.energy_burned == -2000


def _entry(**values: float | None) -> ScrapedEnergyEntry:
    base: dict[str, float | None] = {
        "bmr": 1500,
        "tef": 200,
        "exercise": 100,
        "tracker_activity": 200,
    }
    base.update(values)
    return ScrapedEnergyEntry(date="2026-03-01", **base)


def test_implausible_balance_is_excluded_from_resolution() -> None:
    # ratio 4500 / 2000 = 2.25 is above the 1.8 upper bound
    normalized = normalize_scraped_entry(_entry(energy_balance=4500))

    assert normalized.components.component_total_with_baseline == 2000
    assert normalized.burn_candidates["energyBalance"] is None
    assert normalized.resolved_burned_source == "componentTotalWithBaseline"
    assert normalized.resolved_burned_total == 2000


def test_balance_below_lower_ratio_is_excluded() -> None:
    normalized = normalize_scraped_entry(_entry(energy_balance=1000))

    assert normalized.burn_candidates["energyBalance"] is None


def test_balance_ratio_bounds_are_inclusive() -> None:
    at_min = normalize_scraped_entry(_entry(energy_balance=1400))
    at_max = normalize_scraped_entry(_entry(energy_balance=3600))

    assert at_min.burn_candidates["energyBalance"] == 1400
    assert at_min.resolved_burned_source == "componentTotalWithBaseline"
    assert at_max.burn_candidates["energyBalance"] == 3600
    assert at_max.resolved_burned_source == "energyBalance"
    assert at_max.resolved_burned_total == 3600


def test_balance_just_outside_ratio_bounds_is_excluded() -> None:
    below = normalize_scraped_entry(_entry(energy_balance=1399))
    above = normalize_scraped_entry(_entry(energy_balance=3601))

    assert below.burn_candidates["energyBalance"] is None
    assert above.burn_candidates["energyBalance"] is None


def test_largest_plausible_candidate_wins() -> None:
    # documented policy: the most complete-looking figure is preferred
    normalized = normalize_scraped_entry(_entry(energy_balance=2300, energy_burned=2100))

    assert normalized.burn_candidates["energyBalance"] == 2300
    assert normalized.resolved_burned_source == "energyBalance"
    assert normalized.resolved_burned_total == 2300


def test_negative_balance_is_not_a_burn_candidate() -> None:
    normalized = normalize_scraped_entry(_entry(energy_balance=-2100))

    assert normalized.burn_candidates["energyBalance"] is None
    assert normalized.energy_balance == -2100


def test_ratio_bounds_come_from_policy() -> None:
    policy = BalancePolicy(balance_ratio_min=0.7, balance_ratio_max=2.5)

    normalized = normalize_scraped_entry(_entry(energy_balance=4500), policy)

    assert normalized.resolved_burned_source == "energyBalance"
    assert normalized.resolved_burned_total == 4500


def test_energy_burned_keeps_raw_sign() -> None:
    normalized = normalize_scraped_entry(_entry(energy_burned=-2100))

    assert normalized.energy_burned is not None
    assert normalized.energy_burned.total_burned_magnitude == 2100
    assert normalized.energy_burned.raw_signed_total == -2100
    assert normalized.resolved_burned_source == "energyBurned"


def test_empty_entry_resolves_nothing() -> None:
    normalized = normalize_scraped_entry(ScrapedEnergyEntry(date="2026-03-01"))

    assert normalized.components.missing_components == [
        "bmr",
        "tef",
        "exercise",
        "trackerActivity",
    ]
    assert normalized.resolved_burned_source is None
    assert normalized.resolved_burned_total == 0


def test_normalize_dates_dedupes_and_orders_newest_first() -> None:
    dates = ["2026-03-01", " 2026-03-03 ", "bad", 5, "2026-03-01", "2026-02-30"]

    assert normalize_dates(dates) == ["2026-03-03", "2026-03-01"]
