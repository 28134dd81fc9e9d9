"""Loosely-typed numeric field extraction."""

import math
import re
from collections.abc import Iterable, Mapping

from energy_balance.domain.energy import FieldMatch

_MINUS_VARIANTS = re.compile("[−–—]")


def parse_number(value: object) -> float | None:
    """Parse a number from a native value or formatted text.

    Text may use thousands separators and unicode minus signs.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None
    cleaned = _MINUS_VARIANTS.sub("-", value).replace(",", "").strip()
    if not cleaned:
        return None
    try:
        number = float(cleaned)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def extract_field(record: object, keys: Iterable[str]) -> FieldMatch | None:
    """Return the first alias key whose value parses to a finite number."""
    if not isinstance(record, Mapping):
        return None
    for key in keys:
        if key not in record:
            continue
        value = parse_number(record[key])
        if value is not None:
            return FieldMatch(value=value, matched_key=key)
    return None
