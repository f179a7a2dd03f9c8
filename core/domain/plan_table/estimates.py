"""
Estimate label and duration normalization.

Timed rows hold a human estimate label (e.g. "15 Minutes") and a derived
duration in H.MM form (e.g. "0.15"). The label vocabulary is closed; the
sentinel "Custom" suspends derivation so the duration can be typed freely.
"""

import re
from typing import List, Optional

from .models import DURATION_COL, ESTIMATE_COL, PlanRow, PlanTable, Section, clone_row
from .bounds import compute_section_bounds


NO_ESTIMATE = "-"
CUSTOM_ESTIMATE = "Custom"
ZERO_DURATION = "0.00"


def _hour_label(hours: int) -> str:
    return f"{hours} Hour{'s' if hours > 1 else ''}"


ESTIMATE_OPTIONS: List[str] = (
    [NO_ESTIMATE, CUSTOM_ESTIMATE, "1 Minute"]
    + [f"{m} Minutes" for m in range(5, 60, 5)]
    + [_hour_label(h) for h in range(1, 9)]
)

_MINUTE_RE = re.compile(r"^(\d+)\s+Minute")
_HOUR_RE = re.compile(r"^(\d+)\s+Hour")


def label_to_minutes(label: Optional[str]) -> Optional[int]:
    """
    Convert an estimate label to minutes.

    Returns:
        Minutes for vocabulary labels ("-" is 0), None for "Custom" and
        anything outside the vocabulary
    """
    if label == NO_ESTIMATE:
        return 0
    if not label or label not in ESTIMATE_OPTIONS:
        return None
    match = _MINUTE_RE.match(label)
    if match:
        return int(match.group(1))
    match = _HOUR_RE.match(label)
    if match:
        return int(match.group(1)) * 60
    return None


def minutes_to_label(minutes: Optional[int]) -> str:
    """Convert minutes to an estimate label, or "Custom" if no label matches."""
    if not minutes:
        return NO_ESTIMATE
    if minutes == 1:
        return "1 Minute"
    if 5 <= minutes <= 55 and minutes % 5 == 0:
        return f"{minutes} Minutes"
    if minutes % 60 == 0 and 1 <= minutes // 60 <= 8:
        return _hour_label(minutes // 60)
    return CUSTOM_ESTIMATE


def format_minutes_hhmm(minutes: int) -> str:
    """Format minutes as H.MM (e.g. 75 -> '1.15')."""
    hours, mins = divmod(max(int(minutes), 0), 60)
    return f"{hours}.{mins:02d}"


_LEADING_INT_RE = re.compile(r"\s*([+-]?[0-9]+)")


def _leading_int(text: str) -> Optional[int]:
    """Integer from the leading digits of text ("3x" -> 3), None if there are none."""
    match = _LEADING_INT_RE.match(text)
    return int(match.group(1)) if match else None


def parse_time_value(value: object) -> int:
    """
    Parse an H.MM duration into minutes.

    A single minute digit is read as tens ("1.5" is 1h50m), minutes are
    clamped to 0..59, and anything unparseable counts as 0.
    """
    if value is None:
        return 0
    text = str(value).strip()
    if not text:
        return 0
    parts = text.split(".")
    hours = _leading_int(parts[0])
    if hours is None:
        return 0
    minutes = _leading_int((parts[1] if len(parts) > 1 else "0").ljust(2, "0")[:2])
    return hours * 60 + min(max(minutes or 0, 0), 59)


def apply_estimate_label(row: PlanRow, label: str) -> PlanRow:
    """
    Set a row's estimate label and re-derive its duration.

    "Custom" (and any off-vocabulary label) resets the duration to 0.00,
    ready for free-form entry.
    """
    result = clone_row(row)
    result.cells[ESTIMATE_COL] = label
    minutes = label_to_minutes(label)
    result.cells[DURATION_COL] = format_minutes_hhmm(minutes) if minutes is not None else ZERO_DURATION
    return result


def apply_duration(row: PlanRow, text: str) -> Optional[PlanRow]:
    """
    Set a row's duration directly.

    Only allowed when the estimate label is "Custom"; the duration is
    otherwise derived and read-only.

    Returns:
        New row with the normalized H.MM duration, or None if not editable
    """
    if row.cells[ESTIMATE_COL] != CUSTOM_ESTIMATE:
        return None
    result = clone_row(row)
    result.cells[DURATION_COL] = format_minutes_hhmm(parse_time_value(text))
    return result


def section_total_minutes(table: PlanTable, section: Section) -> int:
    """Sum the duration column over a section's rows."""
    bounds = compute_section_bounds(table.counts)
    return sum(
        parse_time_value(table.cell(idx, DURATION_COL))
        for idx in bounds[section]
    )
