import pytest

from core.domain.plan_table import (
    CUSTOM_ESTIMATE,
    ESTIMATE_OPTIONS,
    NO_ESTIMATE,
    PlanRow,
    Section,
    apply_duration,
    apply_estimate_label,
    format_minutes_hhmm,
    label_to_minutes,
    minutes_to_label,
    parse_time_value,
    section_total_minutes,
)


def test_vocabulary():
    assert ESTIMATE_OPTIONS[:3] == ["-", "Custom", "1 Minute"]
    assert "55 Minutes" in ESTIMATE_OPTIONS
    assert "1 Hour" in ESTIMATE_OPTIONS
    assert ESTIMATE_OPTIONS[-1] == "8 Hours"
    assert len(ESTIMATE_OPTIONS) == 22


@pytest.mark.parametrize("label", [l for l in ESTIMATE_OPTIONS if l != CUSTOM_ESTIMATE])
def test_labels_and_minutes_are_inverses(label):
    assert minutes_to_label(label_to_minutes(label)) == label


def test_label_to_minutes():
    assert label_to_minutes(NO_ESTIMATE) == 0
    assert label_to_minutes("15 Minutes") == 15
    assert label_to_minutes("3 Hours") == 180
    assert label_to_minutes(CUSTOM_ESTIMATE) is None
    assert label_to_minutes("3 Minutes") is None
    assert label_to_minutes("") is None


def test_off_vocabulary_minutes_map_to_custom():
    assert minutes_to_label(7) == CUSTOM_ESTIMATE
    assert minutes_to_label(90) == CUSTOM_ESTIMATE
    assert minutes_to_label(9 * 60) == CUSTOM_ESTIMATE
    assert minutes_to_label(0) == NO_ESTIMATE
    assert minutes_to_label(None) == NO_ESTIMATE


def test_format_minutes_hhmm():
    assert format_minutes_hhmm(0) == "0.00"
    assert format_minutes_hhmm(5) == "0.05"
    assert format_minutes_hhmm(75) == "1.15"
    assert format_minutes_hhmm(600) == "10.00"


@pytest.mark.parametrize("text, minutes", [
    ("1.15", 75),
    ("1.5", 110),
    ("0.75", 59),
    ("2", 120),
    ("1_0.30", 90),
    ("1.3x", 63),
    ("2h", 120),
    ("1.2.3", 80),
    (" 1.", 60),
    ("abc", 0),
    ("", 0),
    (None, 0),
])
def test_parse_time_value(text, minutes):
    assert parse_time_value(text) == minutes


def test_estimate_label_derives_duration():
    row = PlanRow()

    assert apply_estimate_label(row, "15 Minutes").cells[4] == "0.15"
    assert apply_estimate_label(row, "2 Hours").cells[4] == "2.00"
    assert apply_estimate_label(row, NO_ESTIMATE).cells[4] == "0.00"
    assert apply_estimate_label(row, CUSTOM_ESTIMATE).cells[4] == "0.00"
    assert row.cells[3] == ""


def test_duration_only_editable_for_custom():
    row = apply_estimate_label(PlanRow(), "15 Minutes")
    assert apply_duration(row, "1.00") is None

    custom = apply_estimate_label(PlanRow(), CUSTOM_ESTIMATE)
    edited = apply_duration(custom, "1.3")
    assert edited.cells[4] == "1.30"
    assert edited.cells[3] == CUSTOM_ESTIMATE


def test_section_total_minutes(table):
    table.rows[8].cells[4] = "0.30"
    table.rows[11].cells[4] = "1.45"

    assert section_total_minutes(table, Section.NEEDS_PLANS) == 30
    assert section_total_minutes(table, Section.SCHEDULE) == 105
    assert section_total_minutes(table, Section.SUBPROJECTS) == 0
