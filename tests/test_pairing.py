from core.domain.plan_table import (
    NEEDS_PAIRING,
    OUTCOME_PAIRING,
    PairEntry,
    PlanRow,
    build_paired_groups,
    clone_table,
    ensure_pairing,
    ensure_plan_pairing,
    paired_groups_for,
)


def _rows(*pair_ids):
    return [PlanRow(pair_id=pair_id) for pair_id in pair_ids]


def _entries(*pair_ids, start=0):
    return [PairEntry(start + i, PlanRow(pair_id=pair_id)) for i, pair_id in enumerate(pair_ids)]


def test_unpaired_rows_get_shared_ids():
    result = ensure_pairing(_rows(None, None, None, None), range(0, 2), range(2, 4), prefix="outcome")

    assert result[0].pair_id == result[2].pair_id
    assert result[1].pair_id == result[3].pair_id
    assert result[0].pair_id != result[1].pair_id
    assert result[0].pair_id.startswith("outcome-")


def test_existing_id_is_propagated():
    result = ensure_pairing(_rows(None, "p1"), range(0, 1), range(1, 2))
    assert result[0].pair_id == "p1"

    result = ensure_pairing(_rows("p2", None), range(0, 1), range(1, 2))
    assert result[1].pair_id == "p2"


def test_conflicting_ids_are_left_alone():
    result = ensure_pairing(_rows("a", "b"), range(0, 1), range(1, 2))

    assert result[0].pair_id == "a"
    assert result[1].pair_id == "b"


def test_fill_down_through_unset_rows():
    result = ensure_pairing(_rows(None, None, None, None), range(0, 1), range(1, 4))

    assert result[1].pair_id == result[0].pair_id
    assert result[2].pair_id == result[0].pair_id
    assert result[3].pair_id == result[0].pair_id


def test_ensure_pairing_does_not_mutate_input():
    rows = _rows(None, None)
    ensure_pairing(rows, range(0, 1), range(1, 2))

    assert rows[0].pair_id is None
    assert rows[1].pair_id is None


def test_ensure_plan_pairing_is_idempotent(table):
    table.rows[4].pair_id = None
    table.rows[5].pair_id = None
    once = ensure_plan_pairing(table)
    twice = ensure_plan_pairing(once)

    assert twice == once
    assert once.rows[4].pair_id == once.rows[5].pair_id


def test_grouping_consumes_groups_then_fallback():
    primary = _entries("a", "b", None, "z")
    secondary = _entries("a", "a", None, "c", None, start=10)

    groups = build_paired_groups(primary, secondary)

    assert [g.primary.index for g in groups.pairs] == [0, 1, 2]
    assert [e.index for e in groups.pairs[0].secondary] == [10, 11]
    assert [e.index for e in groups.pairs[1].secondary] == [12]
    assert [e.index for e in groups.pairs[2].secondary] == [14]
    assert [e.index for e in groups.leftover_primary] == [3]
    assert [e.index for e in groups.leftover_secondary] == [13]


def test_grouping_partitions_secondary_entries():
    primary = _entries("x", None, "y")
    secondary = _entries(None, "y", "q", "x", None, "y", start=20)

    groups = build_paired_groups(primary, secondary)

    placed = [e.index for g in groups.pairs for e in g.secondary]
    placed += [e.index for e in groups.leftover_secondary]
    assert sorted(placed) == [e.index for e in secondary]
    assert len(placed) == len(set(placed))


def test_leftover_secondary_keeps_original_order():
    groups = build_paired_groups([], _entries(None, "x", None))

    assert groups.pairs == []
    assert [e.index for e in groups.leftover_secondary] == [0, 1, 2]


def test_paired_groups_for_table(table):
    paired = ensure_plan_pairing(table)

    outcome_groups = paired_groups_for(paired, OUTCOME_PAIRING)
    needs_groups = paired_groups_for(paired, NEEDS_PAIRING)

    assert outcome_groups.pairs[0].primary.index == 5
    assert [e.index for e in outcome_groups.pairs[0].secondary] == [4]
    assert needs_groups.pairs[0].primary.index == 7
    assert [e.index for e in needs_groups.pairs[0].secondary] == [8]


def test_multiple_outcomes_group_under_one_question(table):
    working = clone_table(table)
    working.rows.insert(5, PlanRow(pair_id=working.rows[4].pair_id))
    working.counts = working.counts.with_count(OUTCOME_PAIRING.secondary, 2)

    groups = paired_groups_for(working, OUTCOME_PAIRING)

    assert len(groups.pairs) == 1
    assert [e.index for e in groups.pairs[0].secondary] == [4, 5]
    assert groups.leftover_secondary == []
