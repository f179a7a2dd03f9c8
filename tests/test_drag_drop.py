from core.domain.plan_table import (
    CommandHistory,
    DragDropEngine,
    PlanRow,
    RowCoord,
    move_rows,
)


def _named_rows(count):
    return [PlanRow.with_text(0, f"r{i}") for i in range(count)]


def _names(rows):
    return [row.cells[0] for row in rows]


def test_move_block_downwards():
    result = move_rows(_named_rows(6), [1, 3], 5)
    assert _names(result) == ["r0", "r2", "r4", "r1", "r3", "r5"]


def test_move_single_row_upwards():
    result = move_rows(_named_rows(6), [4], 1)
    assert _names(result) == ["r0", "r4", "r1", "r2", "r3", "r5"]


def test_move_rows_keeps_length_and_input():
    rows = _named_rows(4)
    result = move_rows(rows, [0, 2], 99)

    assert len(result) == 4
    assert _names(result) == ["r1", "r3", "r0", "r2"]
    assert _names(rows) == ["r0", "r1", "r2", "r3"]


def test_start_drags_selected_rows_of_same_item(store):
    engine = DragDropEngine(store)
    selected = {RowCoord("item-a", 4), RowCoord("item-a", 2), RowCoord("item-b", 3)}

    preview = engine.start("item-a", 4, selected)

    assert preview.dragged_rows == [2, 4]
    assert engine.is_row_dragged("item-a", 2)
    assert not engine.is_row_dragged("item-b", 3)


def test_start_on_unselected_row_drags_only_it(store):
    engine = DragDropEngine(store)
    preview = engine.start("item-a", 5, {RowCoord("item-a", 2)})
    assert preview.dragged_rows == [5]


def test_over_tracks_drop_target(store):
    engine = DragDropEngine(store)
    engine.over("item-a", 3)
    assert not engine.is_active

    engine.start("item-a", 2)
    engine.over("item-a", 4)
    assert engine.is_drop_target("item-a", 4)

    engine.over("item-a", 2)
    assert engine.preview.drop_target is None


def test_drop_abandoned_cases(store):
    engine = DragDropEngine(store)
    assert engine.drop("item-a", 3) is None

    engine.start("item-a", 2)
    assert engine.drop("item-a", 2) is None
    assert not engine.is_active

    engine.start("item-a", 2)
    assert engine.drop("item-b", 4) is None

    engine.start("item-a", 2)
    engine.cancel()
    assert engine.drop("item-a", 4) is None


def test_drop_moves_rows_and_undo_restores(store):
    table = store.find_item("item-a").table
    table.rows[2].cells[2] = "reason"
    history = CommandHistory()
    engine = DragDropEngine(store)

    engine.start("item-a", 2)
    history.execute_command(engine.drop("item-a", 5))

    moved = store.find_item("item-a").table
    assert moved.cell(4, 2) == "reason"
    assert moved.cell(2, 0) == "Outcomes"
    assert moved.counts == table.counts

    history.undo()
    assert store.find_item("item-a").table.cell(2, 2) == "reason"
