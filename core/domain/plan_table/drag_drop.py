"""
Drag-and-drop row reordering within one plan table.

The engine only tracks the transient drag preview; dropping produces a
MoveRowsCommand which the history applies. Moves never change section
counts, so rows dropped into another section simply become part of it.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from .commands import TableEditCommand
from .models import PlanRow, PlanTable, RowCoord, clone_row, clone_table
from .store import PlanDocumentStore


def move_rows(rows: Sequence[PlanRow], indexes: Iterable[int], target: int) -> List[PlanRow]:
    """
    Move a set of rows so they form a contiguous block at a target position.

    Rows are removed from the highest index down, then re-inserted at the
    target index minus the number of moved rows that sat above it. The moved
    rows keep their relative order.

    Args:
        rows: Table rows (not modified)
        indexes: Absolute indexes of the rows to move
        target: Absolute index of the row the block is dropped on

    Returns:
        New list of rows
    """
    result = [clone_row(r) for r in rows]
    moving = sorted({i for i in indexes if 0 <= i < len(result)})
    if not moving:
        return result

    block = [result[i] for i in moving]
    for idx in reversed(moving):
        del result[idx]

    insert_at = target - sum(1 for i in moving if i < target)
    insert_at = min(max(insert_at, 0), len(result))
    result[insert_at:insert_at] = block
    return result


class MoveRowsCommand(TableEditCommand):
    """Undoable move of rows inside one item's table."""

    def __init__(self, store: PlanDocumentStore, item_id: str, indexes: Sequence[int], target: int):
        self.indexes = sorted(indexes)
        self.target = target
        super().__init__(store, item_id, self._move, "Move rows")

    def _move(self, table: PlanTable) -> PlanTable:
        result = clone_table(table)
        result.rows = move_rows(table.rows, self.indexes, self.target)
        return result


@dataclass
class DragPreview:
    """Transient, uncommitted proposed row move."""
    item_id: str
    dragged_rows: List[int] = field(default_factory=list)
    drop_target: Optional[RowCoord] = None


class DragDropEngine:
    """
    Tracks a row drag from start to drop.

    Usage:
        engine.start(item_id, row, selection.rows)
        engine.over(item_id, other_row)
        command = engine.drop(item_id, other_row)
        if command:
            history.execute_command(command)
    """

    def __init__(self, store: PlanDocumentStore):
        self._store = store
        self._preview: Optional[DragPreview] = None

    @property
    def preview(self) -> Optional[DragPreview]:
        return self._preview

    @property
    def is_active(self) -> bool:
        return self._preview is not None

    def start(self, item_id: str, row: int, selected_rows: Iterable[RowCoord] = ()) -> DragPreview:
        """
        Begin dragging a row.

        If the row is part of the row selection, every selected row of the
        same item is dragged along (sorted by index); otherwise just the row.
        """
        selected = set(selected_rows)
        if RowCoord(item_id, row) in selected:
            dragged = sorted(r.row for r in selected if r.item_id == item_id)
        else:
            dragged = [row]
        self._preview = DragPreview(item_id=item_id, dragged_rows=dragged)
        return self._preview

    def over(self, item_id: str, row: int) -> None:
        """Pointer entered a row; it becomes the drop target unless it is being dragged."""
        if self._preview is None:
            return
        if self.is_row_dragged(item_id, row):
            self._preview.drop_target = None
        else:
            self._preview.drop_target = RowCoord(item_id, row)

    def drop(self, item_id: str, row: int) -> Optional[MoveRowsCommand]:
        """
        Finish the drag on a row.

        Returns:
            The move command, or None when the drop is abandoned (no drag in
            progress, dropped onto a dragged row, or onto another item)
        """
        preview = self._preview
        self._preview = None
        if preview is None or not preview.dragged_rows:
            return None
        if item_id != preview.item_id:
            return None
        if row in preview.dragged_rows:
            return None
        return MoveRowsCommand(self._store, item_id, preview.dragged_rows, row)

    def cancel(self) -> None:
        self._preview = None

    def is_row_dragged(self, item_id: str, row: int) -> bool:
        if self._preview is None:
            return False
        return self._preview.item_id == item_id and row in self._preview.dragged_rows

    def is_drop_target(self, item_id: str, row: int) -> bool:
        if self._preview is None:
            return False
        return self._preview.drop_target == RowCoord(item_id, row)
