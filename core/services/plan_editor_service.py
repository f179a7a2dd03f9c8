"""
Plan editor service.

This module provides the editing session for plan tables: it owns the
document store, the undo/redo history, the selection and the drag state,
and exposes intention-revealing operations for the UI. Every document
change goes through a command so it can be undone.
"""

import random
from typing import Callable, Dict, List, Optional, Set

from ..domain.plan_table import (
    PLAN_TABLE_COLS,
    ESTIMATE_COL,
    DURATION_COL,
    TIMED_SECTIONS,
    OUTCOME_PAIRING,
    NEEDS_PAIRING,
    Section,
    SectionPairing,
    PlanItem,
    PlanTable,
    PlanDocument,
    CellCoord,
    FocusRequest,
    PlanDocumentStore,
    CommandHistory,
    TableEditCommand,
    DocumentEditCommand,
    AddItemCommand,
    RemoveItemCommand,
    Selection,
    DragDropEngine,
    DragPreview,
    PairedGroups,
    PlanSummary,
    compute_section_bounds,
    create_plan_table,
    section_at,
    insert_section_row,
    remove_section_row,
    add_paired_rows,
    apply_estimate_label,
    apply_duration,
    paired_groups_for,
    build_plan_summary,
    copy_selection,
    build_paste_command,
    focus_column,
    PAIRINGS,
    clone_row,
    clone_table,
    create_pair_id,
)


# Colors handed out to new projects
PROJECT_COLORS = [
    '#ef4444', '#f97316', '#f59e0b', '#eab308', '#84cc16',
    '#22c55e', '#14b8a6', '#06b6d4', '#0ea5e9', '#3b82f6',
    '#6366f1', '#8b5cf6', '#a855f7', '#d946ef', '#ec4899',
]

FocusCallback = Callable[[FocusRequest], None]
TableTransform = Callable[[PlanTable], Optional[PlanTable]]


# -------------------------------------------------------------------------
# Table transforms used by the multi-row commands
# -------------------------------------------------------------------------

def delete_section_rows(table: PlanTable, indexes: Set[int]) -> Optional[PlanTable]:
    """
    Remove rows through their sections, highest index first.

    Heading and prompt rows are skipped; a section's sole row is cleared
    rather than removed.
    """
    working = table
    changed = False
    for idx in sorted(indexes, reverse=True):
        section = section_at(working, idx)
        if section is None:
            continue
        updated = remove_section_row(working, section, idx)
        if updated is not None:
            working = updated
            changed = True
    return working if changed else None


def duplicate_section_rows(table: PlanTable, indexes: Set[int]) -> Optional[PlanTable]:
    """
    Insert a copy directly below each section row, growing its section.

    A copied prompt-side row gets a fresh pair id so that no two prompts
    share one; copied value-side rows keep theirs and join the same group.
    """
    prefixes = {pairing.primary: pairing.prefix for pairing in PAIRINGS}
    working = clone_table(table)
    changed = False
    for idx in sorted(indexes, reverse=True):
        section = section_at(working, idx)
        if section is None or idx >= len(working.rows):
            continue
        copy = clone_row(working.rows[idx])
        if section in prefixes and copy.pair_id:
            copy.pair_id = create_pair_id(prefixes[section])
        working.rows.insert(idx + 1, copy)
        working.counts = working.counts.with_count(section, working.counts.get(section) + 1)
        changed = True
    return working if changed else None


class PlanEditorService:
    """
    Editing session over one plan document.

    Provides high-level operations for editing cells and rows, selection,
    drag-and-drop, clipboard and undo/redo. Structural changes reset the
    selection and any drag in progress.
    """

    def __init__(self, store: Optional[PlanDocumentStore] = None, max_undo: int = 100):
        """
        Initialize the service.

        Args:
            store: Optional existing PlanDocumentStore. Creates new if not provided.
            max_undo: Depth of the undo history
        """
        self._store = store if store is not None else PlanDocumentStore()
        self._history = CommandHistory(max_history=max_undo)
        self._selection = Selection()
        self._drag = DragDropEngine(self._store)
        self._focus_callbacks: List[FocusCallback] = []

    @property
    def store(self) -> PlanDocumentStore:
        """Get the document store."""
        return self._store

    @property
    def document(self) -> PlanDocument:
        return self._store.document

    @property
    def history(self) -> CommandHistory:
        return self._history

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def drag_preview(self) -> Optional[DragPreview]:
        return self._drag.preview

    def load_document(self, document: PlanDocument) -> None:
        """Replace the whole document (e.g. after loading) and start a fresh history."""
        self._reset_interaction()
        self._history.clear()
        self._store.replace(document)
        self._store.modified = False

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    def add_item(
        self,
        text: str,
        color: Optional[str] = None,
        project_name: str = "",
        project_nickname: str = "",
    ) -> Optional[PlanItem]:
        """
        Add a project to the shortlist with a freshly seeded plan table.

        Returns:
            Created item, or None if text is blank
        """
        text = (text or "").strip()
        if not text:
            return None

        item = PlanItem(
            text=text,
            color=color or random.choice(PROJECT_COLORS),
            project_name=project_name,
            project_nickname=project_nickname,
            table=create_plan_table(),
        )
        self._history.execute_command(AddItemCommand(self._store, item))
        return item

    def remove_item(self, item_id: str) -> bool:
        """Remove a project (and its table) from the shortlist."""
        if self._store.find_item(item_id) is None:
            return False
        self._history.execute_command(RemoveItemCommand(self._store, item_id))
        self._reset_interaction()
        return True

    # -------------------------------------------------------------------------
    # Cell edits
    # -------------------------------------------------------------------------

    def set_cell(self, item_id: str, row: int, col: int, value: str) -> bool:
        """
        Write a cell value.

        The estimate and duration columns of timed rows are routed through
        set_estimate and set_duration so the pair stays consistent.

        Returns:
            True if the document changed
        """
        item = self._store.find_item(item_id)
        if item is None:
            return False
        if section_at(item.table, row) in TIMED_SECTIONS:
            if col == ESTIMATE_COL:
                return self.set_estimate(item_id, row, value)
            if col == DURATION_COL:
                return self.set_duration(item_id, row, value)

        def write(table: PlanTable) -> Optional[PlanTable]:
            if not (0 <= row < len(table.rows) and 0 <= col < PLAN_TABLE_COLS):
                return None
            if table.rows[row].cells[col] == value:
                return None
            result = clone_table(table)
            result.rows[row].cells[col] = value
            return result

        return self._edit_table(item_id, write, "Edit cell")

    def set_estimate(self, item_id: str, row: int, label: str) -> bool:
        """Set the estimate label of a timed row and re-derive its duration."""
        def estimate(table: PlanTable) -> Optional[PlanTable]:
            if section_at(table, row) not in TIMED_SECTIONS or row >= len(table.rows):
                return None
            updated = apply_estimate_label(table.rows[row], label)
            if updated.cells == table.rows[row].cells:
                return None
            result = clone_table(table)
            result.rows[row] = updated
            return result

        return self._edit_table(item_id, estimate, "Set estimate")

    def set_duration(self, item_id: str, row: int, text: str) -> bool:
        """Type a duration into a timed row; only allowed for "Custom" estimates."""
        def duration(table: PlanTable) -> Optional[PlanTable]:
            if section_at(table, row) not in TIMED_SECTIONS or row >= len(table.rows):
                return None
            updated = apply_duration(table.rows[row], text)
            if updated is None or updated.cells == table.rows[row].cells:
                return None
            result = clone_table(table)
            result.rows[row] = updated
            return result

        return self._edit_table(item_id, duration, "Set duration")

    def clear_selected_cells(self) -> bool:
        """Empty every selected cell (rows stay in place)."""
        targets: Dict[str, List[CellCoord]] = {}
        for cell in self._selection.cells:
            item = self._store.find_item(cell.item_id)
            if item is not None and item.table.cell(cell.row, cell.col):
                targets.setdefault(cell.item_id, []).append(cell)
        if not targets:
            return False

        def clear(document: PlanDocument) -> PlanDocument:
            for item_id, cells in targets.items():
                item = document.find_item(item_id)
                if item is None:
                    continue
                for cell in cells:
                    if cell.row < len(item.table.rows) and cell.col < PLAN_TABLE_COLS:
                        item.table.rows[cell.row].cells[cell.col] = ""
            return document

        self._history.execute_command(DocumentEditCommand(self._store, clear, "Clear cells"))
        return True

    # -------------------------------------------------------------------------
    # Structural edits
    # -------------------------------------------------------------------------

    def insert_row(self, item_id: str, row_index: int, above: bool = False) -> Optional[FocusRequest]:
        """
        Insert a blank row next to a row of a section.

        A section's heading or prompt row inserts at the top of that section.

        Args:
            item_id: Item to edit
            row_index: Absolute index of the reference row
            above: Insert above the reference row instead of below it

        Returns:
            FocusRequest for the new row, or None if nothing was inserted
        """
        item = self._store.find_item(item_id)
        if item is None:
            return None

        target = self._insert_target(item.table, row_index, above)
        if target is None:
            return None
        section, offset = target

        inserted = self._edit_table(
            item_id,
            lambda table: insert_section_row(table, section, offset),
            "Insert row",
        )
        if not inserted:
            return None

        new_index = compute_section_bounds(item.table.counts)[section].start + offset
        return self._structural_change(item_id, new_index)

    def remove_row(self, item_id: str, row_index: int) -> bool:
        """Remove a section row (the sole row of a section is cleared instead)."""
        item = self._store.find_item(item_id)
        if item is None:
            return False
        section = section_at(item.table, row_index)
        if section is None:
            return False

        removed = self._edit_table(
            item_id,
            lambda table: remove_section_row(table, section, row_index),
            "Remove row",
        )
        if removed:
            self._reset_interaction()
        return removed

    def add_question_with_outcome(self, item_id: str) -> Optional[FocusRequest]:
        """Append a question row and a paired outcome row."""
        return self._add_pair(item_id, OUTCOME_PAIRING, "Add question")

    def add_needs_question_with_plan(self, item_id: str) -> Optional[FocusRequest]:
        """Append a needs question row and a paired plan row."""
        return self._add_pair(item_id, NEEDS_PAIRING, "Add needs question")

    def delete_selected_rows(self) -> bool:
        """Delete every selected row through its section, then clear the selection."""
        return self._edit_selected_rows(delete_section_rows, "Delete rows")

    def duplicate_selected_rows(self) -> bool:
        """Duplicate every selected row below itself, then clear the selection."""
        return self._edit_selected_rows(duplicate_section_rows, "Duplicate rows")

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def click_cell(self, item_id: str, row: int, col: int, extend: bool = False, toggle: bool = False) -> None:
        self._selection.click(CellCoord(item_id, row, col), extend=extend, toggle=toggle)

    def pointer_enter(self, item_id: str, row: int, col: int) -> None:
        self._selection.pointer_enter(CellCoord(item_id, row, col))

    def pointer_release(self) -> None:
        self._selection.pointer_release()

    def select_row(self, item_id: str, row: int, additive: bool = False) -> None:
        self._selection.select_row(item_id, row, additive=additive)

    def clear_selection(self) -> None:
        self._selection.clear()

    # -------------------------------------------------------------------------
    # Drag and drop
    # -------------------------------------------------------------------------

    def start_row_drag(self, item_id: str, row: int) -> DragPreview:
        return self._drag.start(item_id, row, self._selection.rows)

    def drag_over(self, item_id: str, row: int) -> None:
        self._drag.over(item_id, row)

    def drop_rows(self, item_id: str, row: int) -> bool:
        """
        Drop the dragged rows onto a row.

        Returns:
            True if rows were moved
        """
        command = self._drag.drop(item_id, row)
        if command is None:
            return False
        self._history.execute_command(command)
        self._reset_interaction()
        return True

    def cancel_drag(self) -> None:
        self._drag.cancel()

    def is_row_dragged(self, item_id: str, row: int) -> bool:
        return self._drag.is_row_dragged(item_id, row)

    def is_drop_target(self, item_id: str, row: int) -> bool:
        return self._drag.is_drop_target(item_id, row)

    # -------------------------------------------------------------------------
    # Clipboard
    # -------------------------------------------------------------------------

    def copy_selection(self) -> Optional[str]:
        """TSV text of the selected cells, or None if nothing is selected."""
        return copy_selection(self._selection.cells, self._store.document)

    def paste(self, text: str) -> bool:
        """
        Paste TSV text at the first selected cell.

        Returns:
            True if a paste was applied
        """
        command = build_paste_command(self._store, text, self._selection.cells)
        if command is None:
            return False
        self._history.execute_command(command)
        return True

    # -------------------------------------------------------------------------
    # Undo/Redo
    # -------------------------------------------------------------------------

    def undo(self) -> bool:
        """
        Undo the last edit.

        Returns:
            True if undo was performed, False if nothing to undo
        """
        if not self._history.undo():
            return False
        self._reset_interaction()
        return True

    def redo(self) -> bool:
        """
        Redo the last undone edit.

        Returns:
            True if redo was performed, False if nothing to redo
        """
        if not self._history.redo():
            return False
        self._reset_interaction()
        return True

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return self._history.can_undo()

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return self._history.can_redo()

    def clear_undo_history(self) -> None:
        """Clear undo/redo history."""
        self._history.clear()

    # -------------------------------------------------------------------------
    # Focus requests
    # -------------------------------------------------------------------------

    def on_focus_request(self, callback: FocusCallback) -> None:
        """Register a callback receiving a FocusRequest after each structural insert."""
        self._focus_callbacks.append(callback)

    def remove_focus_callback(self, callback: FocusCallback) -> None:
        if callback in self._focus_callbacks:
            self._focus_callbacks.remove(callback)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_item(self, item_id: str) -> Optional[PlanItem]:
        return self._store.find_item(item_id)

    def paired_groups(self, item_id: str, pairing: SectionPairing) -> Optional[PairedGroups]:
        """Prompt rows grouped with their paired value rows."""
        item = self._store.find_item(item_id)
        if item is None:
            return None
        return paired_groups_for(item.table, pairing)

    def plan_summary(self, item_id: str) -> PlanSummary:
        return build_plan_summary(self._store.find_item(item_id))

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _edit_table(self, item_id: str, transform: TableTransform, description: str) -> bool:
        """Run a table transform as a command unless it is a no-op."""
        item = self._store.find_item(item_id)
        if item is None or transform(item.table) is None:
            return False
        self._history.execute_command(TableEditCommand(self._store, item_id, transform, description))
        return True

    def _edit_selected_rows(self, transform: Callable[[PlanTable, Set[int]], Optional[PlanTable]], description: str) -> bool:
        rows_by_item: Dict[str, Set[int]] = {}
        for coord in self._selection.rows:
            rows_by_item.setdefault(coord.item_id, set()).add(coord.row)

        targets = {}
        for item_id, indexes in rows_by_item.items():
            item = self._store.find_item(item_id)
            if item is not None and transform(item.table, indexes) is not None:
                targets[item_id] = indexes
        if not targets:
            return False

        def apply(document: PlanDocument) -> PlanDocument:
            for item_id, indexes in targets.items():
                item = document.find_item(item_id)
                if item is None:
                    continue
                updated = transform(item.table, indexes)
                if updated is not None:
                    item.table = updated
            return document

        self._history.execute_command(DocumentEditCommand(self._store, apply, description))
        self._reset_interaction()
        return True

    def _insert_target(self, table: PlanTable, row_index: int, above: bool):
        """(section, local offset) for an insert relative to a row, or None."""
        bounds = compute_section_bounds(table.counts)
        section = bounds.section_at(row_index)
        if section is not None:
            offset = row_index - bounds[section].start
            return section, offset if above else offset + 1
        for candidate in Section:
            if bounds.lead_row(candidate) == row_index:
                return candidate, 0
        return None

    def _add_pair(self, item_id: str, pairing: SectionPairing, description: str) -> Optional[FocusRequest]:
        item = self._store.find_item(item_id)
        if item is None:
            return None
        self._history.execute_command(
            TableEditCommand(self._store, item_id, lambda table: add_paired_rows(table, pairing)[0], description)
        )
        table = self._store.find_item(item_id).table
        new_index = compute_section_bounds(table.counts)[pairing.primary].stop - 1
        return self._structural_change(item_id, new_index)

    def _structural_change(self, item_id: str, row_index: int) -> Optional[FocusRequest]:
        self._reset_interaction()
        item = self._store.find_item(item_id)
        if item is None or row_index >= len(item.table.rows):
            return None
        request = FocusRequest(item_id, row_index, focus_column(item.table.rows[row_index].kind))
        for callback in list(self._focus_callbacks):
            try:
                callback(request)
            except Exception as e:
                print(f"[plan-editor] Focus listener failed: {e}")
        return request

    def _reset_interaction(self) -> None:
        self._selection.clear()
        self._drag.cancel()
