"""
Clipboard interchange for plan tables.

Copied cells are written as plain tab-separated text (cells joined by
tabs, rows joined by newlines) with no quoting or escaping, so it pastes
straight into spreadsheets and back.
"""

from typing import List, Optional, Sequence

from .commands import TableEditCommand
from .models import CellCoord, PlanDocument, PlanRow, PlanTable, clone_row, clone_table
from .store import PlanDocumentStore


def copy_selection(cells: Sequence[CellCoord], document: PlanDocument) -> Optional[str]:
    """
    Encode selected cells as TSV text.

    Cells are grouped per item and per row; rows are ordered by index and
    columns by index within each row. Items are emitted one after another
    in the order they were first selected, without any alignment between
    them. Cells of missing items or rows copy as empty strings.

    Returns:
        TSV text, or None if nothing is selected
    """
    if not cells:
        return None

    grouped = {}
    for cell in cells:
        grouped.setdefault(cell.item_id, {}).setdefault(cell.row, set()).add(cell.col)

    lines: List[str] = []
    for item_id, rows in grouped.items():
        item = document.find_item(item_id)
        for row in sorted(rows):
            values = [item.table.cell(row, col) if item else "" for col in sorted(rows[row])]
            lines.append("\t".join(values))
    return "\n".join(lines)


def parse_tsv(text: str) -> List[List[str]]:
    """Split clipboard text into rows (on newlines) of cells (on tabs)."""
    if not text:
        return []
    return [line.split("\t") for line in text.split("\n")]


def paste_rows(rows: Sequence[PlanRow], block: Sequence[Sequence[str]], row: int, col: int) -> List[PlanRow]:
    """
    Overwrite a rectangular block of cells starting at (row, col).

    Values falling outside the table's rows or columns are dropped.

    Returns:
        New list of rows
    """
    result = [clone_row(r) for r in rows]
    for r_offset, values in enumerate(block):
        target_row = row + r_offset
        if target_row < 0 or target_row >= len(result):
            continue
        cells = result[target_row].cells
        for c_offset, value in enumerate(values):
            target_col = col + c_offset
            if 0 <= target_col < len(cells):
                cells[target_col] = value
    return result


class PasteCommand(TableEditCommand):
    """Undoable paste of a TSV block into one item's table."""

    def __init__(self, store: PlanDocumentStore, anchor: CellCoord, block: List[List[str]]):
        self.anchor = anchor
        self.block = block
        super().__init__(store, anchor.item_id, self._paste, "Paste")

    def _paste(self, table: PlanTable) -> PlanTable:
        result = clone_table(table)
        result.rows = paste_rows(table.rows, self.block, self.anchor.row, self.anchor.col)
        return result


def build_paste_command(
    store: PlanDocumentStore,
    text: str,
    cells: Sequence[CellCoord],
) -> Optional[PasteCommand]:
    """
    Build the command that pastes clipboard text at the first selected cell.

    Only the item owning the anchor cell is written to.

    Returns:
        PasteCommand, or None for empty text, an empty selection or an
        anchor whose item is no longer on the shortlist
    """
    if not text or not cells:
        return None
    block = parse_tsv(text)
    if not block:
        return None
    anchor = cells[0]
    if store.find_item(anchor.item_id) is None:
        return None
    return PasteCommand(store, anchor, block)
