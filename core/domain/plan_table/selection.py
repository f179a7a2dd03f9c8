"""
Cell and row selection for plan tables.

Selection state is independent of table content: it only stores
coordinates. Cell selection keeps insertion order so that "the first
selected cell" (the paste anchor) is well defined.
"""

from typing import Dict, Iterable, List, Optional, Set

from .models import PLAN_TABLE_COLS, CellCoord, RowCoord


class Selection:
    """
    Selected cells and rows plus the anchor/focus of the current range.

    Attributes:
        anchor: Fixed corner of the rectangular range
        focus: Moving corner of the rectangular range
        dragging: True between a plain click and pointer release
    """

    def __init__(self, width: int = PLAN_TABLE_COLS):
        self._width = width
        self._cells: Dict[CellCoord, None] = {}  # ordered set
        self._rows: Set[RowCoord] = set()
        self.anchor: Optional[CellCoord] = None
        self.focus: Optional[CellCoord] = None
        self.dragging: bool = False

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def cells(self) -> List[CellCoord]:
        """Selected cells in selection order."""
        return list(self._cells)

    @property
    def rows(self) -> Set[RowCoord]:
        return set(self._rows)

    def is_empty(self) -> bool:
        return not self._cells and not self._rows

    def is_cell_selected(self, item_id: str, row: int, col: int) -> bool:
        return CellCoord(item_id, row, col) in self._cells

    def is_row_selected(self, item_id: str, row: int) -> bool:
        return RowCoord(item_id, row) in self._rows

    def first_cell(self) -> Optional[CellCoord]:
        """The earliest selected cell, used as paste anchor."""
        return next(iter(self._cells), None)

    def cells_by_item(self) -> Dict[str, Dict[int, List[int]]]:
        """Selected cells grouped as {item_id: {row: [cols]}} in encounter order."""
        grouped: Dict[str, Dict[int, List[int]]] = {}
        for cell in self._cells:
            grouped.setdefault(cell.item_id, {}).setdefault(cell.row, []).append(cell.col)
        return grouped

    def range_cells(self, anchor: CellCoord, focus: CellCoord) -> List[CellCoord]:
        """
        All cells of the rectangle spanned by anchor and focus, row-major.

        Ranges never cross items: if the corners belong to different items
        only the focus cell is returned.
        """
        if anchor.item_id != focus.item_id:
            return [focus]
        rows = range(min(anchor.row, focus.row), max(anchor.row, focus.row) + 1)
        cols = range(min(anchor.col, focus.col), max(anchor.col, focus.col) + 1)
        return [CellCoord(anchor.item_id, r, c) for r in rows for c in cols]

    # -------------------------------------------------------------------------
    # Cell gestures
    # -------------------------------------------------------------------------

    def click(self, cell: CellCoord, extend: bool = False, toggle: bool = False) -> None:
        """
        Handle a pointer press on a cell.

        Args:
            cell: Cell under the pointer
            extend: Shift held; extend the range from the current anchor
            toggle: Ctrl/Cmd held; toggle just this cell
        """
        if extend and self.anchor is not None:
            self._set_cells(self.range_cells(self.anchor, cell))
            self.focus = cell
        elif toggle:
            if cell in self._cells:
                del self._cells[cell]
            else:
                self._cells[cell] = None
            self.anchor = cell
            self.focus = cell
        else:
            self.anchor = cell
            self.focus = cell
            self._set_cells([cell])
            self.dragging = True

        self._rows.clear()

    def pointer_enter(self, cell: CellCoord) -> None:
        """Pointer moved onto a cell; grows the range while a drag is active."""
        if not self.dragging or self.anchor is None:
            return
        self.focus = cell
        self._set_cells(self.range_cells(self.anchor, cell))

    def pointer_release(self) -> None:
        self.dragging = False

    # -------------------------------------------------------------------------
    # Row gestures
    # -------------------------------------------------------------------------

    def select_row(self, item_id: str, row: int, additive: bool = False) -> None:
        """
        Select a whole row (and all of its cells).

        With additive, the row is toggled in the existing row selection and
        its cells are toggled in the cell selection.
        """
        row_coord = RowCoord(item_id, row)
        row_cells = [CellCoord(item_id, row, col) for col in range(self._width)]

        if additive:
            if row_coord in self._rows:
                self._rows.discard(row_coord)
            else:
                self._rows.add(row_coord)
            for cell in row_cells:
                if cell in self._cells:
                    del self._cells[cell]
                else:
                    self._cells[cell] = None
        else:
            self._rows = {row_coord}
            self._set_cells(row_cells)

        self.anchor = row_cells[0]
        self.focus = row_cells[-1]

    def clear(self) -> None:
        """Drop all selection state."""
        self._cells.clear()
        self._rows.clear()
        self.anchor = None
        self.focus = None
        self.dragging = False

    def _set_cells(self, cells: Iterable[CellCoord]) -> None:
        self._cells = dict.fromkeys(cells)
