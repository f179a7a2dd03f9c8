"""
Plan table layout operations.

Provides normalization, positional kind derivation, the seeded table for a
new project, and the section-aware insert/remove operations, which are the
only way rows are added to or taken out of a section.

All operations are pure: they return a new PlanTable (or None when the
request is a no-op) and never mutate the table they were given.
"""

from typing import List, Optional, Sequence, Tuple, Union

from .models import (
    PLAN_TABLE_COLS,
    PAIRINGS,
    SECTION_ORDER,
    SECTION_ROW_KINDS,
    PlanRow,
    PlanTable,
    RowKind,
    Section,
    SectionCounts,
    SectionPairing,
    clone_table,
)
from .bounds import PLAN_TABLE_ROWS, SECTION_LEADS, SectionBounds, compute_section_bounds
from .pairing import create_pair_id, ensure_plan_pairing


# -------------------------------------------------------------------------
# Normalization
# -------------------------------------------------------------------------

RowLike = Union[PlanRow, Sequence[object]]


def _coerce_cells(values: Sequence[object], width: int) -> List[str]:
    cells = []
    for col in range(width):
        value = values[col] if col < len(values) else ""
        cells.append(value if isinstance(value, str) else "")
    return cells


def normalize_table(
    rows: Sequence[RowLike],
    min_rows: int = PLAN_TABLE_ROWS,
    width: int = PLAN_TABLE_COLS,
) -> List[PlanRow]:
    """
    Pad/trim rows to the fixed width and pad the row list to a minimum length.

    Accepts PlanRow objects or raw cell sequences (e.g. freshly loaded JSON).
    Non-string cell values become empty strings. Kind and pair id of PlanRow
    inputs are preserved; raw sequences become DATA rows without a pair id.

    Raises:
        ValueError: if width is not the fixed plan table width
    """
    if width != PLAN_TABLE_COLS:
        raise ValueError(f"Plan tables are exactly {PLAN_TABLE_COLS} columns wide")

    normalized: List[PlanRow] = []
    for source in rows:
        if isinstance(source, PlanRow):
            normalized.append(PlanRow(
                cells=_coerce_cells(source.cells, width),
                kind=source.kind,
                pair_id=source.pair_id,
            ))
        elif isinstance(source, (list, tuple)):
            normalized.append(PlanRow(cells=_coerce_cells(source, width)))
        else:
            normalized.append(PlanRow())

    while len(normalized) < min_rows:
        normalized.append(PlanRow())
    return normalized


def derive_row_kinds(table: PlanTable) -> PlanTable:
    """
    Re-derive every row's kind from its position in the section layout.

    Used after loading a document whose rows carry no kind metadata.
    Rows past the end of the layout become DATA rows.
    """
    bounds = compute_section_bounds(table.counts)
    result = clone_table(table)
    heading_rows = set(bounds.headings.values())
    prompt_rows = set(bounds.prompts.values())
    for idx, row in enumerate(result.rows):
        if idx in heading_rows:
            row.kind = RowKind.HEADER
        elif idx in prompt_rows:
            row.kind = RowKind.PROMPT
        else:
            section = bounds.section_at(idx)
            row.kind = SECTION_ROW_KINDS[section] if section else RowKind.DATA
    return result


def create_plan_table() -> PlanTable:
    """Seed table for a new project: headings, prompts and one row per section."""
    counts = SectionCounts()
    bounds = compute_section_bounds(counts)
    rows = [PlanRow() for _ in range(bounds.total_rows)]
    for section, idx in bounds.headings.items():
        rows[idx] = PlanRow.with_text(0, SECTION_LEADS[section][0], RowKind.HEADER)
    for section, idx in bounds.prompts.items():
        rows[idx] = PlanRow.with_text(1, SECTION_LEADS[section][1], RowKind.PROMPT)
    for section in SECTION_ORDER:
        for idx in bounds[section]:
            rows[idx].kind = SECTION_ROW_KINDS[section]
    table = PlanTable(rows=rows, counts=counts)
    return ensure_plan_pairing(table)


def _prepare(table: PlanTable) -> Tuple[PlanTable, SectionBounds]:
    """Clone, pad to the layout and pair, ready for a structural edit."""
    bounds = compute_section_bounds(table.counts)
    working = PlanTable(
        rows=normalize_table(table.rows, min_rows=bounds.total_rows),
        counts=clone_table(table).counts,
    )
    return ensure_plan_pairing(working), bounds


def _value_pairing(section: Section) -> Optional[SectionPairing]:
    for pairing in PAIRINGS:
        if pairing.secondary == section:
            return pairing
    return None


# -------------------------------------------------------------------------
# Section-aware structural edits
# -------------------------------------------------------------------------

def section_at(table: PlanTable, row_index: int) -> Optional[Section]:
    """The section that owns a row, or None for heading/prompt/out-of-range rows."""
    return compute_section_bounds(table.counts).section_at(row_index)


def insert_section_row(table: PlanTable, section: Section, offset: int) -> Optional[PlanTable]:
    """
    Insert a blank row into a section at a local offset.

    Args:
        table: Table to edit
        section: Section to grow
        offset: Local position in [0, count]; count appends to the section

    Returns:
        New table with the section count incremented, or None if the offset
        is outside the section
    """
    count = table.counts.get(section)
    if offset < 0 or offset > count:
        return None

    working, bounds = _prepare(table)
    insert_at = bounds[section].start + offset
    new_row = PlanRow(kind=SECTION_ROW_KINDS[section])

    pairing = _value_pairing(section)
    if pairing is not None:
        # Value rows join the pair of the row they follow
        previous = working.rows[insert_at - 1] if offset > 0 else None
        new_row.pair_id = (previous.pair_id if previous else None) or create_pair_id(pairing.prefix)

    working.rows.insert(insert_at, new_row)
    working.counts = working.counts.with_count(section, count + 1)
    return working


def insert_row_after(table: PlanTable, section: Section, row_index: int) -> Optional[Tuple[PlanTable, int]]:
    """
    Insert a blank row directly below an absolute row of a section.

    The section's heading/prompt row is accepted too and inserts at the
    top of the section.

    Returns:
        (new table, absolute index of the new row), or None if row_index
        does not belong to the section
    """
    bounds = compute_section_bounds(table.counts)
    section_range = bounds[section]
    if row_index in section_range:
        offset = row_index - section_range.start + 1
    elif row_index == bounds.lead_row(section):
        offset = 0
    else:
        return None

    result = insert_section_row(table, section, offset)
    if result is None:
        return None
    return result, section_range.start + offset


def remove_section_row(table: PlanTable, section: Section, row_index: int) -> Optional[PlanTable]:
    """
    Remove an absolute row from a section.

    The sole remaining row of a section is cleared instead of removed, so a
    section never drops below one row; the cleared row keeps its kind and
    pair id.

    Returns:
        New table, or None if row_index is not inside the section
    """
    bounds = compute_section_bounds(table.counts)
    if row_index not in bounds[section] or row_index >= len(table.rows):
        return None

    working = clone_table(table)
    count = working.counts.get(section)
    if count <= 1:
        existing = working.rows[row_index]
        working.rows[row_index] = PlanRow(kind=existing.kind, pair_id=existing.pair_id)
        return working

    del working.rows[row_index]
    working.counts = working.counts.with_count(section, count - 1)
    return working


def add_paired_rows(table: PlanTable, pairing: SectionPairing) -> Tuple[PlanTable, int]:
    """
    Append one row to each side of a pairing, sharing a new pair id.

    Returns:
        (new table, absolute index of the new primary-side row)
    """
    working, bounds = _prepare(table)
    pair_id = create_pair_id(pairing.prefix)

    inserts = [
        (bounds[pairing.primary].stop, pairing.primary),
        (bounds[pairing.secondary].stop, pairing.secondary),
    ]
    # Insert the lower row last so the earlier insert cannot shift it
    for insert_at, section in sorted(inserts, key=lambda pair: pair[0], reverse=True):
        working.rows.insert(insert_at, PlanRow(kind=SECTION_ROW_KINDS[section], pair_id=pair_id))
        working.counts = working.counts.with_count(section, working.counts.get(section) + 1)

    new_bounds = compute_section_bounds(working.counts)
    return working, new_bounds[pairing.primary].stop - 1
