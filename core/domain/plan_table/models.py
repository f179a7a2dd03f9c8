"""
Plan table domain models.

This module contains the core data structures for plan tables,
designed to be independent of any UI framework (Qt-free).

Rows carry their kind and pair id as ordinary fields so that cloning and
persistence can never silently drop them.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Tuple
from enum import Enum
import uuid


PLAN_TABLE_COLS = 6

# Column roles used by timed rows
NAME_COL = 2
ESTIMATE_COL = 3
DURATION_COL = 4


class RowKind(Enum):
    """Display/behaviour kind of a plan table row."""
    HEADER = "header"        # Section heading, spans the row
    PROMPT = "prompt"        # Question-style row, text starts in column 1
    RESPONSE = "response"    # Answer-style row, text starts in column 2
    DATA = "data"            # Free-form data row


class Section(Enum):
    """Count-sized sections of a plan table, in layout order."""
    REASONS = "reasons"
    OUTCOMES = "outcomes"
    QUESTIONS = "questions"
    NEEDS_QUESTIONS = "needs_questions"
    NEEDS_PLANS = "needs_plans"
    SCHEDULE = "schedule"
    SUBPROJECTS = "subprojects"


SECTION_ORDER: Tuple[Section, ...] = tuple(Section)

# Kind given to rows created inside each section
SECTION_ROW_KINDS: Dict[Section, RowKind] = {
    Section.REASONS: RowKind.RESPONSE,
    Section.OUTCOMES: RowKind.RESPONSE,
    Section.QUESTIONS: RowKind.PROMPT,
    Section.NEEDS_QUESTIONS: RowKind.PROMPT,
    Section.NEEDS_PLANS: RowKind.DATA,
    Section.SCHEDULE: RowKind.DATA,
    Section.SUBPROJECTS: RowKind.DATA,
}

# Sections whose rows carry an estimate label and an H.MM duration
TIMED_SECTIONS: Tuple[Section, ...] = (Section.NEEDS_PLANS, Section.SCHEDULE)


@dataclass(frozen=True)
class SectionPairing:
    """
    Link between a prompt-side section and a value-side section.

    Attributes:
        primary: Section holding the prompt rows (one row per pair id)
        secondary: Section holding the value rows (any number per pair id)
        prefix: Prefix used when generating pair ids
    """
    primary: Section
    secondary: Section
    prefix: str


OUTCOME_PAIRING = SectionPairing(Section.QUESTIONS, Section.OUTCOMES, "outcome")
NEEDS_PAIRING = SectionPairing(Section.NEEDS_QUESTIONS, Section.NEEDS_PLANS, "needs")
PAIRINGS: Tuple[SectionPairing, ...] = (OUTCOME_PAIRING, NEEDS_PAIRING)


def blank_cells() -> List[str]:
    """A fresh list of empty cells of the fixed table width."""
    return [""] * PLAN_TABLE_COLS


@dataclass
class PlanRow:
    """
    One fixed-width row of a plan table.

    Attributes:
        cells: Cell values, always exactly PLAN_TABLE_COLS strings
        kind: Row kind (header/prompt/response/data)
        pair_id: Weak link to rows in a paired section, or None
    """
    cells: List[str] = field(default_factory=blank_cells)
    kind: RowKind = RowKind.DATA
    pair_id: Optional[str] = None

    def __post_init__(self):
        if len(self.cells) != PLAN_TABLE_COLS:
            raise ValueError(
                f"PlanRow needs exactly {PLAN_TABLE_COLS} cells, got {len(self.cells)}"
            )

    @classmethod
    def with_text(cls, col: int, text: str, kind: RowKind = RowKind.DATA) -> 'PlanRow':
        """Create a row with a single non-empty cell."""
        cells = blank_cells()
        cells[col] = text
        return cls(cells=cells, kind=kind)

    def is_blank(self) -> bool:
        """Whether every cell is empty."""
        return not any(self.cells)


@dataclass
class SectionCounts:
    """Number of rows in each count-sized section. Every count is >= 1."""
    reasons: int = 1
    outcomes: int = 1
    questions: int = 1
    needs_questions: int = 1
    needs_plans: int = 1
    schedule: int = 1
    subprojects: int = 1

    def get(self, section: Section) -> int:
        return getattr(self, section.value)

    def with_count(self, section: Section, count: int) -> 'SectionCounts':
        """Return a copy with one section's count replaced (clamped to >= 1)."""
        values = {s.value: self.get(s) for s in SECTION_ORDER}
        values[section.value] = max(int(count), 1)
        return SectionCounts(**values)

    def total(self) -> int:
        return sum(self.get(s) for s in SECTION_ORDER)


@dataclass
class PlanTable:
    """Rows of one project item together with the section counts that partition them."""
    rows: List[PlanRow] = field(default_factory=list)
    counts: SectionCounts = field(default_factory=SectionCounts)

    def __len__(self) -> int:
        return len(self.rows)

    def cell(self, row: int, col: int) -> str:
        """Cell value, or '' when the coordinate is out of range."""
        if 0 <= row < len(self.rows) and 0 <= col < PLAN_TABLE_COLS:
            return self.rows[row].cells[col]
        return ""


@dataclass
class PlanItem:
    """
    A project on the shortlist (or archive) with its plan table.

    Attributes:
        id: Unique identifier for this item
        text: Display text entered when the item was created
        color: Display color (hex string)
        project_name: Optional longer project name
        project_nickname: Optional short project name
        table: The plan table
        extra: Persisted keys this engine does not interpret, carried through untouched
    """
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    text: str = ""
    color: str = "#3b82f6"
    project_name: str = ""
    project_nickname: str = ""
    table: PlanTable = field(default_factory=PlanTable)
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.project_nickname or self.project_name or self.text

    def __repr__(self) -> str:
        return f"PlanItem({self.id}, {self.display_name!r}, {len(self.table)} rows)"


@dataclass
class PlanDocument:
    """Everything persisted under one storage scope."""
    shortlist: List[PlanItem] = field(default_factory=list)
    archived: List[PlanItem] = field(default_factory=list)

    def find_item(self, item_id: str) -> Optional[PlanItem]:
        """Find an item on the shortlist by ID."""
        for item in self.shortlist:
            if item.id == item_id:
                return item
        return None


@dataclass(frozen=True)
class CellCoord:
    """Coordinate of one cell: (item, row, column)."""
    item_id: str
    row: int
    col: int

    @property
    def row_coord(self) -> 'RowCoord':
        return RowCoord(self.item_id, self.row)


@dataclass(frozen=True)
class RowCoord:
    """Coordinate of one row: (item, row)."""
    item_id: str
    row: int


@dataclass(frozen=True)
class FocusRequest:
    """Request for the presentation layer to focus a cell once it exists."""
    item_id: str
    row: int
    col: int


# -------------------------------------------------------------------------
# Cloning
# -------------------------------------------------------------------------

def clone_row(row: PlanRow) -> PlanRow:
    """Copy a row's cells, carrying kind and pair id over explicitly."""
    return PlanRow(cells=list(row.cells), kind=row.kind, pair_id=row.pair_id)


def clone_table(table: PlanTable) -> PlanTable:
    counts = SectionCounts(**{s.value: table.counts.get(s) for s in SECTION_ORDER})
    return PlanTable(rows=[clone_row(r) for r in table.rows], counts=counts)


def clone_item(item: PlanItem) -> PlanItem:
    return PlanItem(
        id=item.id,
        text=item.text,
        color=item.color,
        project_name=item.project_name,
        project_nickname=item.project_nickname,
        table=clone_table(item.table),
        extra=dict(item.extra),
    )


def clone_document(document: PlanDocument) -> PlanDocument:
    """Deep copy of a document; used for command snapshots."""
    return PlanDocument(
        shortlist=[clone_item(i) for i in document.shortlist],
        archived=[clone_item(i) for i in document.archived],
    )
