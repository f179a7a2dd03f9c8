# Plan table domain models and editing algorithms
from .models import (
    PLAN_TABLE_COLS,
    NAME_COL,
    ESTIMATE_COL,
    DURATION_COL,
    RowKind,
    Section,
    SECTION_ORDER,
    SECTION_ROW_KINDS,
    TIMED_SECTIONS,
    SectionPairing,
    OUTCOME_PAIRING,
    NEEDS_PAIRING,
    PAIRINGS,
    PlanRow,
    SectionCounts,
    PlanTable,
    PlanItem,
    PlanDocument,
    CellCoord,
    RowCoord,
    FocusRequest,
    clone_row,
    clone_table,
    clone_item,
    clone_document,
)
from .bounds import PLAN_TABLE_ROWS, SECTION_LEADS, SectionBounds, compute_section_bounds
from .pairing import (
    PairEntry,
    PairedGroup,
    PairedGroups,
    create_pair_id,
    ensure_pairing,
    ensure_plan_pairing,
    build_paired_groups,
    paired_groups_for,
)
from .layout import (
    normalize_table,
    derive_row_kinds,
    create_plan_table,
    section_at,
    insert_section_row,
    insert_row_after,
    remove_section_row,
    add_paired_rows,
)
from .estimates import (
    NO_ESTIMATE,
    CUSTOM_ESTIMATE,
    ZERO_DURATION,
    ESTIMATE_OPTIONS,
    label_to_minutes,
    minutes_to_label,
    format_minutes_hhmm,
    parse_time_value,
    apply_estimate_label,
    apply_duration,
    section_total_minutes,
)
from .selection import Selection
from .store import PlanDocumentStore
from .commands import (
    Command,
    SnapshotCommand,
    TableEditCommand,
    DocumentEditCommand,
    AddItemCommand,
    RemoveItemCommand,
    CommandHistory,
)
from .drag_drop import DragPreview, DragDropEngine, MoveRowsCommand, move_rows
from .clipboard import PasteCommand, copy_selection, parse_tsv, paste_rows, build_paste_command
from .summary import ScheduleEntry, PlanSummary, build_plan_summary, project_names
from .focus import FocusOutcome, FocusRetry, focus_column

__all__ = [
    # Models
    'PLAN_TABLE_COLS',
    'NAME_COL',
    'ESTIMATE_COL',
    'DURATION_COL',
    'RowKind',
    'Section',
    'SECTION_ORDER',
    'SECTION_ROW_KINDS',
    'TIMED_SECTIONS',
    'SectionPairing',
    'OUTCOME_PAIRING',
    'NEEDS_PAIRING',
    'PAIRINGS',
    'PlanRow',
    'SectionCounts',
    'PlanTable',
    'PlanItem',
    'PlanDocument',
    'CellCoord',
    'RowCoord',
    'FocusRequest',
    'clone_row',
    'clone_table',
    'clone_item',
    'clone_document',
    # Bounds
    'PLAN_TABLE_ROWS',
    'SECTION_LEADS',
    'SectionBounds',
    'compute_section_bounds',
    # Pairing
    'PairEntry',
    'PairedGroup',
    'PairedGroups',
    'create_pair_id',
    'ensure_pairing',
    'ensure_plan_pairing',
    'build_paired_groups',
    'paired_groups_for',
    # Layout
    'normalize_table',
    'derive_row_kinds',
    'create_plan_table',
    'section_at',
    'insert_section_row',
    'insert_row_after',
    'remove_section_row',
    'add_paired_rows',
    # Estimates
    'NO_ESTIMATE',
    'CUSTOM_ESTIMATE',
    'ZERO_DURATION',
    'ESTIMATE_OPTIONS',
    'label_to_minutes',
    'minutes_to_label',
    'format_minutes_hhmm',
    'parse_time_value',
    'apply_estimate_label',
    'apply_duration',
    'section_total_minutes',
    # Selection
    'Selection',
    # Store and commands
    'PlanDocumentStore',
    'Command',
    'SnapshotCommand',
    'TableEditCommand',
    'DocumentEditCommand',
    'AddItemCommand',
    'RemoveItemCommand',
    'CommandHistory',
    # Drag and drop
    'DragPreview',
    'DragDropEngine',
    'MoveRowsCommand',
    'move_rows',
    # Clipboard
    'PasteCommand',
    'copy_selection',
    'parse_tsv',
    'paste_rows',
    'build_paste_command',
    # Summary
    'ScheduleEntry',
    'PlanSummary',
    'build_plan_summary',
    'project_names',
    # Focus
    'FocusOutcome',
    'FocusRetry',
    'focus_column',
]
