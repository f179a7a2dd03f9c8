"""
Plan persistence service.

Loads and saves plan documents through a PlanStoragePort and broadcasts
every saved payload to listeners (e.g. a scheduling view that lists
projects and their scheduled activities).

Persisted shape (one JSON value per storage scope):

    {"shortlist": [item, ...], "archived": [item, ...]}

where an item is {id, text, color, projectName, projectNickname,
planTableEntries: [[str x 6], ...], plan*RowCount..., planSummary, ...}.
Row kinds and pair ids are only written (as planTableRowMeta) when row
metadata persistence is enabled; otherwise they are re-derived from the
layout on load.
"""

from typing import Any, Callable, Dict, List, Optional, Union

from ..domain.plan_table import (
    PLAN_TABLE_ROWS,
    RowKind,
    Section,
    PlanItem,
    PlanTable,
    PlanDocument,
    SectionCounts,
    compute_section_bounds,
    normalize_table,
    derive_row_kinds,
    ensure_plan_pairing,
    build_plan_summary,
)
from ..ports.plan_storage_port import PlanStoragePort


STORAGE_EVENT = 'staging-state-update'
LEGACY_STORAGE_KEY = 'staging-shortlist'
STORAGE_KEY_TEMPLATE = 'staging-year-{}-shortlist'

# Persisted count keys. The schedule and subproject keys keep their historical names.
COUNT_KEYS: Dict[Section, str] = {
    Section.REASONS: 'planReasonRowCount',
    Section.OUTCOMES: 'planOutcomeRowCount',
    Section.QUESTIONS: 'planOutcomeQuestionRowCount',
    Section.NEEDS_QUESTIONS: 'planNeedsQuestionRowCount',
    Section.NEEDS_PLANS: 'planNeedsPlanRowCount',
    Section.SCHEDULE: 'planSubprojectRowCount',
    Section.SUBPROJECTS: 'planXxxRowCount',
}

ENTRIES_KEY = 'planTableEntries'
ROW_META_KEY = 'planTableRowMeta'
SUMMARY_KEY = 'planSummary'

_ITEM_FIELDS = ('id', 'text', 'color', 'projectName', 'projectNickname')
_DERIVED_KEYS = set(_ITEM_FIELDS) | set(COUNT_KEYS.values()) | {ENTRIES_KEY, ROW_META_KEY, SUMMARY_KEY}

Scope = Union[None, int, str]
ChangeCallback = Callable[[Dict[str, Any], str], None]


def storage_key(scope: Scope = None) -> str:
    """
    Storage key for a scope.

    None selects the legacy key, an integer year n gives
    'staging-year-{n}-shortlist', and any other string is used as is.
    """
    if scope is None:
        return LEGACY_STORAGE_KEY
    if isinstance(scope, int) and not isinstance(scope, bool):
        return STORAGE_KEY_TEMPLATE.format(scope)
    return str(scope)


# -------------------------------------------------------------------------
# Serialization
# -------------------------------------------------------------------------

def _count(value: Any) -> int:
    try:
        return max(int(value), 1)
    except (TypeError, ValueError):
        return 1


def item_to_dict(item: PlanItem, include_row_meta: bool = False, include_summary: bool = True) -> Dict[str, Any]:
    """Convert an item to its persisted shape. Unknown keys from loading are written back untouched."""
    data = dict(item.extra)
    data.update({
        'id': item.id,
        'text': item.text,
        'color': item.color,
        'projectName': item.project_name,
        'projectNickname': item.project_nickname,
        ENTRIES_KEY: [list(row.cells) for row in item.table.rows],
    })
    for section, key in COUNT_KEYS.items():
        data[key] = item.table.counts.get(section)
    if include_row_meta:
        data[ROW_META_KEY] = [
            {'kind': row.kind.value, 'pairId': row.pair_id}
            for row in item.table.rows
        ]
    if include_summary:
        data[SUMMARY_KEY] = build_plan_summary(item).to_dict()
    return data


def _apply_row_meta(table: PlanTable, meta: Any) -> None:
    if not isinstance(meta, list):
        return
    for row, entry in zip(table.rows, meta):
        if not isinstance(entry, dict):
            continue
        try:
            row.kind = RowKind(entry.get('kind'))
        except ValueError:
            pass
        pair_id = entry.get('pairId')
        if isinstance(pair_id, str) and pair_id:
            row.pair_id = pair_id


def item_from_dict(data: Dict[str, Any]) -> PlanItem:
    """
    Build an item from its persisted shape.

    Missing counts default to 1, rows are normalized to the layout, row
    kinds come from planTableRowMeta when present (positional otherwise)
    and pairing is re-established. Counts describing more rows than were
    stored are not trusted and fall back to 1 per section.
    """
    counts = SectionCounts(**{
        section.value: _count(data.get(key, 1)) for section, key in COUNT_KEYS.items()
    })
    entries = data.get(ENTRIES_KEY)
    rows = entries if isinstance(entries, list) else []

    stored_rows = max(len(rows), PLAN_TABLE_ROWS)
    if compute_section_bounds(counts).total_rows > stored_rows:
        print(f"[plan-storage] Warning: row counts of item '{data.get('id')}' exceed its "
              f"{len(rows)} stored rows, using default counts")
        counts = SectionCounts()

    table = PlanTable(rows=normalize_table(rows, min_rows=stored_rows), counts=counts)
    table = derive_row_kinds(table)
    _apply_row_meta(table, data.get(ROW_META_KEY))
    table = ensure_plan_pairing(table)

    kwargs = {}
    if data.get('id'):
        kwargs['id'] = str(data['id'])
    if isinstance(data.get('color'), str) and data['color']:
        kwargs['color'] = data['color']

    return PlanItem(
        text=str(data.get('text') or ''),
        project_name=str(data.get('projectName') or ''),
        project_nickname=str(data.get('projectNickname') or ''),
        table=table,
        extra={k: v for k, v in data.items() if k not in _DERIVED_KEYS},
        **kwargs,
    )


def document_to_dict(document: PlanDocument, include_row_meta: bool = False) -> Dict[str, Any]:
    """Persisted payload of a document; shortlist items carry their plan summary."""
    return {
        'shortlist': [item_to_dict(i, include_row_meta) for i in document.shortlist],
        'archived': [item_to_dict(i, include_row_meta, include_summary=False) for i in document.archived],
    }


def document_from_dict(data: Any) -> PlanDocument:
    """Build a document from a persisted payload; anything malformed is dropped."""
    if not isinstance(data, dict):
        return PlanDocument()

    def items(key: str) -> List[PlanItem]:
        values = data.get(key)
        if not isinstance(values, list):
            return []
        return [item_from_dict(v) for v in values if isinstance(v, dict)]

    return PlanDocument(shortlist=items('shortlist'), archived=items('archived'))


# -------------------------------------------------------------------------
# Service
# -------------------------------------------------------------------------

class PlanPersistenceService:
    """
    Load/save plan documents and broadcast saves.

    Failures never propagate: loading falls back to an empty document and
    saving gives up, both with a printed warning and an error log entry.
    """

    def __init__(self, storage: PlanStoragePort, persist_row_metadata: bool = False, error_log=None):
        """
        Initialize the service.

        Args:
            storage: Key-value backend
            persist_row_metadata: Write row kinds and pair ids explicitly
            error_log: ErrorLog to record failures in (the session log if None)
        """
        self._storage = storage
        self.persist_row_metadata = persist_row_metadata
        self._error_log = error_log
        self._change_callbacks: List[ChangeCallback] = []

    @property
    def storage(self) -> PlanStoragePort:
        return self._storage

    def load(self, scope: Scope = None) -> PlanDocument:
        """Load the document stored under a scope (empty if absent or unreadable)."""
        key = storage_key(scope)
        try:
            data = self._storage.get_json(key, None)
        except Exception as e:
            self._report(e, 'plan_load', key)
            return PlanDocument()

        if data is None:
            return PlanDocument()
        if not isinstance(data, dict):
            self._report(ValueError(f"Stored plan document is not an object: {type(data).__name__}"), 'plan_load', key)
            return PlanDocument()

        try:
            return document_from_dict(data)
        except Exception as e:
            self._report(e, 'plan_load', key)
            return PlanDocument()

    def save(self, document: PlanDocument, scope: Scope = None) -> None:
        """Save a document under a scope and notify listeners with the saved payload."""
        key = storage_key(scope)
        try:
            payload = document_to_dict(document, self.persist_row_metadata)
            self._storage.set_json(key, payload)
        except Exception as e:
            self._report(e, 'plan_save', key)
            return
        self._notify_change(payload, key)

    # -------------------------------------------------------------------------
    # Change broadcast
    # -------------------------------------------------------------------------

    def on_change(self, callback: ChangeCallback) -> None:
        """Register a callback(payload, key) called after every successful save."""
        self._change_callbacks.append(callback)

    def remove_change_callback(self, callback: ChangeCallback) -> None:
        """Remove a change callback."""
        if callback in self._change_callbacks:
            self._change_callbacks.remove(callback)

    def _notify_change(self, payload: Dict[str, Any], key: str) -> None:
        for callback in list(self._change_callbacks):
            try:
                callback(payload, key)
            except Exception as e:
                print(f"[plan-storage] {STORAGE_EVENT} listener failed: {e}")

    def _report(self, error: Exception, context: str, key: str) -> None:
        print(f"[plan-storage] Warning: {context} failed for '{key}': {error}")
        error_log = self._error_log
        if error_log is None:
            from core.error_log import ErrorLog
            error_log = ErrorLog.get_instance()
        error_log.log_error(error, context, {'key': key})


def create_persistence_service() -> PlanPersistenceService:
    """Persistence service over the configured SQLite database."""
    from core import config
    from core.adapters.plan_storage_sqlite import SQLiteKeyValueStore

    storage = SQLiteKeyValueStore(config.get_database_path())
    return PlanPersistenceService(storage, persist_row_metadata=config.is_row_metadata_persisted())
