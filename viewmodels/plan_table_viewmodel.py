"""
Plan table view model.

This module provides Qt integration for the plan table editor, exposing
signals for UI updates and commands for user actions. It also realizes
focus requests with a bounded timer-driven retry, bridges the system
clipboard and debounces autosaves.
"""

from typing import Callable, List, Optional, Tuple

from PyQt6.QtCore import QCoreApplication, QObject, QTimer, pyqtSignal
from PyQt6.QtGui import QGuiApplication

from core import config
from core.domain.plan_table import (
    FocusOutcome,
    FocusRequest,
    FocusRetry,
    PlanDocument,
    PlanItem,
    PlanSummary,
    project_names,
)
from core.services import PlanEditorService, PlanPersistenceService


FocusHandler = Callable[[FocusRequest], bool]


class PlanTableViewModel(QObject):
    """
    View model for plan tables.

    Provides Qt signals for UI binding and commands for user actions.
    Acts as the bridge between the UI and the editor/persistence services.

    Signals:
        document_changed: Emitted when the document changes (edit, undo, load)
        selection_changed: Emitted when the cell/row selection changes
        undo_state_changed: Emitted when undo/redo availability changes
        focus_requested: Emitted to ask the view to focus a cell (item, row, col)
        drag_preview_changed: Emitted when the dragged rows or drop target change
        document_saved: Emitted with the storage key after a save
        projects_changed: Emitted with [(project, [activities])] after a save
    """

    # Signals
    document_changed = pyqtSignal()
    selection_changed = pyqtSignal()
    undo_state_changed = pyqtSignal(bool, bool)  # can_undo, can_redo
    focus_requested = pyqtSignal(str, int, int)  # item_id, row, col
    drag_preview_changed = pyqtSignal()
    document_saved = pyqtSignal(str)
    projects_changed = pyqtSignal(list)

    FOCUS_RETRY_INTERVAL_MS = 16
    AUTOSAVE_DELAY_MS = 200

    def __init__(
        self,
        persistence: Optional[PlanPersistenceService] = None,
        scope=None,
        autosave: bool = True,
        max_undo: Optional[int] = None,
        focus_retries: Optional[int] = None,
        parent: Optional[QObject] = None,
    ):
        """
        Initialize the view model.

        Args:
            persistence: Persistence service (no loading/saving if None)
            scope: Storage scope used by load() and saves (config value if None)
            autosave: Save shortly after every document change
            max_undo: Undo depth (config value if None)
            focus_retries: Focus retries after the first try (config value if None)
            parent: Optional parent QObject
        """
        super().__init__(parent)

        if max_undo is None:
            max_undo = config.get_max_undo()
        if focus_retries is None:
            focus_retries = config.get_focus_retry_attempts()
        if scope is None:
            scope = config.get_storage_scope()

        self._service = PlanEditorService(max_undo=max_undo)
        self._persistence = persistence
        self._scope = scope
        self._autosave = autosave
        self._loading = False

        self._focus = FocusRetry(max_retries=focus_retries)
        self._focus_handler: Optional[FocusHandler] = None

        self._save_timer = QTimer(self)
        self._save_timer.setSingleShot(True)
        self._save_timer.setInterval(self.AUTOSAVE_DELAY_MS)
        self._save_timer.timeout.connect(self.save_now)

        # Connect service callbacks to our signals
        self._service.store.on_change(self._on_store_changed)
        self._service.on_focus_request(self._on_focus_request)
        if self._persistence is not None:
            self._persistence.on_change(self._on_saved)

    @property
    def service(self) -> PlanEditorService:
        """Get the underlying service."""
        return self._service

    @property
    def document(self) -> PlanDocument:
        return self._service.document

    @property
    def scope(self):
        return self._scope

    @property
    def has_pending_save(self) -> bool:
        return self._save_timer.isActive()

    # -------------------------------------------------------------------------
    # Loading and saving
    # -------------------------------------------------------------------------

    def load(self, scope=None) -> PlanDocument:
        """Load the document of a scope (the current scope if None)."""
        if scope is not None:
            self._scope = scope
        if self._persistence is None:
            return self.document

        document = self._persistence.load(self._scope)
        self._loading = True
        try:
            self._service.load_document(document)
        finally:
            self._loading = False
        self._save_timer.stop()
        self.selection_changed.emit()
        self._emit_undo_state()
        return document

    def save_now(self) -> None:
        """Save immediately, cancelling any pending autosave."""
        self._save_timer.stop()
        if self._persistence is None:
            return
        self._persistence.save(self.document, self._scope)
        self._service.store.modified = False

    # -------------------------------------------------------------------------
    # Item commands
    # -------------------------------------------------------------------------

    def add_item(self, text: str, **kwargs) -> Optional[PlanItem]:
        item = self._service.add_item(text, **kwargs)
        if item is not None:
            self._emit_undo_state()
        return item

    def remove_item(self, item_id: str) -> bool:
        return self._after_edit(self._service.remove_item(item_id), structural=True)

    # -------------------------------------------------------------------------
    # Cell and row commands
    # -------------------------------------------------------------------------

    def set_cell(self, item_id: str, row: int, col: int, value: str) -> bool:
        return self._after_edit(self._service.set_cell(item_id, row, col, value))

    def set_estimate(self, item_id: str, row: int, label: str) -> bool:
        return self._after_edit(self._service.set_estimate(item_id, row, label))

    def set_duration(self, item_id: str, row: int, text: str) -> bool:
        return self._after_edit(self._service.set_duration(item_id, row, text))

    def clear_selected_cells(self) -> bool:
        return self._after_edit(self._service.clear_selected_cells())

    def insert_row(self, item_id: str, row_index: int, above: bool = False) -> Optional[FocusRequest]:
        request = self._service.insert_row(item_id, row_index, above)
        self._after_edit(request is not None, structural=True)
        return request

    def remove_row(self, item_id: str, row_index: int) -> bool:
        return self._after_edit(self._service.remove_row(item_id, row_index), structural=True)

    def add_question_with_outcome(self, item_id: str) -> Optional[FocusRequest]:
        request = self._service.add_question_with_outcome(item_id)
        self._after_edit(request is not None, structural=True)
        return request

    def add_needs_question_with_plan(self, item_id: str) -> Optional[FocusRequest]:
        request = self._service.add_needs_question_with_plan(item_id)
        self._after_edit(request is not None, structural=True)
        return request

    def delete_selected_rows(self) -> bool:
        return self._after_edit(self._service.delete_selected_rows(), structural=True)

    def duplicate_selected_rows(self) -> bool:
        return self._after_edit(self._service.duplicate_selected_rows(), structural=True)

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def click_cell(self, item_id: str, row: int, col: int, extend: bool = False, toggle: bool = False) -> None:
        self._service.click_cell(item_id, row, col, extend=extend, toggle=toggle)
        self.selection_changed.emit()

    def pointer_enter(self, item_id: str, row: int, col: int) -> None:
        if self._service.selection.dragging:
            self._service.pointer_enter(item_id, row, col)
            self.selection_changed.emit()

    def pointer_release(self) -> None:
        self._service.pointer_release()

    def select_row(self, item_id: str, row: int, additive: bool = False) -> None:
        self._service.select_row(item_id, row, additive=additive)
        self.selection_changed.emit()

    def clear_selection(self) -> None:
        self._service.clear_selection()
        self.selection_changed.emit()

    def is_cell_selected(self, item_id: str, row: int, col: int) -> bool:
        return self._service.selection.is_cell_selected(item_id, row, col)

    def is_row_selected(self, item_id: str, row: int) -> bool:
        return self._service.selection.is_row_selected(item_id, row)

    # -------------------------------------------------------------------------
    # Drag and drop
    # -------------------------------------------------------------------------

    def start_row_drag(self, item_id: str, row: int) -> None:
        self._service.start_row_drag(item_id, row)
        self.drag_preview_changed.emit()

    def drag_over(self, item_id: str, row: int) -> None:
        self._service.drag_over(item_id, row)
        self.drag_preview_changed.emit()

    def drop_rows(self, item_id: str, row: int) -> bool:
        moved = self._service.drop_rows(item_id, row)
        self.drag_preview_changed.emit()
        return self._after_edit(moved, structural=True)

    def cancel_drag(self) -> None:
        self._service.cancel_drag()
        self.drag_preview_changed.emit()

    def is_row_dragged(self, item_id: str, row: int) -> bool:
        return self._service.is_row_dragged(item_id, row)

    def is_drop_target(self, item_id: str, row: int) -> bool:
        return self._service.is_drop_target(item_id, row)

    # -------------------------------------------------------------------------
    # Clipboard
    # -------------------------------------------------------------------------

    def copy(self) -> Optional[str]:
        """TSV text of the selection (also placed on the system clipboard when available)."""
        text = self._service.copy_selection()
        clipboard = self._clipboard()
        if text is not None and clipboard is not None:
            clipboard.setText(text)
        return text

    def paste(self, text: Optional[str] = None) -> bool:
        """Paste text (the system clipboard text if None) at the first selected cell."""
        if text is None:
            clipboard = self._clipboard()
            text = clipboard.text() if clipboard is not None else ""
        return self._after_edit(self._service.paste(text))

    def _clipboard(self):
        # Only GUI applications have a clipboard
        if isinstance(QCoreApplication.instance(), QGuiApplication):
            return QGuiApplication.clipboard()
        return None

    # -------------------------------------------------------------------------
    # Undo/Redo commands
    # -------------------------------------------------------------------------

    def undo(self) -> bool:
        """Undo the last edit."""
        return self._after_edit(self._service.undo(), structural=True)

    def redo(self) -> bool:
        """Redo the last undone edit."""
        return self._after_edit(self._service.redo(), structural=True)

    @property
    def can_undo(self) -> bool:
        return self._service.can_undo()

    @property
    def can_redo(self) -> bool:
        return self._service.can_redo()

    def _emit_undo_state(self) -> None:
        """Emit undo state changed signal."""
        self.undo_state_changed.emit(self._service.can_undo(), self._service.can_redo())

    def _after_edit(self, changed: bool, structural: bool = False) -> bool:
        if changed:
            self._emit_undo_state()
            if structural:
                self.selection_changed.emit()
        return changed

    # -------------------------------------------------------------------------
    # Focus
    # -------------------------------------------------------------------------

    def set_focus_handler(self, handler: Optional[FocusHandler]) -> None:
        """
        Set the view callback that focuses a cell.

        The handler returns False while the cell does not exist yet; the
        request is then retried on a short timer a bounded number of times.
        Without a handler, focus_requested is emitted once instead.
        """
        self._focus_handler = handler

    def _on_focus_request(self, request: FocusRequest) -> None:
        token = self._focus.request(request)
        QTimer.singleShot(0, lambda: self._attempt_focus(token))

    def _attempt_focus(self, token: int) -> None:
        outcome = self._focus.attempt(token, self._try_focus)
        if outcome == FocusOutcome.RETRY:
            QTimer.singleShot(self.FOCUS_RETRY_INTERVAL_MS, lambda: self._attempt_focus(token))

    def _try_focus(self, request: FocusRequest) -> bool:
        if self._focus_handler is None:
            self.focus_requested.emit(request.item_id, request.row, request.col)
            return True
        if self._focus_handler(request):
            self.focus_requested.emit(request.item_id, request.row, request.col)
            return True
        return False

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def plan_summary(self, item_id: str) -> PlanSummary:
        return self._service.plan_summary(item_id)

    def project_names(self) -> List[Tuple[str, List[str]]]:
        return project_names(self.document.shortlist)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _on_store_changed(self) -> None:
        self.document_changed.emit()
        if self._autosave and not self._loading and self._persistence is not None:
            self._save_timer.start()

    def _on_saved(self, payload, key: str) -> None:
        self.document_saved.emit(key)
        self.projects_changed.emit(project_names(self.document.shortlist))
