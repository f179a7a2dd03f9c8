"""
Plan document storage.

This module provides the in-memory holder for the current plan document.
The document is treated as an immutable snapshot: edits build a new
document and replace the old one wholesale, which is what lets commands
keep a reference to "the state before".
"""

from typing import Callable, List, Optional

from .models import PlanDocument, PlanItem


class PlanDocumentStore:
    """
    In-memory holder for the current PlanDocument.

    Attributes:
        _document: Current document snapshot
        _modified: Whether the store has unsaved changes
        _change_callbacks: Listeners notified after every replacement
    """

    def __init__(self, document: Optional[PlanDocument] = None):
        self._document: PlanDocument = document if document is not None else PlanDocument()
        self._modified: bool = False
        self._change_callbacks: List[Callable[[], None]] = []

    @property
    def document(self) -> PlanDocument:
        """The current document snapshot. Do not mutate; use replace()."""
        return self._document

    @property
    def modified(self) -> bool:
        """Whether the store has unsaved changes."""
        return self._modified

    @modified.setter
    def modified(self, value: bool) -> None:
        self._modified = value

    def replace(self, document: PlanDocument) -> None:
        """Swap in a new document snapshot and notify listeners."""
        self._document = document
        self._notify_change()

    def find_item(self, item_id: str) -> Optional[PlanItem]:
        return self._document.find_item(item_id)

    def on_change(self, callback: Callable[[], None]) -> None:
        """Register a callback to be called when the document changes."""
        self._change_callbacks.append(callback)

    def remove_change_callback(self, callback: Callable[[], None]) -> None:
        """Remove a change callback."""
        if callback in self._change_callbacks:
            self._change_callbacks.remove(callback)

    def _notify_change(self) -> None:
        """Notify all listeners of a change."""
        self._modified = True
        for callback in list(self._change_callbacks):
            try:
                callback()
            except Exception as e:
                print(f"[plan-editor] Change listener failed: {e}")
