"""
Undoable commands and the undo/redo history.

Every edit of a plan document is wrapped in a Command. Snapshot commands
capture the whole document the first time they execute and restore that
exact snapshot on undo, however many times they are undone and redone.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from .models import PlanDocument, PlanItem, PlanTable, clone_document, clone_item
from .store import PlanDocumentStore


class Command(ABC):
    """An undoable edit."""

    description: str = ""

    @abstractmethod
    def execute(self) -> None:
        """Apply (or re-apply) the edit."""

    @abstractmethod
    def undo(self) -> None:
        """Revert the edit."""


class SnapshotCommand(Command):
    """
    Command that captures the document before and after its first execution.

    The pre-state is captured exactly once, on the first execute(). The
    resulting document is also computed once, so a redo replays exactly
    the same result even for edits that mint new pair ids.
    """

    def __init__(self, store: PlanDocumentStore, description: str = ""):
        self._store = store
        self.description = description
        self._snapshot: Optional[PlanDocument] = None
        self._result: Optional[PlanDocument] = None

    @property
    def snapshot(self) -> Optional[PlanDocument]:
        """The captured pre-state (None until first executed)."""
        return self._snapshot

    @abstractmethod
    def apply(self, document: PlanDocument) -> PlanDocument:
        """Build the edited document from a private copy of the current one."""

    def execute(self) -> None:
        if self._snapshot is None:
            current = self._store.document
            self._snapshot = clone_document(current)
            self._result = self.apply(clone_document(current))
        self._store.replace(clone_document(self._result))

    def undo(self) -> None:
        if self._snapshot is not None:
            self._store.replace(clone_document(self._snapshot))


TableTransform = Callable[[PlanTable], Optional[PlanTable]]


class TableEditCommand(SnapshotCommand):
    """
    Edit the plan table of one shortlist item with a pure transform.

    A transform returning None (or an item that no longer exists) leaves the
    document unchanged.
    """

    def __init__(self, store: PlanDocumentStore, item_id: str, transform: TableTransform, description: str = ""):
        super().__init__(store, description)
        self._item_id = item_id
        self._transform = transform

    @property
    def item_id(self) -> str:
        return self._item_id

    def apply(self, document: PlanDocument) -> PlanDocument:
        item = document.find_item(self._item_id)
        if item is None:
            return document
        table = self._transform(item.table)
        if table is not None:
            item.table = table
        return document


class DocumentEditCommand(SnapshotCommand):
    """Edit the whole document with a pure transform."""

    def __init__(self, store: PlanDocumentStore, transform: Callable[[PlanDocument], PlanDocument], description: str = ""):
        super().__init__(store, description)
        self._transform = transform

    def apply(self, document: PlanDocument) -> PlanDocument:
        return self._transform(document)


class AddItemCommand(SnapshotCommand):
    """Append a new item to the shortlist."""

    def __init__(self, store: PlanDocumentStore, item: PlanItem):
        super().__init__(store, f"Add {item.display_name}")
        self._item = clone_item(item)

    def apply(self, document: PlanDocument) -> PlanDocument:
        document.shortlist.append(clone_item(self._item))
        return document


class RemoveItemCommand(SnapshotCommand):
    """Remove an item (and its table) from the shortlist."""

    def __init__(self, store: PlanDocumentStore, item_id: str):
        super().__init__(store, "Remove project")
        self._item_id = item_id

    def apply(self, document: PlanDocument) -> PlanDocument:
        document.shortlist = [i for i in document.shortlist if i.id != self._item_id]
        return document


class CommandHistory:
    """
    Undo/redo stacks of executed commands.

    Executing a new command clears the redo stack. The undo stack is
    bounded; the oldest commands are dropped first.
    """

    def __init__(self, max_history: int = 100):
        self._undo_stack: List[Command] = []
        self._redo_stack: List[Command] = []
        self._max_history = max(int(max_history), 1)

    @property
    def undo_stack(self) -> List[Command]:
        return list(self._undo_stack)

    @property
    def redo_stack(self) -> List[Command]:
        return list(self._redo_stack)

    def execute_command(self, command: Command) -> None:
        """Execute a command and push it onto the undo stack."""
        command.execute()
        self._undo_stack.append(command)
        self._redo_stack.clear()
        while len(self._undo_stack) > self._max_history:
            self._undo_stack.pop(0)

    def undo(self) -> bool:
        """
        Undo the last command.

        Returns:
            True if undo was performed, False if nothing to undo
        """
        if not self._undo_stack:
            return False
        command = self._undo_stack.pop()
        command.undo()
        self._redo_stack.append(command)
        return True

    def redo(self) -> bool:
        """
        Redo the last undone command.

        Returns:
            True if redo was performed, False if nothing to redo
        """
        if not self._redo_stack:
            return False
        command = self._redo_stack.pop()
        command.execute()
        self._undo_stack.append(command)
        return True

    def can_undo(self) -> bool:
        return len(self._undo_stack) > 0

    def can_redo(self) -> bool:
        return len(self._redo_stack) > 0

    def clear(self) -> None:
        """Clear undo/redo history."""
        self._undo_stack.clear()
        self._redo_stack.clear()
