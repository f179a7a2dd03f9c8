"""
Bounded focus retry after structural edits.

Inserting a row emits a FocusRequest; the view can only focus the new cell
once it has rebuilt its widgets, so the request is retried a few times and
then dropped. A newer request supersedes any older one still pending.
"""

from enum import Enum
from typing import Callable, Optional

from .models import FocusRequest, RowKind


class FocusOutcome(Enum):
    FOCUSED = "focused"
    RETRY = "retry"
    GAVE_UP = "gave_up"
    STALE = "stale"   # superseded or cancelled


def focus_column(kind: RowKind) -> int:
    """Column to focus in a new row: prompt rows start in column 1, others in column 2."""
    return 1 if kind == RowKind.PROMPT else 2


class FocusRetry:
    """
    Tracks the pending focus request and its attempts.

    The caller schedules attempts (e.g. with a timer) and calls attempt()
    with the token returned by request(); the first try plus max_retries
    retries are made before giving up.
    """

    def __init__(self, max_retries: int = 4):
        self.max_retries = max(int(max_retries), 0)
        self._generation = 0
        self._pending: Optional[FocusRequest] = None
        self._attempts = 0

    @property
    def pending(self) -> Optional[FocusRequest]:
        return self._pending

    def request(self, focus_request: FocusRequest) -> int:
        """Replace any pending request; returns the token for attempt()."""
        self._generation += 1
        self._pending = focus_request
        self._attempts = 0
        return self._generation

    def cancel(self) -> None:
        self._generation += 1
        self._pending = None

    def attempt(self, token: int, try_focus: Callable[[FocusRequest], bool]) -> FocusOutcome:
        """
        Make one focus attempt for the request identified by token.

        Args:
            token: Value returned by request()
            try_focus: Callback that focuses the cell, returning False if
                the cell does not exist yet

        Returns:
            FOCUSED, RETRY (schedule another attempt), GAVE_UP, or STALE if
            the request was superseded or cancelled
        """
        if token != self._generation or self._pending is None:
            return FocusOutcome.STALE

        if try_focus(self._pending):
            self._pending = None
            return FocusOutcome.FOCUSED

        if self._attempts >= self.max_retries:
            print(f"[plan-editor] Gave up focusing {self._pending} after {self._attempts + 1} attempts")
            self._pending = None
            return FocusOutcome.GAVE_UP

        self._attempts += 1
        return FocusOutcome.RETRY
