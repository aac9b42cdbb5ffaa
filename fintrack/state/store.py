"""
State Store

DESIGN DECISION: The store is an explicit container handed to whoever
needs it (the application facade, the sync controller). There is no
module-level singleton.

The store is the single writer. dispatch() applies the reducer
synchronously, swaps in the new snapshot, then notifies listeners.
Listeners only ever see immutable snapshots.
"""

from typing import Callable, Optional

from fintrack.audit import AuditLogger
from fintrack.state.actions import Action
from fintrack.state.app_state import AppState, initial_state
from fintrack.state.reducer import Reducer

Listener = Callable[[AppState, AppState, Action], None]


class StateStore:
    """Holds the current AppState and applies actions to it."""

    def __init__(
        self,
        reducer: Reducer,
        state: Optional[AppState] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._reducer = reducer
        self._state = state if state is not None else initial_state()
        self._listeners: list[Listener] = []
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def reducer(self) -> Reducer:
        return self._reducer

    def dispatch(self, action: Action) -> AppState:
        """
        Apply an action and notify listeners if the state changed.

        Returns the new state.
        """
        previous = self._state
        current = self._reducer(previous, action)
        if current is previous:
            return current

        self._state = current

        for listener in list(self._listeners):
            try:
                listener(previous, current, action)
            except Exception as e:
                # A broken listener must not roll back or block the transition
                self._audit_logger.log_error(
                    error_type="listener_failed",
                    error_message=str(e),
                    details={"action": type(action).__name__},
                )

        return current

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
