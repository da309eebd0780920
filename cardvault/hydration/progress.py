r"""
Progress Reporter - the run's state machine and its event side channel.

States advance one way only:

    STARTING -> FETCHING -> FILTERING -> PERSISTING -> COMPLETE
         \__________\___________\____________\______-> ERROR

Skipping forward is allowed (an empty acquisition goes FETCHING -> COMPLETE);
going back, or emitting anything after a terminal event, is a programming
error and raises RuntimeError.
"""
from typing import Callable, List, Optional

from cardvault.models.events import ErrorKind, EventStatus, HydrationState, ProgressEvent

EventSink = Callable[[ProgressEvent], None]

_ORDER = [
    HydrationState.STARTING,
    HydrationState.FETCHING,
    HydrationState.FILTERING,
    HydrationState.PERSISTING,
    HydrationState.COMPLETE,
]


class ProgressReporter:
    """
    Builds ProgressEvents and pushes them to a sink in pipeline order.

    Args:
        sink: Called synchronously with every event (queue.put, list.append, a UI callback...)
    """

    def __init__(self, sink: Optional[EventSink] = None):
        self._sink = sink
        self._state: Optional[HydrationState] = None
        self.events: List[ProgressEvent] = []

    @property
    def state(self) -> Optional[HydrationState]:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is not None and self._state.is_terminal

    @property
    def last_event(self) -> Optional[ProgressEvent]:
        return self.events[-1] if self.events else None

    def start(self, message: str) -> ProgressEvent:
        if self._state is not None:
            raise RuntimeError("Hydration already started")
        self._state = HydrationState.STARTING
        return self._emit(EventStatus.STARTING, message)

    def advance(
        self,
        state: HydrationState,
        message: str,
        count: Optional[int] = None,
        total: Optional[int] = None,
    ) -> ProgressEvent:
        """Move to a later non-terminal state and announce it."""
        if state.is_terminal:
            raise ValueError("Use complete() or fail() for terminal states")
        self._transition(state)
        return self._emit(EventStatus.PROGRESS, message, count, total)

    def progress(self, message: str, count: Optional[int] = None, total: Optional[int] = None) -> ProgressEvent:
        """Incremental event within the current state."""
        self._ensure_open()
        return self._emit(EventStatus.PROGRESS, message, count, total)

    def complete(self, message: str, processed: int, total_matched: int) -> ProgressEvent:
        self._transition(HydrationState.COMPLETE)
        return self._emit(EventStatus.COMPLETE, message, processed, total_matched)

    def fail(self, kind: ErrorKind, message: str) -> ProgressEvent:
        self._ensure_open()
        self._state = HydrationState.ERROR
        return self._emit(EventStatus.ERROR, message, error_kind=kind)

    def _ensure_open(self) -> None:
        if self._state is None:
            raise RuntimeError("Hydration not started")
        if self._state.is_terminal:
            raise RuntimeError(f"Event stream already closed ({self._state.value})")

    def _transition(self, state: HydrationState) -> None:
        self._ensure_open()
        if _ORDER.index(state) < _ORDER.index(self._state):
            raise RuntimeError(f"Illegal transition {self._state.value} -> {state.value}")
        self._state = state

    def _emit(
        self,
        status: EventStatus,
        message: str,
        count: Optional[int] = None,
        total: Optional[int] = None,
        error_kind: Optional[ErrorKind] = None,
    ) -> ProgressEvent:
        event = ProgressEvent(
            status=status,
            stage=self._state,
            message=message,
            count=count,
            total=total,
            error_kind=error_kind,
        )
        self.events.append(event)
        if self._sink is not None:
            self._sink(event)
        return event
