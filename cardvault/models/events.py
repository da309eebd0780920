"""
Progress Event Schema - the ordered status messages a hydration run pushes to its caller.

A run emits exactly one "starting" event, any number of "progress" events, and
closes with exactly one terminal event: "complete" or "error".

Example stream:
    {"status": "starting", "stage": "starting", "message": "Analyzing collection filter..."}
    {"status": "progress", "stage": "fetching", "message": "Processing set 1/3: Obsidian Flames", "count": 1, "total": 3}
    {"status": "progress", "stage": "persisting", "message": "Syncing... 10/23", "count": 10, "total": 23}
    {"status": "complete", "stage": "complete", "message": "Sync complete! 23 cards updated.", "count": 23, "total": 23}
"""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class HydrationState(str, Enum):
    """Pipeline stages, in the only order a run may move through them."""
    STARTING = "starting"
    FETCHING = "fetching"
    FILTERING = "filtering"
    PERSISTING = "persisting"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (HydrationState.COMPLETE, HydrationState.ERROR)


class EventStatus(str, Enum):
    STARTING = "starting"
    PROGRESS = "progress"
    COMPLETE = "complete"
    ERROR = "error"


class ErrorKind(str, Enum):
    """Error taxonomy surfaced on terminal error events."""
    INVALID_FILTER = "invalid_filter"
    UPSTREAM_FAILURE = "upstream_failure"
    STORE_FAILURE = "store_failure"
    CANCELLED = "cancelled"
    INTERNAL = "internal"


class ProgressEvent(BaseModel):
    """
    One status message. Transient: consumed once by the caller, never persisted.
    """
    model_config = ConfigDict(
        frozen=True,
        use_enum_values=False,
    )

    status: EventStatus
    stage: HydrationState
    message: str = Field(..., description="Human-readable text, rendered verbatim by the UI")
    count: Optional[int] = Field(None, ge=0, description="Items processed so far")
    total: Optional[int] = Field(None, ge=0, description="Items expected in this stage")
    error_kind: Optional[ErrorKind] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (EventStatus.COMPLETE, EventStatus.ERROR)

    @property
    def processed_count(self) -> Optional[int]:
        """Records persisted; only meaningful on a complete event."""
        return self.count if self.status == EventStatus.COMPLETE else None

    @property
    def total_matched(self) -> Optional[int]:
        """Records that survived filtering; only meaningful on a complete event."""
        return self.total if self.status == EventStatus.COMPLETE else None

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-ready dict without unset counters."""
        return self.model_dump(mode="json", exclude_none=True)
