#!/usr/bin/env python3
"""
Test suite for progress events and the run state machine.
"""
import sys
import warnings
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from cardvault.hydration import progress
from cardvault.hydration.progress import ProgressReporter
from cardvault.models.events import ErrorKind, EventStatus, HydrationState, ProgressEvent


def test_happy_path_sequence():
    """Test a full run from start to complete."""
    print("\n=== Test 1: Happy Path Sequence ===")

    received = []
    reporter = ProgressReporter(received.append)

    reporter.start("Analyzing collection...")
    reporter.advance(HydrationState.FETCHING, "Fetching cards...", 0, 0)
    reporter.progress("Processing set 1/2: Obsidian Flames", 1, 2)
    reporter.advance(HydrationState.FILTERING, "Filtering 3 fetched cards...", 0, 3)
    reporter.advance(HydrationState.PERSISTING, "Found 3 matching cards. Checking sets...", 0, 3)
    final = reporter.complete("Sync complete! 3 cards updated.", 3, 3)

    assert received == reporter.events, "Sink should receive every event in order"
    assert [e.status for e in received] == [
        EventStatus.STARTING,
        EventStatus.PROGRESS,
        EventStatus.PROGRESS,
        EventStatus.PROGRESS,
        EventStatus.PROGRESS,
        EventStatus.COMPLETE,
    ]
    assert reporter.closed
    assert final.is_terminal
    assert final.processed_count == 3 and final.total_matched == 3

    print(" Happy path sequence test passed")


def test_forward_skip_allowed():
    """Test that an empty acquisition may go straight to complete."""
    print("\n=== Test 2: Forward Skip ===")

    reporter = ProgressReporter()
    reporter.start("Analyzing collection...")
    reporter.advance(HydrationState.FETCHING, "Fetching cards...")
    event = reporter.complete("No cards found.", 0, 0)

    assert event.stage == HydrationState.COMPLETE
    assert event.processed_count == 0

    print(" Forward skip test passed")


def test_backward_transition_rejected():
    """Test that a run cannot move back to an earlier stage."""
    print("\n=== Test 3: Backward Transition ===")

    reporter = ProgressReporter()
    reporter.start("Analyzing collection...")
    reporter.advance(HydrationState.PERSISTING, "Saving...")

    with pytest.raises(RuntimeError):
        reporter.advance(HydrationState.FETCHING, "Fetching again...")

    with pytest.raises(ValueError):
        reporter.advance(HydrationState.COMPLETE, "Use complete() instead")

    print(" Backward transition test passed")


def test_nothing_after_terminal():
    """Test that exactly one terminal event can be emitted."""
    print("\n=== Test 4: Single Terminal Event ===")

    reporter = ProgressReporter()
    reporter.start("Analyzing collection...")
    reporter.fail(ErrorKind.UPSTREAM_FAILURE, "Catalog request failed: 503")

    for emit in (
        lambda: reporter.progress("late"),
        lambda: reporter.complete("late", 0, 0),
        lambda: reporter.fail(ErrorKind.INTERNAL, "late"),
    ):
        with pytest.raises(RuntimeError):
            emit()

    assert len(reporter.events) == 2
    assert reporter.last_event.error_kind == ErrorKind.UPSTREAM_FAILURE

    print(" Single terminal event test passed")


def test_start_only_once():
    """Test that events require a started run and start cannot repeat."""
    print("\n=== Test 5: Start Once ===")

    reporter = ProgressReporter()
    with pytest.raises(RuntimeError):
        reporter.progress("too early")

    reporter.start("Analyzing collection...")
    with pytest.raises(RuntimeError):
        reporter.start("again")

    print(" Start once test passed")


def test_event_to_dict():
    """Test the JSON-ready event shape."""
    print("\n=== Test 6: Event Serialization ===")

    event = ProgressEvent(status=EventStatus.PROGRESS, stage=HydrationState.PERSISTING, message="Syncing... 10/23", count=10, total=23)
    assert event.to_dict() == {
        "status": "progress",
        "stage": "persisting",
        "message": "Syncing... 10/23",
        "count": 10,
        "total": 23,
    }
    assert event.processed_count is None, "Only complete events carry a processed count"

    error = ProgressEvent(status=EventStatus.ERROR, stage=HydrationState.ERROR, message="boom", error_kind=ErrorKind.STORE_FAILURE)
    assert error.to_dict() == {"status": "error", "stage": "error", "message": "boom", "error_kind": "store_failure"}
    assert error.is_terminal

    print(" Event serialization test passed")


def test_state_diagram_docstring_compiles_without_warnings():
    """The ASCII state diagram uses backslashes; the module must not emit escape warnings."""
    source = Path(progress.__file__).read_text(encoding="utf-8")
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        compile(source, progress.__file__, "exec")
