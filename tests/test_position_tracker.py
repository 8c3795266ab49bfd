from __future__ import annotations

from typing import List, Optional

import pytest

from helpers import position_of, range_of

from position_tracker.host import (
    DocumentValidationError,
    Position,
    Range,
    TextDocument,
    TextEdit,
    Workspace,
)
from position_tracker.tracking import DocumentPositionTracker

SAMPLE = "1 22 333 4444 55555"


class Recorder:
    """Keeps the latest position and every value a callback received."""

    def __init__(self, position: Optional[Position]) -> None:
        self.position = position
        self.calls: List[Optional[Position]] = []

    def __call__(self, position: Optional[Position]) -> None:
        self.position = position
        self.calls.append(position)


def make_tracker():
    workspace = Workspace()
    return workspace, DocumentPositionTracker(workspace)


def test_tracks_changes_in_multiple_documents() -> None:
    workspace, tracker = make_tracker()
    doc1 = workspace.open_document(SAMPLE)
    doc2 = workspace.open_document(SAMPLE)
    first = Recorder(position_of("^333", doc1))
    second = Recorder(position_of("^4444", doc2))
    tracker.track_position(doc1, first.position, first)
    tracker.track_position(doc2, second.position, second)

    workspace.apply_edits(
        doc1,
        [
            TextEdit.insert(position_of("^1", doc1), "inserted at start"),
            TextEdit.insert(position_of("55555^", doc1), "inserted at end"),
        ],
    )
    workspace.apply_edits(
        doc1,
        [
            TextEdit(range_of("|22|", doc1), "-2-2"),
            TextEdit(range_of("|4444|", doc1), "-4-4-4-4"),
        ],
    )
    workspace.apply_edits(
        doc1,
        [
            TextEdit.delete(range_of("| at start|", doc1)),
            TextEdit.delete(range_of("| at end|", doc1)),
        ],
    )

    assert doc1.text == "inserted1 -2-2 333 -4-4-4-4 55555inserted"
    assert first.position == position_of("^333", doc1)
    assert second.position == position_of("^4444", doc2)
    assert second.calls == []


def test_multi_line_insertion_before_tracked_position() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document("line1\nline2\nline3")
    recorder = Recorder(position_of("^line3", doc))
    tracker.track_position(doc, recorder.position, recorder)

    workspace.insert(doc, Position(0, 0), "\n")

    assert recorder.position == position_of("^line3", doc)
    assert recorder.position == Position(3, 0)


def test_stops_tracking_when_subscription_disposed() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document(SAMPLE)
    recorder = Recorder(position_of("^333", doc))
    handle = tracker.track_position(doc, recorder.position, recorder)

    workspace.insert(doc, position_of("^1", doc), "inserted at start")
    assert recorder.position == position_of("^333", doc)

    handle.dispose()
    handle.dispose()
    workspace.insert(doc, position_of("^1", doc), "000")

    # Not tracked any more, so it is now out of sync.
    assert recorder.position == position_of("^22 3", doc)
    assert tracker.tracked_documents() == ()


def test_stops_tracking_when_tracker_disposed() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document(SAMPLE)
    recorder = Recorder(position_of("^333", doc))
    tracker.track_position(doc, recorder.position, recorder)

    workspace.insert(doc, position_of("^1", doc), "inserted at start")
    tracker.dispose()
    workspace.insert(doc, position_of("^1", doc), "000")
    workspace.close_document(doc)

    assert len(recorder.calls) == 1
    assert tracker.subscription_count() == 0


def test_disposing_one_of_two_equal_subscriptions() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document(SAMPLE)
    start = position_of("^333", doc)
    kept = Recorder(start)
    dropped = Recorder(start)
    tracker.track_position(doc, start, kept)
    handle = tracker.track_position(doc, start, dropped)

    workspace.insert(doc, position_of("^1", doc), "__")
    handle.dispose()
    workspace.insert(doc, position_of("^1", doc), "____")

    assert kept.position == position_of("^333", doc)
    assert kept.calls == [Position(0, 7), Position(0, 11)]
    assert dropped.calls == [Position(0, 7)]
    assert tracker.subscription_count(doc) == 1


def test_edits_in_one_document_do_not_touch_another() -> None:
    workspace, tracker = make_tracker()
    doc_a = workspace.open_document(SAMPLE)
    doc_b = workspace.open_document(SAMPLE)
    recorder = Recorder(position_of("^4444", doc_b))
    tracker.track_position(doc_b, recorder.position, recorder)

    workspace.replace(doc_a, range_of("|1 22 333|", doc_a), "")

    assert recorder.calls == []


def test_close_notifies_every_subscription_once() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document(SAMPLE)
    first = Recorder(None)
    second = Recorder(None)
    tracker.track_position(doc, position_of("^333", doc), first)
    tracker.track_position(doc, position_of("^4444", doc), second)

    workspace.close_document(doc)
    workspace.close_document(doc)

    assert first.calls == [None]
    assert second.calls == [None]
    assert tracker.tracked_documents() == ()


def test_lost_position_is_reported_once_and_not_recovered() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document(SAMPLE)
    recorder = Recorder(position_of("3^33", doc))
    tracker.track_position(doc, recorder.position, recorder)

    workspace.replace(doc, range_of("|333|", doc), "")
    workspace.insert(doc, position_of("22 ^", doc), "333")

    assert recorder.calls == [None]
    assert tracker.subscription_count(doc) == 0


def test_callbacks_run_in_registration_order() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document(SAMPLE)
    order: List[str] = []
    tracker.track_position(doc, position_of("^55555", doc), lambda p: order.append("last"))
    tracker.track_position(doc, position_of("^1", doc), lambda p: order.append("first"))

    workspace.insert(doc, Position(0, 0), "x")

    assert order == ["last", "first"]


def test_callback_may_dispose_itself_and_register_new_positions() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document(SAMPLE)
    added: List[Optional[Position]] = []
    calls: List[Optional[Position]] = []
    handles = []

    def once(position: Optional[Position]) -> None:
        calls.append(position)
        handles[0].dispose()
        tracker.track_position(doc, Position(0, 0), added.append)

    handles.append(tracker.track_position(doc, position_of("^333", doc), once))

    workspace.insert(doc, Position(0, 0), "x")
    workspace.insert(doc, Position(0, 0), "y")

    assert calls == [Position(0, 6)]
    assert added == [Position(0, 1)]
    assert tracker.subscription_count(doc) == 1


def test_subscription_disposed_by_earlier_callback_is_skipped() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document(SAMPLE)
    later: List[Optional[Position]] = []
    handles = []

    tracker.track_position(doc, Position(0, 0), lambda p: handles[0].dispose())
    handles.append(tracker.track_position(doc, Position(0, 2), later.append))

    workspace.insert(doc, Position(0, 0), "x")

    assert later == []
    assert tracker.subscription_count(doc) == 1


def test_disposing_tracker_from_callback_stops_the_batch() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document(SAMPLE)
    later: List[Optional[Position]] = []

    tracker.track_position(doc, Position(0, 0), lambda p: tracker.dispose())
    tracker.track_position(doc, Position(0, 2), later.append)

    workspace.insert(doc, Position(0, 0), "x")

    assert later == []


def test_empty_documents_are_pruned() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document(SAMPLE)
    handles = [tracker.track_position(doc, Position(0, i), lambda p: None) for i in range(3)]

    for handle in handles:
        handle.dispose()

    assert tracker.tracked_documents() == ()
    assert tracker.subscription_count() == 0


def test_independent_trackers_share_nothing() -> None:
    workspace = Workspace()
    doc = workspace.open_document(SAMPLE)
    first = DocumentPositionTracker(workspace)
    second = DocumentPositionTracker(workspace)
    seen: List[Optional[Position]] = []
    first.track_position(doc, Position(0, 5), seen.append)

    second.dispose()
    workspace.insert(doc, Position(0, 0), "x")

    assert seen == [Position(0, 6)]
    assert second.subscription_count() == 0


def test_tracking_in_closed_document_is_an_error() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document(SAMPLE)
    workspace.close_document(doc)

    with pytest.raises(DocumentValidationError):
        tracker.track_position(doc, Position(0, 0), lambda p: None)


def test_tracking_out_of_range_position_is_an_error() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document(SAMPLE)

    with pytest.raises(DocumentValidationError):
        tracker.track_position(doc, Position(3, 0), lambda p: None)


def test_tracking_after_dispose_is_an_error() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document(SAMPLE)
    tracker.dispose()

    with pytest.raises(RuntimeError):
        tracker.track_position(doc, Position(0, 0), lambda p: None)


def test_tracking_in_never_opened_document_is_an_error() -> None:
    workspace, tracker = make_tracker()
    stray = TextDocument("mem://stray", "abc")

    with pytest.raises(DocumentValidationError):
        tracker.track_position(stray, Position(0, 1), lambda p: None)
    assert tracker.subscription_count() == 0


def test_tracking_in_document_from_another_workspace_is_an_error() -> None:
    workspace, tracker = make_tracker()
    other = Workspace(name="other")
    foreign = other.open_document(SAMPLE)
    workspace.open_document(SAMPLE, uri=foreign.uri)

    with pytest.raises(DocumentValidationError):
        tracker.track_position(foreign, Position(0, 1), lambda p: None)
    assert tracker.tracked_documents() == ()


def test_process_event_fires_after_each_pass() -> None:
    workspace, tracker = make_tracker()
    doc = workspace.open_document(SAMPLE)
    untracked = workspace.open_document(SAMPLE)
    processed = []
    tracker.on_did_process_document(processed.append)
    tracker.track_position(doc, Position(0, 0), lambda p: None)

    workspace.insert(doc, Position(0, 0), "x")
    workspace.insert(untracked, Position(0, 0), "x")
    workspace.close_document(doc)

    assert processed == [doc, doc]


def test_position_ranges_through_helpers() -> None:
    workspace = Workspace()
    doc = workspace.open_document(SAMPLE)

    assert range_of("|22|", doc) == Range.of(0, 2, 0, 4)
    assert position_of("55555^", doc) == Position(0, 19)
