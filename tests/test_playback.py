"""
Unit tests for the playback bookkeeping: caller-clock timing and the mark queue.
"""

from app.models.playback import MarkQueue, PlaybackTimer


def test_timer_starts_empty():
    timer = PlaybackTimer()
    assert timer.latest_media_timestamp == 0
    assert timer.response_start_timestamp is None
    assert timer.active_response_item_id is None
    assert timer.response_in_flight is False
    assert timer.elapsed_since_response_start() == 0


def test_first_audio_chunk_anchors_response_start():
    timer = PlaybackTimer()
    timer.update_media_timestamp(1200)

    assert timer.mark_response_audio("item_1") is True
    assert timer.response_start_timestamp == 1200
    assert timer.active_response_item_id == "item_1"

    # Later chunks of the same response keep the anchor
    timer.update_media_timestamp(1500)
    assert timer.mark_response_audio("item_1") is False
    assert timer.response_start_timestamp == 1200


def test_zero_is_a_valid_response_start():
    """A response starting before any caller audio anchors at 0, not 'unset'."""
    timer = PlaybackTimer()
    timer.mark_response_audio("item_1")
    assert timer.response_start_timestamp == 0
    assert timer.response_in_flight is True

    timer.update_media_timestamp(20)
    timer.mark_response_audio("item_1")
    assert timer.response_start_timestamp == 0
    assert timer.elapsed_since_response_start() == 20


def test_missing_item_id_keeps_previous_item():
    timer = PlaybackTimer()
    timer.mark_response_audio("item_1")
    timer.mark_response_audio(None)
    assert timer.active_response_item_id == "item_1"


def test_elapsed_is_never_negative():
    timer = PlaybackTimer()
    timer.update_media_timestamp(500)
    timer.mark_response_audio("item_1")
    timer.update_media_timestamp(100)
    assert timer.elapsed_since_response_start() == 0


def test_clear_response_and_reset():
    timer = PlaybackTimer()
    timer.update_media_timestamp(300)
    timer.mark_response_audio("item_1")

    timer.clear_response()
    assert timer.response_start_timestamp is None
    assert timer.active_response_item_id is None
    assert timer.latest_media_timestamp == 300

    timer.mark_response_audio("item_2")
    timer.reset()
    assert timer.latest_media_timestamp == 0
    assert timer.response_in_flight is False


def test_mark_queue_is_fifo():
    marks = MarkQueue()
    marks.push("a")
    marks.push("b")
    assert len(marks) == 2
    assert marks

    assert marks.acknowledge() == "a"
    assert marks.acknowledge() == "b"
    assert len(marks) == 0
    assert not marks


def test_acknowledge_on_empty_queue_is_a_no_op():
    marks = MarkQueue()
    assert marks.acknowledge() is None
    assert len(marks) == 0

    marks.push("responsePart")
    marks.acknowledge()
    marks.acknowledge()
    assert len(marks) == 0


def test_mark_queue_clear():
    marks = MarkQueue()
    for _ in range(3):
        marks.push("responsePart")
    marks.clear()
    assert len(marks) == 0
