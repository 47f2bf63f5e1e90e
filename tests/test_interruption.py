"""
Unit tests for barge-in handling.
"""

from app.handlers.interruption import interrupt_response


def _play_response(session, timestamps, item_id="item_1"):
    """Forward one response chunk at each caller timestamp, as the bridge does."""
    for timestamp in timestamps:
        session.timer.update_media_timestamp(timestamp)
        session.timer.mark_response_audio(item_id)
        session.marks.push("responsePart")


def test_interrupt_truncates_at_caller_playback_position(session):
    session.start_stream("MZ1")
    session.timer.update_media_timestamp(0)
    # First model audio is forwarded while the caller clock reads 20ms
    _play_response(session, [20])
    session.timer.update_media_timestamp(40)

    interruption = interrupt_response(session)

    assert interruption is not None
    assert interruption.elapsed_ms == 20
    assert interruption.truncate.item_id == "item_1"
    assert interruption.truncate.content_index == 0
    assert interruption.truncate.audio_end_ms == 20
    assert interruption.clear.streamSid == "MZ1"


def test_interrupt_resets_playback_state(session):
    session.start_stream("MZ1")
    _play_response(session, [100, 120, 140])
    session.timer.update_media_timestamp(400)

    interruption = interrupt_response(session)

    assert interruption.elapsed_ms == 300
    assert len(session.marks) == 0
    assert session.response_start_timestamp is None
    assert session.active_response_item_id is None
    assert session.latest_media_timestamp == 400


def test_no_interrupt_when_all_marks_acknowledged(session):
    session.start_stream("MZ1")
    _play_response(session, [100])
    session.marks.acknowledge()

    assert interrupt_response(session) is None
    assert session.response_start_timestamp == 100


def test_no_interrupt_without_response(session):
    session.start_stream("MZ1")
    assert interrupt_response(session) is None


def test_clear_without_truncate_when_item_unknown(session):
    session.start_stream("MZ1")
    _play_response(session, [0, 20], item_id=None)
    session.timer.update_media_timestamp(60)

    interruption = interrupt_response(session)

    assert interruption.truncate is None
    assert interruption.clear.streamSid == "MZ1"
    assert len(session.marks) == 0


def test_second_speech_start_is_a_no_op(session):
    session.start_stream("MZ1")
    _play_response(session, [0, 20])

    assert interrupt_response(session) is not None
    assert interrupt_response(session) is None
