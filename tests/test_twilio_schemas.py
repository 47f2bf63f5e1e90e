"""
Unit tests for the Twilio Media Streams message models.
"""

import json

import pytest
from pydantic import ValidationError

from app.models.twilio_schemas import (
    ClearMessage,
    ConnectedMessage,
    MarkMessage,
    MarkPayload,
    MediaMessage,
    OutgoingMarkMessage,
    OutgoingMediaMessage,
    OutgoingMediaPayload,
    StartMessage,
    StopMessage,
    UnhandledTwilioMessage,
    parse_twilio_message,
)
from frames import (
    AUDIO,
    CALL_SID,
    STREAM_SID,
    twilio_connected,
    twilio_mark,
    twilio_media,
    twilio_start,
    twilio_stop,
)


def test_parse_connected():
    message = parse_twilio_message(twilio_connected())
    assert isinstance(message, ConnectedMessage)
    assert message.protocol == "Call"


def test_parse_start():
    message = parse_twilio_message(twilio_start())
    assert isinstance(message, StartMessage)
    assert message.start.streamSid == STREAM_SID
    assert message.start.callSid == CALL_SID
    assert message.start.mediaFormat.sampleRate == 8000


def test_parse_media_coerces_string_timestamp():
    message = parse_twilio_message(twilio_media(140))
    assert isinstance(message, MediaMessage)
    assert message.media.timestamp == 140
    assert message.media.payload == AUDIO


def test_parse_mark_and_stop():
    assert isinstance(parse_twilio_message(twilio_mark()), MarkMessage)
    assert isinstance(parse_twilio_message(twilio_stop()), StopMessage)


def test_unknown_event_is_unhandled():
    message = parse_twilio_message(json.dumps({"event": "dtmf", "dtmf": {"digit": "1"}}))
    assert isinstance(message, UnhandledTwilioMessage)
    assert message.event == "dtmf"


def test_empty_stream_sid_is_rejected():
    frame = json.loads(twilio_start())
    frame["start"]["streamSid"] = "  "
    with pytest.raises(ValidationError):
        parse_twilio_message(json.dumps(frame))


def test_media_without_payload_is_rejected():
    frame = {"event": "media", "media": {"timestamp": "0"}}
    with pytest.raises(ValidationError):
        parse_twilio_message(json.dumps(frame))


def test_negative_timestamp_is_rejected():
    with pytest.raises(ValidationError):
        parse_twilio_message(twilio_media(-20))


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", "42", '{"event": ["start"]}', '{"event": {}}', '{"streamSid": "MZ1"}'])
def test_malformed_frames_raise_value_error(raw):
    with pytest.raises(ValueError):
        parse_twilio_message(raw)


def test_outgoing_frames_serialize_to_twilio_shape():
    media = OutgoingMediaMessage(streamSid="MZ1", media=OutgoingMediaPayload(payload="AAA="))
    mark = OutgoingMarkMessage(streamSid="MZ1", mark=MarkPayload(name="responsePart"))
    clear = ClearMessage(streamSid="MZ1")

    assert json.loads(media.model_dump_json()) == {
        "event": "media",
        "streamSid": "MZ1",
        "media": {"payload": "AAA="},
    }
    assert json.loads(mark.model_dump_json()) == {
        "event": "mark",
        "streamSid": "MZ1",
        "mark": {"name": "responsePart"},
    }
    assert json.loads(clear.model_dump_json()) == {"event": "clear", "streamSid": "MZ1"}
