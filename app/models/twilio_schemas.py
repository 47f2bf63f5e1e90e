"""
Pydantic models for Twilio Media Streams WebSocket message schemas.

This module defines structured data models for the frames exchanged with a
bidirectional Twilio Media Stream. Incoming frames form a closed union tagged by
the ``event`` field; any tag outside that union is surfaced as an
``UnhandledTwilioMessage`` so callers can log and ignore it.

Reference: https://www.twilio.com/docs/voice/media-streams/websocket-messages
"""

import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from app.config.constants import (
    TWILIO_EVENT_CLEAR,
    TWILIO_EVENT_CONNECTED,
    TWILIO_EVENT_MARK,
    TWILIO_EVENT_MEDIA,
    TWILIO_EVENT_START,
    TWILIO_EVENT_STOP,
)


class BaseTwilioMessage(BaseModel):
    """Base model for all Twilio Media Streams messages."""

    event: str = Field(..., description="Message event type identifier")


# Messages from Twilio to the relay
class ConnectedMessage(BaseTwilioMessage):
    """First frame sent by Twilio once the WebSocket is established."""

    event: Literal["connected"]
    protocol: Optional[str] = Field(None, description="Protocol for the connection")
    version: Optional[str] = Field(None, description="Semantic version of the protocol")


class MediaFormat(BaseModel):
    """Format of the payload in media frames."""

    encoding: str = Field(..., description="Encoding of the payload, e.g. audio/x-mulaw")
    sampleRate: int = Field(..., description="Sample rate in hertz")
    channels: int = Field(..., description="Number of channels")


class StartMetadata(BaseModel):
    """Metadata describing a newly started stream."""

    streamSid: str = Field(..., description="The unique identifier of the Stream")
    accountSid: Optional[str] = Field(None, description="Account that created the Stream")
    callSid: Optional[str] = Field(None, description="Call that started the Stream")
    tracks: List[str] = Field(default_factory=list, description="Expected media tracks")
    customParameters: Dict[str, str] = Field(
        default_factory=dict, description="Custom parameters set on the Stream"
    )
    mediaFormat: Optional[MediaFormat] = None

    @field_validator("streamSid")
    def validate_stream_sid(cls, v):
        """Validate that the stream SID is not empty."""
        if not v.strip():
            raise ValueError("Stream SID cannot be empty")
        return v


class StartMessage(BaseTwilioMessage):
    """Model for the 'start' frame carrying the stream metadata."""

    event: Literal["start"]
    sequenceNumber: Optional[str] = None
    streamSid: Optional[str] = None
    start: StartMetadata


class MediaPayload(BaseModel):
    """Audio chunk carried by an inbound media frame."""

    payload: str = Field(..., description="Base64-encoded audio")
    timestamp: int = Field(..., ge=0, description="Milliseconds since the stream started")
    track: Optional[str] = None
    chunk: Optional[str] = None


class MediaMessage(BaseTwilioMessage):
    """Model for inbound 'media' frames."""

    event: Literal["media"]
    sequenceNumber: Optional[str] = None
    streamSid: Optional[str] = None
    media: MediaPayload


class MarkPayload(BaseModel):
    """Name of a playback mark."""

    name: str


class MarkMessage(BaseTwilioMessage):
    """Acknowledgment that audio sent before a mark has been played."""

    event: Literal["mark"]
    sequenceNumber: Optional[str] = None
    streamSid: Optional[str] = None
    mark: MarkPayload


class StopMessage(BaseTwilioMessage):
    """Model for the 'stop' frame sent when the stream ends."""

    event: Literal["stop"]
    sequenceNumber: Optional[str] = None
    streamSid: Optional[str] = None
    stop: Optional[Dict[str, Any]] = None


class UnhandledTwilioMessage(BaseTwilioMessage):
    """Any frame whose event tag is not part of the handled union."""

    model_config = {"extra": "allow"}


TwilioIncomingMessage = Annotated[
    Union[ConnectedMessage, StartMessage, MediaMessage, MarkMessage, StopMessage],
    Field(discriminator="event"),
]

INCOMING_EVENTS = {
    TWILIO_EVENT_CONNECTED,
    TWILIO_EVENT_START,
    TWILIO_EVENT_MEDIA,
    TWILIO_EVENT_MARK,
    TWILIO_EVENT_STOP,
}

_incoming_adapter = TypeAdapter(TwilioIncomingMessage)


def parse_twilio_message(
    raw: Union[str, bytes]
) -> Union[ConnectedMessage, StartMessage, MediaMessage, MarkMessage, StopMessage, UnhandledTwilioMessage]:
    """
    Parse one raw Twilio frame into its typed model.

    Args:
        raw: JSON text received from the Twilio WebSocket

    Returns:
        The typed message, or an UnhandledTwilioMessage for unknown event tags

    Raises:
        json.JSONDecodeError: If the frame is not valid JSON
        ValueError: If the frame is not an object with a string event tag
        pydantic.ValidationError: If a known event has the wrong shape
    """
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    event = data.get("event")
    if not isinstance(event, str):
        raise ValueError(f"Expected a string event tag, got {type(event).__name__}")
    if event not in INCOMING_EVENTS:
        return UnhandledTwilioMessage.model_validate(data)
    return _incoming_adapter.validate_python(data)


# Messages from the relay to Twilio
class OutgoingMediaPayload(BaseModel):
    payload: str = Field(..., description="Base64-encoded audio to play")


class OutgoingMediaMessage(BaseTwilioMessage):
    """Audio sent back to the caller."""

    event: Literal["media"] = TWILIO_EVENT_MEDIA
    streamSid: str
    media: OutgoingMediaPayload


class OutgoingMarkMessage(BaseTwilioMessage):
    """Mark queued after audio; Twilio echoes it once the audio has played."""

    event: Literal["mark"] = TWILIO_EVENT_MARK
    streamSid: str
    mark: MarkPayload


class ClearMessage(BaseTwilioMessage):
    """Discards any audio buffered by Twilio for the stream."""

    event: Literal["clear"] = TWILIO_EVENT_CLEAR
    streamSid: str


TwilioOutgoingMessage = Union[OutgoingMediaMessage, OutgoingMarkMessage, ClearMessage]
