"""
Pydantic models for OpenAI Realtime API message structures.

This module provides type-safe models for the events exchanged with the OpenAI
Realtime API. Client events are the messages the relay sends; server events are
parsed into a closed union tagged by ``type``, with every other event type
surfaced as an ``UnhandledServerEvent``.
"""

import json
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from app.config.constants import (
    SERVER_EVENT_ERROR,
    SERVER_EVENT_RESPONSE_AUDIO_DELTA,
    SERVER_EVENT_RESPONSE_DONE,
    SERVER_EVENT_SESSION_CREATED,
    SERVER_EVENT_SESSION_UPDATED,
    SERVER_EVENT_SPEECH_STARTED,
)


class MessageRole(str, Enum):
    """Role of a participant in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class RealtimeBaseMessage(BaseModel):
    """Base model for Realtime API messages."""

    type: str


# Session configuration
class TurnDetection(BaseModel):
    """Server-side voice activity detection parameters."""

    type: str = "server_vad"
    threshold: float
    prefix_padding_ms: int
    silence_duration_ms: int


class ParameterProperty(BaseModel):
    type: str = "string"
    description: str
    enum: Optional[List[str]] = None


class FunctionParameters(BaseModel):
    type: str = "object"
    properties: Dict[str, ParameterProperty]
    required: List[str] = Field(default_factory=list)


class FunctionTool(BaseModel):
    """Function tool the model may call."""

    type: Literal["function"] = "function"
    name: str
    description: str
    parameters: FunctionParameters


class SessionConfig(BaseModel):
    """Session settings sent with session.update."""

    turn_detection: TurnDetection
    input_audio_format: str
    output_audio_format: str
    voice: str
    instructions: str
    modalities: List[str] = Field(default_factory=lambda: ["text", "audio"])
    temperature: float
    max_response_output_tokens: Union[int, Literal["inf"]]
    tools: Optional[List[FunctionTool]] = None
    tool_choice: Optional[str] = None


# Client events
class SessionUpdateEvent(RealtimeBaseMessage):
    type: Literal["session.update"] = "session.update"
    session: SessionConfig


class InputAudioBufferAppendEvent(RealtimeBaseMessage):
    type: Literal["input_audio_buffer.append"] = "input_audio_buffer.append"
    audio: str = Field(..., description="Base64-encoded audio")


class ConversationItemTruncateEvent(RealtimeBaseMessage):
    """Tells the model how much of an assistant item the caller actually heard."""

    type: Literal["conversation.item.truncate"] = "conversation.item.truncate"
    item_id: str
    content_index: int = 0
    audio_end_ms: int = Field(..., ge=0)


class InputTextContent(BaseModel):
    type: Literal["input_text"] = "input_text"
    text: str


class MessageItem(BaseModel):
    type: Literal["message"] = "message"
    role: MessageRole
    content: List[InputTextContent]


class FunctionCallOutputItem(BaseModel):
    type: Literal["function_call_output"] = "function_call_output"
    call_id: str
    output: str


class ConversationItemCreateEvent(RealtimeBaseMessage):
    type: Literal["conversation.item.create"] = "conversation.item.create"
    item: Union[MessageItem, FunctionCallOutputItem]


class ResponseCreateEvent(RealtimeBaseMessage):
    type: Literal["response.create"] = "response.create"


RealtimeClientEvent = Union[
    SessionUpdateEvent,
    InputAudioBufferAppendEvent,
    ConversationItemTruncateEvent,
    ConversationItemCreateEvent,
    ResponseCreateEvent,
]


# Server events
class ErrorDetails(BaseModel):
    model_config = {"extra": "allow"}

    type: Optional[str] = None
    code: Optional[str] = None
    message: Optional[str] = None


class ErrorEvent(RealtimeBaseMessage):
    type: Literal["error"]
    event_id: Optional[str] = None
    error: ErrorDetails


class SessionCreatedEvent(RealtimeBaseMessage):
    type: Literal["session.created"]
    event_id: Optional[str] = None
    session: Dict[str, Any] = Field(default_factory=dict)


class SessionUpdatedEvent(RealtimeBaseMessage):
    type: Literal["session.updated"]
    event_id: Optional[str] = None
    session: Dict[str, Any] = Field(default_factory=dict)


class ResponseAudioDeltaEvent(RealtimeBaseMessage):
    type: Literal["response.audio.delta"]
    event_id: Optional[str] = None
    response_id: Optional[str] = None
    item_id: Optional[str] = None
    output_index: Optional[int] = None
    content_index: Optional[int] = None
    delta: str = Field(..., description="Base64-encoded audio")


class SpeechStartedEvent(RealtimeBaseMessage):
    type: Literal["input_audio_buffer.speech_started"]
    event_id: Optional[str] = None
    audio_start_ms: Optional[int] = None
    item_id: Optional[str] = None


class ResponseOutputItem(BaseModel):
    """One entry of response.output; function calls carry name, call_id and arguments."""

    model_config = {"extra": "allow"}

    type: str
    id: Optional[str] = None
    status: Optional[str] = None
    name: Optional[str] = None
    call_id: Optional[str] = None
    arguments: Optional[str] = None


class ResponseResource(BaseModel):
    model_config = {"extra": "allow"}

    id: Optional[str] = None
    status: Optional[str] = None
    output: List[ResponseOutputItem] = Field(default_factory=list)


class ResponseDoneEvent(RealtimeBaseMessage):
    type: Literal["response.done"]
    event_id: Optional[str] = None
    response: ResponseResource


class UnhandledServerEvent(RealtimeBaseMessage):
    """Any server event the relay has no state effect for."""

    model_config = {"extra": "allow"}


RealtimeServerEvent = Annotated[
    Union[
        ErrorEvent,
        SessionCreatedEvent,
        SessionUpdatedEvent,
        ResponseAudioDeltaEvent,
        SpeechStartedEvent,
        ResponseDoneEvent,
    ],
    Field(discriminator="type"),
]

HANDLED_SERVER_EVENTS = {
    SERVER_EVENT_ERROR,
    SERVER_EVENT_SESSION_CREATED,
    SERVER_EVENT_SESSION_UPDATED,
    SERVER_EVENT_RESPONSE_AUDIO_DELTA,
    SERVER_EVENT_SPEECH_STARTED,
    SERVER_EVENT_RESPONSE_DONE,
}

_server_event_adapter = TypeAdapter(RealtimeServerEvent)


def parse_server_event(raw: Union[str, bytes]):
    """
    Parse one raw Realtime API message into its typed event.

    Args:
        raw: JSON text received from the Realtime API WebSocket

    Returns:
        The typed server event, or an UnhandledServerEvent for other types

    Raises:
        json.JSONDecodeError: If the message is not valid JSON
        ValueError: If the message is not an object with a string type
        pydantic.ValidationError: If a handled event has the wrong shape
    """
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    event_type = data.get("type")
    if not isinstance(event_type, str):
        raise ValueError(f"Expected a string event type, got {type(event_type).__name__}")
    if event_type not in HANDLED_SERVER_EVENTS:
        return UnhandledServerEvent.model_validate(data)
    return _server_event_adapter.validate_python(data)
