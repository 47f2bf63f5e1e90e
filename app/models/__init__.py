"""
Models module for data structures and state management in the relay.

Key components:
- twilio_schemas: Pydantic models for the Twilio Media Streams frames, parsed as a
  closed union tagged by ``event``.
- openai_schemas: Pydantic models for OpenAI Realtime API client and server events,
  parsed as a closed union tagged by ``type``.
- playback: The caller-clock timer and the FIFO of playback marks.
- call_session: Per-call state owned by one relay, plus the registry of live relays.

Usage examples:
```python
from app.models.twilio_schemas import MediaMessage, parse_twilio_message
from app.models.call_session import CallSession

session = CallSession("session-1")
message = parse_twilio_message(raw_frame)
if isinstance(message, MediaMessage):
    session.timer.update_media_timestamp(message.media.timestamp)
```
"""

from app.models.call_session import CallSession, SessionRegistry
from app.models.playback import MarkQueue, PlaybackTimer
from app.models.twilio_schemas import (
    ClearMessage,
    ConnectedMessage,
    MarkMessage,
    MediaMessage,
    OutgoingMarkMessage,
    OutgoingMediaMessage,
    StartMessage,
    StopMessage,
    UnhandledTwilioMessage,
    parse_twilio_message,
)
from app.models.openai_schemas import (
    ConversationItemCreateEvent,
    ConversationItemTruncateEvent,
    InputAudioBufferAppendEvent,
    ResponseAudioDeltaEvent,
    ResponseCreateEvent,
    ResponseDoneEvent,
    SessionUpdateEvent,
    SpeechStartedEvent,
    parse_server_event,
)
