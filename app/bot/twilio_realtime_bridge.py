"""
Bridge between a Twilio Media Stream and the OpenAI Realtime API.

One ``TwilioRealtimeBridge`` relays a single call. It runs two pumps for the
lifetime of the call:

- Twilio -> OpenAI: caller audio is forwarded as ``input_audio_buffer.append``;
  ``start`` opens a new stream epoch and ``mark`` acknowledges played audio.
- OpenAI -> Twilio: response audio is forwarded as media frames, each followed
  by a mark; caller speech onset interrupts the response being played, and
  completed responses carrying tool calls are handed to the function dispatcher.

Every handler mutates the session synchronously before its first await, so a
frame arriving on the other pump never observes a half-applied transition.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Set, Union

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from app.bot.realtime_api import RealtimeAudioClient
from app.bot.session_config import build_initial_conversation_item, build_session_update
from app.config import settings
from app.config.constants import (
    LOG_EVENT_TYPES,
    LOGGER_NAME,
    RESPONSE_MARK_NAME,
    SERVER_EVENT_ERROR,
    SERVER_EVENT_RESPONSE_AUDIO_DELTA,
    SERVER_EVENT_RESPONSE_DONE,
    SERVER_EVENT_SESSION_CREATED,
    SERVER_EVENT_SESSION_UPDATED,
    SERVER_EVENT_SPEECH_STARTED,
    TWILIO_EVENT_CONNECTED,
    TWILIO_EVENT_MARK,
    TWILIO_EVENT_MEDIA,
    TWILIO_EVENT_START,
    TWILIO_EVENT_STOP,
)
from app.handlers.function_calls import FunctionCallDispatcher
from app.handlers.interruption import interrupt_response
from app.models.call_session import CallSession
from app.models.openai_schemas import (
    ErrorEvent,
    InputAudioBufferAppendEvent,
    ResponseAudioDeltaEvent,
    ResponseCreateEvent,
    ResponseDoneEvent,
    SpeechStartedEvent,
    parse_server_event,
)
from app.models.twilio_schemas import (
    ConnectedMessage,
    MarkMessage,
    MarkPayload,
    MediaMessage,
    OutgoingMarkMessage,
    OutgoingMediaMessage,
    OutgoingMediaPayload,
    StartMessage,
    StopMessage,
    parse_twilio_message,
)
from app.services.appointment_store import AppointmentStore

logger = logging.getLogger(LOGGER_NAME)

# Longest slice of a malformed frame included in log messages
MAX_LOGGED_FRAME = 200

Handler = Callable[[BaseModel], Awaitable[None]]


class TwilioRealtimeBridge:
    """
    Relays one call between Twilio Media Streams and the OpenAI Realtime API.

    Attributes:
        twilio_websocket: Accepted FastAPI WebSocket from Twilio
        realtime_client: Connected client for the Realtime API
        session: State of the call, owned exclusively by this bridge
        function_dispatcher: Executes scheduling tool calls
    """

    def __init__(
        self,
        twilio_websocket: WebSocket,
        realtime_client: RealtimeAudioClient,
        session: CallSession,
        appointment_store: AppointmentStore,
        enable_appointment_tool: bool = settings.ENABLE_APPOINTMENT_TOOL,
        ai_speaks_first: bool = settings.AI_SPEAKS_FIRST,
        settle_delay: float = settings.SESSION_SETTLE_DELAY,
    ):
        self.twilio_websocket = twilio_websocket
        self.realtime_client = realtime_client
        self.session = session
        self.enable_appointment_tool = enable_appointment_tool
        self.ai_speaks_first = ai_speaks_first
        self.settle_delay = settle_delay
        self.function_dispatcher = FunctionCallDispatcher(realtime_client, appointment_store)
        self._closed = False
        self._function_tasks: Set[asyncio.Task] = set()

        self.twilio_event_handlers: Dict[str, Handler] = {
            TWILIO_EVENT_CONNECTED: self.handle_connected,
            TWILIO_EVENT_START: self.handle_start,
            TWILIO_EVENT_MEDIA: self.handle_media,
            TWILIO_EVENT_MARK: self.handle_mark,
            TWILIO_EVENT_STOP: self.handle_stop,
        }

        self.realtime_event_handlers: Dict[str, Handler] = {
            SERVER_EVENT_ERROR: self.handle_error,
            SERVER_EVENT_SESSION_CREATED: self.handle_session_event,
            SERVER_EVENT_SESSION_UPDATED: self.handle_session_event,
            SERVER_EVENT_RESPONSE_AUDIO_DELTA: self.handle_audio_delta,
            SERVER_EVENT_SPEECH_STARTED: self.handle_speech_started,
            SERVER_EVENT_RESPONSE_DONE: self.handle_response_done,
        }

    @property
    def closed(self) -> bool:
        return self._closed

    async def run(self) -> None:
        """Relay the call until both pumps have finished."""
        try:
            await asyncio.gather(
                self.initialize_session(),
                self.receive_from_twilio(),
                self.receive_from_realtime(),
            )
        finally:
            await self.close()

    async def initialize_session(self) -> None:
        """Send the one-time session configuration once the model socket has settled."""
        await asyncio.sleep(self.settle_delay)
        session_update = build_session_update(self.enable_appointment_tool)
        logger.info("Sending session update")
        logger.debug(f"Session update: {session_update.model_dump_json(exclude_none=True)}")
        if not await self.realtime_client.send_event(session_update):
            logger.warning("Session update not sent; OpenAI connection is not open")
            return

        if self.ai_speaks_first:
            await self.realtime_client.send_event(build_initial_conversation_item())
            await self.realtime_client.send_event(ResponseCreateEvent())

    # Twilio -> OpenAI
    async def receive_from_twilio(self) -> None:
        """Process Twilio frames in arrival order until the Twilio socket closes."""
        try:
            while True:
                data = await self.twilio_websocket.receive_text()
                await self.handle_twilio_message(data)
        except WebSocketDisconnect:
            logger.info("Client disconnected.")
        except Exception as e:
            logger.error(f"Error in Twilio WebSocket: {e}", exc_info=True)
        finally:
            self._closed = True
            if self.realtime_client.is_open:
                await self.realtime_client.close()

    async def handle_twilio_message(self, data: Union[str, bytes]) -> None:
        try:
            message = parse_twilio_message(data)
        except ValueError as e:
            logger.error(f"Error parsing Twilio message: {e}; message: {str(data)[:MAX_LOGGED_FRAME]}")
            return

        handler = self.twilio_event_handlers.get(message.event)
        if handler is None:
            logger.info(f"Received non-media event: {message.event}")
            return
        try:
            await handler(message)
        except Exception as e:
            logger.error(f"Error handling Twilio {message.event} event: {e}", exc_info=True)

    async def handle_connected(self, message: ConnectedMessage) -> None:
        logger.info(f"Twilio connected: protocol={message.protocol}, version={message.version}")

    async def handle_start(self, message: StartMessage) -> None:
        self.session.start_stream(message.start.streamSid, message.start.callSid)
        logger.info(f"Incoming stream has started {self.session.stream_sid}")

    async def handle_media(self, message: MediaMessage) -> None:
        self.session.timer.update_media_timestamp(message.media.timestamp)
        # Forwarding starts with the first 'start' frame
        if self._closed or not self.session.stream_sid or not self.realtime_client.is_open:
            return
        await self.realtime_client.send_event(
            InputAudioBufferAppendEvent(audio=message.media.payload)
        )

    async def handle_mark(self, message: MarkMessage) -> None:
        self.session.marks.acknowledge()

    async def handle_stop(self, message: StopMessage) -> None:
        logger.info(f"Incoming stream has stopped {message.streamSid or self.session.stream_sid}")

    # OpenAI -> Twilio
    async def receive_from_realtime(self) -> None:
        """Process Realtime API messages in arrival order until the model socket closes."""
        async for data in self.realtime_client.messages():
            await self.handle_realtime_message(data)
        logger.info("Disconnected from the OpenAI Realtime API")

    async def handle_realtime_message(self, data: Union[str, bytes]) -> None:
        try:
            event = parse_server_event(data)
        except ValueError as e:
            logger.error(
                f"Error processing OpenAI message: {e}; raw message: {str(data)[:MAX_LOGGED_FRAME]}"
            )
            return

        if event.type in LOG_EVENT_TYPES:
            logger.info(f"Received event: {event.type}")

        handler = self.realtime_event_handlers.get(event.type)
        if handler is None:
            return
        try:
            await handler(event)
        except Exception as e:
            logger.error(f"Error handling OpenAI {event.type} event: {e}", exc_info=True)

    async def handle_error(self, event: ErrorEvent) -> None:
        logger.error(f"Error from OpenAI Realtime API: {event.error.model_dump(exclude_none=True)}")

    async def handle_session_event(self, event: BaseModel) -> None:
        logger.info(f"OpenAI session event: {event.type}")

    async def handle_audio_delta(self, event: ResponseAudioDeltaEvent) -> None:
        stream_sid = self.session.stream_sid
        if self._closed or not stream_sid:
            logger.debug("Dropping response audio; no active Twilio stream")
            return

        self.session.timer.mark_response_audio(event.item_id)
        self.session.marks.push(RESPONSE_MARK_NAME)

        await self._send_to_twilio(
            OutgoingMediaMessage(streamSid=stream_sid, media=OutgoingMediaPayload(payload=event.delta))
        )
        await self._send_to_twilio(
            OutgoingMarkMessage(streamSid=stream_sid, mark=MarkPayload(name=RESPONSE_MARK_NAME))
        )

    async def handle_speech_started(self, event: SpeechStartedEvent) -> None:
        interruption = interrupt_response(self.session)
        if interruption is None:
            return
        if interruption.truncate is not None:
            await self.realtime_client.send_event(interruption.truncate)
        if interruption.clear is not None:
            await self._send_to_twilio(interruption.clear)

    async def handle_response_done(self, event: ResponseDoneEvent) -> None:
        if not self.function_dispatcher.extract_calls(event):
            return
        task = asyncio.create_task(self._dispatch_function_calls(event))
        self._function_tasks.add(task)
        task.add_done_callback(self._function_tasks.discard)

    async def _dispatch_function_calls(self, event: ResponseDoneEvent) -> None:
        try:
            await self.function_dispatcher.dispatch(event, self.session)
        except Exception as e:
            logger.error(f"Error dispatching function calls: {e}", exc_info=True)

    async def wait_for_function_calls(self) -> None:
        """Wait until every pending function call dispatch has finished."""
        while True:
            pending = [task for task in self._function_tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending)

    async def _send_to_twilio(self, message: BaseModel) -> bool:
        if self._closed:
            return False
        try:
            await self.twilio_websocket.send_text(message.model_dump_json())
            return True
        except Exception as e:
            logger.warning(f"Could not send {getattr(message, 'event', 'message')} to Twilio: {e}")
            return False

    async def close(self) -> None:
        """Stop forwarding, finish pending function calls and close the model socket."""
        self._closed = True
        await self.wait_for_function_calls()
        if self.realtime_client.is_open:
            await self.realtime_client.close()
