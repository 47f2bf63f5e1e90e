import json
import logging

import pytest
from fastapi import WebSocketDisconnect

from app.bot.twilio_realtime_bridge import TwilioRealtimeBridge
from app.models.call_session import CallSession
from app.services.appointment_store import AppointmentStore


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


class FakeRealtimeClient:
    """Stands in for RealtimeAudioClient and records every event sent to the model."""

    def __init__(self, messages=None, is_open=True):
        self.sent = []
        self._messages = list(messages or [])
        self._open = is_open
        self.closed = False

    @property
    def is_open(self):
        return self._open

    async def connect(self):
        return self._open

    async def send_event(self, event):
        if not self._open:
            return False
        payload = event if isinstance(event, str) else event.model_dump_json(exclude_none=True)
        self.sent.append(json.loads(payload))
        return True

    async def messages(self):
        for message in self._messages:
            if not self._open:
                break
            yield message
        self._open = False

    async def close(self):
        self._open = False
        self.closed = True

    def sent_types(self):
        return [event["type"] for event in self.sent]


class FakeTwilioWebSocket:
    """Minimal FastAPI WebSocket replacement that replays frames and records sends."""

    def __init__(self, frames=None):
        self.frames = list(frames or [])
        self.sent = []
        self.accepted = False
        self.closed = False
        self.client = None

    async def accept(self):
        self.accepted = True

    async def receive_text(self):
        if not self.frames:
            raise WebSocketDisconnect(code=1000)
        return self.frames.pop(0)

    async def send_text(self, text):
        if self.closed:
            raise RuntimeError("WebSocket is closed")
        self.sent.append(json.loads(text))

    async def close(self, code=1000):
        self.closed = True

    def sent_events(self):
        return [frame["event"] for frame in self.sent]


@pytest.fixture
def realtime_client():
    return FakeRealtimeClient()


@pytest.fixture
def twilio_websocket():
    return FakeTwilioWebSocket()


@pytest.fixture
def session():
    return CallSession("test-session")


@pytest.fixture
def appointment_store(tmp_path):
    return AppointmentStore(tmp_path / "appointments")


@pytest.fixture
def bridge(twilio_websocket, realtime_client, session, appointment_store):
    return TwilioRealtimeBridge(
        twilio_websocket,
        realtime_client,
        session,
        appointment_store,
        enable_appointment_tool=True,
        ai_speaks_first=False,
        settle_delay=0,
    )
