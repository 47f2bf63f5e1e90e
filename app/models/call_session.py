"""
Per-call session state and the registry of live relays.

A ``CallSession`` is owned by exactly one relay instance and is only mutated by
the handlers of that relay's two pumps. The ``SessionRegistry`` tracks which
relays are alive so they can be counted and cleaned up; it holds no call state
of its own.
"""

import logging
from typing import Any, Dict, Optional

from app.config.constants import LOGGER_NAME
from app.models.playback import MarkQueue, PlaybackTimer

logger = logging.getLogger(LOGGER_NAME)


class CallSession:
    """
    State of one relayed call.

    Attributes:
        session_id: Identifier assigned when the Twilio socket was accepted
        stream_sid: Twilio stream identifier, None before 'start'
        call_sid: Twilio call identifier reported in 'start', if any
        timer: Caller-clock playback timing
        marks: Pending playback marks
    """

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.stream_sid: Optional[str] = None
        self.call_sid: Optional[str] = None
        self.timer = PlaybackTimer()
        self.marks = MarkQueue()

    @property
    def latest_media_timestamp(self) -> int:
        return self.timer.latest_media_timestamp

    @property
    def response_start_timestamp(self) -> Optional[int]:
        return self.timer.response_start_timestamp

    @property
    def active_response_item_id(self) -> Optional[str]:
        return self.timer.active_response_item_id

    def start_stream(self, stream_sid: str, call_sid: Optional[str] = None) -> None:
        """Begin a new stream epoch, discarding any previous playback state."""
        self.stream_sid = stream_sid
        self.call_sid = call_sid
        self.timer.reset()
        self.marks.clear()

    def reset_response(self) -> None:
        """Forget the in-flight response and its unacknowledged marks."""
        self.marks.clear()
        self.timer.clear_response()


class SessionRegistry:
    """
    Registry of live relays, keyed by session id.

    Used only for lifecycle cleanup and reporting; relays never look each
    other up through it.
    """

    def __init__(self):
        self.active_sessions: Dict[str, Any] = {}

    def add_session(self, session_id: str, relay: Any) -> None:
        self.active_sessions[session_id] = relay
        logger.debug(f"Registered session {session_id}; active: {len(self.active_sessions)}")

    def get_session(self, session_id: str) -> Optional[Any]:
        return self.active_sessions.get(session_id)

    def remove_session(self, session_id: str) -> None:
        if session_id in self.active_sessions:
            del self.active_sessions[session_id]
            logger.debug(f"Removed session {session_id}; active: {len(self.active_sessions)}")

    def __len__(self) -> int:
        return len(self.active_sessions)
