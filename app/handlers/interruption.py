"""
Barge-in handling for a relayed call.

When the model reports that the caller started speaking while response audio is
still queued on the Twilio side, the response is cut short: the model is told
how much of the item the caller actually heard, Twilio is told to drop whatever
it has buffered, and the session forgets the response.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.config.constants import LOGGER_NAME
from app.models.call_session import CallSession
from app.models.openai_schemas import ConversationItemTruncateEvent
from app.models.twilio_schemas import ClearMessage

logger = logging.getLogger(LOGGER_NAME)


@dataclass
class Interruption:
    """Control frames produced by one interruption."""

    elapsed_ms: int
    clear: Optional[ClearMessage]
    truncate: Optional[ConversationItemTruncateEvent] = None


def interrupt_response(session: CallSession) -> Optional[Interruption]:
    """
    Cut the in-flight response short after caller speech onset.

    Does nothing unless a response is playing and at least one of its chunks
    is still unacknowledged. All session state is reset before returning, so
    the caller only has to send the returned frames.

    Args:
        session: The call whose playback should be interrupted

    Returns:
        The frames to send, or None when there was nothing to interrupt
    """
    if not session.marks or not session.timer.response_in_flight:
        return None

    elapsed = session.timer.elapsed_since_response_start()
    logger.debug(
        f"Calculating elapsed time for truncation: {session.latest_media_timestamp} - "
        f"{session.response_start_timestamp} = {elapsed}ms"
    )

    truncate = None
    item_id = session.active_response_item_id
    if item_id:
        truncate = ConversationItemTruncateEvent(
            item_id=item_id, content_index=0, audio_end_ms=elapsed
        )
        logger.debug(f"Truncating item {item_id} at {elapsed}ms")

    clear = None
    if session.stream_sid:
        clear = ClearMessage(streamSid=session.stream_sid)

    session.reset_response()
    logger.info(f"Caller interrupted response after {elapsed}ms of playback")
    return Interruption(elapsed_ms=elapsed, clear=clear, truncate=truncate)
