"""
Playback bookkeeping for a single call.

Two small state holders live here:

- ``PlaybackTimer`` keeps the caller-side clock (the timestamp of the latest
  inbound media frame) and the moment, on that clock, when the current model
  response started playing.
- ``MarkQueue`` records the marks sent to Twilio after each forwarded audio
  chunk and consumes them in FIFO order as Twilio echoes them back. Its length
  is the number of chunks whose playback has not been acknowledged yet.

Neither class performs I/O; every method runs to completion without awaiting.
"""

import logging
from collections import deque
from typing import Deque, Optional

from app.config.constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


class PlaybackTimer:
    """Caller-clock timing for the response currently being played."""

    def __init__(self):
        self.latest_media_timestamp: int = 0
        # None means no response is playing; 0 is a valid start time
        self.response_start_timestamp: Optional[int] = None
        self.active_response_item_id: Optional[str] = None

    @property
    def response_in_flight(self) -> bool:
        return self.response_start_timestamp is not None

    def reset(self) -> None:
        """Start a new stream epoch: clock back to zero, no response playing."""
        self.latest_media_timestamp = 0
        self.clear_response()

    def update_media_timestamp(self, timestamp: int) -> None:
        self.latest_media_timestamp = timestamp

    def mark_response_audio(self, item_id: Optional[str] = None) -> bool:
        """
        Record that a chunk of model audio has just been forwarded.

        The first chunk of a response anchors its start to the current caller
        clock; later chunks leave the anchor untouched.

        Args:
            item_id: Conversation item the audio belongs to, if known

        Returns:
            True if this chunk started a new response
        """
        started = False
        if self.response_start_timestamp is None:
            self.response_start_timestamp = self.latest_media_timestamp
            started = True
            logger.debug(
                f"Setting start timestamp for new response: {self.response_start_timestamp}ms"
            )
        if item_id:
            self.active_response_item_id = item_id
        return started

    def elapsed_since_response_start(self) -> int:
        """Milliseconds of the current response the caller has heard."""
        if self.response_start_timestamp is None:
            return 0
        return max(0, self.latest_media_timestamp - self.response_start_timestamp)

    def clear_response(self) -> None:
        self.response_start_timestamp = None
        self.active_response_item_id = None


class MarkQueue:
    """FIFO of playback marks awaiting acknowledgment from Twilio."""

    def __init__(self):
        self._marks: Deque[str] = deque()

    def __len__(self) -> int:
        return len(self._marks)

    def __bool__(self) -> bool:
        return bool(self._marks)

    def push(self, name: str) -> None:
        self._marks.append(name)

    def acknowledge(self) -> Optional[str]:
        """
        Consume the oldest pending mark.

        Returns:
            The acknowledged mark name, or None when nothing was pending
        """
        if not self._marks:
            logger.debug("Received mark acknowledgment with no pending marks")
            return None
        return self._marks.popleft()

    def clear(self) -> None:
        self._marks.clear()
