"""
Client for the OpenAI Realtime API WebSocket.

The client owns the model-side socket of one relayed call: it opens the
connection with the required auth headers, serializes client events, and
exposes the raw incoming messages as an async iterator. Reconnection is not
attempted; when the socket closes the relay simply stops forwarding to it.
"""

import asyncio
import logging
import socket
import time
import traceback
from typing import AsyncIterator, Optional, Union

import websockets
from pydantic import BaseModel
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, ConnectionClosedOK

from app.config.constants import LOGGER_NAME, REALTIME_API_URL

logger = logging.getLogger(LOGGER_NAME)

CONNECTION_TIMEOUT = 30  # seconds

# WebSocket configuration for low latency
WS_MAX_SIZE = 16 * 1024 * 1024  # 16MB - large enough for audio chunks
WS_PING_INTERVAL = 5  # seconds between pings
WS_PING_TIMEOUT = 10


class RealtimeAudioClient:
    """
    Client to connect to OpenAI Realtime API over WebSocket for streaming speech-to-speech.
    """

    def __init__(self, api_key: str, model: str):
        self.api_key = api_key
        self.model = model
        self.ws = None
        self._connection_active = False
        self._is_closing = False
        logger.info(f"RealtimeAudioClient initialized with model: {model}")

    @property
    def url(self) -> str:
        return f"{REALTIME_API_URL}?model={self.model}"

    @property
    def is_open(self) -> bool:
        """Whether events can currently be sent to the model."""
        return self.ws is not None and self._connection_active and not self._is_closing

    async def connect(self) -> bool:
        """
        Connect to the OpenAI Realtime WebSocket endpoint.

        Returns:
            bool: True if connection was successful, False otherwise
        """
        if self._is_closing:
            logger.warning("Cannot connect - client is closing")
            return False

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "OpenAI-Beta": "realtime=v1",
        }

        try:
            logger.info(f"Connecting to OpenAI Realtime API with model: {self.model}")
            connection_start = time.time()
            self.ws = await asyncio.wait_for(
                websockets.connect(
                    self.url,
                    max_size=WS_MAX_SIZE,
                    ping_interval=WS_PING_INTERVAL,
                    ping_timeout=WS_PING_TIMEOUT,
                    compression=None,  # Disable compression for lower latency
                    additional_headers=headers,
                ),
                timeout=CONNECTION_TIMEOUT,
            )
            logger.debug(
                f"WebSocket connection established in {time.time() - connection_start:.2f} seconds"
            )
            self._optimize_socket()
            self._connection_active = True
            logger.info("Connected to the OpenAI Realtime API")
            return True
        except asyncio.TimeoutError:
            logger.error(
                f"Timeout while connecting to OpenAI Realtime API (after {CONNECTION_TIMEOUT}s)"
            )
        except Exception as e:
            logger.error(f"Failed to connect to OpenAI Realtime API: {e}")
            logger.debug(f"Connection error details: {traceback.format_exc()}")
        self._connection_active = False
        return False

    def _optimize_socket(self) -> None:
        """Disable Nagle's algorithm on the underlying TCP socket when reachable."""
        transport = getattr(self.ws, "transport", None)
        if transport is None:
            return
        try:
            sock = transport.get_extra_info("socket")
            if sock is not None:
                sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
                logger.debug("Optimized OpenAI socket: TCP_NODELAY enabled for low latency")
        except Exception as e:
            logger.warning(f"Could not optimize OpenAI socket: {e}")

    async def send_event(self, event: Union[BaseModel, str]) -> bool:
        """
        Send one client event to the model.

        Args:
            event: A client event model, or pre-serialized JSON text

        Returns:
            bool: True if the event was sent, False if the socket is not open
        """
        if not self.is_open:
            logger.debug("Cannot send event - connection not active")
            return False

        payload = event if isinstance(event, str) else event.model_dump_json(exclude_none=True)
        try:
            await self.ws.send(payload)
            return True
        except ConnectionClosed as e:
            logger.warning(f"Connection closed while sending event: {e}")
            self._connection_active = False
            return False

    async def messages(self) -> AsyncIterator[Union[str, bytes]]:
        """
        Yield raw messages from the model until the socket closes.
        """
        if self.ws is None:
            logger.error("WebSocket not initialized for receive loop")
            return

        try:
            async for message in self.ws:
                yield message
        except ConnectionClosedOK:
            logger.info("OpenAI WebSocket connection closed normally")
        except ConnectionClosedError as e:
            logger.warning(f"OpenAI WebSocket connection closed unexpectedly: {e}")
        finally:
            self._connection_active = False

    async def close(self) -> None:
        """
        Close the WebSocket connection.
        """
        logger.info("Closing OpenAI Realtime client")
        self._is_closing = True
        self._connection_active = False
        if self.ws:
            try:
                await self.ws.close()
            except Exception as e:
                logger.warning(f"Error closing OpenAI WebSocket: {e}")
        logger.info("OpenAI Realtime client closed")
