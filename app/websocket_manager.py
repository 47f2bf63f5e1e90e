"""
WebSocket connection manager for Twilio Media Streams.

This module accepts the ``/media-stream`` WebSocket opened by Twilio for each
call, pairs it with a freshly opened OpenAI Realtime API connection, and runs a
``TwilioRealtimeBridge`` for the lifetime of the call. Live bridges are kept in
a ``SessionRegistry`` purely for lifecycle cleanup and reporting.
"""

import logging
import socket
import uuid
from typing import Callable, Optional

from fastapi import WebSocket

from app.bot.realtime_api import RealtimeAudioClient
from app.bot.twilio_realtime_bridge import TwilioRealtimeBridge
from app.config import settings
from app.config.constants import LOGGER_NAME
from app.models.call_session import CallSession, SessionRegistry
from app.services.appointment_store import AppointmentStore

logger = logging.getLogger(LOGGER_NAME)

ClientFactory = Callable[[], RealtimeAudioClient]


def default_client_factory() -> RealtimeAudioClient:
    return RealtimeAudioClient(settings.OPENAI_API_KEY or "", settings.OPENAI_REALTIME_MODEL)


class WebSocketManager:
    """
    Manages Twilio Media Stream connections and the bridges serving them.

    Args:
        appointment_store: Store shared by all bridges for scheduled appointments
        client_factory: Builds the Realtime API client for each new call
    """

    def __init__(
        self,
        appointment_store: Optional[AppointmentStore] = None,
        client_factory: ClientFactory = default_client_factory,
    ):
        self.registry = SessionRegistry()
        self.appointment_store = appointment_store or AppointmentStore(settings.APPOINTMENTS_DIR)
        self.client_factory = client_factory

    async def _optimize_socket(self, websocket: WebSocket) -> None:
        """
        Optimize the WebSocket's underlying TCP socket for low-latency transmission.

        Args:
            websocket: The FastAPI WebSocket connection
        """
        try:
            client = websocket.client
            if hasattr(client, "sock") and client.sock is not None:
                client.sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
                logger.info("Optimized socket: TCP_NODELAY enabled for low latency")
        except Exception as e:
            logger.warning(f"Could not optimize socket: {e}")

    async def handle_websocket(self, websocket: WebSocket) -> None:
        """Handle a Twilio Media Stream connection throughout its lifecycle.

        Args:
            websocket (WebSocket): The FastAPI WebSocket connection object

        This method:
        1. Accepts the WebSocket connection
        2. Opens the OpenAI Realtime API connection for the call
        3. Runs the bridge until both sides have finished
        4. Closes both sockets and forgets the session
        """
        await websocket.accept()
        await self._optimize_socket(websocket)
        session_id = str(uuid.uuid4())
        logger.info(f"Client connected: {session_id}")

        realtime_client = self.client_factory()
        try:
            if not await realtime_client.connect():
                logger.error(f"Could not open OpenAI connection for session {session_id}")
                return

            bridge = TwilioRealtimeBridge(
                websocket,
                realtime_client,
                CallSession(session_id),
                self.appointment_store,
            )
            self.registry.add_session(session_id, bridge)
            await bridge.run()
        except Exception as e:
            logger.error(f"Error in media stream {session_id}: {e}", exc_info=True)
        finally:
            self.registry.remove_session(session_id)
            if realtime_client.is_open:
                await realtime_client.close()
            try:
                await websocket.close()
            except Exception as e:
                logger.debug(f"Twilio WebSocket already closed: {e}")
            logger.info(f"Media stream closed: {session_id}")
