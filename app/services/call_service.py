"""
Call placement and TwiML generation through the Twilio SDK.

Inbound calls are answered with TwiML that connects the call to the
``/media-stream`` WebSocket. Outbound calls are placed through the Twilio REST
API with recording enabled, pointing the recording status callback back at this
service.
"""

import asyncio
import logging
from typing import Optional

import requests
from twilio.base.exceptions import TwilioException
from twilio.rest import Client
from twilio.twiml.voice_response import VoiceResponse

from app.config.constants import (
    DEFAULT_OUTBOUND_GREETING,
    INCOMING_CALL_GREETING,
    LOGGER_NAME,
    OUTBOUND_RECORDING_NOTICE,
)

logger = logging.getLogger(LOGGER_NAME)

MEDIA_STREAM_PATH = "/media-stream"
RECORDING_CALLBACK_PATH = "/recording-completed"


class CallPlacementError(Exception):
    """Raised when Twilio rejects or fails to place a call."""


def media_stream_url(host: str) -> str:
    return f"wss://{host}{MEDIA_STREAM_PATH}"


def build_incoming_call_twiml(host: str) -> str:
    """TwiML for an inbound call: hold message, short pause, then the media stream."""
    response = VoiceResponse()
    response.say(INCOMING_CALL_GREETING)
    response.pause(length=1)
    connect = response.connect()
    connect.stream(url=media_stream_url(host))
    return str(response)


def build_outbound_call_twiml(host: str, message: Optional[str] = None) -> str:
    """TwiML for an outbound call: recording notice plus greeting, then the media stream."""
    response = VoiceResponse()
    response.say(f"{OUTBOUND_RECORDING_NOTICE} {message or DEFAULT_OUTBOUND_GREETING}")
    connect = response.connect()
    connect.stream(url=media_stream_url(host))
    return str(response)


class CallService:
    """
    Places recorded outbound calls that are bridged to the relay.

    Args:
        account_sid: Twilio account SID
        auth_token: Twilio auth token
        from_number: Twilio number the calls are placed from
        client: Optional pre-built Twilio REST client
    """

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        client: Optional[Client] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            if not self.account_sid or not self.auth_token:
                raise CallPlacementError("Twilio credentials are not configured")
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    def _create_call(self, to: str, host: str, message: Optional[str]) -> str:
        call = self.client.calls.create(
            to=to,
            from_=self.from_number,
            record=True,
            recording_status_callback=f"https://{host}{RECORDING_CALLBACK_PATH}",
            recording_status_callback_event=["completed"],
            twiml=build_outbound_call_twiml(host, message),
        )
        return call.sid

    async def place_call(self, to: str, host: str, message: Optional[str] = None) -> str:
        """
        Place an outbound call connected to this relay.

        Args:
            to: Destination phone number
            host: Public host name of this service
            message: Optional greeting spoken before the stream connects

        Returns:
            The SID of the created call

        Raises:
            CallPlacementError: If the call could not be placed
        """
        if not self.from_number:
            raise CallPlacementError("TWILIO_PHONE_NUMBER is not configured")
        try:
            call_sid = await asyncio.to_thread(self._create_call, to, host, message)
        except (TwilioException, requests.RequestException) as e:
            raise CallPlacementError(str(e)) from e
        logger.info(f"Outbound call to {to} started: {call_sid}")
        return call_sid
