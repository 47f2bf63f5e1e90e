"""
Bot module for relaying Twilio calls to the OpenAI Realtime API.

Key components:
- RealtimeAudioClient: Client for the model-side WebSocket of a call; opens the
  connection with the required headers, sends client events and yields raw server
  messages.
- TwilioRealtimeBridge: The per-call relay. It runs the Twilio -> OpenAI and
  OpenAI -> Twilio pumps, keeps playback timing, handles barge-in and dispatches
  scheduling tool calls.
- session_config: Builders for the session.update sent when a call starts and the
  optional opening prompt.

Usage examples:
```python
from app.bot import RealtimeAudioClient, TwilioRealtimeBridge
from app.models.call_session import CallSession
from app.services.appointment_store import AppointmentStore

async def relay_call(websocket, api_key, model):
    client = RealtimeAudioClient(api_key, model)
    if await client.connect():
        bridge = TwilioRealtimeBridge(
            websocket, client, CallSession("session-1"), AppointmentStore("appointments")
        )
        await bridge.run()
```
"""

from app.bot.realtime_api import RealtimeAudioClient
from app.bot.twilio_realtime_bridge import TwilioRealtimeBridge

__all__ = ["RealtimeAudioClient", "TwilioRealtimeBridge"]
