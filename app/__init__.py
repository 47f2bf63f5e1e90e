"""
Twilio Realtime Relay - Twilio Media Streams to OpenAI Realtime API Bridge

This application relays phone calls handled by Twilio to OpenAI's Realtime API,
so that the caller talks directly to a speech-to-speech model. Caller audio is
forwarded to the model as it arrives, the model's synthesized audio is played
back to the caller, and the caller can interrupt the model mid-sentence.

Architecture Overview:
- FastAPI server exposing the TwiML webhook, outbound call placement, the
  recording callback and the ``/media-stream`` WebSocket used by Twilio
- One bridge per call pumping frames in both directions between Twilio and OpenAI
- Playback bookkeeping (caller clock + acknowledged marks) driving barge-in
- A scheduling tool the model can call to book a consultant meeting

Key Components:
- bot: Realtime API client, session configuration and the per-call bridge
- config: Constants, environment settings and logging setup
- handlers: Barge-in interruption and function call dispatch
- models: Wire schemas for both protocols and per-call session state
- services: Twilio call placement, recording download and appointment storage
- websocket_manager: Accepts media stream connections and runs their bridges

Getting Started:
1. Set up environment variables (or a .env file):
   - OPENAI_API_KEY: Your OpenAI API key
   - TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, TWILIO_PHONE_NUMBER
   - PORT: Port to run the server on (default 5050)

2. Start the server:
   ```bash
   python run.py
   ```

3. Point the Twilio number's voice webhook at https://your-host/incoming-call
"""
