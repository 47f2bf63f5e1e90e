"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the application,
providing a centralized location for protocol names, model defaults and prompts so that
the relay, the HTTP routes and the tests agree on the same values.
"""

# Logger name used throughout the application
LOGGER_NAME = "twilio_relay"

# Default OpenAI model for Realtime API
DEFAULT_REALTIME_MODEL = "gpt-4o-mini-realtime-preview-2024-12-17"
REALTIME_API_URL = "wss://api.openai.com/v1/realtime"

# Model session defaults
DEFAULT_VOICE = "shimmer"
DEFAULT_TEMPERATURE = 0.78
DEFAULT_MAX_RESPONSE_OUTPUT_TOKENS = 500
DEFAULT_TURN_DETECTION = {
    "type": "server_vad",
    "threshold": 0.43,
    "prefix_padding_ms": 400,
    "silence_duration_ms": 540,
}

# Narrowband telephony codec, both directions
AUDIO_FORMAT_G711_ULAW = "g711_ulaw"

# Twilio Media Streams event names
TWILIO_EVENT_CONNECTED = "connected"
TWILIO_EVENT_START = "start"
TWILIO_EVENT_MEDIA = "media"
TWILIO_EVENT_MARK = "mark"
TWILIO_EVENT_STOP = "stop"
TWILIO_EVENT_CLEAR = "clear"

# Name carried by every playback mark sent to Twilio
RESPONSE_MARK_NAME = "responsePart"

# Realtime API server event types
SERVER_EVENT_ERROR = "error"
SERVER_EVENT_SESSION_CREATED = "session.created"
SERVER_EVENT_SESSION_UPDATED = "session.updated"
SERVER_EVENT_RESPONSE_AUDIO_DELTA = "response.audio.delta"
SERVER_EVENT_SPEECH_STARTED = "input_audio_buffer.speech_started"
SERVER_EVENT_SPEECH_STOPPED = "input_audio_buffer.speech_stopped"
SERVER_EVENT_BUFFER_COMMITTED = "input_audio_buffer.committed"
SERVER_EVENT_RESPONSE_CONTENT_DONE = "response.content.done"
SERVER_EVENT_RATE_LIMITS_UPDATED = "rate_limits.updated"
SERVER_EVENT_RESPONSE_DONE = "response.done"

# Server events worth logging at INFO level
LOG_EVENT_TYPES = [
    SERVER_EVENT_ERROR,
    SERVER_EVENT_RESPONSE_CONTENT_DONE,
    SERVER_EVENT_RATE_LIMITS_UPDATED,
    SERVER_EVENT_RESPONSE_DONE,
    SERVER_EVENT_BUFFER_COMMITTED,
    SERVER_EVENT_SPEECH_STOPPED,
    SERVER_EVENT_SPEECH_STARTED,
    SERVER_EVENT_SESSION_CREATED,
]

# Appointment scheduling tool
SCHEDULE_APPOINTMENT_TOOL = "schedule_appointment"
UNKNOWN_STREAM_SID = "unknown"

SYSTEM_INSTRUCTIONS = """Your main goal is to consistently lead users to schedule a meeting with a consultant. Always aim to persuade them to book a time, even in general replies. Speak with a São Paulo business district accent, specifically from the Faria Lima area.
 # Details
 - Position yourself as Carol from Estratégia Investimentos
 - You are conducting cold calls
 - The meeting should be scheduled for next week
 # Tone and Speech
 - Speak at a fast pace to maintain engagement.
 - Use a persuasive and confident tone of voice paulista
 - Be emotionally engaging and friendly
 - Use a São Paulo business district accent, specifically from the Faria Lima area
 - Project enthusiasm and conviction in your voice"""

APPOINTMENT_INSTRUCTIONS = """
 # Scheduling
 - Once the customer agrees to a meeting, collect their full name, email, preferred day and preferred time
 - Call the schedule_appointment function with the collected details
 - Read the confirmation code back to the customer"""

INITIAL_CONVERSATION_PROMPT = (
    "Inicie uma ligação como Carol da Estratégia Investimentos fazendo uma chamada "
    "a frio para agendar uma reunião com um consultor na próxima semana."
)

# Caller-facing speech used in TwiML
INCOMING_CALL_GREETING = (
    "Por favor, aguarde enquanto conectamos sua chamada com Carol da Estratégia Investimentos"
)
OUTBOUND_RECORDING_NOTICE = "Esta chamada está sendo gravada."
DEFAULT_OUTBOUND_GREETING = "Olá, aqui é a Carol da Estratégia Investimentos"
