"""
Environment-driven settings for the relay service.

Values are read once at import time from the process environment, after loading
a ``.env`` file from the working directory when one exists.
"""

import os
from pathlib import Path
from typing import List

import dotenv

from app.config.constants import DEFAULT_REALTIME_MODEL

# Load environment variables from .env file if it exists
env_path = Path(".") / ".env"
if env_path.exists():
    dotenv.load_dotenv(env_path)


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_REALTIME_MODEL = os.getenv("OPENAI_REALTIME_MODEL", DEFAULT_REALTIME_MODEL)

TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER")

PORT = int(os.getenv("PORT", "5050"))
HOST = os.getenv("HOST", "0.0.0.0")

RECORDINGS_DIR = Path(os.getenv("RECORDINGS_DIR", "recordings"))
APPOINTMENTS_DIR = Path(os.getenv("APPOINTMENTS_DIR", "appointments"))

ENABLE_APPOINTMENT_TOOL = _env_flag("ENABLE_APPOINTMENT_TOOL", True)
AI_SPEAKS_FIRST = _env_flag("AI_SPEAKS_FIRST", False)

# Seconds to wait after the model socket opens before sending session.update
SESSION_SETTLE_DELAY = float(os.getenv("SESSION_SETTLE_DELAY", "0.1"))


def missing_credentials() -> List[str]:
    """
    List the names of required credentials that are not configured.

    Returns:
        Names of the missing environment variables, empty when all are set
    """
    required = {
        "OPENAI_API_KEY": OPENAI_API_KEY,
        "TWILIO_ACCOUNT_SID": TWILIO_ACCOUNT_SID,
        "TWILIO_AUTH_TOKEN": TWILIO_AUTH_TOKEN,
        "TWILIO_PHONE_NUMBER": TWILIO_PHONE_NUMBER,
    }
    return [name for name, value in required.items() if not value]
