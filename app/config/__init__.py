"""
Configuration module for the Twilio to OpenAI Realtime relay.

This module provides centralized configuration management for the entire application,
including constants, logging setup, and environment-based settings.

Key components:
- constants: Protocol event names, model defaults, prompts and the scheduling tool name.
- settings: Credentials, ports, storage directories and feature flags read from the
  environment (and a ``.env`` file when present).
- logging_config: Console and rotating-file logging for the application logger.

Usage examples:
```python
from app.config.constants import LOGGER_NAME, RESPONSE_MARK_NAME
from app.config.logging_config import configure_logging
from app.config import settings

logger = configure_logging()
if settings.missing_credentials():
    logger.error("Relay is not fully configured")
```
"""
