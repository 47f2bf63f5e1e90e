"""
Run script for starting the Twilio Realtime Relay server.

This script checks that the OpenAI and Twilio credentials are configured and
starts the FastAPI server with WebSocket settings suited to real-time audio.

Usage:
    python run.py [--port PORT] [--host HOST]
"""

import argparse
import os
import sys
from pathlib import Path

import uvicorn

sys.path.append(str(Path(__file__).parent))

from app.config import settings
from app.config.logging_config import configure_logging

logger = configure_logging()


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Start the Twilio Realtime Relay server")
    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port to run the server on (default: 5050 or PORT env var)",
    )
    parser.add_argument(
        "--host",
        default=settings.HOST,
        help="Host to bind the server to (default: 0.0.0.0 or HOST env var)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO or LOG_LEVEL env var)",
    )
    return parser.parse_args()


def main():
    """Main entry point for starting the server."""
    args = parse_args()
    configure_logging(args.log_level)

    missing = settings.missing_credentials()
    if missing:
        logger.error(f"Missing required environment variables: {', '.join(missing)}")
        print("Error: set them in the environment or in a .env file")
        sys.exit(1)

    logger.info(f"Starting server on http://{args.host}:{args.port}")
    logger.info(f"Log level: {args.log_level}")

    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        # Use HTTP/1.1 for lower overhead than HTTP/2
        http="h11",
        access_log=False,
        websocket_ping_interval=5,
        websocket_ping_timeout=20,
        reload=os.getenv("ENV", "production").lower() == "development",
    )


if __name__ == "__main__":
    main()
