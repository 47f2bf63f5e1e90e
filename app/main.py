"""
FastAPI server relaying Twilio phone calls to the OpenAI Realtime API.

This module initializes the FastAPI application that Twilio talks to. It serves
the TwiML for inbound calls, places recorded outbound calls, stores finished
recordings, and exposes the ``/media-stream`` WebSocket on which every call is
bridged to a speech-to-speech model session.
"""

from typing import Optional

from fastapi import FastAPI, Request, WebSocket
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from app.config import settings
from app.config.logging_config import configure_logging
from app.services.call_service import CallPlacementError, CallService, build_incoming_call_twiml
from app.services.recording_service import RecordingDownloadError, RecordingService
from app.websocket_manager import WebSocketManager

# Configure logging
logger = configure_logging()

app = FastAPI(
    title="Twilio Realtime Relay",
    description="Relay between Twilio Media Streams and the OpenAI Realtime API",
    version="1.0.0",
)

settings.RECORDINGS_DIR.mkdir(parents=True, exist_ok=True)
logger.info(f"Recordings will be saved to: {settings.RECORDINGS_DIR.resolve()}")
app.mount("/recordings", StaticFiles(directory=settings.RECORDINGS_DIR), name="recordings")

websocket_manager = WebSocketManager()
call_service = CallService(
    settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN, settings.TWILIO_PHONE_NUMBER
)
recording_service = RecordingService(
    settings.RECORDINGS_DIR, settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN
)


class MakeCallRequest(BaseModel):
    """Body of a /make-call request."""

    to: Optional[str] = None
    message: Optional[str] = None


@app.get("/")
async def root():
    """Root endpoint to display basic information about the API.

    Returns:
        dict: Basic information about the API and its endpoints.
    """
    return {
        "message": "Twilio Media Stream Server is running!",
        "name": app.title,
        "version": app.version,
        "endpoints": {
            "/health": "Health check endpoint",
            "/incoming-call": "TwiML webhook for inbound calls",
            "/make-call": "Place an outbound call",
            "/recording-completed": "Recording status callback",
            "/media-stream": "WebSocket endpoint for Twilio Media Streams",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring system status.

    Returns:
        dict: Status information, configured credentials and active call count.
    """
    return {
        "status": "healthy",
        "openai_api_key_configured": bool(settings.OPENAI_API_KEY),
        "twilio_configured": not any(
            name.startswith("TWILIO_") for name in settings.missing_credentials()
        ),
        "active_sessions": len(websocket_manager.registry),
    }


@app.api_route("/incoming-call", methods=["GET", "POST"])
async def incoming_call(request: Request):
    """Answer an inbound Twilio call with TwiML connecting it to the media stream."""
    host = request.headers.get("host", "")
    return Response(content=build_incoming_call_twiml(host), media_type="text/xml")


@app.post("/make-call")
async def make_call(body: MakeCallRequest, request: Request):
    """Place a recorded outbound call that is bridged to the model.

    Returns:
        JSON with the call SID on success, 400 without a destination number,
        500 when Twilio could not place the call.
    """
    if not body.to:
        return JSONResponse(
            status_code=400, content={"error": "Destination phone number (to) is required"}
        )

    host = request.headers.get("host", "")
    try:
        call_sid = await call_service.place_call(body.to, host, body.message)
    except CallPlacementError as e:
        logger.error(f"Error placing call: {e}")
        return JSONResponse(
            status_code=500, content={"error": "Failed to start call", "details": str(e)}
        )

    return {
        "success": True,
        "message": "Call started successfully with recording",
        "callSid": call_sid,
    }


@app.api_route("/recording-completed", methods=["GET", "POST"])
async def recording_completed(request: Request):
    """Recording status callback: download and store the finished recording."""
    params = dict(request.query_params)
    if request.method == "POST":
        form = await request.form()
        params.update({key: str(value) for key, value in form.items()})
    logger.info(f"Recording completed callback received: {params}")

    recording_sid = params.get("RecordingSid")
    recording_url = params.get("RecordingUrl")
    if not recording_url or not recording_sid:
        logger.warning(f"Recording information incomplete: {params}")
        return {"status": "success"}

    try:
        await recording_service.save_recording(
            recording_url, recording_sid, params.get("CallSid"), params.get("DateCreated")
        )
    except RecordingDownloadError as e:
        logger.error(f"Error processing recording: {e}")
        return JSONResponse(status_code=500, content={"status": "error", "message": str(e)})

    return {"status": "success"}


@app.websocket("/media-stream")
async def media_stream(websocket: WebSocket):
    """WebSocket endpoint for Twilio Media Streams.

    Each connection is one call: it is paired with an OpenAI Realtime API session
    and relayed until either side hangs up.
    """
    await websocket_manager.handle_websocket(websocket)


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on http://{settings.HOST}:{settings.PORT}")
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        websocket_ping_interval=5,
        websocket_ping_timeout=20,
        http="h11",
    )
