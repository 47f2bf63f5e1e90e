"""
Tests for downloading Twilio recordings.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
import requests

from app.services.recording_service import (
    RecordingDownloadError,
    RecordingService,
    build_recording_filename,
    parse_recording_date,
)


@pytest.fixture
def recording_service(tmp_path):
    return RecordingService(tmp_path / "recordings", "AC123", "secret")


def mock_response(chunks=(b"RIFF", b"data"), error=None):
    response = MagicMock()
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    response.iter_content.return_value = list(chunks)
    if error is not None:
        response.raise_for_status.side_effect = error
    return response


def test_parse_rfc2822_date():
    moment = parse_recording_date("Tue, 01 Oct 2024 12:30:45 +0000")
    assert moment == datetime(2024, 10, 1, 12, 30, 45, tzinfo=timezone.utc)


def test_parse_iso_date():
    moment = parse_recording_date("2024-10-01T12:30:45.250Z")
    assert moment == datetime(2024, 10, 1, 12, 30, 45, 250000, tzinfo=timezone.utc)


def test_missing_or_invalid_date_defaults_to_now():
    before = datetime.now(timezone.utc)
    for value in (None, "", "yesterday"):
        moment = parse_recording_date(value)
        assert moment >= before


def test_build_recording_filename():
    name = build_recording_filename("CA123", "RE456", "2024-10-01T12:30:45.250Z")
    assert name == "2024-10-01T12-30-45-250Z_CA123_RE456.wav"


@pytest.mark.asyncio
async def test_save_recording_downloads_wav(recording_service):
    response = mock_response()
    with patch("app.services.recording_service.requests.get", return_value=response) as mock_get:
        path = await recording_service.save_recording(
            "https://api.twilio.com/recordings/RE456",
            "RE456",
            "CA123",
            "Tue, 01 Oct 2024 12:30:45 +0000",
        )

    assert path.name == "2024-10-01T12-30-45-000Z_CA123_RE456.wav"
    assert path.read_bytes() == b"RIFFdata"
    args, kwargs = mock_get.call_args
    assert args[0] == "https://api.twilio.com/recordings/RE456.wav"
    assert kwargs["auth"] == ("AC123", "secret")
    assert kwargs["stream"] is True


@pytest.mark.asyncio
async def test_save_recording_http_error(recording_service):
    response = mock_response(error=requests.HTTPError("404 Client Error"))
    with patch("app.services.recording_service.requests.get", return_value=response):
        with pytest.raises(RecordingDownloadError):
            await recording_service.save_recording("https://example.com/RE1", "RE1", "CA1")

    assert list(recording_service.directory.iterdir()) == []


@pytest.mark.asyncio
async def test_save_recording_connection_error(recording_service):
    with patch(
        "app.services.recording_service.requests.get",
        side_effect=requests.ConnectionError("unreachable"),
    ):
        with pytest.raises(RecordingDownloadError):
            await recording_service.save_recording("https://example.com/RE1", "RE1", "CA1")
