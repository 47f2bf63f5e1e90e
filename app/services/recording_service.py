"""
Retrieval of Twilio call recordings.

When Twilio reports that a recording is complete, the WAV rendition is
downloaded with the account credentials and stored in the recordings
directory as ``{date}_{callSid}_{recordingSid}.wav``.
"""

import asyncio
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Optional, Union

import requests

from app.config.constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

DOWNLOAD_CHUNK_SIZE = 8192
DOWNLOAD_TIMEOUT = 30  # seconds


class RecordingDownloadError(Exception):
    """Raised when a recording cannot be downloaded or stored."""


def parse_recording_date(date_created: Optional[str]) -> datetime:
    """Parse Twilio's RFC 2822 (or ISO 8601) DateCreated, defaulting to now."""
    if date_created:
        try:
            return parsedate_to_datetime(date_created)
        except (TypeError, ValueError):
            pass
        try:
            return datetime.fromisoformat(date_created.replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Unrecognised recording date: {date_created}")
    return datetime.now(timezone.utc)


def build_recording_filename(
    call_sid: Optional[str], recording_sid: str, date_created: Optional[str] = None
) -> str:
    """
    Build the file name for a recording.

    The date is the UTC ISO-8601 timestamp with ':' and '.' replaced by '-'.
    """
    moment = parse_recording_date(date_created)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    stamp = moment.strftime("%Y-%m-%dT%H-%M-%S-") + f"{moment.microsecond // 1000:03d}Z"
    return f"{stamp}_{call_sid}_{recording_sid}.wav"


class RecordingService:
    """
    Downloads recordings from Twilio into a local directory.

    Args:
        directory: Folder recordings are written to
        account_sid: Twilio account SID used for basic auth
        auth_token: Twilio auth token used for basic auth
    """

    def __init__(
        self,
        directory: Union[str, Path],
        account_sid: Optional[str],
        auth_token: Optional[str],
        timeout: float = DOWNLOAD_TIMEOUT,
    ):
        self.directory = Path(directory)
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.timeout = timeout

    def _download(self, url: str, path: Path) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        with requests.get(
            url,
            auth=(self.account_sid or "", self.auth_token or ""),
            stream=True,
            timeout=self.timeout,
        ) as response:
            response.raise_for_status()
            with open(path, "wb") as f:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)

    async def save_recording(
        self,
        recording_url: str,
        recording_sid: str,
        call_sid: Optional[str],
        date_created: Optional[str] = None,
    ) -> Path:
        """
        Download the WAV rendition of a recording and store it.

        Args:
            recording_url: RecordingUrl reported by Twilio (without extension)
            recording_sid: RecordingSid reported by Twilio
            call_sid: CallSid the recording belongs to
            date_created: DateCreated reported by Twilio, if any

        Returns:
            Path of the saved file

        Raises:
            RecordingDownloadError: If the download or the write fails
        """
        filename = build_recording_filename(call_sid, recording_sid, date_created)
        path = self.directory / filename
        url = f"{recording_url}.wav"
        logger.info(f"Downloading recording: {url}")

        try:
            await asyncio.to_thread(self._download, url, path)
        except (requests.RequestException, OSError) as e:
            path.unlink(missing_ok=True)
            raise RecordingDownloadError(f"Could not download recording {recording_sid}: {e}") from e

        logger.info(f"Recording saved to: {path}")
        return path
