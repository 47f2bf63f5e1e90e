"""
File-backed persistence for scheduled appointments.

Each appointment is written as one JSON document in the appointments
directory. The store is append-only: records are never read back or updated
by the relay.
"""

import asyncio
import logging
from pathlib import Path
from typing import Union

from pydantic import BaseModel

from app.config.constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


class AppointmentStoreError(Exception):
    """Raised when an appointment record cannot be persisted."""


class AppointmentRecord(BaseModel):
    """An appointment collected during a call."""

    customer_name: str
    email: str
    preferred_day: str
    preferred_time: str
    phone: str = ""
    notes: str = ""
    stream_sid: str
    call_id: str
    confirmation_code: str
    created_at: str


class AppointmentStore:
    """
    Writes appointment records as JSON files.

    Args:
        directory: Folder the records are written to, created on first save
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _filename(self, record: AppointmentRecord) -> str:
        stamp = record.created_at.replace(":", "-").replace(".", "-").replace("+", "_")
        return f"{stamp}_{record.stream_sid}_{record.confirmation_code}.json"

    def _write(self, record: AppointmentRecord) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / self._filename(record)
        path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
        return path

    async def save(self, record: AppointmentRecord) -> Path:
        """
        Persist one record without blocking the event loop.

        Returns:
            Path of the written file

        Raises:
            AppointmentStoreError: If the file could not be written
        """
        try:
            path = await asyncio.to_thread(self._write, record)
        except OSError as e:
            raise AppointmentStoreError(f"Could not write appointment record: {e}") from e
        logger.info(f"Appointment saved to: {path}")
        return path
