"""
Dispatches function calls emitted by the model at the end of a response.

Only the appointment scheduling tool is handled. For each matching call in a
``response.done`` event the arguments are validated, the appointment is
persisted, and a ``function_call_output`` is sent back to the model. Once the
outputs of a response have been sent, a single ``response.create`` lets the
model continue speaking.
"""

import json
import logging
import secrets
import string
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from app.config.constants import (
    LOGGER_NAME,
    SCHEDULE_APPOINTMENT_TOOL,
    UNKNOWN_STREAM_SID,
)
from app.models.call_session import CallSession
from app.models.openai_schemas import (
    ConversationItemCreateEvent,
    FunctionCallOutputItem,
    ResponseCreateEvent,
    ResponseDoneEvent,
    ResponseOutputItem,
)
from app.services.appointment_store import (
    AppointmentRecord,
    AppointmentStore,
    AppointmentStoreError,
)

logger = logging.getLogger(LOGGER_NAME)

CONFIRMATION_CODE_LENGTH = 6
CONFIRMATION_CODE_ALPHABET = string.ascii_uppercase + string.digits


class AppointmentArguments(BaseModel):
    """Arguments of a schedule_appointment call."""

    customer_name: str
    email: str
    preferred_day: str
    preferred_time: str
    phone: str = ""
    notes: str = ""


def parse_appointment_arguments(raw: Optional[str]) -> AppointmentArguments:
    """
    Parse the JSON argument string of a schedule_appointment call.

    Raises:
        pydantic.ValidationError: If the arguments are not a JSON object, or
            required fields are missing or not strings
    """
    return AppointmentArguments.model_validate_json(raw or "")


def generate_confirmation_code() -> str:
    return "".join(
        secrets.choice(CONFIRMATION_CODE_ALPHABET) for _ in range(CONFIRMATION_CODE_LENGTH)
    )


class FunctionCallDispatcher:
    """
    Handles tool calls found in response.done events for one relay.

    Args:
        realtime_client: Client used to send results back to the model
        appointment_store: Persistence collaborator for appointment records
    """

    def __init__(self, realtime_client, appointment_store: AppointmentStore):
        self.realtime_client = realtime_client
        self.appointment_store = appointment_store

    @staticmethod
    def extract_calls(event: ResponseDoneEvent) -> List[ResponseOutputItem]:
        return [
            item
            for item in event.response.output
            if item.type == "function_call" and item.name == SCHEDULE_APPOINTMENT_TOOL
        ]

    async def dispatch(self, event: ResponseDoneEvent, session: CallSession) -> int:
        """
        Execute every scheduling call in a response.done event.

        Args:
            event: The completed response
            session: The call the response belongs to

        Returns:
            Number of function results sent to the model
        """
        sent = 0
        for call in self.extract_calls(event):
            if not call.call_id:
                logger.error(f"Function call {call.name} has no call_id, skipping")
                continue
            try:
                arguments = parse_appointment_arguments(call.arguments)
            except ValidationError as e:
                # pydantic reports malformed JSON as a ValidationError as well
                logger.error(f"Invalid arguments for {call.name} ({call.call_id}): {e}")
                continue

            result = await self._schedule_appointment(arguments, call.call_id, session)
            output = ConversationItemCreateEvent(
                item=FunctionCallOutputItem(call_id=call.call_id, output=json.dumps(result))
            )
            if await self.realtime_client.send_event(output):
                sent += 1
            else:
                logger.warning(f"Could not deliver result for function call {call.call_id}")

        if sent:
            await self.realtime_client.send_event(ResponseCreateEvent())
        return sent

    async def _schedule_appointment(
        self, arguments: AppointmentArguments, call_id: str, session: CallSession
    ) -> Dict[str, Any]:
        confirmation_code = generate_confirmation_code()
        record = AppointmentRecord(
            **arguments.model_dump(),
            stream_sid=session.stream_sid or UNKNOWN_STREAM_SID,
            call_id=call_id,
            confirmation_code=confirmation_code,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        try:
            await self.appointment_store.save(record)
        except AppointmentStoreError as e:
            logger.error(f"Failed to persist appointment for call {call_id}: {e}")
            return {
                "success": False,
                "message": "The appointment could not be saved right now.",
            }

        logger.info(
            f"Appointment scheduled for {arguments.customer_name} on "
            f"{arguments.preferred_day} at {arguments.preferred_time} ({confirmation_code})"
        )
        return {
            "success": True,
            "message": (
                f"Appointment scheduled for {arguments.customer_name} on "
                f"{arguments.preferred_day} at {arguments.preferred_time}. "
                f"Confirmation code: {confirmation_code}."
            ),
            "confirmation_code": confirmation_code,
        }
