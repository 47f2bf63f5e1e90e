"""
Session configuration sent to the Realtime API when a call starts.
"""

from app.config.constants import (
    APPOINTMENT_INSTRUCTIONS,
    AUDIO_FORMAT_G711_ULAW,
    DEFAULT_MAX_RESPONSE_OUTPUT_TOKENS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TURN_DETECTION,
    DEFAULT_VOICE,
    INITIAL_CONVERSATION_PROMPT,
    SCHEDULE_APPOINTMENT_TOOL,
    SYSTEM_INSTRUCTIONS,
)
from app.models.openai_schemas import (
    ConversationItemCreateEvent,
    FunctionParameters,
    FunctionTool,
    InputTextContent,
    MessageItem,
    MessageRole,
    ParameterProperty,
    SessionConfig,
    SessionUpdateEvent,
    TurnDetection,
)

APPOINTMENT_TOOL = FunctionTool(
    name=SCHEDULE_APPOINTMENT_TOOL,
    description="Schedule a meeting between the customer and an investment consultant.",
    parameters=FunctionParameters(
        properties={
            "customer_name": ParameterProperty(description="Customer's full name"),
            "email": ParameterProperty(description="Customer's email address"),
            "preferred_day": ParameterProperty(description="Preferred day for the meeting"),
            "preferred_time": ParameterProperty(description="Preferred time for the meeting"),
            "phone": ParameterProperty(description="Customer's phone number"),
            "notes": ParameterProperty(description="Additional notes about the meeting"),
        },
        required=["customer_name", "email", "preferred_day", "preferred_time"],
    ),
)


def build_session_update(
    enable_appointment_tool: bool = True,
    instructions: str = SYSTEM_INSTRUCTIONS,
    voice: str = DEFAULT_VOICE,
) -> SessionUpdateEvent:
    """
    Build the one-time session.update for a new call.

    Args:
        enable_appointment_tool: Include the scheduling tool and let the model pick tools
        instructions: System instructions for the agent
        voice: Voice used for synthesized audio

    Returns:
        The session.update client event
    """
    tools = None
    tool_choice = None
    if enable_appointment_tool:
        instructions = instructions + APPOINTMENT_INSTRUCTIONS
        tools = [APPOINTMENT_TOOL]
        tool_choice = "auto"

    return SessionUpdateEvent(
        session=SessionConfig(
            turn_detection=TurnDetection(**DEFAULT_TURN_DETECTION),
            input_audio_format=AUDIO_FORMAT_G711_ULAW,
            output_audio_format=AUDIO_FORMAT_G711_ULAW,
            voice=voice,
            instructions=instructions,
            modalities=["text", "audio"],
            temperature=DEFAULT_TEMPERATURE,
            max_response_output_tokens=DEFAULT_MAX_RESPONSE_OUTPUT_TOKENS,
            tools=tools,
            tool_choice=tool_choice,
        )
    )


def build_initial_conversation_item(
    prompt: str = INITIAL_CONVERSATION_PROMPT,
) -> ConversationItemCreateEvent:
    """User message that makes the agent open the call."""
    return ConversationItemCreateEvent(
        item=MessageItem(role=MessageRole.USER, content=[InputTextContent(text=prompt)])
    )
