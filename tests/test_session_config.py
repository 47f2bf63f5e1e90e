import json

from app.bot.session_config import APPOINTMENT_TOOL, build_initial_conversation_item, build_session_update
from app.config.constants import APPOINTMENT_INSTRUCTIONS, SYSTEM_INSTRUCTIONS


def test_session_update_with_appointment_tool():
    event = json.loads(build_session_update().model_dump_json(exclude_none=True))

    assert event["type"] == "session.update"
    session = event["session"]
    assert session["turn_detection"] == {
        "type": "server_vad",
        "threshold": 0.43,
        "prefix_padding_ms": 400,
        "silence_duration_ms": 540,
    }
    assert session["input_audio_format"] == "g711_ulaw"
    assert session["output_audio_format"] == "g711_ulaw"
    assert session["voice"] == "shimmer"
    assert session["temperature"] == 0.78
    assert session["max_response_output_tokens"] == 500
    assert session["modalities"] == ["text", "audio"]
    assert session["instructions"] == SYSTEM_INSTRUCTIONS + APPOINTMENT_INSTRUCTIONS
    assert session["tool_choice"] == "auto"

    tool = session["tools"][0]
    assert tool["type"] == "function"
    assert tool["name"] == "schedule_appointment"
    assert tool["parameters"]["required"] == [
        "customer_name",
        "email",
        "preferred_day",
        "preferred_time",
    ]
    assert set(tool["parameters"]["properties"]) == {
        "customer_name",
        "email",
        "preferred_day",
        "preferred_time",
        "phone",
        "notes",
    }


def test_session_update_without_tool():
    event = json.loads(build_session_update(False).model_dump_json(exclude_none=True))

    session = event["session"]
    assert "tools" not in session
    assert "tool_choice" not in session
    assert session["instructions"] == SYSTEM_INSTRUCTIONS


def test_session_update_overrides():
    event = build_session_update(instructions="Be brief.", voice="alloy")
    assert event.session.voice == "alloy"
    assert event.session.instructions.startswith("Be brief.")


def test_appointment_tool_parameters_are_strings():
    for prop in APPOINTMENT_TOOL.parameters.properties.values():
        assert prop.type == "string"


def test_initial_conversation_item():
    event = json.loads(build_initial_conversation_item("Olá!").model_dump_json())
    assert event == {
        "type": "conversation.item.create",
        "item": {
            "type": "message",
            "role": "user",
            "content": [{"type": "input_text", "text": "Olá!"}],
        },
    }
