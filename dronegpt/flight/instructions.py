# dronegpt/flight/instructions.py
"""
Flight instructions and the parser that pulls them out of model replies.

The model answers in free text with one JSON object somewhere inside it:

    Sure! {"type": "land", "message": "I'm landing"} Landing now.

``extract_instruction_payload`` takes everything from the first ``{`` to the
last ``}``; stray braces in the surrounding prose will fool it.
``decode_instruction`` dispatches on the ``"type"`` field.
"""
import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .exceptions import InstructionDecodeError, UnrecognizedInstructionError
from ..constants.flight_controller import STICK_MAX, STICK_MIN
from ..telemetry.data_models import Controls, StickPosition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TakeOff:
    message: Optional[str] = None
    type = "take_off"


@dataclass(frozen=True)
class Land:
    message: Optional[str] = None
    type = "land"


@dataclass(frozen=True)
class Control:
    left_stick: StickPosition
    right_stick: StickPosition
    message: Optional[str] = None
    type = "control"

    @property
    def controls(self) -> Controls:
        return Controls(self.left_stick, self.right_stick)


@dataclass(frozen=True)
class Stop:
    """Neutral sticks: the safe state."""
    message: Optional[str] = None
    type = "stop"


Instruction = Union[TakeOff, Land, Control, Stop]


def extract_instruction_payload(text: Optional[str]) -> Optional[str]:
    """
    Returns the text between the first '{' and the last '}' inclusive.

    None when either brace is missing. Raises InstructionDecodeError when the
    last '}' comes before the first '{'.
    """
    if not text:
        return None
    left = text.find("{")
    right = text.rfind("}")
    if left == -1 or right == -1:
        return None
    if right < left:
        raise InstructionDecodeError("Closing brace before opening brace", text)
    return text[left:right + 1]


def _stick_value(data: Dict[str, Any], key: str, stick: str, payload: str) -> int:
    value = data.get(key)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InstructionDecodeError(f"{stick}.{key} must be a number", payload)
    clamped = int(max(STICK_MIN, min(STICK_MAX, value)))
    if not STICK_MIN <= value <= STICK_MAX:
        logger.warning(f"{stick}.{key}={value} outside [{STICK_MIN}, {STICK_MAX}], clamped to {clamped}")
    return clamped


def _decode_stick(data: Dict[str, Any], stick: str, payload: str) -> StickPosition:
    raw = data.get(stick)
    if not isinstance(raw, dict):
        raise InstructionDecodeError(f"Missing {stick}", payload)
    return StickPosition(
        vertical_position=_stick_value(raw, "verticalPosition", stick, payload),
        horizontal_position=_stick_value(raw, "horizontalPosition", stick, payload),
    )


def decode_instruction(payload: str) -> Instruction:
    """
    Decodes one JSON instruction.

    Raises:
        UnrecognizedInstructionError: ``type`` is not take_off, land, control or stop.
        InstructionDecodeError: the payload is not a JSON object with a valid
            ``type`` and, for control, both sticks.
    """
    try:
        data = json.loads(payload)
    except ValueError as e:
        raise InstructionDecodeError(f"Invalid JSON: {e}", payload) from e

    if not isinstance(data, dict):
        raise InstructionDecodeError("Instruction must be a JSON object", payload)

    instruction_type = data.get("type")
    if not isinstance(instruction_type, str):
        raise InstructionDecodeError("Missing \"type\"", payload)

    message = data.get("message")
    if message is not None and not isinstance(message, str):
        message = str(message)

    if instruction_type == TakeOff.type:
        return TakeOff(message)
    if instruction_type == Land.type:
        return Land(message)
    if instruction_type == Stop.type:
        return Stop(message)
    if instruction_type == Control.type:
        return Control(
            left_stick=_decode_stick(data, "leftStick", payload),
            right_stick=_decode_stick(data, "rightStick", payload),
            message=message,
        )
    raise UnrecognizedInstructionError(instruction_type, payload)


def parse_instruction(text: Optional[str]) -> Optional[Instruction]:
    """None when the reply carries no JSON object at all."""
    payload = extract_instruction_payload(text)
    if payload is None:
        return None
    return decode_instruction(payload)


def instruction_to_dict(instruction: Instruction) -> Dict[str, Any]:
    data: Dict[str, Any] = {"type": instruction.type}
    if isinstance(instruction, Control):
        data.update(instruction.controls.to_dict())
    if instruction.message is not None:
        data["message"] = instruction.message
    return data


def instruction_to_json(instruction: Instruction) -> str:
    return json.dumps(instruction_to_dict(instruction), indent=4)
