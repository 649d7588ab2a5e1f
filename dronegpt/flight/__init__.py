"""
flight - instruction parsing and execution for dronegpt
"""

from .actuator import FlightActuator
from .instructions import (
    TakeOff, Land, Control, Stop, Instruction,
    extract_instruction_payload, decode_instruction, parse_instruction,
    instruction_to_dict, instruction_to_json,
)
from .exceptions import FlightError, InstructionDecodeError, UnrecognizedInstructionError, ActuatorError

__all__ = [
    'FlightActuator',
    'TakeOff',
    'Land',
    'Control',
    'Stop',
    'Instruction',
    'extract_instruction_payload',
    'decode_instruction',
    'parse_instruction',
    'instruction_to_dict',
    'instruction_to_json',
    'FlightError',
    'InstructionDecodeError',
    'UnrecognizedInstructionError',
    'ActuatorError',
]
