"""dronegpt/flight/exceptions.py"""

class FlightError(Exception):
    """Base class for flight instruction errors"""
    pass

class InstructionDecodeError(FlightError):
    """Raised when an instruction payload is not a valid instruction"""
    def __init__(self, message="Invalid instruction", payload=None):
        self.payload = payload
        super().__init__(f"{message} [Payload: {payload}]" if payload is not None else message)

class UnrecognizedInstructionError(InstructionDecodeError):
    """Raised when the "type" discriminator names no known instruction"""
    def __init__(self, instruction_type, payload=None):
        self.instruction_type = instruction_type
        super().__init__(f"Unrecognized instruction type {instruction_type!r}", payload)

class ActuatorError(FlightError):
    """Raised when the aircraft rejects a control write"""
    def __init__(self, message, key=None):
        self.key = key
        super().__init__(f"{message} [Key: {key}]" if key else message)
