# dronegpt/telemetry/data_models.py
"""
Aircraft state as seen by the control loop.

Field names are snake_case here; ``to_dict`` renders the camelCase keys the
model is prompted with.
"""
import json
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class StickPosition:
    """One virtual joystick. Values are in [STICK_MIN, STICK_MAX]."""
    vertical_position: int = 0
    horizontal_position: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "verticalPosition": self.vertical_position,
            "horizontalPosition": self.horizontal_position,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StickPosition":
        return cls(int(data["verticalPosition"]), int(data["horizontalPosition"]))


@dataclass(frozen=True)
class Controls:
    left_stick: StickPosition
    right_stick: StickPosition

    @classmethod
    def neutral(cls) -> "Controls":
        return cls(StickPosition(), StickPosition())

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {"leftStick": self.left_stick.to_dict(), "rightStick": self.right_stick.to_dict()}


@dataclass(frozen=True)
class AircraftState:
    """
    Latest known value of each telemetry field. None until the first sample.
    """
    longitude: Optional[float] = None        # degrees
    latitude: Optional[float] = None         # degrees
    altitude: Optional[float] = None         # meters
    x_velocity: Optional[float] = None       # m/s, NED
    y_velocity: Optional[float] = None       # m/s, NED
    z_velocity: Optional[float] = None       # m/s, NED
    compass_heading: Optional[float] = None  # degrees, [-180, 180], north is 0
    sticks: Optional[Controls] = None

    _JSON_KEYS = {
        "longitude": "longitude",
        "latitude": "latitude",
        "altitude": "altitude",
        "x_velocity": "xVelocity",
        "y_velocity": "yVelocity",
        "z_velocity": "zVelocity",
        "compass_heading": "compassHeading",
        "sticks": "sticks",
    }

    @classmethod
    def field_names(cls) -> frozenset:
        return frozenset(f.name for f in fields(cls))

    def to_dict(self) -> Dict[str, Any]:
        """Known fields only, camelCase keys."""
        result = {}
        for name, key in self._JSON_KEYS.items():
            value = getattr(self, name)
            if value is None:
                continue
            result[key] = value.to_dict() if isinstance(value, Controls) else value
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
