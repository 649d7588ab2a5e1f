# In dronegpt/fc_interface/protocols/simulated.py

import math
import threading
from typing import Any, Callable, Dict, List, Optional, Set

from ..exceptions import ActionRejected, FCCommError
from ...constants.flight_controller import FCKeys, STICK_MAX

# Take-off hover height used by the aircraft firmware
TAKEOFF_ALTITUDE_M = 1.2
# Full stick deflection in m/s (or deg/s for yaw)
MAX_HORIZONTAL_SPEED = 5.0
MAX_VERTICAL_SPEED = 2.0
MAX_YAW_RATE = 60.0
METERS_PER_DEG_LAT = 111_320.0


class SimulatedProtocol:
    """
    In-memory stand-in for a vendor flight-controller SDK.

    Stores key values, notifies listeners on every write and answers actions
    synchronously. ``step`` integrates the virtual sticks into a crude
    kinematic model so a console session has something to look at.
    """

    def __init__(self, longitude: float = 0.0, latitude: float = 0.0, altitude: float = 0.0,
                 heading: float = 0.0, rejected_actions: Optional[Set[str]] = None):
        self._lock = threading.Lock()
        self._listeners: Dict[str, List[Callable[[Any], None]]] = {}
        self._values: Dict[str, Any] = {
            FCKeys.FLIGHT.LOCATION_3D: {"longitude": longitude, "latitude": latitude, "altitude": altitude},
            FCKeys.FLIGHT.VELOCITY: {"x": 0.0, "y": 0.0, "z": 0.0},
            FCKeys.FLIGHT.COMPASS_HEADING: heading,
            FCKeys.FLIGHT.HOME_LOCATION: None,
            FCKeys.STICKS.LEFT: {"verticalPosition": 0, "horizontalPosition": 0},
            FCKeys.STICKS.RIGHT: {"verticalPosition": 0, "horizontalPosition": 0},
        }
        self.rejected_actions = set(rejected_actions or ())
        self.actions: List[str] = []
        self.writes: List[tuple] = []
        self.closed = False

    def get(self, key: str) -> Any:
        with self._lock:
            if key not in self._values:
                raise FCCommError(f"Unknown key: {key}")
            return self._values[key]

    def set(self, key: str, value: Any):
        with self._lock:
            if key not in self._values:
                raise FCCommError(f"Unknown key: {key}")
            self._values[key] = value
            self.writes.append((key, value))
        self._notify(key, value)

    def perform_action(self, key: str, on_success: Callable, on_failure: Callable):
        self.actions.append(key)
        if key in self.rejected_actions:
            on_failure(ActionRejected(f"{key} rejected by aircraft"))
            return
        if key == FCKeys.ACTIONS.START_TAKEOFF:
            self._set_altitude(TAKEOFF_ALTITUDE_M)
        elif key == FCKeys.ACTIONS.START_AUTO_LANDING:
            self._set_altitude(0.0)
        else:
            on_failure(FCCommError(f"Unknown action: {key}"))
            return
        on_success(None)

    def listen(self, key: str, callback: Callable[[Any], None]):
        with self._lock:
            if key not in self._values:
                raise FCCommError(f"Unknown key: {key}")
            self._listeners.setdefault(key, []).append(callback)

    def publish(self, key: str, value: Any):
        """Injects a sensor sample, as the aircraft would."""
        self.set(key, value)

    def step(self, dt: float):
        """Advances the kinematic model by ``dt`` seconds."""
        with self._lock:
            location = dict(self._values[FCKeys.FLIGHT.LOCATION_3D])
            heading = self._values[FCKeys.FLIGHT.COMPASS_HEADING]
            left = self._values[FCKeys.STICKS.LEFT]
            right = self._values[FCKeys.STICKS.RIGHT]

        airborne = location["altitude"] > 0.0
        forward = MAX_HORIZONTAL_SPEED * right["verticalPosition"] / STICK_MAX if airborne else 0.0
        lateral = MAX_HORIZONTAL_SPEED * right["horizontalPosition"] / STICK_MAX if airborne else 0.0
        climb = MAX_VERTICAL_SPEED * left["verticalPosition"] / STICK_MAX if airborne else 0.0
        yaw_rate = MAX_YAW_RATE * left["horizontalPosition"] / STICK_MAX if airborne else 0.0

        rad = math.radians(heading)
        north = forward * math.cos(rad) - lateral * math.sin(rad)
        east = forward * math.sin(rad) + lateral * math.cos(rad)

        location["latitude"] += north * dt / METERS_PER_DEG_LAT
        cos_lat = max(math.cos(math.radians(location["latitude"])), 1e-6)
        location["longitude"] += east * dt / (METERS_PER_DEG_LAT * cos_lat)
        location["altitude"] = max(0.0, location["altitude"] + climb * dt)
        heading = (heading + yaw_rate * dt + 180.0) % 360.0 - 180.0

        self.publish(FCKeys.FLIGHT.LOCATION_3D, location)
        self.publish(FCKeys.FLIGHT.VELOCITY, {"x": north, "y": east, "z": -climb})
        self.publish(FCKeys.FLIGHT.COMPASS_HEADING, heading)

    def close(self):
        self.closed = True

    def _set_altitude(self, altitude: float):
        with self._lock:
            location = dict(self._values[FCKeys.FLIGHT.LOCATION_3D])
        location["altitude"] = altitude
        self.publish(FCKeys.FLIGHT.LOCATION_3D, location)

    def _notify(self, key: str, value: Any):
        with self._lock:
            listeners = list(self._listeners.get(key, ()))
        for callback in listeners:
            callback(value)
