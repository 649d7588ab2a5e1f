# dronegpt/telemetry/core.py

import logging
import threading
from dataclasses import replace
from typing import Any, Dict, Optional

from .data_models import AircraftState, Controls, StickPosition
from .exceptions import TelemetryError
from ..constants.flight_controller import FCKeys

logger = logging.getLogger(__name__)


class TelemetryStore:
    """
    Holds the latest known AircraftState.

    Sensor callbacks merge partial samples through ``update``; the control
    loop reads whole immutable states through ``snapshot``. Each write
    publishes a new frozen state object, so a reader always sees a complete
    state and the newest value of every field written before the read.
    """

    def __init__(self, initial: Optional[AircraftState] = None):
        self._state = initial or AircraftState()
        self._write_lock = threading.Lock()

    def snapshot(self) -> AircraftState:
        return self._state

    def update(self, sample: Optional[Dict[str, Any]] = None, **fields: Any) -> AircraftState:
        """Merges newly observed fields. Values are passed through unchecked."""
        changes = dict(sample or {})
        changes.update(fields)
        unknown = set(changes) - AircraftState.field_names()
        if unknown:
            raise TelemetryError("Unknown telemetry field", field=", ".join(sorted(unknown)))
        if not changes:
            return self._state

        with self._write_lock:
            self._state = replace(self._state, **changes)
            logger.debug(f"State (new): {self._state}")
            return self._state

    def record_sticks(self, controls: Controls) -> None:
        """Mirrors the stick positions last commanded to the aircraft."""
        self.update(sticks=controls)

    def attach(self, fc) -> None:
        """
        Seeds the store from the flight controller and subscribes to
        location, velocity and heading updates.

        Args:
            fc: A connected FCConnection.
        """
        handlers = {
            FCKeys.FLIGHT.LOCATION_3D: self._on_location,
            FCKeys.FLIGHT.VELOCITY: self._on_velocity,
            FCKeys.FLIGHT.COMPASS_HEADING: self._on_heading,
        }
        for key, handler in handlers.items():
            response = fc.get(key)
            if response['success']:
                handler(response['data']['value'])
            else:
                logger.warning(f"Initial read of {key} failed: {response['message']}")

        self.record_sticks(self._read_sticks(fc))
        logger.debug(f"State (initial): {self._state}")

        for key, handler in handlers.items():
            response = fc.listen(key, handler)
            if not response['success']:
                logger.error(f"Could not subscribe to {key}: {response['message']}")

    # --- Sensor callbacks ---

    def _on_location(self, value: Optional[Dict[str, float]]):
        if value is None:
            return
        self._merge(value, {"longitude": "longitude", "latitude": "latitude", "altitude": "altitude"})

    def _on_velocity(self, value: Optional[Dict[str, float]]):
        if value is None:
            return
        self._merge(value, {"x": "x_velocity", "y": "y_velocity", "z": "z_velocity"})

    def _on_heading(self, value: Optional[float]):
        if value is None:
            return
        self.update(compass_heading=value)

    def _merge(self, value: Dict[str, Any], mapping: Dict[str, str]):
        # Keys absent from a sample keep their previous value
        self.update({field: value[key] for key, field in mapping.items() if value.get(key) is not None})

    def _read_sticks(self, fc) -> Controls:
        sticks = []
        for key in (FCKeys.STICKS.LEFT, FCKeys.STICKS.RIGHT):
            response = fc.get(key)
            value = response['data'].get('value') if response['success'] else None
            sticks.append(StickPosition.from_dict(value) if value else StickPosition())
        return Controls(*sticks)
