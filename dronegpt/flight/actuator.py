# dronegpt/flight/actuator.py

import logging
import threading
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from dataclasses import replace
from typing import Any, Dict, Optional

from .exceptions import ActuatorError
from .instructions import Control, Instruction, Land, Stop, TakeOff
from ..constants.flight_controller import FCKeys
from ..telemetry.core import TelemetryStore
from ..telemetry.data_models import AircraftState, Controls

logger = logging.getLogger(__name__)


class FlightActuator:
    """
    Applies instructions to the aircraft.

    Take-off and landing are started and left running; their outcome is only
    logged by the action callback unless ``action_timeout_s`` is set, in which
    case ``execute`` waits (bounded) for it. Each stick accepted by the
    aircraft is mirrored into the TelemetryStore, so a rejected right stick
    still leaves the new left stick recorded.
    """

    def __init__(self, fc, telemetry: TelemetryStore, action_timeout_s: Optional[float] = None):
        self.fc = fc
        self.telemetry = telemetry
        self.action_timeout_s = action_timeout_s
        self._lock = threading.Lock()

    def execute(self, instruction: Instruction, state: Optional[AircraftState] = None) -> Optional[Future]:
        """
        Applies one instruction.

        Args:
            instruction: The instruction to apply.
            state: Snapshot to take the home location from on take-off.
                A fresh snapshot is used when omitted.

        Returns:
            The action future for TakeOff/Land, None for stick instructions.

        Raises:
            ActuatorError: if the aircraft rejects a stick write.
        """
        logger.info(f"Executing instruction: {instruction}")
        with self._lock:
            if isinstance(instruction, TakeOff):
                self._set_home(state or self.telemetry.snapshot())
                return self._start_action(FCKeys.ACTIONS.START_TAKEOFF, "Take-off")
            if isinstance(instruction, Land):
                return self._start_action(FCKeys.ACTIONS.START_AUTO_LANDING, "Landing")
            if isinstance(instruction, Control):
                self._write_sticks(instruction.controls)
                return None
            if isinstance(instruction, Stop):
                self._write_sticks(Controls.neutral())
                return None
        raise TypeError(f"Not an instruction: {instruction!r}")

    def _set_home(self, state: AircraftState):
        if state.longitude is None or state.latitude is None:
            logger.warning("Position unknown, home location not updated.")
            return
        home = {"longitude": state.longitude, "latitude": state.latitude}
        response = self.fc.set(FCKeys.FLIGHT.HOME_LOCATION, home)
        if response['success']:
            logger.info(f"Home location set to {home}")
        else:
            logger.warning(f"Home location write failed: {response['message']}")

    def _start_action(self, key: str, label: str) -> Future:
        def _report(response: Dict[str, Any]):
            if response['success']:
                logger.info(f"{label} started")
            else:
                logger.warning(f"{label} failed: {response['message']}")

        future = self.fc.perform_action(key, _report)
        if self.action_timeout_s is not None:
            try:
                future.result(timeout=self.action_timeout_s)
            except FutureTimeoutError:
                logger.warning(f"{label} not confirmed within {self.action_timeout_s}s")
        return future

    def _write_sticks(self, controls: Controls):
        # Mirror each stick as soon as the aircraft accepts it
        recorded = self.telemetry.snapshot().sticks or Controls.neutral()
        for key, name in ((FCKeys.STICKS.LEFT, "left_stick"), (FCKeys.STICKS.RIGHT, "right_stick")):
            stick = getattr(controls, name)
            response = self.fc.set(key, stick.to_dict())
            if not response['success']:
                logger.error(f"Stick write rejected: {response['message']}")
                raise ActuatorError(response['message'], key=key)
            recorded = replace(recorded, **{name: stick})
            self.telemetry.record_sticks(recorded)
