# In dronegpt/fc_interface/core.py

import logging
import time
from concurrent.futures import Future
from typing import Any, Callable, Dict, Optional

from .exceptions import ActionRejected

logger = logging.getLogger(__name__)

ResponseCallback = Callable[[Dict[str, Any]], None]


class FCConnection:
    """Handles flight-controller communication with a JSON interface.

    Wraps a protocol object (an SDK binding or the simulator) exposing
    ``get``, ``set``, ``perform_action`` and ``listen``, and turns every
    outcome into the same standardized response dictionary.
    """

    def __init__(self, protocol):
        self._protocol = protocol

    @property
    def connected(self) -> bool:
        return self._protocol is not None

    def disconnect(self):
        """Closes the underlying protocol."""
        if self._protocol:
            close = getattr(self._protocol, "close", None)
            if close is not None:
                close()
            self._protocol = None
            logger.info("Flight controller connection closed.")

    def get(self, key: str) -> Dict[str, Any]:
        """Standardized JSON response for key reads."""
        if not self._protocol:
            return self._format_response(success=False, message="Not connected",
                                         data={"key": key, "required_action": "Provide a protocol"})
        try:
            value = self._protocol.get(key)
            return self._format_response(
                success=True, message=f"Read {key}",
                data={"key": key, "value": value}
            )
        except Exception as e:
            return self._format_response(
                success=False, message=f"Failed to read {key}",
                data={"key": key, "error_type": type(e).__name__, "error_details": str(e)}
            )

    def set(self, key: str, value: Any) -> Dict[str, Any]:
        """Writes a key and returns a standardized JSON response."""
        if not self._protocol:
            return self._format_response(success=False, message="Not connected",
                                         data={"key": key, "required_action": "Provide a protocol"})
        try:
            self._protocol.set(key, value)
            return self._format_response(
                success=True,
                message=f"Set {key} to {value}",
                data={"key": key, "value": value}
            )
        except Exception as e:
            return self._format_response(
                success=False,
                message=f"Failed to set {key}",
                data={"key": key, "error_type": type(e).__name__, "error_details": str(e)}
            )

    def perform_action(self, key: str, callback: Optional[ResponseCallback] = None) -> "Future[Dict[str, Any]]":
        """
        Starts an action on the aircraft without waiting for it.

        The returned future resolves with the standardized response once the
        protocol reports success or failure; ``callback`` receives the same
        dictionary. Failures never raise here.
        """
        future: Future = Future()

        def _finish(response: Dict[str, Any]):
            if future.done():
                return
            future.set_result(response)
            if callback is not None:
                callback(response)

        def _on_success(result: Any = None):
            _finish(self._format_response(
                success=True, message=f"{key} succeeded",
                data={"key": key, "result": result}
            ))

        def _on_failure(error: Any):
            _finish(self._format_response(
                success=False, message=f"{key} failed: {error}",
                data={"key": key, "error_type": type(error).__name__ if isinstance(error, Exception) else "ActionRejected",
                      "error_details": str(error)}
            ))

        if not self._protocol:
            _on_failure(ActionRejected("Not connected"))
            return future

        try:
            self._protocol.perform_action(key, _on_success, _on_failure)
        except Exception as e:
            _on_failure(e)
        return future

    def listen(self, key: str, callback: Callable[[Any], None]) -> Dict[str, Any]:
        """Registers ``callback`` for every new value of ``key``."""
        if not self._protocol:
            return self._format_response(success=False, message="Not connected", data={"key": key})
        try:
            self._protocol.listen(key, callback)
            return self._format_response(success=True, message=f"Listening to {key}", data={"key": key})
        except Exception as e:
            return self._format_response(
                success=False, message=f"Failed to listen to {key}",
                data={"key": key, "error_type": type(e).__name__, "error_details": str(e)}
            )

    def _format_response(self, success: bool, message: str, data: Dict = None) -> Dict[str, Any]:
        """Standardized response format for all methods."""
        return {
            "module": "fc_interface", "success": success, "message": message,
            "data": data or {}, "timestamp": time.time()
        }
