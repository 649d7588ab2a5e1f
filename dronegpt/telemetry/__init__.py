"""
telemetry - latest known aircraft state for dronegpt
"""

from .core import TelemetryStore
from .data_models import AircraftState, Controls, StickPosition
from .exceptions import TelemetryError

__all__ = ['TelemetryStore', 'AircraftState', 'Controls', 'StickPosition', 'TelemetryError']
