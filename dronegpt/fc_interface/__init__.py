"""
fc_interface - flight-controller communication interface for dronegpt

Exposes the FCConnection wrapper, the in-memory simulator protocol and
common exceptions.
"""

from .core import FCConnection
from .exceptions import FCCommError, ActionRejected
from .protocols.simulated import SimulatedProtocol

__all__ = ['FCConnection', 'FCCommError', 'ActionRejected', 'SimulatedProtocol']
