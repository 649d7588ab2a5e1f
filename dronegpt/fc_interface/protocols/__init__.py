"""
Protocol implementations behind FCConnection

Currently supported:
- Simulated (in-memory)

A vendor SDK binding only needs the same four methods:
get, set, perform_action and listen.
"""

from .simulated import SimulatedProtocol

__all__ = ['SimulatedProtocol']
