"""
dronegpt - natural-language drone control through a vision-language model.

Subpackages:
- fc_interface: flight-controller capability interface
- telemetry: latest-known aircraft state
- vision: latest camera frame as JPEG
- chat: conversation log, context selection, model client
- flight: instruction parsing and actuation
- agent: the closed control loop
"""

__version__ = "0.1.0"
