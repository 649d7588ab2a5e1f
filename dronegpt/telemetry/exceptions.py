"""dronegpt/telemetry/exceptions.py"""

class TelemetryError(Exception):
    """Failed to read or merge telemetry data"""
    def __init__(self, message="Telemetry failure", field=None):
        self.field = field
        super().__init__(f"{message} [Field: {field}]" if field else message)
