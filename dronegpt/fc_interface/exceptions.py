"""dronegpt/fc_interface/exceptions.py"""

class FCCommError(Exception):
    """Base exception for all flight-controller communication errors."""
    pass

class ActionRejected(FCCommError):
    """Raised (or reported) when the aircraft refuses an action."""
    pass
