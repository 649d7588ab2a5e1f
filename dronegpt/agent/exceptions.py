"""dronegpt/agent/exceptions.py"""

class AgentError(Exception):
    """Base class for agent loop errors"""
    pass

class AgentBusyError(AgentError):
    """Raised when a command arrives while a run is still active"""
    pass
