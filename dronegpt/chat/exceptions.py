"""dronegpt/chat/exceptions.py"""

class ChatError(Exception):
    """Base class for conversation and model errors"""
    pass

class ConversationError(ChatError):
    """Raised when an append would break the log's invariants"""
    pass

class ContextError(ChatError):
    """Raised when the log does not contain what context selection needs"""
    pass

class ModelClientError(ChatError):
    """Base for failures talking to the model endpoint"""
    def __init__(self, message, status_code=None):
        self.status_code = status_code
        super().__init__(f"{message} [HTTP {status_code}]" if status_code else message)

class ModelTransientError(ModelClientError):
    """Timeouts, connection errors and retryable HTTP statuses"""
    pass

class ModelProtocolError(ModelClientError):
    """Malformed or unexpected responses; retrying will not help"""
    pass
