"""
chat - conversation state and model access for dronegpt

Exposes the message types, the append-only ConversationLog, context
selection, the HTTP ModelClient and a plain ChatSession.
"""

from .client import ModelClient
from .context import select_context
from .conversation import ConversationLog
from .data_models import (
    AssistantMessage,
    Choice,
    CompletionRequest,
    CompletionResponse,
    ImageUrlPart,
    ObservationMessage,
    SystemMessage,
    TextPart,
    ToolMessage,
    UserMessage,
    message_from_dict,
    message_to_dict,
)
from .exceptions import (
    ChatError,
    ContextError,
    ConversationError,
    ModelClientError,
    ModelProtocolError,
    ModelTransientError,
)
from .session import ChatSession

__all__ = [
    'ModelClient',
    'select_context',
    'ConversationLog',
    'ChatSession',
    'AssistantMessage',
    'Choice',
    'CompletionRequest',
    'CompletionResponse',
    'ImageUrlPart',
    'ObservationMessage',
    'SystemMessage',
    'TextPart',
    'ToolMessage',
    'UserMessage',
    'message_from_dict',
    'message_to_dict',
    'ChatError',
    'ContextError',
    'ConversationError',
    'ModelClientError',
    'ModelProtocolError',
    'ModelTransientError',
]
