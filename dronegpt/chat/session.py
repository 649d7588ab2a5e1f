# dronegpt/chat/session.py

import logging
from typing import List, Optional

from .client import ModelClient
from .data_models import AssistantMessage, CompletionRequest, ConversationMessage, SystemMessage, UserMessage
from ..constants.model_api import ModelAPIConstants

logger = logging.getLogger(__name__)

CLI_SYSTEM_PROMPT = "You're a helpful assistant being used in a command line interface (CLI)."


class ChatSession:
    """Plain multi-turn chat: the whole history goes out every turn."""

    def __init__(self, client: ModelClient, model: str = ModelAPIConstants.DEFAULT_CHAT_MODEL,
                 system_prompt: Optional[str] = CLI_SYSTEM_PROMPT):
        self.client = client
        self.model = model
        self.messages: List[ConversationMessage] = []
        if system_prompt:
            self.messages.append(SystemMessage(system_prompt))

    def add(self, text: str) -> ConversationMessage:
        """Sends ``text`` and records the reply. Model errors propagate."""
        self.messages.append(UserMessage(text))
        response = self.client.complete(CompletionRequest(self.model, list(self.messages)))
        self.messages.append(response.message)
        return response.message

    def last_assistant_message(self) -> Optional[AssistantMessage]:
        return next((m for m in reversed(self.messages) if isinstance(m, AssistantMessage)), None)

    def last_user_message(self) -> Optional[UserMessage]:
        return next((m for m in reversed(self.messages) if isinstance(m, UserMessage)), None)
