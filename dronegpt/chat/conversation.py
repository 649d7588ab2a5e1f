# dronegpt/chat/conversation.py

import logging
import queue
import threading
from typing import List, Tuple

from .data_models import (AssistantMessage, ConversationMessage, ObservationMessage,
                          SystemMessage, ToolMessage)
from .exceptions import ConversationError

logger = logging.getLogger(__name__)


class ConversationLog:
    """
    Append-only record of everything said during a session.

    Message 0 is always the single system prompt. Observers receive every
    later append through the queues handed out by ``subscribe``.
    """

    def __init__(self, system_prompt: str):
        self._messages: List[ConversationMessage] = [SystemMessage(system_prompt)]
        self._lock = threading.Lock()
        self._subscribers: List[queue.Queue] = []

    @property
    def system_prompt(self) -> SystemMessage:
        return self._messages[0]

    def append(self, message: ConversationMessage) -> None:
        if isinstance(message, SystemMessage):
            raise ConversationError("The system prompt is fixed at position 0")
        with self._lock:
            self._messages.append(message)
            subscribers = list(self._subscribers)
        logger.debug(f"Appended {type(message).__name__} (#{len(self._messages) - 1})")
        for subscriber in subscribers:
            subscriber.put(message)

    def all(self) -> Tuple[ConversationMessage, ...]:
        with self._lock:
            return tuple(self._messages)

    def visible(self) -> List[ConversationMessage]:
        """User commands and the model's natural-language replies only."""
        return [m for m in self.all()[1:] if _is_visible(m)]

    def subscribe(self) -> queue.Queue:
        channel: queue.Queue = queue.Queue()
        with self._lock:
            self._subscribers.append(channel)
        return channel

    def unsubscribe(self, channel: queue.Queue) -> None:
        with self._lock:
            if channel in self._subscribers:
                self._subscribers.remove(channel)

    def __len__(self) -> int:
        return len(self._messages)


def _is_visible(message: ConversationMessage) -> bool:
    if isinstance(message, (ObservationMessage, ToolMessage)):
        return False
    if isinstance(message, AssistantMessage):
        return not message.control
    return True
