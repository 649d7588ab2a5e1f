# dronegpt/chat/context.py
"""
Reduces the full conversation to the handful of messages sent each round.

    SYSTEM PROMPT
    USER MESSAGE                 (most recent command)
    OBSERVATION                  (anchor: right after the command)
    [ASSISTANT MESSAGE]          (first reply after the anchor: the plan)
    [OBSERVATION]                (freshest telemetry + image)

Request size stays bounded however long the flight runs.
"""
from typing import List, Sequence

from .data_models import AssistantMessage, ConversationMessage, ObservationMessage, SystemMessage, UserMessage
from .exceptions import ContextError


def _last_index(messages: Sequence[ConversationMessage], kind: type) -> int:
    for index in range(len(messages) - 1, -1, -1):
        if isinstance(messages[index], kind):
            return index
    return -1


def select_context(messages: Sequence[ConversationMessage]) -> List[ConversationMessage]:
    """
    Picks the messages sent to the model from the full log.

    Raises:
        ContextError: if the log has no system prompt, no user command, or no
            observation directly after the latest command.
    """
    if not messages or not isinstance(messages[0], SystemMessage):
        raise ContextError("Conversation must start with the system prompt")

    user_index = _last_index(messages, UserMessage)
    if user_index < 0:
        raise ContextError("No user command to act on")

    anchor_index = user_index + 1
    if anchor_index >= len(messages) or not isinstance(messages[anchor_index], ObservationMessage):
        raise ContextError("No observation follows the latest user command")

    selected = [messages[0], messages[user_index], messages[anchor_index]]

    # Synthetic control turns are not a plan
    plan = next(
        (m for m in messages[anchor_index + 1:] if isinstance(m, AssistantMessage) and not m.control),
        None,
    )
    if plan is not None:
        selected.append(plan)

    latest_index = _last_index(messages, ObservationMessage)
    if latest_index > anchor_index:
        selected.append(messages[latest_index])
    return selected
