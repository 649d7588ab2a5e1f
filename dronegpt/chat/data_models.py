# dronegpt/chat/data_models.py
"""
Conversation messages and the completion request/response pair.

Each message variant maps to one wire ``role``. ObservationMessage is the
synthetic telemetry + camera entry; AssistantMessage.control marks internal
turns that never reach the operator's transcript.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


# --- Content parts ---

@dataclass(frozen=True)
class TextPart:
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass(frozen=True)
class ImageUrlPart:
    url: str
    detail: str = "auto"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "image_url", "image_url": {"url": self.url, "detail": self.detail}}


ContentPart = Union[TextPart, ImageUrlPart]


# --- Messages ---

@dataclass(frozen=True)
class SystemMessage:
    content: str
    role = "system"


@dataclass(frozen=True)
class UserMessage:
    content: str
    role = "user"


@dataclass(frozen=True)
class ObservationMessage:
    """Aircraft state (JSON text) plus the latest camera image, if any."""
    state: str
    image_url: Optional[str] = None
    image_detail: str = "auto"
    # Image parts are only accepted on user turns
    role = "user"

    @property
    def parts(self) -> List[ContentPart]:
        parts: List[ContentPart] = [TextPart(self.state)]
        if self.image_url is not None:
            parts.append(ImageUrlPart(self.image_url, self.image_detail))
        return parts


@dataclass(frozen=True)
class AssistantMessage:
    content: str
    control: bool = False
    tool_calls: Optional[List[Dict[str, Any]]] = None
    role = "assistant"


@dataclass(frozen=True)
class ToolMessage:
    content: str
    tool_call_id: str
    role = "tool"


ConversationMessage = Union[SystemMessage, UserMessage, ObservationMessage, AssistantMessage, ToolMessage]


def message_to_dict(message: ConversationMessage) -> Dict[str, Any]:
    """Wire representation of one message."""
    if isinstance(message, ObservationMessage):
        return {"role": message.role, "content": [part.to_dict() for part in message.parts]}
    if isinstance(message, AssistantMessage):
        data: Dict[str, Any] = {"role": message.role, "content": message.content}
        if message.tool_calls:
            data["tool_calls"] = message.tool_calls
        return data
    if isinstance(message, ToolMessage):
        return {"role": message.role, "content": message.content, "tool_call_id": message.tool_call_id}
    if isinstance(message, (SystemMessage, UserMessage)):
        return {"role": message.role, "content": message.content}
    raise TypeError(f"Not a conversation message: {message!r}")


def _flatten_content(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        texts = []
        for part in content:
            if not isinstance(part, dict):
                raise ValueError(f"Content part is not an object: {part!r}")
            if part.get("type") == "text":
                texts.append(str(part.get("text", "")))
        return "".join(texts)
    raise ValueError(f"Unsupported content type: {type(content).__name__}")


def message_from_dict(data: Dict[str, Any]) -> ConversationMessage:
    """
    Parses a wire message. Raises ValueError for unknown roles or shapes.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Message is not an object: {data!r}")
    role = data.get("role")
    if role == "assistant":
        return AssistantMessage(_flatten_content(data.get("content")), tool_calls=data.get("tool_calls"))
    if role == "user":
        return UserMessage(_flatten_content(data.get("content")))
    if role == "system":
        return SystemMessage(_flatten_content(data.get("content")))
    if role == "tool":
        return ToolMessage(_flatten_content(data.get("content")), str(data.get("tool_call_id", "")))
    raise ValueError(f"Unknown message role: {role!r}")


# --- Request / response ---

@dataclass
class CompletionRequest:
    model: str
    messages: List[ConversationMessage]
    max_tokens: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": self.model,
            "messages": [message_to_dict(m) for m in self.messages],
        }
        if self.max_tokens is not None:
            body["max_tokens"] = self.max_tokens
        return body


@dataclass
class Choice:
    message: ConversationMessage
    finish_reason: Optional[str] = None


@dataclass
class CompletionResponse:
    choices: List[Choice] = field(default_factory=list)

    @property
    def message(self) -> ConversationMessage:
        return self.choices[0].message

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompletionResponse":
        """Raises ValueError when the body does not have at least one choice."""
        if not isinstance(data, dict):
            raise ValueError("Response body is not an object")
        raw_choices = data.get("choices")
        if not isinstance(raw_choices, list) or not raw_choices:
            raise ValueError("Response has no choices")
        choices = []
        for raw in raw_choices:
            if not isinstance(raw, dict) or "message" not in raw:
                raise ValueError(f"Malformed choice: {raw!r}")
            choices.append(Choice(message_from_dict(raw["message"]), raw.get("finish_reason")))
        return cls(choices)
