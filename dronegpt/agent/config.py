# dronegpt/agent/config.py

import os
from dataclasses import dataclass, field
from typing import Optional

from .exceptions import AgentError
from .prompt import SYSTEM_PROMPT
from ..constants.model_api import ModelAPIConstants
from ..vision.encoding import DEFAULT_JPEG_QUALITY


@dataclass
class AgentConfig:
    """Configuration for the control agent."""

    api_key: Optional[str] = None
    model: str = ModelAPIConstants.DEFAULT_AGENT_MODEL
    api_url: str = ModelAPIConstants.DEFAULT_URL
    request_timeout_s: float = ModelAPIConstants.DEFAULT_TIMEOUT_S
    max_tokens: Optional[int] = ModelAPIConstants.DEFAULT_MAX_TOKENS
    # Target duration of one observe/ask/execute round
    loop_period_s: float = 5.0
    image_detail: str = "auto"
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    # None: take-off/landing are not awaited
    action_timeout_s: Optional[float] = None
    system_prompt: str = field(default=SYSTEM_PROMPT, repr=False)

    @classmethod
    def from_env(cls, environ=None) -> "AgentConfig":
        """Defaults overridden by OPENAI_API_KEY and DRONEGPT_* variables."""
        env = os.environ if environ is None else environ
        config = cls(api_key=env.get(ModelAPIConstants.API_KEY_ENV))
        if env.get("DRONEGPT_MODEL"):
            config.model = env["DRONEGPT_MODEL"]
        if env.get("DRONEGPT_API_URL"):
            config.api_url = env["DRONEGPT_API_URL"]
        try:
            if env.get("DRONEGPT_LOOP_PERIOD_S"):
                config.loop_period_s = float(env["DRONEGPT_LOOP_PERIOD_S"])
            if env.get("DRONEGPT_MAX_TOKENS"):
                config.max_tokens = int(env["DRONEGPT_MAX_TOKENS"])
        except ValueError as e:
            raise AgentError(f"Invalid DRONEGPT_* setting: {e}") from e
        return config
