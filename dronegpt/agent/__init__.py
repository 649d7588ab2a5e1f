"""
agent - closed-loop control agent for dronegpt

Exposes the Agent and its run handle, configuration, the system prompt and
common exceptions.
"""

from .config import AgentConfig
from .core import Agent, AgentRun, AgentState, LoopStats, RunOutcome, pace_delay
from .exceptions import AgentError, AgentBusyError
from .prompt import SYSTEM_PROMPT

__all__ = [
    'Agent',
    'AgentRun',
    'AgentState',
    'LoopStats',
    'RunOutcome',
    'pace_delay',
    'AgentConfig',
    'SYSTEM_PROMPT',
    'AgentError',
    'AgentBusyError',
]
