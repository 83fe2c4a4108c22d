"""Agent package -- the tool-calling loop that produces traces.

Provides the AgentLoop class, its configuration, the TraceRecorder and the
trace/result records.
"""

from agenteval.agent.config import AgentConfig
from agenteval.agent.loop import AgentLoop, run_agent
from agenteval.agent.models import (
    ERROR_ACTION,
    AgentRunResult,
    AgentState,
    StopReason,
    TraceStep,
)
from agenteval.agent.trace import TraceRecorder

__all__ = [
    "AgentLoop",
    "AgentConfig",
    "AgentRunResult",
    "AgentState",
    "StopReason",
    "TraceStep",
    "TraceRecorder",
    "ERROR_ACTION",
    "run_agent",
]
