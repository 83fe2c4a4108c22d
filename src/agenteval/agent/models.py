"""Agent run state and trace records.

Provides AgentState, StopReason, TraceStep and AgentRunResult for the
agent's ask-model / execute-tools loop.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from agenteval.protocols import Message, TokenUsage

ERROR_ACTION = "error"


class AgentState(str, enum.Enum):
    """States the agent loop can end in (RUNNING while in progress)."""

    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED_EARLY = "stopped_early"


class StopReason(str, enum.Enum):
    """Why a run ended in STOPPED_EARLY."""

    NO_FINAL_REPORT = "no_final_report"
    UNEXPECTED_FINISH_REASON = "unexpected_finish_reason"
    EXECUTION_ERROR = "execution_error"
    MAX_STEPS_EXCEEDED = "max_steps_exceeded"


@dataclass(frozen=True)
class TraceStep:
    """Durable record of one executed tool call.

    Frozen: trace steps are immutable records of what happened.

    Attributes:
        step: 1-based position in the trace.
        llm_message: The assistant message that requested the call.
        action: Tool name, or ``"error"`` for a synthetic failure step.
        args: Resolved arguments.
        result: Tool result (opaque JSON-shaped value).
        turn: Model turn that produced the step (0 when unknown).
    """

    step: int
    llm_message: Message
    action: str
    args: dict[str, Any] = field(default_factory=dict)
    result: Any = None
    turn: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "turn": self.turn,
            "llmMessage": self.llm_message.to_dict(),
            "action": self.action,
            "args": self.args,
            "result": self.result,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TraceStep:
        """Rebuild a step from its serialized form.

        Lenient on purpose: externally produced traces may lack fields or
        carry odd values, and the evaluator must still be able to score them.
        """
        raw_message = d.get("llmMessage") or d.get("llm_message") or {}
        if not isinstance(raw_message, dict):
            raw_message = {}
        try:
            message = Message.from_dict(raw_message)
        except (AttributeError, TypeError):
            message = Message(role="assistant", content=None)
        args = d.get("args")
        step = d.get("step", 0)
        return cls(
            step=step if isinstance(step, int) else 0,
            llm_message=message,
            action=str(d.get("action", "")),
            args=args if isinstance(args, dict) else {},
            result=d.get("result"),
            turn=d.get("turn", 0) if isinstance(d.get("turn"), int) else 0,
        )


@dataclass(frozen=True)
class AgentRunResult:
    """Final result of an agent run.

    Frozen: the result is immutable once the run completes.
    """

    steps: tuple[TraceStep, ...] = ()
    state: AgentState = AgentState.RUNNING
    stop_reason: StopReason | None = None
    turns: int = 0
    messages: tuple[Message, ...] = ()
    usage: TokenUsage = field(default_factory=TokenUsage)

    @property
    def completed(self) -> bool:
        return self.state == AgentState.COMPLETED

    @property
    def final_report(self) -> Any:
        """Result payload of the first final_report step, if any."""
        for step in self.steps:
            if step.action == "final_report":
                return step.result
        return None
