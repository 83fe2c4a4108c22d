"""TraceRecorder: append-only log of executed tool calls.

Kept separate from the conversation history so the trace can be handed to
the evaluator without any of the loop's conversational state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from agenteval.agent.models import ERROR_ACTION, TraceStep
from agenteval.protocols import Message

logger = logging.getLogger(__name__)


class TraceRecorder:
    """Assigns contiguous 1-based step indices in execution order."""

    def __init__(self) -> None:
        self._steps: list[TraceStep] = []

    def record(
        self,
        llm_message: Message,
        action: str,
        args: dict[str, Any],
        result: Any,
        *,
        turn: int = 0,
    ) -> TraceStep:
        step = TraceStep(
            step=len(self._steps) + 1,
            llm_message=llm_message,
            action=action,
            args=args,
            result=result,
            turn=turn,
        )
        self._steps.append(step)
        logger.debug("Recorded step %d: %s", step.step, action)
        return step

    def record_error(self, description: str, *, turn: int = 0) -> TraceStep:
        """Record a synthetic ``error`` step for a failure that aborted the run."""
        return self.record(
            Message(role="assistant", content=""),
            ERROR_ACTION,
            {},
            {"error": description},
            turn=turn,
        )

    @property
    def steps(self) -> tuple[TraceStep, ...]:
        """Snapshot of the trace so far."""
        return tuple(self._steps)

    def has_action(self, action: str) -> bool:
        return any(step.action == action for step in self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[TraceStep]:
        return iter(tuple(self._steps))
