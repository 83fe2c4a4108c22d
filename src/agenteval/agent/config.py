"""Agent loop configuration.

Mutable dataclass (like the other run-level configs) -- callers may adjust
settings between runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from agenteval.agent.models import TraceStep
    from agenteval.config import AgentEvalConfig
    from agenteval.protocols import ModelResponse


@dataclass
class AgentConfig:
    """Configuration for one agent run.

    Attributes:
        max_steps: Maximum number of model turns before stopping.
        base_url: Endpoint base URL announced in the system prompt.
        system_prompt: Override for the default API-testing system prompt.
        model: LLM model identifier (None = use the client's default).
        temperature: LLM temperature for agent calls.
        max_tokens: Maximum completion tokens per model call.
        extra_llm_kwargs: Additional LLM kwargs forwarded to client.chat().
        on_step: Callback invoked after each trace step is recorded.
        on_response: Callback invoked with each parsed model reply.
    """

    max_steps: int = 15
    base_url: str = "http://localhost:3000"
    system_prompt: str | None = None
    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    extra_llm_kwargs: dict | None = None
    on_step: Callable[[TraceStep], None] | None = None
    on_response: Callable[[ModelResponse], None] | None = None

    @classmethod
    def from_config(cls, config: AgentEvalConfig, **overrides) -> AgentConfig:
        """Derive loop settings from the process configuration."""
        values = {
            "max_steps": config.evaluation.max_steps,
            "base_url": config.endpoint.base_url,
            "temperature": config.llm.temperature,
            "max_tokens": config.llm.max_tokens,
        }
        values.update(overrides)
        return cls(**values)
