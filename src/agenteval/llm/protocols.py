"""Model gateway protocol and response parsing.

Any object with ``chat()`` and ``close()`` matching LLMClient works as the
gateway. Responses are OpenAI chat-completion dicts; ``parse_response``
turns one into a ModelResponse for the agent loop.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from agenteval.llm.errors import LLMResponseError
from agenteval.protocols import Message, ModelResponse, TokenUsage


@runtime_checkable
class LLMClient(Protocol):
    """Protocol for pluggable LLM clients.

    The built-in OpenAIClient and AzureOpenAIClient implement this protocol.
    ``tools`` and ``tool_choice`` travel through ``**kwargs``.
    """

    def chat(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> dict:
        """Send messages, return response dict."""
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...


def parse_response(response: dict) -> ModelResponse:
    """Parse an OpenAI-format chat completion into a ModelResponse.

    Args:
        response: Full API response dict.

    Returns:
        ModelResponse with the first choice's message and finish reason.

    Raises:
        LLMResponseError: If the response has no usable first choice.
    """
    try:
        choice = response["choices"][0]
        raw_message = choice["message"]
        if not isinstance(raw_message, dict):
            raise TypeError(f"message is {type(raw_message).__name__}, not dict")
        message = Message.from_dict({**raw_message, "role": "assistant"})
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise LLMResponseError(
            f"Cannot parse chat completion: {exc}. Response: {response}"
        ) from exc

    usage = response.get("usage")
    return ModelResponse(
        message=message,
        finish_reason=choice.get("finish_reason"),
        usage=TokenUsage.from_dict(usage if isinstance(usage, dict) else None),
        raw=response,
    )
