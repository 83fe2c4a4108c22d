"""Conversation types shared by the agent loop and the model gateway.

Frozen dataclasses for the role-tagged messages exchanged with the model,
the tool invocations it requests, and the parsed gateway response.
"""

from __future__ import annotations

import json as _json
from dataclasses import dataclass, field
from typing import Literal, TypedDict

Role = Literal["system", "user", "assistant", "tool"]

FINISH_TOOL_CALLS = "tool_calls"
FINISH_STOP = "stop"


class _ToolInvocationFunction(TypedDict):
    name: str
    arguments: str


class ToolInvocationDict(TypedDict):
    """OpenAI wire format for a single tool call."""

    id: str
    type: str
    function: _ToolInvocationFunction


@dataclass(frozen=True)
class ToolInvocation:
    """A tool/function invocation requested by the model.

    ``arguments`` is the raw JSON-encoded string exactly as the model sent
    it. The agent loop parses it once before dispatching; nothing else
    should interpret it.
    """

    id: str
    name: str
    arguments: str = "{}"
    type: str = "function"

    @classmethod
    def from_openai(cls, tc: dict) -> ToolInvocation:
        """Parse from OpenAI/compatible format.

        Already-decoded argument objects (some compatible servers send them)
        are re-encoded so ``arguments`` is always a string.
        """
        func = tc.get("function") or {}
        raw_args = func.get("arguments", "{}")
        if raw_args is None:
            raw_args = "{}"
        elif not isinstance(raw_args, str):
            raw_args = _json.dumps(raw_args)
        return cls(
            id=str(tc.get("id", "")),
            name=str(func.get("name", "")),
            arguments=raw_args,
            type=tc.get("type", "function"),
        )

    def to_openai(self) -> ToolInvocationDict:
        """Serialize to OpenAI wire format."""
        return {
            "id": self.id,
            "type": self.type,
            "function": {
                "name": self.name,
                "arguments": self.arguments,
            },
        }


@dataclass(frozen=True)
class Message:
    """One conversational turn.

    ``content`` is None for assistant turns that only carry tool calls.
    ``tool_call_id`` and ``name`` are set on tool-result messages.
    """

    role: Role
    content: str | None = None
    tool_calls: tuple[ToolInvocation, ...] = ()
    tool_call_id: str | None = None
    name: str | None = None

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role="user", content=content)

    @classmethod
    def tool_result(cls, invocation: ToolInvocation, content: str) -> Message:
        return cls(
            role="tool",
            content=content,
            tool_call_id=invocation.id,
            name=invocation.name,
        )

    @classmethod
    def from_dict(cls, d: dict) -> Message:
        """Parse an OpenAI-format message dict (e.g. ``choices[0].message``)."""
        raw_calls = d.get("tool_calls") or []
        return cls(
            role=d.get("role", "assistant"),
            content=d.get("content"),
            tool_calls=tuple(ToolInvocation.from_openai(tc) for tc in raw_calls),
            tool_call_id=d.get("tool_call_id"),
            name=d.get("name"),
        )

    def to_dict(self) -> dict:
        """Serialize to OpenAI wire format, omitting unset optional keys."""
        out: dict = {"role": self.role, "content": self.content}
        if self.tool_calls:
            out["tool_calls"] = [tc.to_openai() for tc in self.tool_calls]
        if self.tool_call_id is not None:
            out["tool_call_id"] = self.tool_call_id
        if self.name is not None:
            out["name"] = self.name
        return out


@dataclass(frozen=True)
class TokenUsage:
    """Token usage reported by an LLM API response."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_dict(cls, d: dict | None) -> TokenUsage | None:
        if not d:
            return None
        return cls(
            prompt_tokens=int(d.get("prompt_tokens") or 0),
            completion_tokens=int(d.get("completion_tokens") or 0),
            total_tokens=int(d.get("total_tokens") or 0),
        )

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


@dataclass(frozen=True)
class ModelResponse:
    """A parsed gateway reply: one assistant message plus its finish reason."""

    message: Message
    finish_reason: str | None
    usage: TokenUsage | None = None
    raw: dict = field(default_factory=dict, repr=False, compare=False)

    @property
    def wants_tools(self) -> bool:
        """True when the model stopped to request tool calls."""
        return self.finish_reason == FINISH_TOOL_CALLS and bool(self.message.tool_calls)
