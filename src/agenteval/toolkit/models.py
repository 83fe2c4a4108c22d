"""Toolkit data models for the API-testing agent.

Frozen dataclasses for tool definitions, plus pydantic request/response
records for each tool. Argument records validate on construction and
reject missing required fields; result records serialize to the camelCase
payloads recorded in traces.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from agenteval.toolkit.schemas import SchemaKind

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolDefinition:
    """A single tool definition for LLM consumption.

    Attributes:
        name: Tool name as exposed to the model (e.g. "callApi").
        description: Human-readable description of when/why to use this tool.
        parameters: JSON Schema dict describing tool parameters.
        arguments_model: Pydantic model that validates raw arguments.
        handler: Callable taking a validated ``arguments_model`` instance.
    """

    name: str
    description: str
    parameters: dict
    arguments_model: type[BaseModel]
    handler: Callable[[Any], object]

    def to_openai(self) -> dict:
        """Convert to OpenAI function-calling format.

        Returns:
            Dict with "type": "function" and nested "function" object.
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class _ToolRecord(BaseModel):
    """Base for tool records: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


class GenerateTestIdsArgs(_ToolRecord):
    """generateTestIds takes no arguments; stray keys are ignored."""


class CallApiArgs(_ToolRecord):
    method: str = Field(min_length=1)
    url: str = Field(min_length=1)

    @field_validator("method")
    @classmethod
    def _normalize_method(cls, v: str) -> str:
        method = v.strip().upper()
        if not method:
            raise ValueError("method must not be blank")
        return method


class ValidateSchemaArgs(_ToolRecord):
    data: Any
    expected_type: SchemaKind


class FinalReportArgs(_ToolRecord):
    """Terminal report payload. Extra keys are kept so it round-trips.

    Counts are required but never coerced: the report is echoed exactly as
    the model sent it, and the evaluator judges whether they are numbers.
    """

    model_config = ConfigDict(extra="allow")

    summary: str
    total_tests: Any
    success_count: Any
    error_count: Any
    failures: Optional[list[str]] = None


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class _ToolResultRecord(_ToolRecord):
    def to_payload(self) -> dict:
        """Dump with wire aliases, dropping optional error lists that are unset."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CallApiResult(_ToolResultRecord):
    status: int
    data: Any = None
    schema_valid: bool
    schema_errors: Optional[list[str]] = None

    def to_payload(self) -> dict:
        payload = self.model_dump(by_alias=True)
        if payload.get("schemaErrors") is None:
            payload.pop("schemaErrors", None)
        return payload


class ValidateSchemaResult(_ToolResultRecord):
    valid: bool
    errors: Optional[list[str]] = None


