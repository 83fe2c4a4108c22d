"""ToolCatalog: the fixed tool set and its dispatcher.

``descriptors()`` returns the ordered definitions shown to the model and
``execute()`` looks a tool up by exact name, validates its arguments and
returns the JSON-shaped result.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ValidationError

from agenteval.exceptions import ToolArgumentError, ToolExecutionError, UnknownToolError
from agenteval.toolkit.definitions import get_all_tools
from agenteval.toolkit.models import CallApiResult, ValidateSchemaResult
from agenteval.toolkit.schemas import format_validation_errors

if TYPE_CHECKING:
    from agenteval.config import EndpointSettings
    from agenteval.toolkit.models import ToolDefinition

logger = logging.getLogger(__name__)


class ToolCatalog:
    """Registry of the agent's tools, keyed by name.

    Usage::

        with ToolCatalog() as catalog:
            tools = catalog.to_openai()
            result = catalog.execute("callApi", {"method": "GET", "url": url})
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Create the catalog.

        Args:
            client: HTTP client for callApi. When omitted the catalog owns
                one built from ``timeout`` and ``transport`` and closes it
                in ``close()``.
            timeout: Request timeout in seconds for an owned client.
            transport: Optional httpx transport for an owned client.
        """
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, transport=transport)
        self._tools: tuple[ToolDefinition, ...] = tuple(get_all_tools(self._client))
        self._by_name: dict[str, ToolDefinition] = {t.name: t for t in self._tools}

    @classmethod
    def from_settings(
        cls,
        settings: EndpointSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> ToolCatalog:
        return cls(timeout=settings.timeout, transport=transport)

    def descriptors(self) -> tuple[ToolDefinition, ...]:
        """Return the full catalog in its fixed order."""
        return self._tools

    def to_openai(self) -> list[dict]:
        """Return the catalog in OpenAI function-calling format."""
        return [tool.to_openai() for tool in self._tools]

    def available_tools(self) -> list[str]:
        return [tool.name for tool in self._tools]

    def get(self, name: str) -> ToolDefinition:
        """Look a tool up by exact name.

        Raises:
            UnknownToolError: If no tool has this name.
        """
        tool = self._by_name.get(name)
        if tool is None:
            raise UnknownToolError(name)
        return tool

    def execute(self, name: str, arguments: dict[str, Any]) -> Any:
        """Execute a tool by name with the given arguments.

        Args:
            name: Name of the tool to execute.
            arguments: Decoded argument object from the model.

        Returns:
            JSON-shaped result value.

        Raises:
            UnknownToolError: If the tool does not exist.
            ToolArgumentError: If the arguments fail validation.
            ToolExecutionError: If the handler raises.
        """
        tool = self.get(name)
        try:
            validated = tool.arguments_model.model_validate(arguments)
        except ValidationError as exc:
            raise ToolArgumentError(
                name, "; ".join(format_validation_errors(exc))
            ) from exc

        try:
            result = tool.handler(validated)
        except Exception as exc:
            logger.debug("Tool %s failed: %s", name, exc, exc_info=True)
            raise ToolExecutionError(name, exc) from exc

        if isinstance(result, (CallApiResult, ValidateSchemaResult)):
            return result.to_payload()
        if isinstance(result, BaseModel):
            return result.model_dump(by_alias=True)
        return result

    def close(self) -> None:
        """Close the HTTP client if the catalog created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> ToolCatalog:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
