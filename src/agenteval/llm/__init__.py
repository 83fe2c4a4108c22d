"""Model gateway for AgentEval.

Provides OpenAI-compatible and Azure OpenAI HTTP clients, the pluggable
LLMClient protocol, and response parsing into ModelResponse.
"""

from agenteval.llm.client import AzureOpenAIClient, OpenAIClient, check_connection
from agenteval.llm.errors import (
    LLMAuthError,
    LLMConfigError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTransportError,
    ModelGatewayError,
)
from agenteval.llm.protocols import LLMClient, parse_response

__all__ = [
    "OpenAIClient",
    "AzureOpenAIClient",
    "LLMClient",
    "check_connection",
    "parse_response",
    "ModelGatewayError",
    "LLMConfigError",
    "LLMRateLimitError",
    "LLMAuthError",
    "LLMResponseError",
    "LLMTransportError",
]
