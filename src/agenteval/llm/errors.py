"""Model gateway error hierarchy.

All gateway errors inherit from AgentEvalError for consistent exception handling.
"""

from __future__ import annotations

from agenteval.exceptions import AgentEvalError


class ModelGatewayError(AgentEvalError):
    """Base for all model gateway errors."""


class LLMConfigError(ModelGatewayError):
    """Missing or invalid LLM configuration (e.g., no API key)."""


class LLMRateLimitError(ModelGatewayError):
    """Rate limited by the API (429).

    Attributes:
        retry_after: Seconds to wait before retrying (from Retry-After header),
            or None if not provided.
    """

    def __init__(self, message: str = "Rate limited", retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        if retry_after is not None:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message)


class LLMAuthError(ModelGatewayError):
    """Authentication failed (401/403)."""


class LLMResponseError(ModelGatewayError):
    """Unexpected response format from the LLM API."""


class LLMTransportError(ModelGatewayError):
    """Non-success status or network failure after retries were exhausted.

    Attributes:
        status_code: HTTP status of the failed response, or None for
            connection-level failures.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
