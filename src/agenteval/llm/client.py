"""Built-in OpenAI-compatible httpx clients with tenacity retry.

Provides sync HTTP clients for OpenAI-compatible and Azure OpenAI chat
completion APIs. Configuration comes from constructor arguments; the
process entry point builds them from an AgentEvalConfig.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
import tenacity

from agenteval.llm.errors import (
    LLMAuthError,
    LLMConfigError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTransportError,
)
from agenteval.llm.protocols import LLMClient, parse_response

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
_AUTH_ERROR_STATUS_CODES = {401, 403}


def _is_retryable(exc: BaseException) -> bool:
    """Check if an exception is retryable.

    Retryable: 429, 500, 502, 503, 504, connection errors.
    Not retryable: 401, 403, 400, other client errors.
    """
    if isinstance(exc, LLMAuthError):
        return False
    if isinstance(exc, LLMRateLimitError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout))


class OpenAIClient:
    """Sync httpx client for OpenAI-compatible chat completions.

    Implements the LLMClient protocol. Supports retry with exponential
    backoff for transient errors (429, 5xx). Fails immediately on
    authentication errors (401, 403). Every failure leaves ``chat()`` as a
    ModelGatewayError subclass.

    Usage::

        with OpenAIClient(api_key="sk-...") as client:
            response = client.chat([{"role": "user", "content": "Hello"}])
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        default_model: str = "gpt-4o",
        timeout: float = 120.0,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the OpenAI-compatible client.

        Args:
            api_key: API key sent as a bearer token.
            base_url: API base URL.
            default_model: Default model for chat requests.
            timeout: Request timeout in seconds.
            max_retries: Maximum number of attempts for retryable errors.
            transport: Optional httpx transport (tests use MockTransport).

        Raises:
            LLMConfigError: If no API key is provided.
        """
        if not api_key:
            raise LLMConfigError(
                "No API key provided. Set AGENTEVAL_OPENAI_API_KEY in the "
                "environment or .env file."
            )
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._default_model = default_model
        self._timeout = timeout
        self._max_retries = max_retries
        self._client = httpx.Client(
            timeout=timeout,
            headers=self._headers(),
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    def _completions_url(self) -> str:
        return f"{self._base_url}/chat/completions"

    def _build_payload(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str | None,
        temperature: float | None,
        max_tokens: int | None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model or self._default_model,
            "messages": messages,
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_completion_tokens"] = max_tokens
        if kwargs.get("tools") and "tool_choice" not in kwargs:
            payload["tool_choice"] = "auto"
        payload.update(kwargs)
        return payload

    def chat(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> dict:
        """Send one chat completion request, retrying transient failures.

        The payload is built once and re-posted on each attempt. Attempts
        are capped per instance by ``max_retries``.

        Args:
            messages: OpenAI-format message dicts.
            model: Model override. Falls back to default_model.
            temperature: Sampling temperature.
            max_tokens: Completion token cap, sent as ``max_completion_tokens``.
            **kwargs: Extra payload fields (``tools``, ``tool_choice``...).

        Returns:
            The decoded completion, guaranteed to carry ``choices``.

        Raises:
            LLMAuthError: On 401/403, never retried.
            LLMRateLimitError: On 429 once attempts run out.
            LLMResponseError: On a body that is not a completion.
            LLMTransportError: On any other HTTP or network failure.
        """
        payload = self._build_payload(
            messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )
        attempts = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=(
                tenacity.wait_exponential(multiplier=1, min=1, max=30)
                + tenacity.wait_random(0, 2)
            ),
            stop=tenacity.stop_after_attempt(self._max_retries),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            return attempts(self._post, payload)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise LLMTransportError(
                f"Model gateway returned HTTP {status}: {exc.response.text}",
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            raise LLMTransportError(f"Model gateway unreachable: {exc}") from exc

    def _post(self, payload: dict[str, Any]) -> dict:
        url = self._completions_url()
        logger.debug(
            "POST %s (%d messages, %d tools)",
            url,
            len(payload["messages"]),
            len(payload.get("tools") or []),
        )
        response = self._client.post(url, json=payload)
        _check_status(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise LLMResponseError(f"Completion body is not JSON: {exc}") from exc
        if not isinstance(data, dict) or "choices" not in data:
            raise LLMResponseError(f"Completion has no 'choices': {data!r:.500}")
        return data

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> OpenAIClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class AzureOpenAIClient(OpenAIClient):
    """OpenAIClient variant for Azure OpenAI deployments.

    Requests go to
    ``{endpoint}/openai/deployments/{deployment}/chat/completions?api-version=...``
    and authenticate with the ``api-key`` header. The deployment selects
    the model, so no ``model`` field is sent unless one is given per call.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        deployment: str = "gpt-4o",
        api_version: str = "2024-08-01-preview",
        timeout: float = 120.0,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not endpoint or not api_key:
            raise LLMConfigError(
                "Azure OpenAI credentials not configured. Set "
                "AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY."
            )
        self._deployment = deployment
        self._api_version = api_version
        super().__init__(
            api_key=api_key,
            base_url=endpoint,
            default_model=deployment,
            timeout=timeout,
            max_retries=max_retries,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "api-key": self._api_key,
        }

    def _completions_url(self) -> str:
        return (
            f"{self._base_url}/openai/deployments/{self._deployment}"
            f"/chat/completions?api-version={self._api_version}"
        )

    def _build_payload(self, messages, *, model, temperature, max_tokens, **kwargs):
        payload = super()._build_payload(
            messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )
        if model is None:
            payload.pop("model", None)
        return payload


def check_connection(client: LLMClient) -> bool:
    """Send a trivial prompt and report whether the model answered normally.

    Returns:
        True if the gateway replied with finish reason ``stop``.
    """
    try:
        response = client.chat([{"role": "user", "content": "Reply with OK"}])
        return parse_response(response).finish_reason == "stop"
    except Exception:
        logger.warning("LLM connection test failed", exc_info=True)
        return False


def _retry_after(response: httpx.Response) -> float | None:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _check_status(response: httpx.Response) -> None:
    """Map gateway error statuses onto the exception types the retry policy reads."""
    status = response.status_code
    if status in _AUTH_ERROR_STATUS_CODES:
        raise LLMAuthError(f"Gateway rejected credentials: HTTP {status} - {response.text}")
    if status == 429:
        raise LLMRateLimitError(
            f"Gateway rate limit: HTTP 429 - {response.text}",
            retry_after=_retry_after(response),
        )
    response.raise_for_status()
