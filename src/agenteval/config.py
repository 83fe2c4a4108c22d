"""Process configuration for AgentEval.

AgentEvalConfig is built once at process entry (usually via ``from_env``)
and passed explicitly to the LLM client, the callApi tool and the agent
loop. There is no module-level singleton.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

import httpx

from agenteval.exceptions import ConfigError
from agenteval.llm.client import AzureOpenAIClient, OpenAIClient

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2024-08-01-preview"
DEFAULT_DEPLOYMENT = "gpt-4o"
DEFAULT_BASE_URL = "http://localhost:3000"


@dataclass(frozen=True)
class LLMSettings:
    """Model gateway settings.

    Attributes:
        provider: ``"azure"`` (deployment URL + api-key header) or
            ``"openai"`` (any OpenAI-compatible base URL + bearer token).
        endpoint: Azure resource endpoint.
        api_key: Credential for the selected provider.
        api_version: Azure API version query parameter.
        deployment: Azure deployment name.
        base_url: OpenAI-compatible base URL.
        model: Model name for OpenAI-compatible providers.
        max_tokens: Completion token cap per model call.
        temperature: Sampling temperature (some models only support 1).
        timeout: HTTP timeout in seconds for model calls.
        max_retries: Transport-level attempts for retryable failures.
    """

    provider: Literal["azure", "openai"] = "azure"
    endpoint: str = ""
    api_key: str = ""
    api_version: str = DEFAULT_API_VERSION
    deployment: str = DEFAULT_DEPLOYMENT
    base_url: str = "https://api.openai.com/v1"
    model: str = DEFAULT_DEPLOYMENT
    max_tokens: int = 2000
    temperature: float = 1.0
    timeout: float = 120.0
    max_retries: int = 3

    @property
    def configured(self) -> bool:
        if self.provider == "azure":
            return bool(self.endpoint and self.api_key)
        return bool(self.api_key)


@dataclass(frozen=True)
class EndpointSettings:
    """Target endpoint under test."""

    base_url: str = DEFAULT_BASE_URL
    port: int = 3000
    timeout: float = 5.0


@dataclass(frozen=True)
class EvaluationSettings:
    """Agent run limits."""

    max_steps: int = 15


@dataclass(frozen=True)
class AgentEvalConfig:
    """Top-level configuration value."""

    llm: LLMSettings = field(default_factory=LLMSettings)
    endpoint: EndpointSettings = field(default_factory=EndpointSettings)
    evaluation: EvaluationSettings = field(default_factory=EvaluationSettings)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AgentEvalConfig:
        """Load configuration from environment variables with defaults.

        Azure credentials (``AZURE_OPENAI_*``) take precedence; when they
        are absent but ``AGENTEVAL_OPENAI_API_KEY`` is set, the
        OpenAI-compatible provider is selected instead.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Raises:
            ConfigError: If a numeric variable cannot be parsed.
        """
        env = os.environ if environ is None else environ

        endpoint = env.get("AZURE_OPENAI_ENDPOINT", "")
        azure_key = env.get("AZURE_OPENAI_API_KEY", "")
        openai_key = env.get("AGENTEVAL_OPENAI_API_KEY", "")

        provider: Literal["azure", "openai"] = "azure"
        if not (endpoint and azure_key) and openai_key:
            provider = "openai"
        elif not (endpoint and azure_key):
            logger.warning(
                "Azure OpenAI credentials not configured. Set AZURE_OPENAI_ENDPOINT "
                "and AZURE_OPENAI_API_KEY in .env"
            )

        deployment = env.get("AZURE_OPENAI_DEPLOYMENT_NAME", DEFAULT_DEPLOYMENT)
        llm = LLMSettings(
            provider=provider,
            endpoint=endpoint.rstrip("/"),
            api_key=azure_key if provider == "azure" else openai_key,
            api_version=env.get("AZURE_OPENAI_API_VERSION", DEFAULT_API_VERSION),
            deployment=deployment,
            base_url=env.get("AGENTEVAL_OPENAI_BASE_URL", "https://api.openai.com/v1"),
            model=env.get("AGENTEVAL_MODEL", deployment),
            timeout=_parse_number(env, "AGENTEVAL_TIMEOUT", 120.0, float),
        )

        port = _parse_number(env, "PORT", 3000, int)
        endpoint_settings = EndpointSettings(
            base_url=env.get("API_BASE_URL", f"http://localhost:{port}").rstrip("/"),
            port=port,
        )

        max_steps = _parse_number(env, "AGENTEVAL_MAX_STEPS", 15, int)
        if max_steps < 1:
            raise ConfigError(f"AGENTEVAL_MAX_STEPS must be >= 1, got {max_steps}")

        return cls(
            llm=llm,
            endpoint=endpoint_settings,
            evaluation=EvaluationSettings(max_steps=max_steps),
        )


def _parse_number(env: Mapping[str, str], key: str, default, kind):
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a valid {kind.__name__}, got {raw!r}") from None


def build_llm_client(
    settings: LLMSettings,
    transport: httpx.BaseTransport | None = None,
) -> OpenAIClient:
    """Create the gateway client for the configured provider.

    Raises:
        LLMConfigError: If the provider's credentials are missing.
    """
    if settings.provider == "openai":
        return OpenAIClient(
            api_key=settings.api_key,
            base_url=settings.base_url,
            default_model=settings.model,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            transport=transport,
        )
    return AzureOpenAIClient(
        endpoint=settings.endpoint,
        api_key=settings.api_key,
        deployment=settings.deployment,
        api_version=settings.api_version,
        timeout=settings.timeout,
        max_retries=settings.max_retries,
        transport=transport,
    )
