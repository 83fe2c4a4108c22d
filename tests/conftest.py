"""Shared test fixtures for agenteval.

Provides a tool catalog and HTTP client wired to the in-process users
endpoint, and an environment scrubbed of agenteval settings.
"""

import httpx
import pytest

from agenteval.mock_endpoint import mock_transport
from agenteval.toolkit import ToolCatalog

CONFIG_ENV_VARS = (
    "AZURE_OPENAI_ENDPOINT",
    "AZURE_OPENAI_API_KEY",
    "AZURE_OPENAI_API_VERSION",
    "AZURE_OPENAI_DEPLOYMENT_NAME",
    "AGENTEVAL_OPENAI_API_KEY",
    "AGENTEVAL_OPENAI_BASE_URL",
    "AGENTEVAL_MODEL",
    "AGENTEVAL_MAX_STEPS",
    "AGENTEVAL_TIMEOUT",
    "AGENTEVAL_LOG_LEVEL",
    "PORT",
    "API_BASE_URL",
)


@pytest.fixture
def catalog():
    """ToolCatalog whose callApi is served by the mock endpoint."""
    with ToolCatalog(transport=mock_transport()) as cat:
        yield cat


@pytest.fixture
def http_client():
    with httpx.Client(transport=mock_transport()) as client:
        yield client


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every agenteval configuration variable from the environment."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
