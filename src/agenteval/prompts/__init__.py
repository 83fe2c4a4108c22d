"""Prompt templates used by the agent loop."""

from agenteval.prompts.api_testing import (
    API_TESTING_SYSTEM_TEMPLATE,
    DEFAULT_TASK_PROMPT,
    build_system_prompt,
)

__all__ = [
    "API_TESTING_SYSTEM_TEMPLATE",
    "DEFAULT_TASK_PROMPT",
    "build_system_prompt",
]
