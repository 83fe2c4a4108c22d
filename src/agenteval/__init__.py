"""AgentEval: run an LLM tool-calling agent against a REST endpoint and score it.

The agent tests a users endpoint with a fixed toolset and leaves a trace of
every tool call; the evaluator scores that trace against an expected
workflow and produces a structured report.
"""

from agenteval._version import __version__

# Agent loop
from agenteval.agent import (
    AgentConfig,
    AgentLoop,
    AgentRunResult,
    AgentState,
    StopReason,
    TraceRecorder,
    TraceStep,
    run_agent,
)

# Configuration
from agenteval.config import (
    AgentEvalConfig,
    EndpointSettings,
    EvaluationSettings,
    LLMSettings,
    build_llm_client,
)

# Evaluation
from agenteval.evaluation import (
    CheckResult,
    EvaluationReport,
    EvaluationScores,
    ExpectedWorkflowSpec,
    WorkflowEvaluator,
    evaluate_trace,
)

# Exceptions
from agenteval.exceptions import (
    AgentEvalError,
    ArtifactError,
    ConfigError,
    ToolArgumentError,
    ToolError,
    ToolExecutionError,
    UnknownToolError,
)
from agenteval.llm import (
    AzureOpenAIClient,
    LLMAuthError,
    LLMClient,
    LLMConfigError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTransportError,
    ModelGatewayError,
    OpenAIClient,
)

# Wire records
from agenteval.protocols import Message, ModelResponse, TokenUsage, ToolInvocation

# Artifacts
from agenteval.reporting import (
    load_report_dict,
    load_trace,
    render_html,
    save_html_report,
    save_report,
    save_trace,
)

# Tools
from agenteval.toolkit import ToolCatalog, ToolDefinition

__all__ = [
    "__version__",
    # Agent
    "AgentLoop",
    "AgentConfig",
    "AgentRunResult",
    "AgentState",
    "StopReason",
    "TraceRecorder",
    "TraceStep",
    "run_agent",
    # Configuration
    "AgentEvalConfig",
    "LLMSettings",
    "EndpointSettings",
    "EvaluationSettings",
    "build_llm_client",
    # Evaluation
    "WorkflowEvaluator",
    "evaluate_trace",
    "ExpectedWorkflowSpec",
    "CheckResult",
    "EvaluationScores",
    "EvaluationReport",
    # Exceptions
    "AgentEvalError",
    "ConfigError",
    "ArtifactError",
    "ToolError",
    "UnknownToolError",
    "ToolArgumentError",
    "ToolExecutionError",
    "ModelGatewayError",
    "LLMConfigError",
    "LLMAuthError",
    "LLMRateLimitError",
    "LLMResponseError",
    "LLMTransportError",
    # LLM
    "LLMClient",
    "OpenAIClient",
    "AzureOpenAIClient",
    # Wire records
    "Message",
    "ModelResponse",
    "TokenUsage",
    "ToolInvocation",
    # Artifacts
    "save_trace",
    "load_trace",
    "save_report",
    "load_report_dict",
    "render_html",
    "save_html_report",
    # Tools
    "ToolCatalog",
    "ToolDefinition",
]
