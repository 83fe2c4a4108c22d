"""AgentEval exception hierarchy.

All AgentEval-specific exceptions inherit from AgentEvalError.
LLM gateway errors live in agenteval.llm.errors and share the same root.
"""


class AgentEvalError(Exception):
    """Base exception for all AgentEval errors."""


class ConfigError(AgentEvalError):
    """Raised when configuration values are missing or malformed."""


class ArtifactError(AgentEvalError):
    """Raised when a trace or report file cannot be read or written."""


class ToolError(AgentEvalError):
    """Base for errors raised while dispatching a tool call."""

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        super().__init__(message)


class UnknownToolError(ToolError):
    """Raised when the model requests a tool that is not in the catalog."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(tool_name, f"Unknown tool: {tool_name}")


class ToolArgumentError(ToolError):
    """Raised when tool arguments cannot be parsed or fail validation.

    Validation is fail-closed: a missing required field rejects the call
    before the tool runs.
    """

    def __init__(self, tool_name: str, detail: str) -> None:
        self.detail = detail
        super().__init__(tool_name, f"Invalid arguments for {tool_name}: {detail}")


class ToolExecutionError(ToolError):
    """Raised when a tool handler fails unexpectedly."""

    def __init__(self, tool_name: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(
            tool_name, f"Tool {tool_name} failed: {type(cause).__name__}: {cause}"
        )
