"""Agent toolkit: the four API-testing tools and their catalog.

Provides tool definitions, per-tool argument/result records, response
schemas, and the ToolCatalog dispatcher.
"""

from agenteval.toolkit.definitions import (
    FINAL_REPORT_TOOL,
    TEST_IDS,
    call_api,
    generate_test_ids,
    get_all_tools,
    validate_schema,
)
from agenteval.toolkit.executor import ToolCatalog
from agenteval.toolkit.models import (
    CallApiArgs,
    CallApiResult,
    FinalReportArgs,
    GenerateTestIdsArgs,
    ToolDefinition,
    ValidateSchemaArgs,
    ValidateSchemaResult,
)
from agenteval.toolkit.schemas import (
    ErrorRecord,
    SchemaCheck,
    UserRecord,
    schema_for_status,
    validate_payload,
)

__all__ = [
    "ToolCatalog",
    "ToolDefinition",
    "get_all_tools",
    "generate_test_ids",
    "call_api",
    "validate_schema",
    "FINAL_REPORT_TOOL",
    "TEST_IDS",
    "GenerateTestIdsArgs",
    "CallApiArgs",
    "CallApiResult",
    "ValidateSchemaArgs",
    "ValidateSchemaResult",
    "FinalReportArgs",
    "UserRecord",
    "ErrorRecord",
    "SchemaCheck",
    "schema_for_status",
    "validate_payload",
]
