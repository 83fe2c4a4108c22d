"""Tool definitions for the API-testing agent.

Each tool definition includes an action-oriented description, JSON Schema
parameters, a pydantic arguments model and a handler bound to the HTTP
client passed in. Catalog order is the order returned by
``get_all_tools`` and is what the model sees.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from agenteval.toolkit.models import (
    CallApiArgs,
    CallApiResult,
    FinalReportArgs,
    GenerateTestIdsArgs,
    ToolDefinition,
    ValidateSchemaArgs,
    ValidateSchemaResult,
)
from agenteval.toolkit.schemas import SchemaKind, schema_for_status, validate_payload

logger = logging.getLogger(__name__)

FINAL_REPORT_TOOL = "final_report"

# Valid range (1, 50), boundary (100), and known-invalid ids (-1, 999).
TEST_IDS: tuple[int, ...] = (1, 50, 100, -1, 999)

NETWORK_ERROR_MESSAGE = "Network error or server not running"
PARSE_ERROR_MESSAGE = "Failed to parse response"


def generate_test_ids() -> list[int]:
    """Return the fixed, ordered list of test ids."""
    return list(TEST_IDS)


def call_api(client: httpx.Client, method: str, url: str) -> CallApiResult:
    """Call the endpoint and classify the response against its schema.

    Never raises: transport failures and unparseable bodies both become
    status-0, schema-invalid results.
    """
    try:
        response = client.request(
            method, url, headers={"Content-Type": "application/json"}
        )
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.info("callApi %s %s failed: %s", method, url, exc)
        return CallApiResult(
            status=0,
            data={"error": str(exc)},
            schema_valid=False,
            schema_errors=[NETWORK_ERROR_MESSAGE],
        )

    try:
        body = response.json()
    except ValueError as exc:
        logger.info(
            "callApi %s %s returned an unparseable body (HTTP %d)",
            method,
            url,
            response.status_code,
        )
        return CallApiResult(
            status=0,
            data={"error": PARSE_ERROR_MESSAGE},
            schema_valid=False,
            schema_errors=[str(exc)],
        )

    kind = schema_for_status(response.status_code)
    if kind is None:
        return CallApiResult(
            status=response.status_code, data=body, schema_valid=False
        )
    check = validate_payload(body, kind)
    return CallApiResult(
        status=response.status_code,
        data=body,
        schema_valid=check.valid,
        schema_errors=list(check.errors) or None,
    )


def validate_schema(data: Any, expected_type: SchemaKind) -> ValidateSchemaResult:
    """Re-run the callApi schema check on arbitrary data."""
    check = validate_payload(data, expected_type)
    return ValidateSchemaResult(valid=check.valid, errors=list(check.errors) or None)


def get_all_tools(client: httpx.Client) -> list[ToolDefinition]:
    """Build the four tool definitions.

    Args:
        client: HTTP client the callApi tool sends requests through.

    Returns:
        generateTestIds, callApi, validateSchema and final_report, in order.
    """
    return [
        ToolDefinition(
            name="generateTestIds",
            description=(
                "Generate a list of test IDs to use for API testing. Returns "
                "valid IDs (1-100) and invalid IDs to test error handling."
            ),
            parameters={
                "type": "object",
                "properties": {},
                "required": [],
            },
            arguments_model=GenerateTestIdsArgs,
            handler=lambda args: generate_test_ids(),
        ),
        ToolDefinition(
            name="callApi",
            description=(
                "Call the user API endpoint with a specific HTTP method and URL. "
                "Returns the status code, response data, and schema validation "
                "result."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "method": {
                        "type": "string",
                        "description": "HTTP method to use (GET, POST, etc.)",
                        "enum": ["GET", "POST", "PUT", "DELETE"],
                    },
                    "url": {
                        "type": "string",
                        "description": (
                            "Full URL to call (e.g., http://localhost:3000/users/1)"
                        ),
                    },
                },
                "required": ["method", "url"],
            },
            arguments_model=CallApiArgs,
            handler=lambda args: call_api(client, args.method, args.url),
        ),
        ToolDefinition(
            name="validateSchema",
            description=(
                "Validate that response data matches the expected JSON schema "
                "(user or error response)."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "data": {
                        "type": "object",
                        "description": "The response data to validate",
                    },
                    "expectedType": {
                        "type": "string",
                        "description": "Expected schema type",
                        "enum": ["user", "error"],
                    },
                },
                "required": ["data", "expectedType"],
            },
            arguments_model=ValidateSchemaArgs,
            handler=lambda args: validate_schema(args.data, args.expected_type),
        ),
        ToolDefinition(
            name=FINAL_REPORT_TOOL,
            description=(
                "Submit the final test report summarizing all API tests "
                "performed. Call this when all testing is complete."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "summary": {
                        "type": "string",
                        "description": "Overall summary of the testing results",
                    },
                    "totalTests": {
                        "type": "number",
                        "description": "Total number of API calls made",
                    },
                    "successCount": {
                        "type": "number",
                        "description": (
                            "Number of successful tests (200 responses with "
                            "valid schema)"
                        ),
                    },
                    "errorCount": {
                        "type": "number",
                        "description": (
                            "Number of expected error cases (404 responses "
                            "with valid error schema)"
                        ),
                    },
                    "failures": {
                        "type": "array",
                        "description": (
                            "List of any unexpected failures or schema "
                            "validation errors"
                        ),
                        "items": {"type": "string"},
                    },
                },
                "required": ["summary", "totalTests", "successCount", "errorCount"],
            },
            arguments_model=FinalReportArgs,
            handler=lambda args: args.model_dump(by_alias=True, exclude_unset=True),
        ),
    ]
