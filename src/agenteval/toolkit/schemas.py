"""Response schemas for the users endpoint.

The user and error shapes are strict pydantic models. ``validate_payload``
is the single schema check shared by the callApi and validateSchema tools.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, ValidationError

SchemaKind = Literal["user", "error"]


class UserRecord(BaseModel):
    """Body of a 200 response: exactly id, name and email."""

    model_config = ConfigDict(extra="forbid", strict=True)

    id: Union[int, float]
    name: str
    email: str


class ErrorRecord(BaseModel):
    """Body of a 404 response: a string ``error`` plus anything else."""

    model_config = ConfigDict(extra="allow", strict=True)

    error: str


_SCHEMAS: dict[str, type[BaseModel]] = {
    "user": UserRecord,
    "error": ErrorRecord,
}

_SCHEMA_BY_STATUS: dict[int, SchemaKind] = {
    200: "user",
    404: "error",
}


@dataclass(frozen=True)
class SchemaCheck:
    """Outcome of validating one payload."""

    valid: bool
    errors: tuple[str, ...] = ()


def schema_for_status(status: int) -> SchemaKind | None:
    """Return the schema a response with this status must match, if any."""
    return _SCHEMA_BY_STATUS.get(status)


def format_validation_errors(exc: ValidationError) -> tuple[str, ...]:
    """Render pydantic errors as ``"<field path>: <message>"`` strings."""
    rendered = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "(root)"
        rendered.append(f"{loc}: {err.get('msg', 'invalid')}")
    return tuple(rendered)


def validate_payload(data: Any, expected_type: SchemaKind) -> SchemaCheck:
    """Validate ``data`` against the named schema.

    Args:
        data: Decoded JSON value.
        expected_type: ``"user"`` or ``"error"``.

    Raises:
        KeyError: If ``expected_type`` names no schema.
    """
    model = _SCHEMAS[expected_type]
    try:
        model.model_validate(data)
    except ValidationError as exc:
        return SchemaCheck(valid=False, errors=format_validation_errors(exc))
    return SchemaCheck(valid=True)
