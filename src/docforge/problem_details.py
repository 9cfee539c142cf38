"""RFC 9457 Problem Details helpers.

Payloads are validated against an embedded JSON Schema 2020-12 document so
every error rendered by the CLI has the same shape.

Examples
--------
>>> from docforge.problem_details import ProblemDetailsParams, build_problem_details
>>> problem = build_problem_details(
...     ProblemDetailsParams(
...         problem_type="https://docforge.dev/problems/path-not-found",
...         title="NotFoundError",
...         status=404,
...         detail="Docs folder not found: docs",
...         instance="urn:docforge:build",
...     )
... )
>>> problem["status"]
404
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import cache
from typing import TYPE_CHECKING, Final, TypedDict, cast

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as SchemaValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "JsonValue",
    "ProblemDetails",
    "ProblemDetailsParams",
    "ProblemDetailsValidationError",
    "build_problem_details",
    "render_problem",
]

type JsonPrimitive = str | int | float | bool | None
type JsonValue = JsonPrimitive | list[JsonValue] | dict[str, JsonValue]

PROBLEM_DETAILS_SCHEMA: Final[dict[str, object]] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["type", "title", "status", "detail", "instance"],
    "properties": {
        "type": {"type": "string", "minLength": 1},
        "title": {"type": "string", "minLength": 1},
        "status": {"type": "integer", "minimum": 100, "maximum": 599},
        "detail": {"type": "string"},
        "instance": {"type": "string", "minLength": 1},
        "code": {"type": "string"},
        "extensions": {"type": "object"},
    },
    "additionalProperties": False,
}


class ProblemDetails(TypedDict, total=False):
    """RFC 9457 Problem Details payload."""

    type: str
    title: str
    status: int
    detail: str
    instance: str
    code: str
    extensions: dict[str, JsonValue]


class ProblemDetailsValidationError(ValueError):
    """Raised when a payload does not satisfy the Problem Details schema."""


@dataclass(slots=True)
class ProblemDetailsParams:
    """Parameters used to construct a Problem Details payload."""

    problem_type: str
    title: str
    status: int
    detail: str
    instance: str
    code: str | None = None
    extensions: Mapping[str, JsonValue] | None = None


@cache
def _validator() -> Draft202012Validator:
    return Draft202012Validator(PROBLEM_DETAILS_SCHEMA)


def build_problem_details(params: ProblemDetailsParams, /) -> ProblemDetails:
    """Build and validate a Problem Details payload.

    Parameters
    ----------
    params : ProblemDetailsParams
        Fields of the payload.

    Returns
    -------
    ProblemDetails
        Payload with ``type``, ``title``, ``status``, ``detail`` and
        ``instance`` plus the optional ``code`` and ``extensions``.

    Raises
    ------
    ProblemDetailsValidationError
        If the assembled payload violates the schema.
    """
    payload: dict[str, object] = {
        "type": params.problem_type,
        "title": params.title,
        "status": params.status,
        "detail": params.detail,
        "instance": params.instance,
    }
    if params.code is not None:
        payload["code"] = params.code
    if params.extensions:
        payload["extensions"] = dict(params.extensions)

    try:
        _validator().validate(payload)
    except SchemaValidationError as exc:
        msg = f"Invalid Problem Details payload: {exc.message}"
        raise ProblemDetailsValidationError(msg) from exc
    return cast("ProblemDetails", payload)


def render_problem(problem: ProblemDetails, *, indent: int | None = 2) -> str:
    """Serialise ``problem`` to JSON text."""
    return json.dumps(problem, indent=indent, default=str)
