"""Typed exception hierarchy with Problem Details support.

All docforge exceptions inherit from :class:`DocforgeError`, which carries a
stable :class:`~docforge.errors.codes.ErrorCode`, a status and a context
mapping, and converts itself to an RFC 9457 payload.

Examples
--------
>>> from docforge.errors import NotFoundError
>>> try:
...     raise NotFoundError("Docs folder not found", path="docs")
... except NotFoundError as e:
...     details = e.to_problem_details(instance="urn:docforge:build")
>>> details["extensions"]["path"]
'docs'
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, cast

from docforge.errors.codes import ErrorCode, get_type_uri
from docforge.problem_details import ProblemDetailsParams, build_problem_details

if TYPE_CHECKING:
    from docforge.problem_details import JsonValue, ProblemDetails

__all__ = [
    "DocforgeError",
    "NotFoundError",
    "SettingsError",
    "ValidationError",
]


class DocforgeError(Exception):
    """Base exception for all docforge errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode, optional
        Stable error code. Defaults to ``ErrorCode.RUNTIME_ERROR``.
    http_status : int, optional
        Status reported in Problem Details payloads. Defaults to 500.
    cause : Exception | None, optional
        Underlying exception, chained as ``__cause__``.
    context : Mapping[str, object] | None, optional
        Additional structured context rendered as Problem Details extensions.
    """

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.RUNTIME_ERROR,
        http_status: int = 500,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status
        self.context: dict[str, object] = dict(context) if context else {}
        if cause is not None:
            self.__cause__ = cause

    def to_problem_details(
        self,
        instance: str | None = None,
        title: str | None = None,
    ) -> ProblemDetails:
        """Convert the error to an RFC 9457 Problem Details payload.

        Parameters
        ----------
        instance : str | None, optional
            URI identifying the occurrence. Defaults to ``urn:docforge:error``.
        title : str | None, optional
            Short summary. Defaults to the exception class name.

        Returns
        -------
        ProblemDetails
            Validated payload.
        """
        extensions = {key: _jsonable(value) for key, value in self.context.items()}
        return build_problem_details(
            ProblemDetailsParams(
                problem_type=get_type_uri(self.code),
                title=title or self.__class__.__name__,
                status=self.http_status,
                detail=self.message,
                instance=instance or "urn:docforge:error",
                code=self.code.value,
                extensions=cast("Mapping[str, JsonValue] | None", extensions or None),
            )
        )

    def __str__(self) -> str:
        base = f"{self.__class__.__name__}[{self.code.value}]: {self.message}"
        if self.__cause__:
            base += f" (caused by: {type(self.__cause__).__name__})"
        return base


def _jsonable(value: object) -> object:
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    return value


class ValidationError(DocforgeError):
    """Raised when caller input is malformed.

    Covers malformed override documents, wrong file extensions, missing
    required files and invalid theme directives. Raised before any file is
    mutated where feasible.
    """

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.INVALID_INPUT,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, code=code, http_status=400, cause=cause, context=context)


class NotFoundError(DocforgeError):
    """Raised when a required input path does not exist.

    The offending path is available as :attr:`path` and in the Problem
    Details extensions.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | Path,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.PATH_NOT_FOUND,
            http_status=404,
            cause=cause,
            context={"path": str(path)},
        )
        self.path = Path(path)


class SettingsError(DocforgeError):
    """Raised when environment-driven settings fail validation."""

    def __init__(
        self,
        message: str,
        *,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.CONFIGURATION_ERROR,
            http_status=500,
            cause=cause,
            context=context,
        )
