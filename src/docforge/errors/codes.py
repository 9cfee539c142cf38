"""Error code registry and type URIs for Problem Details.

Codes are stable kebab-case strings; the type URI of every code lives under
:data:`BASE_TYPE_URI`.

Examples
--------
>>> from docforge.errors.codes import ErrorCode, get_type_uri
>>> get_type_uri(ErrorCode.PATH_NOT_FOUND)
'https://docforge.dev/problems/path-not-found'
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

__all__ = [
    "BASE_TYPE_URI",
    "ErrorCode",
    "get_type_uri",
]

BASE_TYPE_URI: Final[str] = "https://docforge.dev/problems"


class ErrorCode(StrEnum):
    """Stable error codes for docforge exceptions.

    Attributes
    ----------
    INVALID_INPUT
        Caller supplied an invalid value or file.
    OVERRIDE_PARSE_ERROR
        The override document could not be parsed.
    THEME_DIRECTIVE_ERROR
        The theme export specifier or options literal is malformed.
    STYLESHEET_ERROR
        A custom stylesheet failed validation.
    PATH_NOT_FOUND
        A required input path does not exist.
    CONFIGURATION_ERROR
        Environment configuration failed validation.
    RUNTIME_ERROR
        Unclassified failure.
    """

    INVALID_INPUT = "invalid-input"
    OVERRIDE_PARSE_ERROR = "override-parse-error"
    THEME_DIRECTIVE_ERROR = "theme-directive-error"
    STYLESHEET_ERROR = "stylesheet-error"
    PATH_NOT_FOUND = "path-not-found"
    CONFIGURATION_ERROR = "configuration-error"
    RUNTIME_ERROR = "runtime-error"


def get_type_uri(code: ErrorCode) -> str:
    """Return the Problem Details type URI for ``code``."""
    return f"{BASE_TYPE_URI}/{code.value}"
