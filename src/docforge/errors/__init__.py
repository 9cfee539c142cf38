"""Exception hierarchy and Problem Details support.

Examples
--------
>>> from docforge.errors import DocforgeError, ErrorCode
>>> error = DocforgeError("Operation failed", code=ErrorCode.RUNTIME_ERROR)
>>> error.to_problem_details()["type"]
'https://docforge.dev/problems/runtime-error'
"""

from __future__ import annotations

from docforge.errors.codes import BASE_TYPE_URI, ErrorCode, get_type_uri
from docforge.errors.exceptions import (
    DocforgeError,
    NotFoundError,
    SettingsError,
    ValidationError,
)

__all__ = [
    "BASE_TYPE_URI",
    "DocforgeError",
    "ErrorCode",
    "NotFoundError",
    "SettingsError",
    "ValidationError",
    "get_type_uri",
]
