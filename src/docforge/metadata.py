"""Parsing of leading ``---`` metadata blocks.

A document may start with a block of ``key: value`` lines delimited by lines
containing exactly three hyphens. Values are bare, double-quoted or
single-quoted scalars. Lines that are not simple ``key: scalar`` pairs are
kept verbatim in :attr:`MetadataBlock.raw` but ignored by :attr:`fields`.

Examples
--------
>>> from docforge.metadata import split_metadata
>>> block, body = split_metadata('---\\ntitle: "Guide"\\norder: 2\\n---\\n\\n# Guide\\n')
>>> block.title, block.order, body
('Guide', 2, '\\n# Guide\\n')
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final

__all__ = [
    "FRONTMATTER_RE",
    "MetadataBlock",
    "parse_fields",
    "split_metadata",
]

FRONTMATTER_RE: Final[re.Pattern[str]] = re.compile(
    r"\A---\r?\n(?P<body>(?:.*?\r?\n)?)---\r?(?:\n|\Z)", re.DOTALL
)
_FIELD_RE: Final[re.Pattern[str]] = re.compile(
    r"""^(?P<key>[A-Za-z_][\w-]*):[ \t]*(?:"(?P<dq>(?:[^"\\]|\\.)*)"|'(?P<sq>[^']*)'|(?P<bare>.*?))[ \t]*$"""
)
_ORDER_RE: Final[re.Pattern[str]] = re.compile(r"\d+")


@dataclass(frozen=True, slots=True)
class MetadataBlock:
    """A parsed leading metadata block.

    Attributes
    ----------
    raw : str
        Exact text of the block including both delimiter lines and the
        newline terminating the closing delimiter, if any.
    fields : dict[str, str]
        Unquoted scalar values keyed by field name, first occurrence wins.
    """

    raw: str
    fields: dict[str, str] = field(default_factory=dict)

    @property
    def title(self) -> str | None:
        """Declared title, or ``None`` when absent or empty."""
        value = self.fields.get("title")
        return value or None

    @property
    def order(self) -> int | None:
        """Declared sidebar order when it is a non-negative integer."""
        value = self.fields.get("order")
        if value is None or not _ORDER_RE.fullmatch(value):
            return None
        return int(value)


def parse_fields(block_body: str) -> dict[str, str]:
    """Parse ``key: scalar`` lines, ignoring anything that does not fit."""
    fields: dict[str, str] = {}
    for line in block_body.splitlines():
        match = _FIELD_RE.match(line)
        if match is None:
            continue
        key = match.group("key")
        if key in fields:
            continue
        for group in ("dq", "sq", "bare"):
            value = match.group(group)
            if value is not None:
                fields[key] = _unquote(group, value)
                break
    return fields


def split_metadata(text: str) -> tuple[MetadataBlock | None, str]:
    """Split ``text`` into its metadata block (if any) and the remaining body."""
    match = FRONTMATTER_RE.match(text)
    if match is None:
        return None, text
    raw = match.group(0)
    return MetadataBlock(raw=raw, fields=parse_fields(match.group("body"))), text[len(raw) :]


def _unquote(group: str, value: str) -> str:
    if group == "dq":
        return re.sub(r"\\(.)", r"\1", value)
    if group == "sq":
        return value
    return value.strip()
