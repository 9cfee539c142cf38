"""Rewriting of landing-document links into site paths.

The landing document (usually the repository README) links into the docs
folder with repository-relative paths such as ``docs/guide.md``. Once the
docs are published those links must point at site routes instead, e.g.
``/my-repo/guide/``. The document is parsed into a markdown syntax tree,
only ``link`` nodes are rewritten (images keep their targets) and the tree
is rendered back to markdown. A leading metadata block is carried over
verbatim.

Examples
--------
>>> from docforge.links import rewrite_url
>>> rewrite_url("./docs/API.md", "docs", "/my-repo")
'/my-repo/api/'
>>> rewrite_url("https://example.com", "docs", "/my-repo")
'https://example.com'
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from pathlib import Path
from typing import Any, cast

import mistune
from mistune.renderers.markdown import MarkdownRenderer

from docforge.logging import get_logger
from docforge.metadata import FRONTMATTER_RE

__all__ = [
    "iter_links",
    "rewrite_file",
    "rewrite_links",
    "rewrite_url",
]

logger = get_logger(__name__)

type Token = dict[str, Any]


def rewrite_url(url: str, docs_folder: str, base_path: str) -> str:
    """Map a docs-folder URL to its site route; return any other URL unchanged."""
    if "://" in url or url.startswith("#"):
        return url

    folder = docs_folder.rstrip("/")
    base = base_path.rstrip("/")
    match = re.fullmatch(rf"(?:\./)?{re.escape(folder)}/(?P<rest>.+)", url, flags=re.DOTALL)
    if match is None:
        return url

    rest = match.group("rest").removesuffix(".md").removesuffix("/index")
    return f"{base}/{rest.lower()}/"


def iter_links(tokens: list[Token]) -> Iterator[Token]:
    """Yield inline ``link`` nodes of a mistune syntax tree, depth first.

    Reference-style links are skipped: their targets live in the reference
    definitions, not on the node.
    """
    for token in tokens:
        if token.get("type") == "link" and not token.get("label"):
            yield token
        children = token.get("children")
        if isinstance(children, list):
            yield from iter_links(children)


def rewrite_links(content: str, docs_folder: str, base_path: str) -> str:
    """Rewrite links in ``content`` that point into ``docs_folder``.

    Parameters
    ----------
    content : str
        Markdown document, optionally starting with a metadata block.
    docs_folder : str
        Name of the docs folder as it appears in the document's links.
    base_path : str
        Base path of the published site.

    Returns
    -------
    str
        The re-rendered document. Formatting of untouched content may be
        normalised by the renderer.
    """
    frontmatter = ""
    body = content
    match = FRONTMATTER_RE.match(content)
    if match is not None:
        frontmatter = match.group(0)
        body = content[len(frontmatter) :]

    parser = mistune.create_markdown(renderer="ast")
    result, state = parser.parse(body)
    tokens = cast("list[Token]", result)

    rewritten = 0
    for node in iter_links(tokens):
        attrs = node.setdefault("attrs", {})
        url = attrs.get("url", "")
        new_url = rewrite_url(url, docs_folder, base_path)
        if new_url != url:
            attrs["url"] = new_url
            rewritten += 1

    logger.debug(
        "Rewrote landing document links",
        extra={"operation": "rewrite_links", "rewritten_count": rewritten},
    )
    return frontmatter + MarkdownRenderer()(tokens, state)


def rewrite_file(path: Path, docs_folder: str, base_path: str) -> None:
    """Apply :func:`rewrite_links` to the document at ``path`` in place."""
    content = path.read_text(encoding="utf-8")
    path.write_text(rewrite_links(content, docs_folder, base_path), encoding="utf-8")
