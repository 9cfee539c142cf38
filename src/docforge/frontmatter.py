"""Title inference for markdown documents.

Every document processed here ends up with a ``title`` in its leading
metadata block. A title already declared in the block is never touched, so
processing is idempotent. Otherwise the title is taken from the first
level-1 heading, or derived from the file name.

Examples
--------
>>> from docforge.frontmatter import infer_title_text
>>> infer_title_text("# Install\\n\\nSteps.\\n", fallback="Ignored")
'---\\ntitle: "Install"\\n---\\n\\n# Install\\n\\nSteps.\\n'
"""

from __future__ import annotations

import os
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Final

from docforge.errors import NotFoundError
from docforge.logging import get_logger
from docforge.metadata import split_metadata

__all__ = [
    "extract_first_heading",
    "infer_title_text",
    "is_hidden",
    "iter_markdown_files",
    "process_directory",
    "process_file",
    "title_case",
    "title_from_filename",
]

logger = get_logger(__name__)

INDEX_STEM: Final[str] = "index"
HOME_TITLE: Final[str] = "Home"

_HEADING_RE: Final[re.Pattern[str]] = re.compile(r"^#[ \t]+(?P<text>.+?)[ \t]*$")
_FENCE_RE: Final[re.Pattern[str]] = re.compile(r"^[ ]{0,3}(?P<fence>`{3,}|~{3,})")
_OPENING_DELIMITER_RE: Final[re.Pattern[str]] = re.compile(r"\A---\r?\n")
_WORD_START_RE: Final[re.Pattern[str]] = re.compile(r"\b\w")


def title_case(name: str) -> str:
    """Turn a slug-like name into a display title.

    Hyphens and underscores become spaces and the first letter of every word
    is upper-cased; the rest of each word is left as written.

    >>> title_case("getting-started_guide")
    'Getting Started Guide'
    >>> title_case("api")
    'Api'
    """
    spaced = name.replace("-", " ").replace("_", " ")
    return _WORD_START_RE.sub(lambda match: match.group(0).upper(), spaced)


def title_from_filename(path: Path, root: Path | None = None) -> str:
    """Derive a title from ``path``'s file name.

    A file named ``index`` takes its parent directory's name instead, or
    ``"Home"`` when that parent is ``root`` (or has no usable name).
    """
    if path.stem.lower() != INDEX_STEM:
        return title_case(path.stem)
    parent = path.parent
    if root is not None and _same_path(parent, root):
        return HOME_TITLE
    if parent.name in {"", ".", ".."}:
        return HOME_TITLE
    return title_case(parent.name)


def _same_path(left: Path, right: Path) -> bool:
    return os.path.normcase(left.resolve()) == os.path.normcase(right.resolve())


def extract_first_heading(body: str) -> str | None:
    """Return the text of the first level-1 ATX heading outside code fences."""
    fence: str | None = None
    for line in body.splitlines():
        fence_match = _FENCE_RE.match(line)
        if fence_match is not None:
            marker = fence_match.group("fence")
            if fence is None:
                fence = marker
            elif marker[0] == fence[0] and len(marker) >= len(fence):
                fence = None
            continue
        if fence is not None:
            continue
        heading = _HEADING_RE.match(line)
        if heading is not None:
            return heading.group("text")
    return None


def infer_title_text(content: str, *, fallback: str) -> str:
    """Return ``content`` with a title guaranteed in its metadata block.

    Parameters
    ----------
    content : str
        Raw document text.
    fallback : str
        Title used when the body has no level-1 heading.

    Returns
    -------
    str
        ``content`` itself when a title is already declared, otherwise the
        document with a ``title`` line injected as the first key of the
        existing block or a new block prepended.
    """
    block, body = split_metadata(content)
    if block is not None and block.title is not None:
        return content

    title = extract_first_heading(body) or fallback
    title_line = f'title: "{_escape(title)}"\n'

    if block is not None:
        return _OPENING_DELIMITER_RE.sub(lambda _: f"---\n{title_line}", content, count=1)
    return f"---\n{title_line}---\n\n{content}"


def _escape(title: str) -> str:
    return title.replace("\\", "\\\\").replace('"', '\\"')


def process_file(path: Path, *, root: Path | None = None) -> bool:
    """Ensure the document at ``path`` declares a title.

    Parameters
    ----------
    path : Path
        Markdown document, rewritten in place when a title is injected.
    root : Path | None, optional
        Root of the document tree, used to name a root ``index`` "Home".

    Returns
    -------
    bool
        ``True`` when the file was rewritten.

    Raises
    ------
    OSError
        If the document cannot be read or written.
    """
    content = path.read_text(encoding="utf-8")
    updated = infer_title_text(content, fallback=title_from_filename(path, root))
    if updated == content:
        logger.debug(
            "Title already declared",
            extra={"operation": "frontmatter", "path": str(path), "status": "skipped"},
        )
        return False
    path.write_text(updated, encoding="utf-8")
    logger.debug("Injected title", extra={"operation": "frontmatter", "path": str(path)})
    return True


def is_hidden(path: Path, root: Path) -> bool:
    """Return whether any segment of ``path`` below ``root`` starts with a dot."""
    return any(part.startswith(".") for part in path.relative_to(root).parts)


def iter_markdown_files(directory: Path) -> list[Path]:
    """Return every visible ``*.md`` file under ``directory`` in sorted order.

    Dot-files and anything below a dot-directory are skipped, matching the
    entries the sidebar publishes.
    """
    return sorted(
        path
        for path in directory.rglob("*.md")
        if path.is_file() and not is_hidden(path, directory)
    )


def process_directory(directory: Path, *, max_workers: int = 1) -> int:
    """Ensure every markdown document under ``directory`` declares a title.

    Files are independent of each other, so they are processed on a thread
    pool when ``max_workers`` is greater than one. The first failure is
    re-raised after the pool drains.

    Parameters
    ----------
    directory : Path
        Root of the document tree.
    max_workers : int, optional
        Number of worker threads. Defaults to 1 (sequential).

    Returns
    -------
    int
        Number of files rewritten.

    Raises
    ------
    NotFoundError
        If ``directory`` does not exist or is not a directory.
    """
    if not directory.is_dir():
        msg = f"Docs directory not found: {directory}"
        raise NotFoundError(msg, path=directory)

    files = iter_markdown_files(directory)
    if max_workers <= 1 or len(files) <= 1:
        changed = sum(process_file(path, root=directory) for path in files)
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            changed = sum(pool.map(lambda path: process_file(path, root=directory), files))

    logger.info(
        "Frontmatter inference complete",
        extra={
            "operation": "frontmatter",
            "directory": str(directory),
            "file_count": len(files),
            "changed_count": changed,
        },
    )
    return changed
