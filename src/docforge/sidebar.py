"""Navigation sidebar construction from a document tree.

The sidebar is a post-order fold over the directory tree: each directory
yields an immutable, sorted tuple of :class:`SidebarLink` and
:class:`SidebarGroup` items, and a parent only includes a subdirectory whose
fold is non-empty.

Examples
--------
>>> from docforge.sidebar import to_slug
>>> to_slug("api/reference.md"), to_slug("guides/index.md"), to_slug("index.md")
('/api/reference', '/guides', '/')
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Final

from docforge.errors import NotFoundError
from docforge.frontmatter import INDEX_STEM, title_case
from docforge.logging import get_logger
from docforge.metadata import MetadataBlock, split_metadata

__all__ = [
    "INDEX_ORDER",
    "SidebarGroup",
    "SidebarItem",
    "SidebarLink",
    "build_sidebar",
    "sidebar_to_data",
    "to_slug",
]

logger = get_logger(__name__)

MARKDOWN_SUFFIX: Final[str] = ".md"
INDEX_FILENAME: Final[str] = f"{INDEX_STEM}{MARKDOWN_SUFFIX}"
INDEX_ORDER: Final[int] = -1
"""Rank of a promoted index page; lower than any order a document can declare."""


@dataclass(frozen=True, slots=True)
class SidebarLink:
    """Leaf entry pointing at a single page."""

    label: str
    link: str


@dataclass(frozen=True, slots=True)
class SidebarGroup:
    """Collapsible group of nested entries."""

    label: str
    items: tuple[SidebarItem, ...]
    collapsed: bool = False


type SidebarItem = SidebarLink | SidebarGroup


@dataclass(frozen=True, slots=True)
class _Ranked:
    item: SidebarItem
    order: int | None
    listing_name: str

    def sort_key(self) -> tuple[object, ...]:
        label = self.item.label
        if self.order is not None:
            return (0, self.order, label.casefold(), label, self.listing_name)
        return (1, 0, label.casefold(), label, self.listing_name)


def to_slug(relative_path: str | PurePosixPath) -> str:
    """Convert a base-relative document path to a site slug.

    The ``.md`` extension and a trailing ``/index`` segment are removed, a
    root ``index`` collapses to ``/`` and the result is lower-cased.
    """
    slug = PurePosixPath(relative_path).as_posix()
    slug = slug.removesuffix(MARKDOWN_SUFFIX)
    if slug == INDEX_STEM:
        slug = ""
    slug = slug.removesuffix(f"/{INDEX_STEM}")
    return f"/{slug.lower()}"


def _read_metadata(path: Path) -> MetadataBlock | None:
    block, _ = split_metadata(path.read_text(encoding="utf-8"))
    return block


def _relative_slug(path: Path, base_directory: Path) -> str:
    return to_slug(PurePosixPath(*path.relative_to(base_directory).parts))


def _scan(directory: Path) -> tuple[list[Path], list[Path], Path | None]:
    files: list[Path] = []
    dirs: list[Path] = []
    index: Path | None = None
    with os.scandir(directory) as entries:
        for entry in sorted(entries, key=lambda e: e.name):
            if entry.name.startswith("."):
                continue
            path = Path(entry.path)
            if entry.is_dir():
                dirs.append(path)
            elif entry.is_file() and entry.name.endswith(MARKDOWN_SUFFIX):
                if entry.name == INDEX_FILENAME:
                    index = path
                else:
                    files.append(path)
    return files, dirs, index


def _fold(directory: Path, base_directory: Path, *, is_root: bool) -> tuple[SidebarItem, ...]:
    files, dirs, index = _scan(directory)
    ranked: list[_Ranked] = []

    if index is not None and not is_root:
        block = _read_metadata(index)
        label = (block.title if block else None) or title_case(directory.name)
        ranked.append(
            _Ranked(
                SidebarLink(label=label, link=_relative_slug(index, base_directory)),
                INDEX_ORDER,
                index.name,
            )
        )

    for path in files:
        block = _read_metadata(path)
        label = (block.title if block else None) or title_case(path.stem)
        ranked.append(
            _Ranked(
                SidebarLink(label=label, link=_relative_slug(path, base_directory)),
                block.order if block else None,
                path.name,
            )
        )

    for subdir in dirs:
        children = _fold(subdir, base_directory, is_root=False)
        if children:
            ranked.append(
                _Ranked(SidebarGroup(label=title_case(subdir.name), items=children), None, subdir.name)
            )

    ranked.sort(key=_Ranked.sort_key)
    return tuple(entry.item for entry in ranked)


def build_sidebar(
    directory: Path,
    base_directory: Path | None = None,
) -> tuple[SidebarItem, ...]:
    """Build the ordered sidebar for the document tree under ``directory``.

    Parameters
    ----------
    directory : Path
        Directory to walk.
    base_directory : Path | None, optional
        Root that slugs are computed against. Defaults to ``directory``; the
        ``index.md`` of that root is left out of the result, while the index
        of any other directory is promoted to the first item.

    Returns
    -------
    tuple[SidebarItem, ...]
        Items sorted with explicitly ordered pages first (ascending), then
        everything else alphabetically by label. Directories without any
        markdown content are omitted.

    Raises
    ------
    NotFoundError
        If ``directory`` does not exist or is not a directory.
    OSError
        If a directory or document cannot be read.
    """
    base = base_directory if base_directory is not None else directory
    if not directory.is_dir():
        msg = f"Docs directory not found: {directory}"
        raise NotFoundError(msg, path=directory)

    items = _fold(directory, base, is_root=_same_directory(directory, base))
    logger.debug(
        "Sidebar built",
        extra={"operation": "sidebar", "directory": str(directory), "item_count": len(items)},
    )
    return items


def _same_directory(left: Path, right: Path) -> bool:
    return left.resolve() == right.resolve()


def sidebar_to_data(items: tuple[SidebarItem, ...]) -> list[dict[str, object]]:
    """Convert sidebar items to plain JSON-compatible data."""
    data: list[dict[str, object]] = []
    for item in items:
        if isinstance(item, SidebarGroup):
            data.append(
                {
                    "label": item.label,
                    "collapsed": item.collapsed,
                    "items": sidebar_to_data(item.items),
                }
            )
        else:
            data.append({"label": item.label, "link": item.link})
    return data
