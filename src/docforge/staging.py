"""Staging of documentation sources into a scaffolded site project.

These helpers feed the compiler: markdown documents are copied into the
project's content directory, the repository README can become the landing
page, a logo is placed under ``public/`` and custom stylesheets are copied
into the project's styles directory.
"""

from __future__ import annotations

import shutil
from collections import Counter
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Final

from docforge.errors import ErrorCode, NotFoundError, ValidationError
from docforge.frontmatter import INDEX_STEM, iter_markdown_files
from docforge.links import rewrite_file
from docforge.logging import get_logger
from docforge.settings import DocforgeSettings, load_settings

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = [
    "DocsStagingResult",
    "StylesheetPlan",
    "copy_docs",
    "copy_markdown_tree",
    "parse_stylesheet_list",
    "plan_stylesheets",
    "stage_stylesheets",
]

logger = get_logger(__name__)

README_FILENAME: Final[str] = "README.md"
PUBLIC_DIRNAME: Final[str] = "public"
STYLESHEET_SUFFIX: Final[str] = ".css"


@dataclass(frozen=True, slots=True)
class DocsStagingResult:
    """Summary of a :func:`copy_docs` run."""

    file_count: int
    readme_copied: bool = False
    logo_path: Path | None = None


def copy_markdown_tree(source: Path, destination: Path) -> int:
    """Copy every ``*.md`` file under ``source`` into ``destination``.

    Directory layout is preserved; other files and hidden entries are
    ignored.

    Returns
    -------
    int
        Number of markdown files copied.
    """
    count = 0
    for path in iter_markdown_files(source):
        target = destination / path.relative_to(source)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(path, target)
        count += 1
    return count


def copy_docs(
    docs_path: Path,
    project_dir: Path,
    *,
    workspace_dir: Path,
    readme: bool = False,
    logo: str | None = None,
    base_path: str = "/",
    settings: DocforgeSettings | None = None,
) -> DocsStagingResult:
    """Stage documentation sources into ``project_dir``.

    Parameters
    ----------
    docs_path : Path
        Docs folder inside ``workspace_dir``.
    project_dir : Path
        Scaffolded site project.
    workspace_dir : Path
        Repository root that relative paths are resolved against.
    readme : bool, optional
        Copy ``README.md`` from the workspace as the landing page, rewriting
        its links into the docs folder to site routes.
    logo : str | None, optional
        Logo path relative to ``workspace_dir``, copied into ``public/``.
    base_path : str, optional
        Site base path used when rewriting README links.
    settings : DocforgeSettings | None, optional
        Runtime settings; loaded from the environment when omitted.

    Returns
    -------
    DocsStagingResult
        What was copied.

    Raises
    ------
    NotFoundError
        If ``docs_path`` is not a directory.
    """
    runtime = settings or load_settings()
    source = docs_path if docs_path.is_absolute() else workspace_dir / docs_path
    if not source.is_dir():
        msg = f"Docs folder not found: {source}"
        raise NotFoundError(msg, path=source)

    content_dir = project_dir / runtime.docs_subdir
    content_dir.mkdir(parents=True, exist_ok=True)
    file_count = copy_markdown_tree(source, content_dir)
    if file_count == 0:
        logger.warning(
            "No markdown files found in docs folder",
            extra={"operation": "copy_docs", "path": str(source)},
        )
    else:
        logger.info(
            "Copied markdown files from docs folder",
            extra={"operation": "copy_docs", "file_count": file_count},
        )

    readme_copied = False
    if readme:
        readme_copied = _stage_readme(source, content_dir, workspace_dir, base_path)

    logo_path = _stage_logo(logo, project_dir, workspace_dir) if logo else None
    return DocsStagingResult(
        file_count=file_count, readme_copied=readme_copied, logo_path=logo_path
    )


def _stage_readme(source: Path, content_dir: Path, workspace_dir: Path, base_path: str) -> bool:
    readme_path = workspace_dir / README_FILENAME
    if not readme_path.is_file():
        logger.warning(
            "README requested but not found in workspace root",
            extra={"operation": "copy_docs", "path": str(readme_path)},
        )
        return False

    target = content_dir / f"{INDEX_STEM}.md"
    shutil.copyfile(readme_path, target)
    try:
        docs_folder = PurePosixPath(*source.resolve().relative_to(workspace_dir.resolve()).parts)
    except ValueError:
        docs_folder = PurePosixPath(source.name)
    rewrite_file(target, docs_folder.as_posix(), base_path)
    logger.info("Copied README.md as index page", extra={"operation": "copy_docs"})
    return True


def _stage_logo(logo: str, project_dir: Path, workspace_dir: Path) -> Path | None:
    source = workspace_dir / logo
    if not source.is_file():
        logger.warning(
            "Logo file not found", extra={"operation": "copy_docs", "path": str(source)}
        )
        return None
    public_dir = project_dir / PUBLIC_DIRNAME
    public_dir.mkdir(parents=True, exist_ok=True)
    target = public_dir / source.name
    shutil.copyfile(source, target)
    logger.info("Copied logo", extra={"operation": "copy_docs", "path": str(target)})
    return target


def parse_stylesheet_list(raw: str | Sequence[str] | None) -> list[str]:
    """Split a comma-separated stylesheet list, dropping blank entries."""
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else list(raw)
    return [part.strip() for part in parts if part.strip()]


def _destination_names(paths: Sequence[str]) -> list[str]:
    basenames = [PurePosixPath(path).name for path in paths]
    counts = Counter(basenames)
    names = [
        f"{PurePosixPath(path).parent.name}-{name}" if counts[name] > 1 else name
        for path, name in zip(paths, basenames, strict=True)
    ]
    collisions = sorted(name for name, count in Counter(names).items() if count > 1)
    if collisions:
        msg = f"Custom CSS files collide after disambiguation: {', '.join(collisions)}"
        raise ValidationError(
            msg, code=ErrorCode.STYLESHEET_ERROR, context={"collisions": collisions}
        )
    return names


@dataclass(frozen=True, slots=True)
class StylesheetPlan:
    """A validated stylesheet and where it will be staged."""

    source: Path
    name: str
    config_path: str


def plan_stylesheets(
    custom_css: str | Sequence[str] | None,
    *,
    workspace_dir: Path,
    settings: DocforgeSettings | None = None,
) -> list[StylesheetPlan]:
    """Validate stylesheet entries and compute their staged names.

    Nothing is written. Entries sharing a basename are prefixed with their
    parent directory name.

    Raises
    ------
    ValidationError
        If an entry lacks the ``.css`` extension or two entries still collide
        after disambiguation.
    NotFoundError
        If an entry does not exist.
    """
    paths = parse_stylesheet_list(custom_css)
    if not paths:
        return []

    for css_path in paths:
        if not css_path.endswith(STYLESHEET_SUFFIX):
            msg = f"Custom CSS file must have .css extension: {css_path}"
            raise ValidationError(
                msg, code=ErrorCode.STYLESHEET_ERROR, context={"path": css_path}
            )
        full_path = workspace_dir / css_path
        if not full_path.is_file():
            msg = f"Custom CSS file not found: {full_path}"
            raise NotFoundError(msg, path=full_path)
    names = _destination_names(paths)

    runtime = settings or load_settings()
    return [
        StylesheetPlan(
            source=workspace_dir / css_path,
            name=name,
            config_path=f"./{PurePosixPath(runtime.styles_subdir, name).as_posix()}",
        )
        for css_path, name in zip(paths, names, strict=True)
    ]


def stage_stylesheets(
    custom_css: str | Sequence[str] | None,
    *,
    workspace_dir: Path,
    project_dir: Path,
    settings: DocforgeSettings | None = None,
) -> list[str]:
    """Validate and copy custom stylesheets into the project.

    Every entry is validated by :func:`plan_stylesheets` before anything is
    copied.

    Parameters
    ----------
    custom_css : str | Sequence[str] | None
        Comma-separated string or sequence of paths relative to
        ``workspace_dir``.
    workspace_dir : Path
        Repository root.
    project_dir : Path
        Scaffolded site project.
    settings : DocforgeSettings | None, optional
        Runtime settings; loaded from the environment when omitted.

    Returns
    -------
    list[str]
        Config-relative paths (``./src/styles/<name>``) in input order.

    Raises
    ------
    ValidationError
        If an entry lacks the ``.css`` extension or two entries still collide
        after disambiguation.
    NotFoundError
        If an entry does not exist.
    """
    runtime = settings or load_settings()
    plan = plan_stylesheets(custom_css, workspace_dir=workspace_dir, settings=runtime)
    if not plan:
        return []

    styles_dir = project_dir / runtime.styles_subdir
    styles_dir.mkdir(parents=True, exist_ok=True)
    for entry in plan:
        shutil.copyfile(entry.source, styles_dir / entry.name)
        logger.info(
            "Copied custom CSS",
            extra={
                "operation": "stage_css",
                "source": str(entry.source),
                "destination": entry.name,
            },
        )
    return [entry.config_path for entry in plan]
