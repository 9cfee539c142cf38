"""End-to-end compilation of a documentation site project."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from docforge.compose import (
    build_theme_import,
    compose_settings,
    generate_config,
    load_override,
    validate_settings,
)
from docforge.errors import NotFoundError
from docforge.frontmatter import process_directory
from docforge.logging import get_logger, with_fields
from docforge.settings import DocforgeSettings, load_settings
from docforge.staging import copy_docs, plan_stylesheets, stage_stylesheets

if TYPE_CHECKING:
    from pathlib import Path

    from docforge.inputs import SiteInputs

__all__ = [
    "CompileRequest",
    "CompileResult",
    "compile_site",
]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CompileRequest:
    """Where the sources live and what to stage besides the docs folder.

    Attributes
    ----------
    workspace_dir : Path
        Repository root.
    docs_path : Path
        Docs folder, relative to ``workspace_dir`` or absolute.
    project_dir : Path
        Scaffolded site project receiving content and the config artifact.
    readme : bool
        Use the workspace ``README.md`` as the landing page.
    custom_css : str | None
        Comma-separated stylesheet paths relative to ``workspace_dir``.
    """

    workspace_dir: Path
    docs_path: Path
    project_dir: Path
    readme: bool = False
    custom_css: str | None = None


@dataclass(frozen=True, slots=True)
class CompileResult:
    """Summary of a :func:`compile_site` run."""

    config_path: Path
    file_count: int
    titled_count: int
    stylesheets: tuple[str, ...]
    readme_copied: bool
    duration_seconds: float


def _preflight(
    request: CompileRequest, inputs: SiteInputs, runtime: DocforgeSettings
) -> None:
    """Run every check that does not need staged content.

    The override is composed against an empty sidebar and the planned
    stylesheet paths, so composition errors surface before any file is
    written.
    """
    docs_source = (
        request.docs_path
        if request.docs_path.is_absolute()
        else request.workspace_dir / request.docs_path
    )
    if not docs_source.is_dir():
        msg = f"Docs folder not found: {docs_source}"
        raise NotFoundError(msg, path=docs_source)

    override = load_override(inputs.config_path) if inputs.config_path is not None else None
    theme = (
        build_theme_import(inputs.theme, inputs.theme_plugin, inputs.theme_options)
        if inputs.theme and inputs.theme_plugin
        else None
    )
    planned = plan_stylesheets(
        request.custom_css, workspace_dir=request.workspace_dir, settings=runtime
    )
    planned_inputs = inputs.model_copy(
        update={
            "custom_css_paths": (
                *(entry.config_path for entry in planned),
                *inputs.custom_css_paths,
            )
        }
    )
    validate_settings(compose_settings(planned_inputs, [], override), theme)


def compile_site(
    request: CompileRequest,
    inputs: SiteInputs,
    *,
    settings: DocforgeSettings | None = None,
) -> CompileResult:
    """Stage docs, infer titles and write the config artifact.

    Inputs that can be checked up front (docs folder, override document,
    theme directive, stylesheets and their composition with the override)
    are validated before anything is written.
    """
    runtime = settings or load_settings()
    start = time.monotonic()
    _preflight(request, inputs, runtime)
    log = with_fields(logger, operation="compile", project_dir=str(request.project_dir))
    log.info("Compilation started", extra={"status": "started"})

    stylesheets = stage_stylesheets(
        request.custom_css,
        workspace_dir=request.workspace_dir,
        project_dir=request.project_dir,
        settings=runtime,
    )
    staged = copy_docs(
        request.docs_path,
        request.project_dir,
        workspace_dir=request.workspace_dir,
        readme=request.readme,
        logo=inputs.logo,
        base_path=inputs.base,
        settings=runtime,
    )
    titled = process_directory(
        request.project_dir / runtime.docs_subdir, max_workers=runtime.max_workers
    )

    effective = inputs.model_copy(
        update={"custom_css_paths": (*stylesheets, *inputs.custom_css_paths)}
    )
    config_path = generate_config(request.project_dir, effective, settings=runtime)

    duration = time.monotonic() - start
    log.info("Compilation finished", extra={"duration_ms": round(duration * 1000, 3)})
    return CompileResult(
        config_path=config_path,
        file_count=staged.file_count,
        titled_count=titled,
        stylesheets=tuple(stylesheets),
        readme_copied=staged.readme_copied,
        duration_seconds=duration,
    )
