"""Command line interface for the documentation tree compiler."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, NoReturn

import pydantic
import typer

from docforge.compose import format_sidebar
from docforge.errors import DocforgeError, ErrorCode, NotFoundError, ValidationError
from docforge.frontmatter import process_directory
from docforge.inputs import SiteInputs
from docforge.links import rewrite_links
from docforge.logging import CorrelationContext, get_logger, setup_logging
from docforge.pipeline import CompileRequest, compile_site
from docforge.problem_details import render_problem
from docforge.settings import load_settings
from docforge.sidebar import build_sidebar, sidebar_to_data
from docforge.staging import stage_stylesheets

__all__ = ["app", "main"]

LOGGER = get_logger(__name__)

app = typer.Typer(
    help="Compile a markdown tree into a documentation site's navigation and config.",
    no_args_is_help=True,
    add_completion=False,
)


def _fail(error: DocforgeError, command: str) -> NoReturn:
    problem = error.to_problem_details(instance=f"urn:docforge:cli:{command}")
    typer.echo(render_problem(problem), err=True)
    LOGGER.error(
        "Command failed",
        extra={"operation": command, "code": error.code.value, "detail": error.message},
    )
    raise typer.Exit(code=1)


@app.callback()
def _configure(
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Logging level; defaults to DOCFORGE_LOG_LEVEL."),
    ] = None,
) -> None:
    try:
        settings = load_settings()
    except DocforgeError as exc:
        _fail(exc, "configure")
    setup_logging((log_level or settings.log_level).upper())


@app.command("frontmatter")
def frontmatter_command(
    docs_dir: Annotated[Path, typer.Argument(help="Directory of markdown documents.")],
    workers: Annotated[
        int | None, typer.Option("--workers", min=1, help="Worker threads.")
    ] = None,
) -> None:
    """Ensure every document under DOCS_DIR declares a title."""
    try:
        max_workers = workers or load_settings().max_workers
        changed = process_directory(docs_dir, max_workers=max_workers)
    except DocforgeError as exc:
        _fail(exc, "frontmatter")
    typer.echo(f"Titled {changed} document(s)")


@app.command("sidebar")
def sidebar_command(
    docs_dir: Annotated[Path, typer.Argument(help="Directory of markdown documents.")],
    as_json: Annotated[bool, typer.Option("--json", help="Emit JSON instead of JS.")] = False,
) -> None:
    """Print the navigation sidebar built from DOCS_DIR."""
    try:
        data = sidebar_to_data(build_sidebar(docs_dir))
    except DocforgeError as exc:
        _fail(exc, "sidebar")
    if as_json:
        typer.echo(json.dumps(data, indent=2, ensure_ascii=False))
    else:
        typer.echo(format_sidebar(data, indent=0))


@app.command("rewrite-links")
def rewrite_links_command(
    document: Annotated[Path, typer.Argument(help="Landing document to rewrite.")],
    docs_folder: Annotated[str, typer.Option("--docs-folder", help="Docs folder name.")] = "docs",
    base: Annotated[str, typer.Option("--base", help="Site base path.")] = "/",
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write here instead of in place.")
    ] = None,
) -> None:
    """Rewrite links into the docs folder as site routes."""
    if not document.is_file():
        _fail(NotFoundError(f"Document not found: {document}", path=document), "rewrite-links")
    content = document.read_text(encoding="utf-8")
    rewritten = rewrite_links(content, docs_folder, base)
    (output or document).write_text(rewritten, encoding="utf-8")


@app.command("stage-css")
def stage_css_command(
    custom_css: Annotated[str, typer.Argument(help="Comma-separated stylesheet paths.")],
    project: Annotated[Path, typer.Option("--project", help="Site project directory.")],
    workspace: Annotated[Path, typer.Option("--workspace", help="Repository root.")] = Path(),
) -> None:
    """Copy custom stylesheets into the project and print their config paths."""
    try:
        paths = stage_stylesheets(custom_css, workspace_dir=workspace, project_dir=project)
    except DocforgeError as exc:
        _fail(exc, "stage-css")
    for path in paths:
        typer.echo(path)


def _site_inputs(**values: object) -> SiteInputs:
    try:
        return SiteInputs(**values)  # type: ignore[arg-type]
    except pydantic.ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'inputs'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValidationError(
            f"Invalid site inputs: {details}", code=ErrorCode.INVALID_INPUT, cause=exc
        ) from exc


@app.command("build")
def build_command(  # noqa: PLR0913
    title: Annotated[str, typer.Option("--title", help="Site title.")],
    site: Annotated[str, typer.Option("--site", help="Site origin URL.")],
    project: Annotated[Path, typer.Option("--project", help="Site project directory.")],
    docs: Annotated[Path, typer.Option("--docs", help="Docs folder.")] = Path("docs"),
    workspace: Annotated[Path, typer.Option("--workspace", help="Repository root.")] = Path(),
    description: Annotated[str, typer.Option("--description")] = "",
    base: Annotated[str, typer.Option("--base", help="Site base path.")] = "/",
    logo: Annotated[str | None, typer.Option("--logo", help="Logo path.")] = None,
    config: Annotated[
        Path | None, typer.Option("--config", help="Override document (JSON or YAML).")
    ] = None,
    readme: Annotated[
        bool, typer.Option("--readme/--no-readme", help="Use README.md as the landing page.")
    ] = True,
    custom_css: Annotated[
        str | None, typer.Option("--custom-css", help="Comma-separated stylesheets.")
    ] = None,
    theme: Annotated[str | None, typer.Option("--theme", help="Theme package.")] = None,
    theme_plugin: Annotated[
        str | None, typer.Option("--theme-plugin", help="'name' or '{ name }'.")
    ] = None,
    theme_options: Annotated[
        str | None, typer.Option("--theme-options", help="JSON options object.")
    ] = None,
) -> None:
    """Stage docs into PROJECT, infer titles and write the site config."""
    try:
        inputs = _site_inputs(
            title=title,
            description=description,
            base=base,
            site=site,
            logo=logo,
            config_path=config,
            theme=theme,
            theme_plugin=theme_plugin,
            theme_options=theme_options,
        )
        request = CompileRequest(
            workspace_dir=workspace,
            docs_path=docs,
            project_dir=project,
            readme=readme,
            custom_css=custom_css,
        )
        with CorrelationContext(f"build:{project.name or 'project'}"):
            result = compile_site(request, inputs)
    except DocforgeError as exc:
        _fail(exc, "build")
    typer.echo(
        f"Wrote {result.config_path} ({result.file_count} document(s), "
        f"{result.titled_count} titled)"
    )


def main() -> None:
    """Console script entry point."""
    app(prog_name="docforge")


if __name__ == "__main__":
    main()
