"""Documentation tree compiler.

Turns a tree of markdown documents into the structural artifacts of a
documentation site: inferred page titles, a navigation sidebar, a composed
``astro.config.mjs`` and landing-page links rewritten to site routes.
"""

from __future__ import annotations

from docforge.compose import build_theme_import, generate_config, render_config
from docforge.config_values import ConfigValue, deep_merge, merge_settings
from docforge.errors import DocforgeError, ErrorCode, NotFoundError, ValidationError
from docforge.frontmatter import process_directory, process_file
from docforge.inputs import SiteInputs
from docforge.links import rewrite_links
from docforge.pipeline import CompileRequest, CompileResult, compile_site
from docforge.sidebar import SidebarGroup, SidebarItem, SidebarLink, build_sidebar

__all__ = [
    "CompileRequest",
    "CompileResult",
    "ConfigValue",
    "DocforgeError",
    "ErrorCode",
    "NotFoundError",
    "SidebarGroup",
    "SidebarItem",
    "SidebarLink",
    "SiteInputs",
    "ValidationError",
    "build_sidebar",
    "build_theme_import",
    "compile_site",
    "deep_merge",
    "generate_config",
    "merge_settings",
    "process_directory",
    "process_file",
    "render_config",
    "rewrite_links",
]

__version__ = "0.1.0"
