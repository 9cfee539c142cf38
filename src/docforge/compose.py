"""Site configuration composition and ``astro.config.mjs`` generation.

Generated settings (title, description, logo and the sidebar built from the
project's content directory) are deep-merged with an optional user override
document, custom stylesheets are prepended to any ``customCss`` the override
declares, and the result is rendered into a fixed config skeleton.

Examples
--------
>>> from docforge.compose import build_theme_import
>>> directive = build_theme_import("starlight-ion-theme", "{ ion }")
>>> directive.import_statement
"import { ion } from 'starlight-ion-theme'"
>>> directive.plugin_call
'ion()'
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Final, cast

import yaml

from docforge.config_values import ConfigValue, merge_settings
from docforge.errors import ErrorCode, NotFoundError, ValidationError
from docforge.logging import get_logger
from docforge.settings import DocforgeSettings, load_settings
from docforge.sidebar import build_sidebar, sidebar_to_data

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from docforge.inputs import SiteInputs

__all__ = [
    "SIDEBAR_INDENT_STEP",
    "ThemeImport",
    "build_settings",
    "build_theme_import",
    "compose_settings",
    "compose_stylesheets",
    "format_sidebar",
    "generate_config",
    "load_override",
    "render_config",
    "validate_settings",
]

logger = get_logger(__name__)

SIDEBAR_INDENT_STEP: Final[int] = 4
CUSTOM_CSS_KEY: Final[str] = "customCss"
PLUGINS_KEY: Final[str] = "plugins"
_HEAD_KEYS: Final[tuple[str, ...]] = ("title", "description", "logo", "sidebar")
_LINK_KEYS: Final[frozenset[str]] = frozenset({"label", "link"})
_GROUP_KEYS: Final[frozenset[str]] = frozenset({"label", "collapsed", "items"})

_IDENTIFIER: Final[str] = r"[A-Za-z_$][\w$]*"
_DEFAULT_EXPORT_RE: Final[re.Pattern[str]] = re.compile(rf"(?P<name>{_IDENTIFIER})")
_NAMED_EXPORT_RE: Final[re.Pattern[str]] = re.compile(rf"\{{\s*(?P<name>{_IDENTIFIER})\s*\}}")


@dataclass(frozen=True, slots=True)
class ThemeImport:
    """Import directive and plugin invocation for a theme package."""

    import_statement: str
    plugin_call: str


def _js(value: object) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _single_quoted(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def build_theme_import(
    source: str,
    specifier: str,
    options: str | None = None,
) -> ThemeImport:
    """Build the import statement and plugin call for a theme package.

    Parameters
    ----------
    source : str
        Package the theme is imported from.
    specifier : str
        ``name`` imports the default export under ``name``; ``{ name }``
        imports the named export ``name``.
    options : str | None, optional
        JSON object literal forwarded as the plugin's only argument.

    Returns
    -------
    ThemeImport
        The directive pair.

    Raises
    ------
    ValidationError
        If ``specifier`` is neither form or ``options`` is not a JSON object.
    """
    specifier = specifier.strip()
    if (named := _NAMED_EXPORT_RE.fullmatch(specifier)) is not None:
        binding = named.group("name")
        clause = f"{{ {binding} }}"
    elif (default := _DEFAULT_EXPORT_RE.fullmatch(specifier)) is not None:
        binding = default.group("name")
        clause = binding
    else:
        msg = f"Theme plugin must be an identifier or '{{ identifier }}': {specifier!r}"
        raise ValidationError(
            msg, code=ErrorCode.THEME_DIRECTIVE_ERROR, context={"theme_plugin": specifier}
        )

    argument = ""
    if options is not None and options.strip():
        try:
            parsed = json.loads(options)
        except json.JSONDecodeError as exc:
            msg = f"Theme options are not valid JSON: {exc.msg}"
            raise ValidationError(msg, code=ErrorCode.THEME_DIRECTIVE_ERROR, cause=exc) from exc
        if not isinstance(parsed, dict):
            msg = "Theme options must be a JSON object"
            raise ValidationError(msg, code=ErrorCode.THEME_DIRECTIVE_ERROR)
        argument = _js(parsed)

    return ThemeImport(
        import_statement=f"import {clause} from {_single_quoted(source)}",
        plugin_call=f"{binding}({argument})",
    )


def compose_stylesheets(staged: Sequence[str], existing: Sequence[str] = ()) -> list[str]:
    """Return ``staged`` stylesheets followed by ``existing`` ones, duplicates kept."""
    return [*staged, *existing]


def load_override(path: Path) -> dict[str, object]:
    """Read a user override document.

    ``.json`` files are parsed as JSON; ``.yaml`` and ``.yml`` files with
    PyYAML's safe loader. Dates become ISO 8601 strings.

    Raises
    ------
    NotFoundError
        If ``path`` does not exist.
    ValidationError
        If the extension is unsupported, parsing fails, the document is not
        a mapping or it holds a value with no configuration kind.
    """
    if not path.is_file():
        msg = f"Config override file not found: {path}"
        raise NotFoundError(msg, path=path)

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    try:
        if suffix == ".json":
            data: object = json.loads(text)
        elif suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        else:
            msg = f"Config override must be a .json, .yaml or .yml file: {path}"
            raise ValidationError(msg, context={"path": path})
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        msg = f"Config override could not be parsed: {path}"
        raise ValidationError(
            msg, code=ErrorCode.OVERRIDE_PARSE_ERROR, cause=exc, context={"path": path}
        ) from exc

    if not isinstance(data, dict):
        msg = f"Config override must contain a mapping at the top level: {path}"
        raise ValidationError(msg, code=ErrorCode.OVERRIDE_PARSE_ERROR, context={"path": path})
    try:
        lifted = ConfigValue.from_python(data)
    except TypeError as exc:
        msg = f"Config override contains an unsupported value: {path}"
        raise ValidationError(
            msg, code=ErrorCode.OVERRIDE_PARSE_ERROR, cause=exc, context={"path": path}
        ) from exc
    return cast("dict[str, object]", lifted.to_python())


def build_settings(inputs: SiteInputs, sidebar: list[dict[str, object]]) -> dict[str, object]:
    """Return the generated settings before any override is applied."""
    settings: dict[str, object] = {
        "title": inputs.title,
        "description": inputs.description,
        "sidebar": sidebar,
    }
    if inputs.logo:
        settings["logo"] = {"src": f"/public/{PurePath(inputs.logo).name}"}
    return settings


def compose_settings(
    inputs: SiteInputs,
    sidebar: list[dict[str, object]],
    override: Mapping[str, object] | None = None,
) -> dict[str, object]:
    """Merge generated settings with ``override`` and attach stylesheets.

    Raises
    ------
    ValidationError
        If the override's ``customCss`` is not a list of strings.
    """
    settings = build_settings(inputs, sidebar)
    if override:
        settings = merge_settings(settings, override)

    if inputs.custom_css_paths:
        existing = settings.get(CUSTOM_CSS_KEY) or []
        if not isinstance(existing, list) or not all(isinstance(p, str) for p in existing):
            msg = f"{CUSTOM_CSS_KEY} in the config override must be a list of strings"
            raise ValidationError(msg, code=ErrorCode.OVERRIDE_PARSE_ERROR)
        settings[CUSTOM_CSS_KEY] = compose_stylesheets(inputs.custom_css_paths, existing)
    return settings


def _is_link(item: object) -> bool:
    return (
        isinstance(item, dict)
        and item.keys() == _LINK_KEYS
        and all(isinstance(value, str) for value in item.values())
    )


def _is_group(item: object) -> bool:
    return (
        isinstance(item, dict)
        and "label" in item
        and isinstance(item.get("items"), list)
        and item.keys() <= _GROUP_KEYS
    )


def format_sidebar(items: Sequence[object], indent: int = 6) -> str:
    """Pretty-print sidebar data as a JavaScript array literal.

    ``{label, link}`` leaves render on one line and ``{label, collapsed?,
    items}`` groups open a block whose ``items`` array is indented
    :data:`SIDEBAR_INDENT_STEP` further than the enclosing array. Any other
    entry, such as a bare slug string or an ``autogenerate`` group from an
    override, is emitted verbatim as a literal.
    """
    pad = " " * indent
    lines = ["["]
    for item in items:
        if _is_group(item):
            group = cast("dict[str, object]", item)
            lines.append(f"{pad}  {{")
            lines.append(f"{pad}    label: {_js(group['label'])},")
            if "collapsed" in group:
                lines.append(f"{pad}    collapsed: {_js(group['collapsed'])},")
            nested = format_sidebar(
                cast("list[object]", group["items"]), indent + SIDEBAR_INDENT_STEP
            )
            lines.append(f"{pad}    items: {nested},")
            lines.append(f"{pad}  }},")
        elif _is_link(item):
            leaf = cast("dict[str, str]", item)
            lines.append(f"{pad}  {{ label: {_js(leaf['label'])}, link: {_js(leaf['link'])} }},")
        else:
            lines.append(f"{pad}  {_js(item)},")
    lines.append(f"{pad}]")
    return "\n".join(lines)


def validate_settings(settings: Mapping[str, object], theme: ThemeImport | None = None) -> None:
    """Check that composed ``settings`` can be rendered.

    Raises
    ------
    ValidationError
        If the sidebar is not a list, or ``plugins`` is set while a theme is
        configured.
    """
    if not isinstance(settings.get("sidebar", []), list):
        msg = "sidebar must be a list"
        raise ValidationError(msg, code=ErrorCode.OVERRIDE_PARSE_ERROR)
    if theme is not None and PLUGINS_KEY in settings:
        msg = f"'{PLUGINS_KEY}' cannot be set in the config override when a theme is configured"
        raise ValidationError(msg, code=ErrorCode.THEME_DIRECTIVE_ERROR)


def render_config(
    site: str,
    base: str,
    settings: Mapping[str, object],
    theme: ThemeImport | None = None,
) -> str:
    """Render composed settings into the ``astro.config.mjs`` skeleton.

    Raises
    ------
    ValidationError
        If :func:`validate_settings` rejects ``settings``.
    """
    validate_settings(settings, theme)
    sidebar = settings.get("sidebar", [])

    body = [
        f"      title: {_js(settings.get('title'))},",
        f"      description: {_js(settings.get('description'))},",
    ]
    if settings.get("logo"):
        body.append(f"      logo: {_js(settings['logo'])},")
    body.append(f"      sidebar: {format_sidebar(cast('list[object]', sidebar))},")
    if theme is not None:
        body.append(f"      {PLUGINS_KEY}: [{theme.plugin_call}],")
    body.extend(
        f"      {key}: {_js(value)}," for key, value in settings.items() if key not in _HEAD_KEYS
    )

    header = [
        "import { defineConfig } from 'astro/config'",
        "import starlight from '@astrojs/starlight'",
    ]
    if theme is not None:
        header.append(theme.import_statement)

    return "\n".join(
        [
            *header,
            "",
            "export default defineConfig({",
            f"  site: {_single_quoted(site)},",
            f"  base: {_single_quoted(base)},",
            "  integrations: [",
            "    starlight({",
            *body,
            "    }),",
            "  ],",
            "})",
            "",
        ]
    )


def generate_config(
    project_dir: Path,
    inputs: SiteInputs,
    *,
    settings: DocforgeSettings | None = None,
) -> Path:
    """Compose and write the site config artifact for ``project_dir``.

    The sidebar is built from the project's content directory. The override
    document, when configured, is loaded and validated before anything is
    written.

    Returns
    -------
    Path
        Path of the written artifact.
    """
    runtime = settings or load_settings()
    docs_dir = project_dir / runtime.docs_subdir
    sidebar = sidebar_to_data(build_sidebar(docs_dir))

    override = load_override(inputs.config_path) if inputs.config_path else None
    composed = compose_settings(inputs, sidebar, override)
    theme = (
        build_theme_import(inputs.theme, inputs.theme_plugin, inputs.theme_options)
        if inputs.theme and inputs.theme_plugin
        else None
    )
    content = render_config(inputs.site, inputs.base, composed, theme)

    target = project_dir / runtime.config_filename
    target.write_text(content, encoding="utf-8")
    logger.info(
        "Config artifact written",
        extra={
            "operation": "compose",
            "path": str(target),
            "sidebar_items": len(sidebar),
            "override": str(inputs.config_path) if inputs.config_path else None,
            "theme": inputs.theme,
        },
    )
    return target
