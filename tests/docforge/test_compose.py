"""Tests for config composition and artifact rendering."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from docforge.compose import (
    ThemeImport,
    build_theme_import,
    compose_settings,
    compose_stylesheets,
    format_sidebar,
    generate_config,
    load_override,
    render_config,
    validate_settings,
)
from docforge.errors import ErrorCode, NotFoundError, ValidationError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from pathlib import Path

    from docforge.inputs import SiteInputs
    from docforge.settings import DocforgeSettings

    type ProjectFactory = Callable[[Mapping[str, str]], Path]

DOCS = {
    "getting-started.md": '---\ntitle: "Getting Started"\n---\n',
    "guides/setup.md": '---\ntitle: "Setup"\n---\n',
}


def _write_json(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestBuildThemeImport:
    """Tests for theme directives."""

    def test_default_export(self) -> None:
        """A bare identifier imports the default export."""
        assert build_theme_import("starlight-theme-rapide", "starlightThemeRapide") == ThemeImport(
            import_statement="import starlightThemeRapide from 'starlight-theme-rapide'",
            plugin_call="starlightThemeRapide()",
        )

    def test_named_export(self) -> None:
        """A braced identifier imports a named export."""
        directive = build_theme_import("starlight-ion-theme", "{ ion }")
        assert directive.import_statement == "import { ion } from 'starlight-ion-theme'"
        assert directive.plugin_call == "ion()"

    def test_named_export_without_spaces(self) -> None:
        """Whitespace inside the braces is optional."""
        directive = build_theme_import("@pkg/theme", "{theme}")
        assert directive.import_statement == "import { theme } from '@pkg/theme'"

    def test_options(self) -> None:
        """Options are passed as the plugin's argument."""
        directive = build_theme_import(
            "starlight-theme-catppuccin", "catppuccin", '{ "dark": "mocha", "light": "latte" }'
        )
        assert directive.plugin_call == 'catppuccin({"dark":"mocha","light":"latte"})'

    def test_named_export_with_options(self) -> None:
        """Named exports accept options too."""
        directive = build_theme_import("starlight-ion-theme", "{ ion }", '{"icons": true}')
        assert directive.plugin_call == 'ion({"icons":true})'

    @pytest.mark.parametrize("specifier", ["", "{ }", "two words", "{ a, b }", "1abc"])
    def test_invalid_specifier(self, specifier: str) -> None:
        """Malformed specifiers are rejected."""
        with pytest.raises(ValidationError) as excinfo:
            build_theme_import("pkg", specifier)
        assert excinfo.value.code is ErrorCode.THEME_DIRECTIVE_ERROR

    @pytest.mark.parametrize("options", ["[1, 2]", "not json", '"text"'])
    def test_invalid_options(self, options: str) -> None:
        """Options must be a JSON object."""
        with pytest.raises(ValidationError):
            build_theme_import("pkg", "theme", options)


class TestComposeStylesheets:
    """Tests for stylesheet ordering."""

    def test_staged_first(self) -> None:
        """Staged stylesheets precede existing ones and duplicates are kept."""
        assert compose_stylesheets(["./a.css", "./b.css"], ["./b.css", "./c.css"]) == [
            "./a.css",
            "./b.css",
            "./b.css",
            "./c.css",
        ]


class TestLoadOverride:
    """Tests for override document loading."""

    def test_json(self, tmp_path: Path) -> None:
        """JSON documents load as mappings."""
        path = _write_json(tmp_path / "site.json", {"social": {"github": "g"}})
        assert load_override(path) == {"social": {"github": "g"}}

    @pytest.mark.parametrize("suffix", [".yaml", ".yml"])
    def test_yaml(self, tmp_path: Path, suffix: str) -> None:
        """YAML documents load as mappings."""
        path = tmp_path / f"site{suffix}"
        path.write_text("editLink:\n  baseUrl: https://x\nlastUpdated: true\n", encoding="utf-8")
        assert load_override(path) == {"editLink": {"baseUrl": "https://x"}, "lastUpdated": True}

    @pytest.mark.parametrize(
        ("name", "content"),
        [
            ("bad.json", "{ invalid json }"),
            ("list.json", "[1, 2]"),
            ("bad.yaml", "key: [unclosed"),
            ("scalar.yaml", "just text"),
        ],
    )
    def test_malformed(self, tmp_path: Path, name: str, content: str) -> None:
        """Unparseable and non-mapping documents are parse errors."""
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ValidationError) as excinfo:
            load_override(path)
        assert excinfo.value.code is ErrorCode.OVERRIDE_PARSE_ERROR

    def test_yaml_dates_become_strings(self, tmp_path: Path) -> None:
        """Unquoted YAML dates load as ISO strings."""
        path = tmp_path / "site.yaml"
        path.write_text("head:\n  - attrs:\n      content: 2024-01-01\n", encoding="utf-8")
        assert load_override(path) == {"head": [{"attrs": {"content": "2024-01-01"}}]}

    def test_unsupported_value(self, tmp_path: Path) -> None:
        """Values with no configuration kind are parse errors, not type errors."""
        path = tmp_path / "site.yaml"
        path.write_text("favicon: !!binary aGVsbG8=\n", encoding="utf-8")
        with pytest.raises(ValidationError) as excinfo:
            load_override(path)
        assert excinfo.value.code is ErrorCode.OVERRIDE_PARSE_ERROR
        assert isinstance(excinfo.value.__cause__, TypeError)

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        """Only JSON and YAML documents are accepted."""
        path = tmp_path / "site.toml"
        path.write_text("a = 1\n", encoding="utf-8")
        with pytest.raises(ValidationError) as excinfo:
            load_override(path)
        assert excinfo.value.code is ErrorCode.INVALID_INPUT

    def test_missing(self, tmp_path: Path) -> None:
        """A missing override is a not-found error."""
        with pytest.raises(NotFoundError):
            load_override(tmp_path / "absent.json")


class TestComposeSettings:
    """Tests for settings composition."""

    def test_generated_only(self, site_inputs: SiteInputs) -> None:
        """Without an override the generated settings are used as-is."""
        sidebar = [{"label": "A", "link": "/a"}]
        assert compose_settings(site_inputs, sidebar) == {
            "title": "My Docs",
            "description": "Documentation site",
            "sidebar": sidebar,
        }

    def test_override_wins(self, site_inputs: SiteInputs) -> None:
        """Override values replace generated ones, including the sidebar."""
        composed = compose_settings(
            site_inputs,
            [{"label": "A", "link": "/a"}],
            {"title": "Custom", "sidebar": [{"label": "Manual", "link": "/m"}]},
        )
        assert composed["title"] == "Custom"
        assert composed["sidebar"] == [{"label": "Manual", "link": "/m"}]

    def test_stylesheets_prepended(self, site_inputs: SiteInputs) -> None:
        """Staged stylesheets come before the override's own."""
        inputs = site_inputs.model_copy(update={"custom_css_paths": ("./src/styles/a.css",)})
        composed = compose_settings(inputs, [], {"customCss": ["./src/existing.css"]})
        assert composed["customCss"] == ["./src/styles/a.css", "./src/existing.css"]

    def test_override_css_kept_without_staged(self, site_inputs: SiteInputs) -> None:
        """Without staged stylesheets the override's list is untouched."""
        composed = compose_settings(site_inputs, [], {"customCss": ["./src/existing.css"]})
        assert composed["customCss"] == ["./src/existing.css"]

    def test_invalid_existing_css(self, site_inputs: SiteInputs) -> None:
        """A non-list ``customCss`` cannot be extended."""
        inputs = site_inputs.model_copy(update={"custom_css_paths": ("./a.css",)})
        with pytest.raises(ValidationError):
            compose_settings(inputs, [], {"customCss": "./b.css"})

    def test_logo_by_basename(self, site_inputs: SiteInputs) -> None:
        """The logo is referenced from ``/public`` by basename."""
        inputs = site_inputs.model_copy(update={"logo": "assets/brand/logo.svg"})
        assert compose_settings(inputs, [])["logo"] == {"src": "/public/logo.svg"}


class TestFormatSidebar:
    """Tests for the sidebar literal."""

    def test_nested(self) -> None:
        """Groups nest their items one indentation step deeper."""
        items = [
            {"label": "A", "link": "/a"},
            {"label": "G", "collapsed": False, "items": [{"label": "B", "link": "/g/b"}]},
        ]
        assert format_sidebar(items, indent=0) == "\n".join(
            [
                "[",
                '  { label: "A", link: "/a" },',
                "  {",
                '    label: "G",',
                "    collapsed: false,",
                "    items: [",
                '      { label: "B", link: "/g/b" },',
                "    ],",
                "  },",
                "]",
            ]
        )

    def test_empty(self) -> None:
        """An empty sidebar is an empty array."""
        assert format_sidebar([], indent=2) == "[\n  ]"

    def test_override_entries_kept_verbatim(self) -> None:
        """Entries outside the generated shapes are emitted as literals."""
        items = [
            "guides/intro",
            {"label": "API", "autogenerate": {"directory": "api"}},
            {"label": "Docs", "link": "/docs", "badge": "New"},
            {"label": "G", "items": ["g/a", {"slug": "g/b"}]},
        ]
        assert format_sidebar(items, indent=0) == "\n".join(
            [
                "[",
                '  "guides/intro",',
                '  {"label":"API","autogenerate":{"directory":"api"}},',
                '  {"label":"Docs","link":"/docs","badge":"New"},',
                "  {",
                '    label: "G",',
                "    items: [",
                '      "g/a",',
                '      {"slug":"g/b"},',
                "    ],",
                "  },",
                "]",
            ]
        )

    def test_labels_are_escaped(self) -> None:
        """Labels are emitted as JSON string literals."""
        assert '{ label: "Say \\"hi\\"", link: "/s" },' in format_sidebar(
            [{"label": 'Say "hi"', "link": "/s"}]
        )


class TestRenderConfig:
    """Tests for the artifact skeleton."""

    def test_skeleton(self) -> None:
        """The artifact imports the framework and passes site settings."""
        content = render_config(
            "https://user.github.io",
            "/my-repo",
            {"title": "My Docs", "description": "D", "sidebar": []},
        )
        assert content.startswith(
            "import { defineConfig } from 'astro/config'\n"
            "import starlight from '@astrojs/starlight'\n\n"
            "export default defineConfig({\n"
            "  site: 'https://user.github.io',\n"
            "  base: '/my-repo',\n"
        )
        assert '      title: "My Docs",' in content
        assert "plugins" not in content
        assert "logo" not in content
        assert content.endswith("})\n")

    def test_extra_keys_in_override_order(self) -> None:
        """Keys beyond the generated ones follow in override order."""
        content = render_config(
            "https://x.io",
            "/",
            {"title": "T", "description": "", "sidebar": [], "social": {"github": "g"}, "lastUpdated": True},
        )
        assert '      social: {"github":"g"},' in content
        assert "      lastUpdated: true," in content
        assert content.index("social") < content.index("lastUpdated")

    def test_theme(self) -> None:
        """A theme adds its import and plugin call."""
        theme = build_theme_import("starlight-ion-theme", "{ ion }")
        content = render_config("https://x.io", "/", {"title": "T", "sidebar": []}, theme)
        assert "import { ion } from 'starlight-ion-theme'" in content
        assert "      plugins: [ion()]," in content

    def test_plugins_conflict_with_theme(self) -> None:
        """Override plugins cannot be combined with a theme."""
        theme = build_theme_import("pkg", "theme")
        with pytest.raises(ValidationError):
            render_config("https://x.io", "/", {"title": "T", "sidebar": [], "plugins": []}, theme)

    def test_plugins_without_theme_are_emitted(self) -> None:
        """Without a theme, override plugins pass through as data."""
        content = render_config("https://x.io", "/", {"title": "T", "sidebar": [], "plugins": []})
        assert "      plugins: []," in content

    def test_override_sidebar_of_slugs(self) -> None:
        """An override sidebar of slug strings renders without error."""
        content = render_config(
            "https://x.io", "/", {"title": "T", "sidebar": ["guide", "reference/api"]}
        )
        assert '      sidebar: [\n        "guide",\n        "reference/api",\n      ],' in content

    def test_sidebar_must_be_a_list(self) -> None:
        """A malformed sidebar override is rejected."""
        with pytest.raises(ValidationError):
            render_config("https://x.io", "/", {"title": "T", "sidebar": "auto"})


class TestGenerateConfig:
    """Tests for writing the artifact."""

    def test_basic(
        self,
        make_project: ProjectFactory,
        site_inputs: SiteInputs,
        settings: DocforgeSettings,
    ) -> None:
        """The artifact carries inputs and the sidebar from the content tree."""
        project = make_project(DOCS)
        path = generate_config(project, site_inputs, settings=settings)

        assert path == project / "astro.config.mjs"
        content = path.read_text(encoding="utf-8")
        assert "site: 'https://user.github.io'" in content
        assert "base: '/my-repo'" in content
        assert 'title: "My Docs"' in content
        assert 'description: "Documentation site"' in content
        assert '{ label: "Getting Started", link: "/getting-started" },' in content
        assert 'label: "Guides",' in content
        assert '{ label: "Setup", link: "/guides/setup" },' in content

    def test_with_logo(
        self,
        make_project: ProjectFactory,
        site_inputs: SiteInputs,
        settings: DocforgeSettings,
    ) -> None:
        """The logo appears by basename."""
        project = make_project(DOCS)
        inputs = site_inputs.model_copy(update={"logo": "assets/logo.svg"})
        content = generate_config(project, inputs, settings=settings).read_text(encoding="utf-8")
        assert 'logo: {"src":"/public/logo.svg"},' in content

    def test_override_merge(
        self,
        tmp_path: Path,
        make_project: ProjectFactory,
        site_inputs: SiteInputs,
        settings: DocforgeSettings,
    ) -> None:
        """Override keys are merged into the generated settings."""
        project = make_project(DOCS)
        override = _write_json(
            tmp_path / "site.json",
            {
                "title": "Custom Title",
                "social": {"github": "https://github.com/user/repo"},
                "editLink": {"baseUrl": "https://github.com/user/repo/edit/main/"},
            },
        )
        inputs = site_inputs.model_copy(update={"config_path": override})
        content = generate_config(project, inputs, settings=settings).read_text(encoding="utf-8")

        assert 'title: "Custom Title"' in content
        assert '"My Docs"' not in content
        assert 'social: {"github":"https://github.com/user/repo"},' in content
        assert "editLink" in content
        assert "Getting Started" in content

    def test_css_prepended_to_override(
        self,
        tmp_path: Path,
        make_project: ProjectFactory,
        site_inputs: SiteInputs,
        settings: DocforgeSettings,
    ) -> None:
        """Staged stylesheets precede the override's ``customCss``."""
        project = make_project(DOCS)
        override = _write_json(tmp_path / "site.json", {"customCss": ["./src/existing.css"]})
        inputs = site_inputs.model_copy(
            update={"config_path": override, "custom_css_paths": ("./src/styles/theme.css",)}
        )
        content = generate_config(project, inputs, settings=settings).read_text(encoding="utf-8")
        assert 'customCss: ["./src/styles/theme.css","./src/existing.css"],' in content

    def test_malformed_override_writes_nothing(
        self,
        tmp_path: Path,
        make_project: ProjectFactory,
        site_inputs: SiteInputs,
        settings: DocforgeSettings,
    ) -> None:
        """A malformed override fails before the artifact is written."""
        project = make_project(DOCS)
        bad = tmp_path / "bad.json"
        bad.write_text("{ invalid json }", encoding="utf-8")
        inputs = site_inputs.model_copy(update={"config_path": bad})
        with pytest.raises(ValidationError):
            generate_config(project, inputs, settings=settings)
        assert not (project / "astro.config.mjs").exists()

    def test_theme(
        self,
        make_project: ProjectFactory,
        site_inputs: SiteInputs,
        settings: DocforgeSettings,
    ) -> None:
        """Theme inputs produce the import and the plugin call."""
        project = make_project(DOCS)
        inputs = site_inputs.model_copy(
            update={
                "theme": "starlight-theme-catppuccin",
                "theme_plugin": "catppuccin",
                "theme_options": '{"dark": "mocha"}',
            }
        )
        content = generate_config(project, inputs, settings=settings).read_text(encoding="utf-8")
        assert "import catppuccin from 'starlight-theme-catppuccin'" in content
        assert 'plugins: [catppuccin({"dark":"mocha"})],' in content

    def test_missing_content_dir(
        self, tmp_path: Path, site_inputs: SiteInputs, settings: DocforgeSettings
    ) -> None:
        """A project without a content directory cannot be configured."""
        with pytest.raises(NotFoundError):
            generate_config(tmp_path / "empty", site_inputs, settings=settings)


class TestValidateSettings:
    """Tests for checks on composed settings."""

    def test_valid_settings(self) -> None:
        """A list sidebar without a theme passes."""
        validate_settings({"title": "T", "sidebar": ["guide"], "plugins": []})

    def test_sidebar_must_be_a_list(self) -> None:
        """A mapping sidebar is rejected."""
        with pytest.raises(ValidationError) as excinfo:
            validate_settings({"sidebar": {"a": 1}})
        assert excinfo.value.code is ErrorCode.OVERRIDE_PARSE_ERROR

    def test_plugins_conflict_with_theme(self) -> None:
        """Override plugins cannot be combined with a theme directive."""
        theme = build_theme_import("starlight-ion-theme", "{ ion }")
        with pytest.raises(ValidationError) as excinfo:
            validate_settings({"plugins": []}, theme)
        assert excinfo.value.code is ErrorCode.THEME_DIRECTIVE_ERROR
