"""Validated caller inputs for site compilation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

__all__ = ["SiteInputs"]


class SiteInputs(BaseModel):
    """Values describing the site being compiled.

    Attributes
    ----------
    title : str
        Site title.
    description : str
        Site description.
    base : str
        Base path the site is served under, always starting with ``/``.
    site : str
        Origin of the deployed site (``http`` or ``https``).
    logo : str | None
        Logo path relative to the workspace; only its basename reaches the
        config artifact.
    config_path : Path | None
        Optional override document (JSON or YAML) merged over generated
        settings.
    custom_css_paths : tuple[str, ...]
        Staged, config-relative stylesheet paths.
    theme : str | None
        Theme package import source.
    theme_plugin : str | None
        Export specifier: ``name`` for a default export, ``{ name }`` for a
        named export.
    theme_options : str | None
        JSON object literal passed to the theme plugin.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str = Field(min_length=1)
    description: str = ""
    base: str = "/"
    site: str
    logo: str | None = None
    config_path: Path | None = None
    custom_css_paths: tuple[str, ...] = ()
    theme: str | None = None
    theme_plugin: str | None = None
    theme_options: str | None = None

    @field_validator("title")
    @classmethod
    def _non_blank_title(cls, value: str) -> str:
        if not value.strip():
            msg = "title must not be blank"
            raise ValueError(msg)
        return value

    @field_validator("base")
    @classmethod
    def _normalise_base(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith("/"):
            value = f"/{value}"
        return value

    @field_validator("site")
    @classmethod
    def _http_origin(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            msg = "site must be an http:// or https:// URL"
            raise ValueError(msg)
        return value

    @field_validator("logo", "theme", "theme_plugin", "theme_options")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("theme_options")
    @classmethod
    def _json_object(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as exc:
            msg = f"theme_options must be valid JSON: {exc.msg}"
            raise ValueError(msg) from exc
        if not isinstance(parsed, dict):
            msg = "theme_options must be a JSON object"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def _theme_requires_plugin(self) -> Self:
        if self.theme is not None and self.theme_plugin is None:
            msg = "theme_plugin is required when theme is set"
            raise ValueError(msg)
        if self.theme is None and (self.theme_plugin is not None or self.theme_options is not None):
            msg = "theme_plugin and theme_options require theme"
            raise ValueError(msg)
        return self
