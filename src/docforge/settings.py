"""Runtime settings loaded from ``DOCFORGE_*`` environment variables.

Examples
--------
>>> from docforge.settings import load_settings
>>> settings = load_settings(max_workers=2)
>>> settings.config_filename
'astro.config.mjs'
"""

from __future__ import annotations

from pathlib import PurePosixPath

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docforge.errors import SettingsError
from docforge.logging import get_logger

__all__ = [
    "DocforgeSettings",
    "load_settings",
]

logger = get_logger(__name__)

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class DocforgeSettings(BaseSettings):
    """Process-level configuration for the compiler."""

    model_config = SettingsConfigDict(env_prefix="DOCFORGE_", extra="forbid", frozen=True)

    log_level: str = Field(default="INFO", description="Logging level name")
    docs_subdir: str = Field(
        default="src/content/docs",
        description="Content directory of a scaffolded project, relative to its root",
    )
    styles_subdir: str = Field(
        default="src/styles",
        description="Directory, relative to the project root, receiving custom stylesheets",
    )
    config_filename: str = Field(
        default="astro.config.mjs", description="File name of the generated config artifact"
    )
    max_workers: int = Field(
        default=4, ge=1, le=64, description="Thread pool size for frontmatter inference"
    )

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            msg = f"log_level must be one of {sorted(_LOG_LEVELS)}"
            raise ValueError(msg)
        return level

    @field_validator("docs_subdir", "styles_subdir")
    @classmethod
    def _relative_subdir(cls, value: str) -> str:
        path = PurePosixPath(value.strip().strip("/"))
        if not path.parts or ".." in path.parts:
            msg = "subdirectories must be non-empty and stay inside the project"
            raise ValueError(msg)
        return str(path)


def load_settings(**overrides: object) -> DocforgeSettings:
    """Load :class:`DocforgeSettings`, converting validation failures.

    Raises
    ------
    SettingsError
        If an environment variable or override fails validation.
    """
    try:
        return DocforgeSettings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        msg = f"Configuration validation failed: {exc.error_count()} error(s)"
        logger.exception(
            "Settings validation failed",
            extra={"operation": "load_settings", "error_type": type(exc).__name__},
        )
        raise SettingsError(
            msg,
            cause=exc,
            context={"errors": [str(err["msg"]) for err in exc.errors()]},
        ) from exc
