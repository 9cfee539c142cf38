"""Shared pytest fixtures for the docforge test-suite.

This module provides:
- document tree factories backed by ``tmp_path``
- a scaffolded site project layout
- runtime settings isolated from the caller's ``DOCFORGE_*`` environment
- restoration of root logging handlers after CLI invocations
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import pytest

from docforge.inputs import SiteInputs
from docforge.settings import DocforgeSettings
from tests.helpers import write_tree

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping
    from pathlib import Path

type TreeFactory = Callable[[Mapping[str, str]], Path]


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop any ``DOCFORGE_*`` variables inherited from the caller."""
    for name in list(os.environ):
        if name.startswith("DOCFORGE_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """Undo ``setup_logging`` calls made by CLI commands."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def make_tree(tmp_path: Path) -> TreeFactory:
    """Return a factory writing a document tree under a fresh ``docs`` directory."""

    def _make(files: Mapping[str, str]) -> Path:
        root = tmp_path / "docs"
        root.mkdir(exist_ok=True)
        return write_tree(root, files)

    return _make


@pytest.fixture
def settings() -> DocforgeSettings:
    """Return default runtime settings with sequential processing."""
    return DocforgeSettings(max_workers=1)


@pytest.fixture
def make_project(tmp_path: Path, settings: DocforgeSettings) -> Callable[[Mapping[str, str]], Path]:
    """Return a factory for a scaffolded project whose content tree holds ``docs``."""

    def _make(docs: Mapping[str, str]) -> Path:
        project = tmp_path / "project"
        content = project / settings.docs_subdir
        content.mkdir(parents=True, exist_ok=True)
        write_tree(content, docs)
        return project

    return _make


@pytest.fixture
def site_inputs() -> SiteInputs:
    """Return minimal valid site inputs."""
    return SiteInputs(
        title="My Docs",
        description="Documentation site",
        base="/my-repo",
        site="https://user.github.io",
    )
