# File: tests/conftest.py
# Contains pytest fixtures that lay out throwaway projects for generation tests.

import pytest
from pathlib import Path
from typing import Any, Generator

from module_scaffolder.config import ScaffoldConfig


GO_MODULE = "example.com/shop"


def write_go_mod(project_root: Path, module: str = GO_MODULE) -> Path:
    go_mod = project_root / "go.mod"
    go_mod.write_text(f"module {module}\n\ngo 1.22\n", encoding="utf-8")
    return go_mod


def write_nuxt_app(frontend_root: Path) -> Path:
    """Creates the minimum of a Nuxt project: nuxt.config.ts plus app/pages."""
    (frontend_root / "app" / "pages").mkdir(parents=True, exist_ok=True)
    (frontend_root / "nuxt.config.ts").write_text("export default defineNuxtConfig({})\n", encoding="utf-8")
    return frontend_root


# --- Fixture for an empty Go project ---
@pytest.fixture
def project_root(tmp_path: Path) -> Generator[Path, Any, None]:
    """A project root holding only a go.mod."""
    root = tmp_path / "shop"
    root.mkdir()
    write_go_mod(root)
    yield root


# --- Fixture for a Go project with a sibling Nuxt app ---
@pytest.fixture
def fullstack_root(project_root: Path) -> Path:
    """Project root with an ``admin-app`` Nuxt project next to the Go code."""
    write_nuxt_app(project_root / "admin-app")
    return project_root


# --- Fixture for the configuration used by generation tests ---
@pytest.fixture
def scaffold_config(fullstack_root: Path) -> ScaffoldConfig:
    """Configuration for the full-stack project with external tools disabled."""
    return ScaffoldConfig(project_root=str(fullstack_root), run_formatters=False)
