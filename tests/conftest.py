"""Shared fixtures for the scaffoldkit test suite."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

import pytest

from scaffoldkit.core.types import CONFIG_FILENAME

TemplateFactory = Callable[[str, Mapping[str, str | bytes]], Path]

FEATURE_CONFIG = """\
[template]
name = "feature"
author = "tests"
version = "0.1.0"

[parameters.feature]
type = "string"
message = "Feature name?"
required = true
"""


@pytest.fixture
def make_template(tmp_path: Path) -> TemplateFactory:
    """Build a template directory from a config document and a ``path -> content`` map."""
    counter = 0

    def factory(config: str, files: Mapping[str, str | bytes] | None = None) -> Path:
        nonlocal counter
        counter += 1
        root = tmp_path / f"template-{counter}"
        root.mkdir()
        (root / CONFIG_FILENAME).write_text(config, encoding="utf-8")
        for rel, content in (files or {}).items():
            path = root / rel
            if rel.endswith("/"):
                path.mkdir(parents=True, exist_ok=True)
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return root

    return factory


@pytest.fixture
def feature_template(make_template: TemplateFactory) -> Path:
    """The `src/{{feature}}.rs` template used by the end-to-end tests."""
    return make_template(FEATURE_CONFIG, {"src/{{feature}}.rs": "// {{feature}} module"})


@pytest.fixture
def target(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture
def example_template() -> Path:
    return Path(__file__).resolve().parents[1] / "examples" / "basic"
