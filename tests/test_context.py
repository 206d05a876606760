"""Tests for scaffoldkit.core.context: reserved variables and immutability."""

from pathlib import Path

import pytest

from scaffoldkit.core.config import TemplateDescriptor
from scaffoldkit.core.context import RenderContext, build_context
from scaffoldkit.core.errors import ConfigError


class TestBuildContext:
    def test_merges_reserved_keys(self, tmp_path: Path):
        descriptor = TemplateDescriptor(name="svc", author="me", version="1.2")
        ctx = build_context({"feature": "auth"}, "demo", descriptor, tmp_path)

        assert ctx["feature"] == "auth"
        assert ctx["name"] == "demo"
        assert ctx.project_name == "demo"
        assert ctx["template"]["author"] == "me"
        assert ctx["template"]["version"] == "1.2"
        assert ctx["target_dir"] == str(tmp_path)

    def test_minimal(self):
        ctx = build_context({}, "demo")
        assert dict(ctx) == {"name": "demo"}

    @pytest.mark.parametrize("reserved", ["template", "target_dir", "name"])
    def test_reserved_key_collision(self, reserved: str):
        with pytest.raises(ConfigError, match="reserved") as info:
            build_context({reserved: "x"}, "demo")
        assert info.value.key == f"parameters.{reserved}"

    def test_immutable(self):
        ctx = build_context({"a": 1}, "demo")
        with pytest.raises(TypeError):
            ctx["a"] = 2  # type: ignore[index]
        with pytest.raises(TypeError):
            ctx["template"] = {}  # type: ignore[index]

    def test_source_mapping_changes_do_not_leak(self):
        values = {"a": 1}
        ctx = build_context(values, "demo")
        values["a"] = 2
        assert ctx["a"] == 1

    def test_template_metadata_is_read_only(self):
        ctx = build_context({}, "demo", TemplateDescriptor(name="svc"))
        with pytest.raises(TypeError):
            ctx["template"]["name"] = "other"

    def test_is_mapping(self):
        ctx = RenderContext({"x": 1})
        assert len(ctx) == 1
        assert list(ctx) == ["x"]
        assert "x" in ctx
