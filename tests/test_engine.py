"""End-to-end tests for scaffoldkit.core.engine.generate."""

from __future__ import annotations

from pathlib import Path

import pytest

from scaffoldkit.core.engine import generate
from scaffoldkit.core.errors import (
    CollisionError,
    ConfigError,
    HookError,
    MergeConflictError,
    ParameterError,
)
from scaffoldkit.core.parameters import PROJECT_NAME_PROMPT, ScriptedChannel
from scaffoldkit.core.types import HookPhase, MergeMode

HOOKS_CONFIG = """\
[hooks]
pre = [{pre}]
post = [{post}]
"""


class TestFeatureExample:
    def test_override_renders_path_and_content(self, feature_template: Path, target: Path):
        result = generate(
            feature_template, target, project_name="demo", overrides={"feature": "auth"}
        )
        assert (target / "src" / "auth.rs").read_text() == "// auth module"
        assert [str(f.path) for f in result.files] == ["src/auth.rs"]
        assert result.context["feature"] == "auth"
        assert result.context["name"] == "demo"
        assert result.target_dir == target.resolve()

    def test_prompted_values(self, feature_template: Path, target: Path):
        channel = ScriptedChannel(["demo", "billing"])
        generate(feature_template, target, channel=channel)
        assert (target / "src" / "billing.rs").read_text() == "// billing module"
        assert channel.prompts[0] == PROJECT_NAME_PROMPT

    def test_default_target_is_named_after_project(
        self, feature_template: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.chdir(tmp_path)
        result = generate(feature_template, project_name="demo", overrides={"feature": "auth"})
        assert result.target_dir == (tmp_path / "demo").resolve()
        assert (tmp_path / "demo" / "src" / "auth.rs").exists()

    def test_name_given_as_override(self, feature_template: Path, target: Path):
        result = generate(feature_template, target, overrides={"name": "demo", "feature": "auth"})
        assert result.context.project_name == "demo"
        assert result.context["name"] == "demo"
        assert "name" not in result.descriptor.parameters

    def test_explicit_name_wins_over_override(self, feature_template: Path, target: Path):
        result = generate(
            feature_template,
            target,
            project_name="explicit",
            overrides={"name": "other", "feature": "auth"},
        )
        assert result.context["name"] == "explicit"

    def test_required_missing_non_interactive(self, feature_template: Path, target: Path):
        with pytest.raises(ParameterError) as info:
            generate(feature_template, target, project_name="demo")
        assert info.value.parameter == "feature"
        assert not target.exists()


class TestParameterErrors:
    def test_integer_override_abc(self, make_template, target: Path):
        root = make_template(
            '[parameters.limit]\ntype = "integer"\nmessage = "Limit?"\n', {"a.txt": "{{ limit }}"}
        )
        with pytest.raises(ParameterError) as info:
            generate(root, target, project_name="demo", overrides={"limit": "abc"})
        assert info.value.parameter == "limit"
        assert "limit" in str(info.value)
        assert not target.exists()

    def test_reserved_parameter_name(self, make_template, target: Path):
        root = make_template('[parameters.target_dir]\ntype = "string"\nmessage = "?"\n', {})
        with pytest.raises(ConfigError, match="reserved"):
            generate(root, target, project_name="demo")
        assert not target.exists()


class TestMergeModes:
    def test_default_mode_on_non_empty_target(self, feature_template: Path, target: Path):
        target.mkdir()
        (target / "existing.txt").write_text("x")
        with pytest.raises(MergeConflictError):
            generate(feature_template, target, project_name="d", overrides={"feature": "a"})

    def test_force(self, feature_template: Path, target: Path):
        (target / "src").mkdir(parents=True)
        (target / "src" / "auth.rs").write_text("old")
        generate(
            feature_template,
            target,
            project_name="d",
            overrides={"feature": "auth"},
            mode=MergeMode.FORCE,
        )
        assert (target / "src" / "auth.rs").read_text() == "// auth module"

    def test_append(self, feature_template: Path, target: Path):
        target.mkdir()
        (target / "mine.txt").write_text("keep")
        generate(
            feature_template,
            target,
            project_name="d",
            overrides={"feature": "auth"},
            mode=MergeMode.APPEND,
        )
        assert (target / "mine.txt").read_text() == "keep"
        assert (target / "src" / "auth.rs").exists()


class TestHooks:
    def test_pre_failure_skips_materialization_and_post(self, make_template, target: Path):
        root = make_template(
            HOOKS_CONFIG.format(pre="\"sh -c 'exit 1'\"", post='"touch post-ran"'),
            {"file.txt": "content"},
        )
        with pytest.raises(HookError) as info:
            generate(root, target, project_name="demo")
        assert info.value.phase == "pre"
        assert info.value.exit_code == 1
        assert target.is_dir()
        assert not (target / "file.txt").exists()
        assert not (target / "post-ran").exists()

    def test_order_pre_files_post(self, make_template, target: Path):
        root = make_template(
            HOOKS_CONFIG.format(
                pre="\"sh -c 'test ! -e file.txt'\"",
                post="\"sh -c 'test -e file.txt'\"",
            ),
            {"file.txt": "content"},
        )
        seen: list[tuple[HookPhase, str]] = []
        result = generate(
            root, target, project_name="demo", on_hook=lambda p, c: seen.append((p, c))
        )
        assert [p for p, _ in seen] == [HookPhase.PRE, HookPhase.POST]
        assert [h.phase for h in result.hooks] == [HookPhase.PRE, HookPhase.POST]

    def test_post_not_run_when_materialization_fails(self, make_template, target: Path):
        root = make_template(
            HOOKS_CONFIG.format(pre="", post='"touch post-ran"')
            + '\n[parameters.a]\ntype = "string"\nmessage = "?"\ndefault = "x"\n'
            + '\n[parameters.b]\ntype = "string"\nmessage = "?"\ndefault = "x"\n',
            {"{{a}}.txt": "1", "{{b}}.txt": "2"},
        )
        with pytest.raises(CollisionError):
            generate(root, target, project_name="demo")
        assert not (target / "post-ran").exists()


class TestExampleTemplate:
    def test_generates_basic_example(self, example_template: Path, target: Path):
        result = generate(
            example_template,
            target,
            project_name="my-app",
            overrides={"feature": "auth", "targets": "linux,windows"},
        )
        assert (target / "src" / "auth" / "mod.rs").read_text().startswith("// auth module")
        assert "pub const LIMIT: u32 = 10;" in (target / "src" / "auth" / "mod.rs").read_text()
        assert (target / "src" / "tests.rs").exists()
        readme = (target / "README.md").read_text()
        assert readme.startswith("# MyApp")
        assert "- linux\n- windows\n" in readme
        assert "{{ name }}" in (target / "docs" / "usage.md").read_text()
        assert not (target / "target").exists()
        assert not (target / "debug.log").exists()
        assert "cd my-app" in result.notes
        assert "make test" in result.notes

    def test_conditional_file_dropped(self, example_template: Path, target: Path):
        generate(
            example_template,
            target,
            project_name="my-app",
            overrides={"feature": "auth", "with_tests": "no"},
        )
        assert not (target / "src" / "tests.rs").exists()
