"""Template descriptor dataclasses and the `.scaffold.toml` loader."""

from __future__ import annotations

import logging
import shlex
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from scaffoldkit.core.errors import ConfigError
from scaffoldkit.core.types import (
    CONFIG_FILENAME,
    ParameterKind,
    ParameterValue,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class ParameterSpec:
    """
    Declaration of a single template parameter.

    Attributes:
        name: Parameter name, used as the templating variable.
        kind: Declared type of the value.
        message: Prompt text shown when asking interactively.
        required: Whether an empty answer without default is refused.
        default: Optional kind-typed default value.
        values: Allowed choices, mandatory for select and multiselect.
        tags: Free-form labels, kept as metadata only.
    """

    name: str
    kind: ParameterKind
    message: str
    required: bool = False
    default: ParameterValue | None = None
    values: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        key = f"parameters.{self.name}"
        if self.name == "name":
            raise ConfigError("'name' is reserved for the project name", key=key)
        if self.kind.has_choices:
            if not self.values:
                raise ConfigError(
                    f"a {self.kind.value} parameter needs a non-empty 'values' list",
                    key=f"{key}.values",
                )
            if len(set(self.values)) != len(self.values):
                raise ConfigError("'values' contains duplicates", key=f"{key}.values")
        elif self.values:
            raise ConfigError(
                f"'values' is only allowed on select and multiselect, not {self.kind.value}",
                key=f"{key}.values",
            )
        if self.default is not None:
            object.__setattr__(self, "default", check_default(self, self.default))


@dataclass(frozen=True, kw_only=True)
class Hooks:
    """Ordered lifecycle commands for each phase."""

    pre: tuple[str, ...] = ()
    post: tuple[str, ...] = ()


@dataclass(frozen=True, kw_only=True)
class TemplateDescriptor:
    """
    Validated contents of a template's configuration document.

    Attributes:
        name: Template name.
        author: Template author.
        version: Template version string.
        exclude: Glob patterns matched against raw relative paths.
        disable_templating: Glob patterns whose file content is copied verbatim.
        notes: Template string rendered and shown after generation.
        hooks: Pre and post lifecycle commands.
        parameters: Parameter declarations in declaration order.
    """

    name: str = ""
    author: str = ""
    version: str = ""
    exclude: tuple[str, ...] = ()
    disable_templating: tuple[str, ...] = ()
    notes: str = ""
    hooks: Hooks = field(default_factory=Hooks)
    parameters: Mapping[str, ParameterSpec] = field(default_factory=dict)


def check_default(spec: ParameterSpec, value: Any) -> ParameterValue:
    """Validate a TOML-typed default against its parameter kind and normalize it."""
    key = f"parameters.{spec.name}.default"
    match spec.kind:
        case ParameterKind.STRING:
            if isinstance(value, str):
                return value
        case ParameterKind.INTEGER:
            if isinstance(value, int) and not isinstance(value, bool):
                return value
        case ParameterKind.FLOAT:
            if isinstance(value, int | float) and not isinstance(value, bool):
                return float(value)
        case ParameterKind.BOOLEAN:
            if isinstance(value, bool):
                return value
        case ParameterKind.SELECT:
            if isinstance(value, str):
                if value not in spec.values:
                    raise ConfigError(f"{value!r} is not one of {list(spec.values)}", key=key)
                return value
        case ParameterKind.MULTISELECT:
            if isinstance(value, list | tuple) and all(isinstance(v, str) for v in value):
                unknown = [v for v in value if v not in spec.values]
                if unknown:
                    raise ConfigError(f"{unknown} not in {list(spec.values)}", key=key)
                return tuple(v for v in spec.values if v in value)
    raise ConfigError(f"{value!r} is not a valid {spec.kind.value}", key=key)


def validate_glob(pattern: str, key: str) -> str:
    """Check a glob for syntax errors and return it without a leading './'."""
    if not isinstance(pattern, str) or not pattern.strip():
        raise ConfigError("glob must be a non-empty string", key=key)
    if pattern.startswith("/"):
        raise ConfigError(f"glob {pattern!r} must be relative to the template root", key=key)
    i = 0
    while i < len(pattern):
        if pattern[i] == "[":
            j = i + 1
            if pattern[j : j + 1] == "!":
                j += 1
            if pattern[j : j + 1] == "]":
                j += 1
            end = pattern.find("]", j)
            if end == -1:
                raise ConfigError(f"unclosed character class in glob {pattern!r}", key=key)
            i = end
        i += 1
    normalized = pattern.removeprefix("./")
    return normalized.rstrip("/") or normalized


def _string(raw: Mapping[str, Any], name: str, key: str) -> str:
    value = raw.get(name, "")
    if not isinstance(value, str):
        raise ConfigError("expected a string", key=key)
    return value


def _string_list(raw: Any, key: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
        raise ConfigError("expected a list of strings", key=key)
    return tuple(raw)


def _globs(raw: Any, key: str) -> tuple[str, ...]:
    patterns = _string_list(raw, key)
    return tuple(validate_glob(p, f"{key}[{i}]") for i, p in enumerate(patterns))


def _commands(raw: Any, key: str) -> tuple[str, ...]:
    commands = _string_list(raw, key)
    for i, command in enumerate(commands):
        try:
            argv = shlex.split(command)
        except ValueError as exc:
            raise ConfigError(
                f"cannot split command {command!r}: {exc}", key=f"{key}[{i}]"
            ) from None
        if not argv:
            raise ConfigError("command is empty", key=f"{key}[{i}]")
    return commands


def _parameter(name: str, raw: Any) -> ParameterSpec:
    key = f"parameters.{name}"
    if not isinstance(raw, dict):
        raise ConfigError("expected a table", key=key)
    type_name = raw.get("type")
    try:
        kind = ParameterKind(type_name)
    except ValueError:
        valid = ", ".join(k.value for k in ParameterKind)
        raise ConfigError(
            f"unknown type {type_name!r}, expected one of: {valid}", key=f"{key}.type"
        ) from None
    message = raw.get("message")
    if not isinstance(message, str):
        raise ConfigError("a prompt message is required", key=f"{key}.message")
    required = raw.get("required", False)
    if not isinstance(required, bool):
        raise ConfigError("expected a boolean", key=f"{key}.required")
    return ParameterSpec(
        name=name,
        kind=kind,
        message=message,
        required=required,
        default=raw.get("default"),
        values=_string_list(raw.get("values"), f"{key}.values"),
        tags=_string_list(raw.get("tags"), f"{key}.tags"),
    )


def parse_descriptor(document: Mapping[str, Any]) -> TemplateDescriptor:
    """Build a validated :class:`TemplateDescriptor` from a decoded TOML document."""
    template = document.get("template", {})
    if not isinstance(template, dict):
        raise ConfigError("expected a table", key="template")

    exclude = _globs(document.get("exclude"), "exclude") + _globs(
        template.get("exclude"), "template.exclude"
    )
    if "notes" in document and "notes" in template:
        raise ConfigError("notes given both at top level and under [template]", key="notes")
    notes = _string(document, "notes", "notes") or _string(template, "notes", "template.notes")

    hooks_raw = document.get("hooks", {})
    if not isinstance(hooks_raw, dict):
        raise ConfigError("expected a table", key="hooks")
    hooks = Hooks(
        pre=_commands(hooks_raw.get("pre"), "hooks.pre"),
        post=_commands(hooks_raw.get("post"), "hooks.post"),
    )

    params_raw = document.get("parameters", {})
    if not isinstance(params_raw, dict):
        raise ConfigError("expected a table", key="parameters")
    parameters = {name: _parameter(name, raw) for name, raw in params_raw.items()}

    return TemplateDescriptor(
        name=_string(template, "name", "template.name"),
        author=_string(template, "author", "template.author"),
        version=_string(template, "version", "template.version"),
        exclude=tuple(dict.fromkeys(exclude)),
        disable_templating=_globs(
            template.get("disable_templating"), "template.disable_templating"
        ),
        notes=notes,
        hooks=hooks,
        parameters=parameters,
    )


def load_descriptor(template_root: Path) -> TemplateDescriptor:
    """Read and validate the configuration document at *template_root*."""
    path = Path(template_root) / CONFIG_FILENAME
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(
            f"cannot find {CONFIG_FILENAME} in {template_root}", key=str(path)
        ) from None
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"cannot read configuration: {exc}", key=str(path)) from None
    try:
        document = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"malformed TOML: {exc}", key=str(path)) from None

    descriptor = parse_descriptor(document)
    logger.debug(
        "Loaded template %r with %d parameter(s) from %s",
        descriptor.name,
        len(descriptor.parameters),
        path,
    )
    return descriptor
