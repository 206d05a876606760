"""Parameter resolution: CLI overrides, interactive prompts and coercion.

Interactive input goes through a :class:`PromptChannel`, so resolution can be
driven by a real terminal or by a :class:`ScriptedChannel` with canned answers.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Mapping, Sequence
from typing import Protocol

from scaffoldkit.core.config import ParameterSpec
from scaffoldkit.core.errors import ParameterError
from scaffoldkit.core.types import ParameterKind, ParameterValue

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3

PROJECT_NAME_PROMPT = "What is the name of your generated project?"

_TRUE = frozenset({"true", "yes", "y", "on", "1"})
_FALSE = frozenset({"false", "no", "n", "off", "0"})


class PromptChannel(Protocol):
    """Abstract interactive input/output used to ask for parameter values."""

    def ask(self, prompt: str) -> str:
        """Show *prompt* and return the raw answer. Raises EOFError when input is exhausted."""
        ...

    def choose(
        self, prompt: str, options: Sequence[str], multiple: bool, preselected: Sequence[str]
    ) -> list[str]:
        """Let the user pick one (or several) of *options*; an empty list means no answer."""
        ...

    def notify(self, message: str) -> None:
        """Tell the user why an answer was refused."""
        ...


class ScriptedChannel:
    """
    A :class:`PromptChannel` that replays a fixed list of answers.

    Text prompts consume one string each. Choice prompts consume either a list of
    option labels or a comma-separated string of labels. Every prompt and notice
    is recorded for inspection.
    """

    def __init__(self, answers: Iterable[str | Sequence[str]] = ()) -> None:
        self._answers: deque[str | Sequence[str]] = deque(answers)
        self.prompts: list[str] = []
        self.notices: list[str] = []

    def _next(self) -> str | Sequence[str]:
        if not self._answers:
            raise EOFError("no scripted answers left")
        return self._answers.popleft()

    def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        answer = self._next()
        return answer if isinstance(answer, str) else ",".join(answer)

    def choose(
        self, prompt: str, options: Sequence[str], multiple: bool, preselected: Sequence[str]
    ) -> list[str]:
        self.prompts.append(prompt)
        answer = self._next()
        if isinstance(answer, str):
            return [a.strip() for a in answer.split(",") if a.strip()]
        return list(answer)

    def notify(self, message: str) -> None:
        self.notices.append(message)

    @property
    def remaining(self) -> int:
        return len(self._answers)


def parse_overrides(items: Iterable[str]) -> dict[str, str]:
    """Split repeated ``NAME=VALUE`` strings into a mapping; later entries win."""
    overrides: dict[str, str] = {}
    for item in items:
        name, sep, value = item.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ParameterError("expected NAME=VALUE", parameter=name or item, raw=item)
        overrides[name] = value
    return overrides


def empty_value(spec: ParameterSpec) -> ParameterValue:
    """Value used for an optional parameter that received nothing at all."""
    match spec.kind:
        case ParameterKind.STRING:
            return ""
        case ParameterKind.INTEGER:
            return 0
        case ParameterKind.FLOAT:
            return 0.0
        case ParameterKind.BOOLEAN:
            return False
        case ParameterKind.SELECT:
            return spec.values[0]
        case ParameterKind.MULTISELECT:
            return ()


def _choices(spec: ParameterSpec, labels: Sequence[str], raw: str) -> tuple[str, ...]:
    unknown = [label for label in labels if label not in spec.values]
    if unknown:
        raise ParameterError(
            f"{', '.join(repr(u) for u in unknown)} not in {list(spec.values)}",
            parameter=spec.name,
            raw=raw,
        )
    return tuple(v for v in spec.values if v in labels)


def coerce(spec: ParameterSpec, raw: str) -> ParameterValue:
    """Convert the string form of a value to the parameter's kind."""
    text = raw.strip()
    match spec.kind:
        case ParameterKind.STRING:
            return raw
        case ParameterKind.INTEGER:
            try:
                return int(text)
            except ValueError:
                raise ParameterError("expected an integer", parameter=spec.name, raw=raw) from None
        case ParameterKind.FLOAT:
            try:
                return float(text)
            except ValueError:
                raise ParameterError("expected a number", parameter=spec.name, raw=raw) from None
        case ParameterKind.BOOLEAN:
            lowered = text.lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            raise ParameterError("expected yes or no", parameter=spec.name, raw=raw)
        case ParameterKind.SELECT:
            if text not in spec.values:
                raise ParameterError(
                    f"expected one of {list(spec.values)}", parameter=spec.name, raw=raw
                )
            return text
        case ParameterKind.MULTISELECT:
            labels = [part.strip() for part in text.split(",") if part.strip()]
            return _choices(spec, labels, raw)


def _default_hint(spec: ParameterSpec) -> str:
    match spec.kind:
        case ParameterKind.BOOLEAN:
            if spec.default is None:
                return " [y/n]"
            return " [Y/n]" if spec.default else " [y/N]"
        case ParameterKind.INTEGER:
            kind_hint = " (integer)"
        case ParameterKind.FLOAT:
            kind_hint = " (number)"
        case _:
            kind_hint = ""
    default = f" [{spec.default}]" if spec.default is not None else ""
    return f"{kind_hint}{default}"


class ParameterResolver:
    """
    Resolves every declared parameter to a typed value.

    Parameters are visited in declaration order. An override always wins; otherwise
    the user is prompted through *channel*. Without a channel, resolution is
    non-interactive: defaults (or empty values) are used and a missing required
    value is an error.

    Args:
        parameters: Parameter declarations in declaration order.
        overrides: ``name -> raw string`` values from the command line.
        channel: Interactive input/output, or ``None`` for non-interactive runs.
        max_attempts: How many times a required or invalid answer is asked again.
    """

    def __init__(
        self,
        parameters: Mapping[str, ParameterSpec],
        overrides: Mapping[str, str] | None = None,
        channel: PromptChannel | None = None,
        max_attempts: int = MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}.")
        self.parameters = parameters
        self.overrides = dict(overrides or {})
        self.channel = channel
        self.max_attempts = max_attempts

    def resolve(self) -> dict[str, ParameterValue]:
        unknown = [name for name in self.overrides if name not in self.parameters]
        if unknown:
            raise ParameterError(
                "not declared by this template",
                parameter=unknown[0],
                raw=self.overrides[unknown[0]],
            )

        values: dict[str, ParameterValue] = {}
        for name, spec in self.parameters.items():
            if name in self.overrides:
                values[name] = coerce(spec, self.overrides[name])
                logger.debug("Parameter %s = %r (override)", name, values[name])
            else:
                values[name] = self._prompt(spec)
                logger.debug("Parameter %s = %r (prompt)", name, values[name])
        return values

    def _fallback(self, spec: ParameterSpec) -> ParameterValue | None:
        if spec.default is not None:
            return spec.default
        if not spec.required:
            return empty_value(spec)
        return None

    def _ask_once(self, spec: ParameterSpec, channel: PromptChannel) -> ParameterValue | None:
        if spec.kind.has_choices:
            multiple = spec.kind is ParameterKind.MULTISELECT
            preselected: list[str] = []
            if isinstance(spec.default, tuple):
                preselected = list(spec.default)
            elif isinstance(spec.default, str):
                preselected = [spec.default]
            labels = channel.choose(spec.message, list(spec.values), multiple, preselected)
            if not labels:
                return None
            raw = ",".join(labels)
            if not multiple and len(labels) != 1:
                raise ParameterError("expected a single choice", parameter=spec.name, raw=raw)
            chosen = _choices(spec, labels, raw)
            return chosen if multiple else chosen[0]

        answer = channel.ask(f"{spec.message}{_default_hint(spec)}")
        if not answer.strip():
            return None
        return coerce(spec, answer)

    def _prompt(self, spec: ParameterSpec) -> ParameterValue:
        if self.channel is None:
            value = self._fallback(spec)
            if value is None:
                raise ParameterError("a value is required", parameter=spec.name)
            return value

        for _ in range(self.max_attempts):
            try:
                value = self._ask_once(spec, self.channel)
            except EOFError:
                raise ParameterError("input ended before a value was given", spec.name) from None
            except ParameterError as exc:
                self.channel.notify(str(exc))
                continue
            if value is None:
                value = self._fallback(spec)
            if value is not None:
                return value
            self.channel.notify(f"A value for '{spec.name}' is required.")

        raise ParameterError(f"no valid value after {self.max_attempts} attempts", spec.name)


def resolve_parameters(
    parameters: Mapping[str, ParameterSpec],
    overrides: Mapping[str, str] | None = None,
    channel: PromptChannel | None = None,
    max_attempts: int = MAX_ATTEMPTS,
) -> dict[str, ParameterValue]:
    """Functional shortcut for :meth:`ParameterResolver.resolve`."""
    return ParameterResolver(parameters, overrides, channel, max_attempts).resolve()


def resolve_project_name(
    name: str | None,
    channel: PromptChannel | None,
    max_attempts: int = MAX_ATTEMPTS,
) -> str:
    """Return *name* when given, otherwise ask for it as a required string."""
    if name is not None and name.strip():
        return name.strip()
    if channel is None:
        raise ParameterError("a project name is required", parameter="name")
    for _ in range(max_attempts):
        try:
            answer = channel.ask(PROJECT_NAME_PROMPT).strip()
        except EOFError:
            raise ParameterError("input ended before a value was given", "name") from None
        if answer:
            return answer
        channel.notify("A project name is required.")
    raise ParameterError(f"no valid value after {max_attempts} attempts", "name")
