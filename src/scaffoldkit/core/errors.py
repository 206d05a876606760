"""Error taxonomy for template generation.

Every failure raised by the engine derives from :class:`ScaffoldError` and is
fatal to the run. Each subclass keeps the context needed to act on it (the
offending key, parameter, path or command) as attributes.
"""

from __future__ import annotations

from collections.abc import Sequence


class ScaffoldError(Exception):
    """Base class for all generation failures."""


class ConfigError(ScaffoldError):
    """The configuration document is missing, malformed or invalid."""

    def __init__(self, message: str, key: str | None = None) -> None:
        self.key = key
        super().__init__(f"{key}: {message}" if key else message)


class ParameterError(ScaffoldError):
    """A parameter value could not be obtained or coerced."""

    def __init__(self, message: str, parameter: str, raw: str | None = None) -> None:
        self.parameter = parameter
        self.raw = raw
        detail = f" (got {raw!r})" if raw is not None else ""
        super().__init__(f"parameter '{parameter}': {message}{detail}")


class RenderError(ScaffoldError):
    """A template string failed to render."""

    def __init__(
        self,
        message: str,
        fragment: str,
        lineno: int | None = None,
        path: str | None = None,
    ) -> None:
        self.message = message
        self.fragment = fragment
        self.lineno = lineno
        self.path = path
        where = f" at line {lineno}" if lineno is not None else ""
        text = f"{message}{where} in {_shorten(fragment)!r}"
        if path is not None:
            text = f"cannot render template '{path}': {text}"
        super().__init__(text)

    def at(self, path: str) -> RenderError:
        """The same error, attributed to the template file at *path*."""
        return RenderError(self.message, self.fragment, self.lineno, path)


class CollisionError(ScaffoldError):
    """Two distinct template paths render to the same output path."""

    def __init__(self, sources: Sequence[str], target: str) -> None:
        self.sources = tuple(sources)
        self.target = target
        joined = " and ".join(f"'{s}'" for s in self.sources)
        super().__init__(f"{joined} both render to '{target}'")


class MergeConflictError(ScaffoldError):
    """The target already exists and the merge mode forbids touching it."""

    def __init__(self, target: str, message: str | None = None) -> None:
        self.target = target
        super().__init__(message or f"cannot create '{target}' because it already exists")


class HookError(ScaffoldError):
    """A lifecycle command exited with a non-zero status."""

    def __init__(self, phase: str, command: str, exit_code: int) -> None:
        self.phase = phase
        self.command = command
        self.exit_code = exit_code
        super().__init__(f"{phase} hook '{command}' failed with exit code {exit_code}")


class SourceError(ScaffoldError):
    """The template could not be located or fetched."""


def _shorten(text: str, limit: int = 60) -> str:
    text = text.strip()
    return text if len(text) <= limit else text[: limit - 3] + "..."
