"""Jinja2 rendering of template strings.

The same :func:`render` call is used for path segments, file contents and the
closing notes. Undefined variables are errors, not empty strings.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError, TemplateSyntaxError

from scaffoldkit.core.errors import RenderError


_WORD = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


def _words(value: str) -> list[str]:
    """Split ``someThing``, ``some-thing``, ``Some Thing`` or ``SOME_thing`` into words."""
    return _WORD.findall(str(value))


def _slugify_filter(value: str) -> str:
    return "-".join(re.findall(r"[a-z0-9]+", str(value).lower()))


def _pascal_case_filter(value: str) -> str:
    return "".join(word[:1].upper() + word[1:] for word in _words(value))


def _camel_case_filter(value: str) -> str:
    pascal = _pascal_case_filter(value)
    return pascal[:1].lower() + pascal[1:]


def _snake_case_filter(value: str) -> str:
    return "_".join(word.lower() for word in _words(value))


def _kebab_case_filter(value: str) -> str:
    return "-".join(word.lower() for word in _words(value))


def _make_environment() -> Environment:
    env = Environment(
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["slugify"] = _slugify_filter
    env.filters["pascal_case"] = _pascal_case_filter
    env.filters["snake_case"] = _snake_case_filter
    env.filters["kebab_case"] = _kebab_case_filter
    env.filters["camel_case"] = _camel_case_filter
    return env


_ENV = _make_environment()

# Jinja2 names templates built with ``from_string`` like this in its tracebacks.
_TEMPLATE_FILENAME = "<template>"


def _line(text: str, lineno: int | None) -> str:
    lines = text.splitlines()
    if lineno is not None and 1 <= lineno <= len(lines):
        return lines[lineno - 1]
    return text


def _template_lineno(exc: BaseException) -> int | None:
    """Line of the innermost template frame in a rendering traceback."""
    lineno = None
    tb = exc.__traceback__
    while tb is not None:
        if tb.tb_frame.f_code.co_filename == _TEMPLATE_FILENAME:
            lineno = tb.tb_lineno
        tb = tb.tb_next
    return lineno


def render(template_text: str, context: Mapping[str, Any]) -> str:
    """
    Render *template_text* against *context*.

    Args:
        template_text: Jinja2 template source.
        context: Variables available to the template.

    Returns:
        The rendered text.

    Raises:
        RenderError: On syntax errors, undefined variables or failing expressions.
    """
    try:
        template = _ENV.from_string(template_text)
    except TemplateSyntaxError as exc:
        raise RenderError(
            exc.message or "syntax error", _line(template_text, exc.lineno), exc.lineno
        ) from None

    try:
        return template.render(dict(context))
    except (TemplateError, TypeError, ValueError, ArithmeticError) as exc:
        message = str(exc) if isinstance(exc, TemplateError) else f"{type(exc).__name__}: {exc}"
        lineno = _template_lineno(exc)
        raise RenderError(message, _line(template_text, lineno), lineno) from None
