"""Render context: resolved parameter values plus reserved variables."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from scaffoldkit.core.config import TemplateDescriptor
from scaffoldkit.core.errors import ConfigError
from scaffoldkit.core.types import RESERVED_KEYS, ParameterValue


class RenderContext(Mapping[str, Any]):
    """
    Immutable variable namespace handed to the template renderer.

    Holds every resolved parameter, ``name`` (the project name), ``template``
    (read-only template metadata) and, when known, ``target_dir``.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = MappingProxyType(dict(data))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"RenderContext({dict(self._data)!r})"

    @property
    def project_name(self) -> str:
        return self._data["name"]


def build_context(
    values: Mapping[str, ParameterValue],
    project_name: str,
    descriptor: TemplateDescriptor | None = None,
    target_dir: Path | None = None,
) -> RenderContext:
    """Merge resolved *values* with the reserved variables."""
    clashes = sorted(set(values) & RESERVED_KEYS)
    if clashes:
        raise ConfigError(
            f"'{clashes[0]}' is a reserved variable and cannot be a parameter",
            key=f"parameters.{clashes[0]}",
        )

    data: dict[str, Any] = dict(values)
    data["name"] = project_name
    if descriptor is not None:
        data["template"] = MappingProxyType(
            {"name": descriptor.name, "author": descriptor.author, "version": descriptor.version}
        )
    if target_dir is not None:
        data["target_dir"] = str(target_dir)
    return RenderContext(data)
