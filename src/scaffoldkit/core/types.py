"""Enums and aliases shared across the engine."""

from __future__ import annotations

from enum import Enum
from typing import TypeAlias

ParameterValue: TypeAlias = str | int | float | bool | tuple[str, ...]
"""A resolved parameter value; MultiSelect resolves to a tuple of choices."""

CONFIG_FILENAME = ".scaffold.toml"

RESERVED_KEYS: frozenset[str] = frozenset({"name", "template", "target_dir"})


class ParameterKind(str, Enum):
    """Declared type of a template parameter."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    SELECT = "select"
    MULTISELECT = "multiselect"

    @property
    def has_choices(self) -> bool:
        return self in (ParameterKind.SELECT, ParameterKind.MULTISELECT)


class MergeMode(str, Enum):
    """Policy for writing into a target directory that may already exist."""

    CREATE = "create"
    FORCE = "force"
    APPEND = "append"

    @property
    def label(self) -> str:
        labels: dict[MergeMode, str] = {
            MergeMode.CREATE: "Creating directory",
            MergeMode.FORCE: "Overriding directory",
            MergeMode.APPEND: "Appending to directory",
        }
        return labels[self]


class HookPhase(str, Enum):
    """When a lifecycle command runs relative to materialization."""

    PRE = "pre"
    POST = "post"


class FileOutcome(str, Enum):
    """What happened to a single output file."""

    CREATED = "created"
    OVERWRITTEN = "overwritten"
    SKIPPED_EXISTING = "skipped-existing"

    @property
    def style(self) -> str:
        styles: dict[FileOutcome, str] = {
            FileOutcome.CREATED: "green",
            FileOutcome.OVERWRITTEN: "yellow",
            FileOutcome.SKIPPED_EXISTING: "dim",
        }
        return styles[self]


class NodeKind(str, Enum):
    """Kind of an entry in the raw template tree."""

    FILE = "file"
    DIRECTORY = "directory"
