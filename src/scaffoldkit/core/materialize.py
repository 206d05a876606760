"""Tree materialization: exclusion, path/content rendering and merge-mode writes."""

from __future__ import annotations

import contextlib
import fnmatch
import logging
import os
import shutil
import tempfile
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

from scaffoldkit.core.errors import CollisionError, MergeConflictError, RenderError
from scaffoldkit.core.render import render
from scaffoldkit.core.tree import TemplateFileNode
from scaffoldkit.core.types import FileOutcome, MergeMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaterializedFile:
    """
    Result of processing one template file.

    Attributes:
        path: Rendered path relative to the target directory.
        source: Raw template path the file was produced from.
        content: Bytes written (or that would have been written when skipped).
        outcome: Created, overwritten or skipped because it already existed.
    """

    path: PurePosixPath
    source: PurePosixPath
    content: bytes
    outcome: FileOutcome


ProgressCallback = Callable[[MaterializedFile], None]


@dataclass(frozen=True)
class _Planned:
    node: TemplateFileNode
    target: PurePosixPath


def _globstar_forms(pattern: str) -> Iterator[str]:
    """*pattern* plus the forms where each ``**/`` matches zero directories."""
    yield pattern
    if pattern.startswith("**/"):
        yield from _globstar_forms(pattern[3:])
    if "/**/" in pattern:
        yield from _globstar_forms(pattern.replace("/**/", "/", 1))


def matches_any(path: PurePosixPath, patterns: Iterable[str]) -> bool:
    """Whether the raw relative *path* matches one of the glob *patterns*."""
    text = path.as_posix()
    return any(
        fnmatch.fnmatchcase(text, form) for pattern in patterns for form in _globstar_forms(pattern)
    )


def prepare_target(target_dir: Path, mode: MergeMode) -> Path:
    """
    Make sure *target_dir* exists and may be written under *mode*.

    Raises:
        MergeConflictError: In create mode when the directory exists and is not
            empty, or in any mode when the path exists but is not a directory.
    """
    target = Path(target_dir)
    if target.exists():
        if not target.is_dir():
            raise MergeConflictError(str(target), f"'{target}' exists and is not a directory")
        if mode is MergeMode.CREATE and any(target.iterdir()):
            raise MergeConflictError(str(target))
    logger.debug("%s %s", mode.label, target)
    target.mkdir(parents=True, exist_ok=True)
    return target.resolve()


def atomic_write(path: Path, data: bytes, mode_source: Path | None = None) -> None:
    """Write *data* to *path* through a temporary file so it appears whole or not at all."""
    temp_file = tempfile.NamedTemporaryFile(
        "wb", dir=str(path.parent), prefix=f".{path.name}.", delete=False
    )
    temp_name = temp_file.name
    try:
        with temp_file:
            temp_file.write(data)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        if mode_source is not None:
            shutil.copymode(mode_source, temp_name)
        os.replace(temp_name, path)
    finally:
        if os.path.exists(temp_name):
            with contextlib.suppress(OSError):
                os.remove(temp_name)


class Materializer:
    """
    Writes a rendered template tree into a target directory.

    The tree is visited parents first, siblings by name. Excludes are matched on
    raw paths before anything is rendered and prune whole subtrees. Each path
    segment is rendered on its own; a segment rendering to an empty string drops
    the node and everything below it. All target paths are computed and checked
    for collisions before the first file is written.

    Args:
        context: Variables used for rendering paths and contents.
        target_dir: Existing directory to write into (see :func:`prepare_target`).
        mode: Merge policy for files that already exist.
        exclude: Globs for raw paths that must not be generated.
        disable_templating: Globs for raw paths whose content is copied verbatim.
        on_progress: Called once per processed file, in traversal order.
    """

    def __init__(
        self,
        context: Mapping[str, Any],
        target_dir: Path,
        mode: MergeMode = MergeMode.CREATE,
        exclude: Iterable[str] = (),
        disable_templating: Iterable[str] = (),
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.context = context
        self.target_dir = Path(target_dir)
        self.mode = mode
        self.exclude = tuple(exclude)
        self.disable_templating = tuple(disable_templating)
        self.on_progress = on_progress

    # -- planning ----------------------------------------------------------

    def _render_segment(self, node: TemplateFileNode) -> PurePosixPath | None:
        try:
            segment = render(node.path.name, self.context)
        except RenderError as exc:
            raise exc.at(str(node.path)) from None
        if not segment.strip():
            return None
        rendered = PurePosixPath(segment)
        if rendered.is_absolute() or not rendered.parts or ".." in rendered.parts:
            raise RenderError(
                "rendered path escapes the target directory", segment, path=str(node.path)
            )
        return rendered

    def plan(self, tree: TemplateFileNode) -> list[_Planned]:
        """Compute the target path of every generated node, in write order."""
        planned: list[_Planned] = []
        seen: dict[PurePosixPath, _Planned] = {}
        file_targets: set[PurePosixPath] = set()
        ancestors: dict[PurePosixPath, _Planned] = {}

        def check(entry: _Planned) -> None:
            previous = seen.get(entry.target)
            if previous is not None:
                raise CollisionError(
                    [str(previous.node.path), str(entry.node.path)], str(entry.target)
                )
            for parent in entry.target.parents:
                if parent in file_targets:
                    raise CollisionError(
                        [str(seen[parent].node.path), str(entry.node.path)], str(parent)
                    )
            if not entry.node.is_dir and entry.target in ancestors:
                raise CollisionError(
                    [str(ancestors[entry.target].node.path), str(entry.node.path)],
                    str(entry.target),
                )
            seen[entry.target] = entry
            for parent in entry.target.parents:
                ancestors.setdefault(parent, entry)
            if not entry.node.is_dir:
                file_targets.add(entry.target)

        def visit(node: TemplateFileNode, parent: PurePosixPath) -> None:
            for child in node.children:
                if matches_any(child.path, self.exclude):
                    logger.debug("Excluded %s", child.path)
                    continue
                rendered = self._render_segment(child)
                if rendered is None:
                    logger.debug("Skipped %s: name rendered empty", child.path)
                    continue
                entry = _Planned(child, parent / rendered)
                check(entry)
                planned.append(entry)
                if child.is_dir:
                    visit(child, entry.target)

        visit(tree, PurePosixPath())
        return planned

    # -- writing -----------------------------------------------------------

    def _content(self, node: TemplateFileNode) -> bytes:
        raw = node.read_bytes()
        if matches_any(node.path, self.disable_templating):
            return raw
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Copying %s verbatim: not UTF-8 text", node.path)
            return raw
        try:
            return render(text, self.context).encode("utf-8")
        except RenderError as exc:
            raise exc.at(str(node.path)) from None

    def _write_dir(self, entry: _Planned) -> None:
        dest = self.target_dir / entry.target
        if dest.exists() and not dest.is_dir():
            raise MergeConflictError(
                str(dest), f"cannot create directory '{dest}': a file is in the way"
            )
        dest.mkdir(parents=True, exist_ok=True)

    def _write_file(self, entry: _Planned) -> MaterializedFile:
        content = self._content(entry.node)
        dest = self.target_dir / entry.target

        if dest.is_dir():
            raise MergeConflictError(
                str(dest), f"cannot write '{dest}': a directory is in the way"
            )
        if dest.exists():
            match self.mode:
                case MergeMode.APPEND:
                    outcome = FileOutcome.SKIPPED_EXISTING
                case MergeMode.FORCE:
                    outcome = FileOutcome.OVERWRITTEN
                case MergeMode.CREATE:
                    raise MergeConflictError(str(dest))
        else:
            outcome = FileOutcome.CREATED

        if outcome is not FileOutcome.SKIPPED_EXISTING:
            dest.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(dest, content, mode_source=entry.node.source)
        logger.debug("%s %s (from %s)", outcome.value, entry.target, entry.node.path)
        return MaterializedFile(entry.target, entry.node.path, content, outcome)

    def run(self, tree: TemplateFileNode) -> list[MaterializedFile]:
        """Plan and write the tree; returns one record per processed file."""
        files: list[MaterializedFile] = []
        for entry in self.plan(tree):
            if entry.node.is_dir:
                self._write_dir(entry)
                continue
            record = self._write_file(entry)
            files.append(record)
            if self.on_progress is not None:
                self.on_progress(record)
        return files


def materialize(
    tree: TemplateFileNode,
    context: Mapping[str, Any],
    target_dir: Path,
    mode: MergeMode = MergeMode.CREATE,
    exclude: Iterable[str] = (),
    disable_templating: Iterable[str] = (),
    notes: str = "",
    on_progress: ProgressCallback | None = None,
) -> tuple[list[MaterializedFile], str]:
    """Write *tree* into *target_dir* and return the file records and the rendered notes."""
    materializer = Materializer(context, target_dir, mode, exclude, disable_templating, on_progress)
    files = materializer.run(tree)
    return files, render(notes, context) if notes else ""
