"""Raw template tree loading."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from scaffoldkit.core.errors import SourceError
from scaffoldkit.core.types import CONFIG_FILENAME, NodeKind

logger = logging.getLogger(__name__)

_IGNORED_NAMES = frozenset({".git"})


@dataclass(frozen=True)
class TemplateFileNode:
    """
    One entry of the raw template tree.

    Attributes:
        path: Un-rendered path relative to the template root (may contain template syntax).
        kind: File or directory.
        source: Absolute location of the entry on disk.
        children: Sorted child nodes, empty for files.
    """

    path: PurePosixPath
    kind: NodeKind
    source: Path
    children: tuple[TemplateFileNode, ...] = ()

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIRECTORY

    def read_bytes(self) -> bytes:
        """Raw content of a file node."""
        if self.is_dir:
            raise IsADirectoryError(str(self.source))
        return self.source.read_bytes()

    def walk(self) -> Iterator[TemplateFileNode]:
        """Yield this node and then its descendants, parents before children."""
        yield self
        for child in self.children:
            yield from child.walk()


def _scan(directory: Path, rel: PurePosixPath, root: bool) -> tuple[TemplateFileNode, ...]:
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda e: e.name)

    nodes: list[TemplateFileNode] = []
    for entry in entries:
        if entry.name in _IGNORED_NAMES or (root and entry.name == CONFIG_FILENAME):
            continue
        path = rel / entry.name
        source = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            children = _scan(source, path, root=False)
            nodes.append(TemplateFileNode(path, NodeKind.DIRECTORY, source, children))
        elif entry.is_file():
            nodes.append(TemplateFileNode(path, NodeKind.FILE, source))
        else:
            logger.debug("Ignoring %s: not a regular file or directory", source)
    return tuple(nodes)


def load_tree(template_root: Path) -> TemplateFileNode:
    """
    Build the raw node tree below *template_root*.

    Siblings are sorted by name. ``.git`` directories and the configuration
    document at the root are left out. The returned root node has an empty path.
    """
    root = Path(template_root)
    if not root.is_dir():
        raise SourceError(f"template root '{root}' is not a directory")
    children = _scan(root, PurePosixPath(), root=True)
    return TemplateFileNode(PurePosixPath(), NodeKind.DIRECTORY, root, children)
