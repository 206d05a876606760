"""Template source providers.

A provider turns a template locator into a local directory holding the raw
template tree. Everything network related stays behind this boundary.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Protocol

from scaffoldkit.core.errors import SourceError

logger = logging.getLogger(__name__)

_REMOTE_PREFIXES = ("http://", "https://", "git@", "ssh://", "git://", "file://")


class TemplateSource(Protocol):
    """Provides a local, readable template directory for a locator."""

    def fetch(self, locator: str, ref: str | None = None) -> Path: ...


class LocalTemplateSource:
    """Locators are paths to template directories on disk."""

    def fetch(self, locator: str, ref: str | None = None) -> Path:
        if ref is not None:
            raise SourceError(f"a git ref was given but '{locator}' is a local directory")
        path = Path(locator).expanduser()
        if not path.is_dir():
            raise SourceError(f"template directory '{locator}' does not exist")
        return path.resolve()


class GitTemplateSource:
    """
    Clones a repository with the ``git`` executable.

    Each fetch clones into a fresh temporary directory below *workdir*; call
    :meth:`cleanup` to remove all of them.
    """

    def __init__(self, workdir: Path | None = None) -> None:
        self.workdir = workdir
        self._clones: list[Path] = []

    def _git(self, *args: str) -> None:
        logger.debug("git %s", " ".join(args))
        try:
            result = subprocess.run(
                ["git", *args], capture_output=True, text=True, check=False
            )
        except FileNotFoundError:
            raise SourceError("git is required to fetch remote templates") from None
        if result.returncode != 0:
            raise SourceError(f"git {args[0]} failed: {result.stderr.strip()}")

    def fetch(self, locator: str, ref: str | None = None) -> Path:
        clone_dir = Path(tempfile.mkdtemp(prefix="scaffoldkit-", dir=self.workdir))
        self._clones.append(clone_dir)
        self._git("clone", "--quiet", locator, str(clone_dir))
        if ref is not None:
            self._git("-C", str(clone_dir), "checkout", "--quiet", ref)
        return clone_dir

    def cleanup(self) -> None:
        for clone in self._clones:
            shutil.rmtree(clone, ignore_errors=True)
        self._clones.clear()


def is_remote(locator: str) -> bool:
    return locator.endswith(".git") or locator.startswith(_REMOTE_PREFIXES)


@contextmanager
def open_template(
    locator: str, ref: str | None = None, subpath: str | None = None
) -> Iterator[Path]:
    """
    Yield the local template root for *locator*.

    Remote locators are cloned for the duration of the ``with`` block. *subpath*
    selects a template stored below the repository root.
    """
    if is_remote(locator):
        git = GitTemplateSource()
        try:
            root = git.fetch(locator, ref)
            yield _select(root, subpath)
        finally:
            git.cleanup()
    else:
        yield _select(LocalTemplateSource().fetch(locator, ref), subpath)


def _select(root: Path, subpath: str | None) -> Path:
    if subpath is None:
        return root
    selected = (root / subpath).resolve()
    if not selected.is_relative_to(root.resolve()) or not selected.is_dir():
        raise SourceError(f"'{subpath}' is not a directory inside the template source")
    return selected
