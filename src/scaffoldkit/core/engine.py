"""End-to-end generation: descriptor, parameters, context, tree, hooks."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from scaffoldkit.core.config import TemplateDescriptor, load_descriptor
from scaffoldkit.core.context import RenderContext, build_context
from scaffoldkit.core.hooks import HookInvocation, run_hooks
from scaffoldkit.core.materialize import (
    MaterializedFile,
    ProgressCallback,
    materialize,
    prepare_target,
)
from scaffoldkit.core.parameters import PromptChannel, resolve_parameters, resolve_project_name
from scaffoldkit.core.tree import load_tree
from scaffoldkit.core.types import HookPhase, MergeMode

logger = logging.getLogger(__name__)

HookCallback = Callable[[HookPhase, str], None]


@dataclass(frozen=True)
class GenerationResult:
    """Everything produced by one successful run."""

    target_dir: Path
    descriptor: TemplateDescriptor
    context: RenderContext
    files: list[MaterializedFile] = field(default_factory=list)
    notes: str = ""
    hooks: list[HookInvocation] = field(default_factory=list)


def generate(
    template_root: Path,
    target_dir: Path | None = None,
    *,
    project_name: str | None = None,
    overrides: Mapping[str, str] | None = None,
    channel: PromptChannel | None = None,
    mode: MergeMode = MergeMode.CREATE,
    on_progress: ProgressCallback | None = None,
    on_hook: HookCallback | None = None,
) -> GenerationResult:
    """
    Generate a project from the template at *template_root*.

    Order of operations: load and validate the descriptor and raw tree, resolve
    the project name and parameters, build the render context, prepare the
    target directory, run ``pre`` hooks inside it, materialize the tree, render
    the notes, run ``post`` hooks. Any error stops the run at that point; files
    already written stay in place.

    Args:
        template_root: Local directory holding the template and its `.scaffold.toml`.
        target_dir: Output directory. Defaults to ``./<project name>``.
        project_name: Project name; prompted for through *channel* when omitted.
        overrides: ``name -> raw string`` parameter values. A ``name`` entry sets
            the project name when *project_name* is not given.
        channel: Interactive input/output; ``None`` runs non-interactively.
        mode: Merge policy for an existing target.
        on_progress: Called once per processed file.
        on_hook: Called with the phase and command line before each hook runs.
    """
    template_root = Path(template_root)
    descriptor = load_descriptor(template_root)
    tree = load_tree(template_root)

    overrides = dict(overrides or {})
    name_override = overrides.pop("name", None)
    if project_name is None:
        project_name = name_override
    name = resolve_project_name(project_name, channel)
    values = resolve_parameters(descriptor.parameters, overrides, channel)

    target = Path(target_dir) if target_dir is not None else Path.cwd() / name
    context = build_context(values, name, descriptor, target.resolve())
    target = prepare_target(target, mode)

    def started(phase: HookPhase) -> Callable[[str], None] | None:
        if on_hook is None:
            return None
        return lambda command: on_hook(phase, command)

    invocations = run_hooks(HookPhase.PRE, descriptor.hooks.pre, target, started(HookPhase.PRE))

    files, notes = materialize(
        tree,
        context,
        target,
        mode=mode,
        exclude=descriptor.exclude,
        disable_templating=descriptor.disable_templating,
        notes=descriptor.notes,
        on_progress=on_progress,
    )
    logger.debug("Materialized %d file(s) into %s", len(files), target)

    invocations += run_hooks(
        HookPhase.POST, descriptor.hooks.post, target, started(HookPhase.POST)
    )

    return GenerationResult(
        target_dir=target,
        descriptor=descriptor,
        context=context,
        files=files,
        notes=notes,
        hooks=invocations,
    )
