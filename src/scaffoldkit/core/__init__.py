"""Template generation engine."""

from scaffoldkit.core.config import (
    Hooks,
    ParameterSpec,
    TemplateDescriptor,
    load_descriptor,
    parse_descriptor,
)
from scaffoldkit.core.context import RenderContext, build_context
from scaffoldkit.core.engine import GenerationResult, generate
from scaffoldkit.core.errors import (
    CollisionError,
    ConfigError,
    HookError,
    MergeConflictError,
    ParameterError,
    RenderError,
    ScaffoldError,
    SourceError,
)
from scaffoldkit.core.hooks import HookInvocation, run_hooks
from scaffoldkit.core.materialize import MaterializedFile, Materializer, materialize, prepare_target
from scaffoldkit.core.parameters import (
    ParameterResolver,
    PromptChannel,
    ScriptedChannel,
    coerce,
    parse_overrides,
    resolve_parameters,
    resolve_project_name,
)
from scaffoldkit.core.render import render
from scaffoldkit.core.sources import open_template
from scaffoldkit.core.tree import TemplateFileNode, load_tree
from scaffoldkit.core.types import (
    CONFIG_FILENAME,
    FileOutcome,
    HookPhase,
    MergeMode,
    NodeKind,
    ParameterKind,
    ParameterValue,
)

__all__ = [
    "CONFIG_FILENAME",
    "CollisionError",
    "ConfigError",
    "FileOutcome",
    "GenerationResult",
    "HookError",
    "HookInvocation",
    "HookPhase",
    "Hooks",
    "MaterializedFile",
    "Materializer",
    "MergeConflictError",
    "MergeMode",
    "NodeKind",
    "ParameterError",
    "ParameterKind",
    "ParameterResolver",
    "ParameterSpec",
    "ParameterValue",
    "PromptChannel",
    "RenderContext",
    "RenderError",
    "ScaffoldError",
    "ScriptedChannel",
    "SourceError",
    "TemplateDescriptor",
    "TemplateFileNode",
    "build_context",
    "coerce",
    "generate",
    "load_descriptor",
    "load_tree",
    "materialize",
    "open_template",
    "parse_descriptor",
    "parse_overrides",
    "prepare_target",
    "render",
    "resolve_parameters",
    "resolve_project_name",
    "run_hooks",
]
