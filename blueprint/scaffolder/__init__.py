"""Blueprint scaffolder -- the template rendering and composition engine.

Quick usage::

    from blueprint.scaffolder import GenerationRequest, ProjectGenerator

    request = GenerationRequest(
        project_name="svc",
        template="base",
        plugins={"cors", "jwt"},
        author="Jane",
    )
    result = await ProjectGenerator().generate(request)
    result.raise_for_failure()
"""

from blueprint.scaffolder.commands import CommandOrchestrator, CommandResult, CommandStep
from blueprint.scaffolder.generator import (
    GenerationFailure,
    GenerationRequest,
    GenerationResult,
    GenerationStage,
    ProjectGenerator,
)
from blueprint.scaffolder.manifest import (
    ManifestMerger,
    ManifestOverlay,
    ProjectManifest,
    merge,
)
from blueprint.scaffolder.plugins import PluginResolver
from blueprint.scaffolder.templates import TemplateRenderer, TemplateTree, load_tree

__all__ = [
    "CommandOrchestrator",
    "CommandResult",
    "CommandStep",
    "GenerationFailure",
    "GenerationRequest",
    "GenerationResult",
    "GenerationStage",
    "ManifestMerger",
    "ManifestOverlay",
    "PluginResolver",
    "ProjectGenerator",
    "ProjectManifest",
    "TemplateRenderer",
    "TemplateTree",
    "load_tree",
    "merge",
]
