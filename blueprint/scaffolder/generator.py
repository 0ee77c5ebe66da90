"""Generation coordinator.

Takes a :class:`GenerationRequest` and drives the stages that turn it into a
ready-to-build project directory:

    VALIDATING -> RENDERING -> SPLICING -> INITIALIZING -> MERGING -> INSTALLING -> DONE

Any stage error moves the run straight to FAILED.  Nothing already written
is rolled back; the partial directory is left on disk for inspection.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..catalog import (
    AUXILIARY_DOCKER_DIR,
    DOCKER_SCRIPTS,
    Catalog,
    PluginDescriptor,
    TemplateDefinition,
    default_catalog,
)
from ..config import Config
from ..errors import BlueprintError, ValidationError
from ..utils import ConsoleReporter, Reporter
from .commands import CommandOrchestrator, CommandStep
from .manifest import ManifestMerger, ManifestOverlay, ProjectManifest
from .plugins import PluginResolver
from .templates import TemplateRenderer, TemplateTree


# ---------------------------------------------------------------------------
# Request / result models
# ---------------------------------------------------------------------------


class GenerationStage(str, Enum):
    """Stages of a generation run, in execution order."""
    VALIDATING = "validating"
    RENDERING = "rendering"
    SPLICING = "splicing"
    INITIALIZING = "initializing"
    MERGING = "merging"
    INSTALLING = "installing"
    DONE = "done"
    FAILED = "failed"


class GenerationRequest(BaseModel):
    """Immutable description of the project to generate."""

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="Name of the project directory")
    template: str = Field(default="base", description="Template variant identifier")
    plugins: frozenset[str] = Field(default_factory=frozenset)
    author: str = Field(default="")
    description: str = Field(default="")
    docker: bool = Field(default=False, description="Include Docker deployment files")


@dataclass
class GenerationFailure:
    """Structured description of why a run stopped."""

    kind: str
    message: str
    stage: GenerationStage
    error: BlueprintError


@dataclass
class GenerationResult:
    """Outcome of :meth:`ProjectGenerator.generate`."""

    project_path: Path
    stage: GenerationStage = GenerationStage.VALIDATING
    files: list[Path] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)
    manifest: ProjectManifest | None = None
    failure: GenerationFailure | None = None

    @property
    def success(self) -> bool:
        return self.stage is GenerationStage.DONE

    def raise_for_failure(self) -> None:
        """Re-raise the originating error of a failed run."""
        if self.failure is not None:
            raise self.failure.error


@dataclass(frozen=True)
class _Plan:
    template: TemplateDefinition
    tree: TemplateTree
    docker_tree: TemplateTree | None
    plugins: list[PluginDescriptor]


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Composes renderer, plugin resolver, merger and command orchestrator.

    Each collaborator can be injected; by default they are built from
    *config* and the built-in catalog.
    """

    def __init__(
        self,
        config: Config | None = None,
        catalog: Catalog | None = None,
        reporter: Reporter | None = None,
        orchestrator: CommandOrchestrator | None = None,
    ) -> None:
        self.config = config or Config()
        self.catalog = catalog or default_catalog()
        self.reporter = reporter or ConsoleReporter()
        self.renderer = TemplateRenderer(self.config.template_root)
        self.resolver = PluginResolver(self.catalog, self.config.template_root)
        self.merger = ManifestMerger()
        self.orchestrator = orchestrator or CommandOrchestrator(self.reporter)

    # -- Public API --------------------------------------------------------

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate the project described by *request*.

        Never raises for stage failures: the returned result carries the
        failure instead.  Use :meth:`GenerationResult.raise_for_failure` to
        turn it back into an exception.
        """
        target = self.config.project_path(request.project_name)
        result = GenerationResult(project_path=target)
        on_file = self.reporter.file_generated

        try:
            self._advance(result, GenerationStage.VALIDATING)
            plan = self._validate(request, target)

            self._advance(result, GenerationStage.RENDERING)
            context = self._build_context(request)
            result.files += await self.renderer.render(
                plan.tree, target, context, on_file=on_file
            )
            if plan.docker_tree is not None:
                result.files += await self.renderer.render(
                    plan.docker_tree, target, context, fresh=False, on_file=on_file
                )

            self._advance(result, GenerationStage.SPLICING)
            result.files += await self.resolver.splice(
                [p.id for p in plan.plugins], target, on_file=on_file
            )

            self._advance(result, GenerationStage.INITIALIZING)
            init = CommandStep(tuple(self.config.init_args), target)
            await self.orchestrator.run([init])
            result.commands.append(init.label)

            self._advance(result, GenerationStage.MERGING)
            overlay = self._build_overlay(request, plan)
            result.manifest = await self.merger.apply(target, overlay)
            self.reporter.info(f"{self.merger.filename} updated")

            self._advance(result, GenerationStage.INSTALLING)
            install = CommandStep(tuple(self.config.install_args), target)
            await self.orchestrator.run([install])
            result.commands.append(install.label)
        except BlueprintError as exc:
            exc.stage = result.stage.value
            result.failure = GenerationFailure(
                kind=exc.kind, message=exc.message, stage=result.stage, error=exc
            )
            self.reporter.error(f"{exc.kind} during {result.stage.value}: {exc.message}")
            result.stage = GenerationStage.FAILED
            self.reporter.stage(GenerationStage.FAILED.value)
            return result

        self._advance(result, GenerationStage.DONE)
        self.reporter.success(
            f"Project {request.project_name!r} generated at {target} "
            f"({len(result.files)} files)"
        )
        return result

    # -- Stages ------------------------------------------------------------

    def _advance(self, result: GenerationResult, stage: GenerationStage) -> None:
        result.stage = stage
        self.reporter.stage(stage.value)

    def _validate(self, request: GenerationRequest, target: Path) -> _Plan:
        """Check the request and resolve everything it references.

        Only reads the catalog and the template root; nothing is written.
        """
        name = request.project_name
        if not name.strip():
            raise ValidationError("Project name is required")
        if name in (".", "..") or "/" in name or os.sep in name:
            raise ValidationError(f"Project name must be a single directory name: {name!r}")
        if os.path.lexists(target):
            raise ValidationError(f"Target path already exists: {target}")

        template = self.catalog.template(request.template)
        plugins = self.resolver.resolve_all(request.plugins)
        tree = self.renderer.load(template.directory, template.id)
        docker_tree = self.renderer.load(AUXILIARY_DOCKER_DIR) if request.docker else None
        return _Plan(template=template, tree=tree, docker_tree=docker_tree, plugins=plugins)

    @staticmethod
    def _build_context(request: GenerationRequest) -> dict[str, str]:
        """Flat placeholder values available to every template file."""
        return {
            "name": request.project_name,
            "projectName": request.project_name,
            "author": request.author,
            "description": request.description,
            "template": request.template,
        }

    @staticmethod
    def _build_overlay(request: GenerationRequest, plan: _Plan) -> ManifestOverlay:
        template = plan.template
        scripts = dict(template.scripts)
        if request.docker:
            scripts.update(DOCKER_SCRIPTS)
        dependencies = dict(template.dependencies)
        dependencies.update({p.package: p.version for p in plan.plugins})
        return ManifestOverlay(
            main=template.main,
            author=request.author or template.author,
            description=request.description or template.description,
            scripts=scripts,
            dependencies=dependencies,
            dev_dependencies=dict(template.dev_dependencies),
        )
