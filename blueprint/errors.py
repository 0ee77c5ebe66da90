"""Error taxonomy for the generation engine.

Every error raised by a generation stage derives from :class:`BlueprintError`.
The ``kind`` attribute is stable (the class name) so callers and the CLI can
report failures without inspecting exception types.
"""

from __future__ import annotations

from collections.abc import Iterable


class BlueprintError(Exception):
    """Base class for every failure the generation engine reports."""

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        self.message = message
        self.stage = stage
        super().__init__(message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class ValidationError(BlueprintError):
    """The generation request is malformed or conflicts with the filesystem."""


class TemplateNotFoundError(BlueprintError):
    """The requested template variant is not in the catalog or not on disk."""

    def __init__(self, template_id: str, message: str | None = None) -> None:
        self.template_id = template_id
        super().__init__(message or f"Unknown template variant: {template_id!r}")


class UnknownPluginError(BlueprintError):
    """A plugin identifier does not resolve against the catalog."""

    def __init__(self, plugin_id: str) -> None:
        self.plugin_id = plugin_id
        super().__init__(f"Unknown plugin: {plugin_id!r}")


class MissingFragmentError(BlueprintError):
    """A plugin declares a template fragment that does not exist on disk."""

    def __init__(self, plugin_id: str, fragment: str) -> None:
        self.plugin_id = plugin_id
        self.fragment = fragment
        super().__init__(f"Template fragment for plugin {plugin_id!r} not found: {fragment}")


class PluginCollisionError(BlueprintError):
    """Two plugins would splice their fragments onto the same location."""

    def __init__(self, destination: str, plugin_ids: Iterable[str]) -> None:
        self.destination = destination
        self.plugin_ids = tuple(sorted(plugin_ids))
        super().__init__(
            f"Plugins {', '.join(self.plugin_ids)} all target {destination!r}"
        )


class FileSystemError(BlueprintError):
    """An I/O failure while rendering, splicing or persisting the manifest."""


class ManifestParseError(BlueprintError):
    """The base project manifest is missing, unreadable or malformed."""


class CommandExecutionError(BlueprintError):
    """An external command exited with a non-zero status."""

    def __init__(self, label: str, returncode: int, output: str) -> None:
        self.label = label
        self.returncode = returncode
        self.output = output
        message = f"{label} failed with exit code {returncode}"
        if output:
            message = f"{message}:\n{output}"
        super().__init__(message)
