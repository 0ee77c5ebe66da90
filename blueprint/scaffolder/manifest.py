"""Project manifest (``package.json``) model and merger.

The package manager's ``init`` command writes a minimal default manifest.
:class:`ManifestMerger` overlays the template metadata, user choices and
plugin dependencies onto it and persists the result with a single atomic
write.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from ..errors import FileSystemError, ManifestParseError
from ..utils import load_json, save_json

MANIFEST_FILENAME = "package.json"

# Mapping fields written with sorted keys, following package-manager convention.
_SORTED_MAPPINGS = ("dependencies", "devDependencies")
_MANAGED_KEYS = ("main", "author", "description", "scripts", "dependencies", "devDependencies")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ProjectManifest(BaseModel):
    """The generated project's manifest.

    Keys this engine does not manage (``name``, ``version``, ``license``...)
    are kept as extra fields and written back in their original position.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    main: str = Field(default="")
    # npm also accepts a person object: {"name": ..., "email": ..., "url": ...}
    author: str | dict[str, Any] = Field(default="")
    description: str = Field(default="")
    scripts: dict[str, str] = Field(default_factory=dict)
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict, alias="devDependencies")

    _key_order: list[str] = PrivateAttr(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectManifest":
        manifest = cls.model_validate(data)
        manifest._key_order = list(data)
        return manifest

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping with a reproducible key order."""
        values = self.model_dump(by_alias=True)
        for key in _SORTED_MAPPINGS:
            values[key] = dict(sorted(values[key].items()))

        ordered: dict[str, Any] = {}
        for key in self._key_order:
            if key in values:
                ordered[key] = values[key]
        for key in (*values.keys(), *_MANAGED_KEYS):
            if key not in ordered and key in values:
                ordered[key] = values[key]
        return ordered

    def dumps(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"


class ManifestOverlay(BaseModel):
    """Metadata laid over the base manifest.

    Empty scalar values never replace the base value.
    """

    model_config = ConfigDict(frozen=True)

    main: str = Field(default="")
    author: str = Field(default="")
    description: str = Field(default="")
    scripts: dict[str, str] = Field(default_factory=dict)
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------


def merge(base: ProjectManifest, overlay: ManifestOverlay) -> ProjectManifest:
    """Overlay *overlay* onto *base* and return the merged manifest.

    * ``main``, ``author``, ``description``: the overlay wins when non-empty.
    * ``scripts``, ``dependencies``, ``devDependencies``: key-level union,
      the overlay's value wins on conflict.  Values are opaque strings.

    *base* is not modified.
    """
    merged = base.model_copy(deep=True)
    merged._key_order = list(base._key_order)

    for name in ("main", "author", "description"):
        value = getattr(overlay, name)
        if value:
            setattr(merged, name, value)

    merged.scripts = {**base.scripts, **overlay.scripts}
    merged.dependencies = {**base.dependencies, **overlay.dependencies}
    merged.dev_dependencies = {**base.dev_dependencies, **overlay.dev_dependencies}
    return merged


class ManifestMerger:
    """Read-modify-write of the manifest file in a project directory."""

    def __init__(self, filename: str = MANIFEST_FILENAME) -> None:
        self.filename = filename

    def read(self, path: Path) -> ProjectManifest:
        """Load the base manifest.

        Raises:
            ManifestParseError: If the file is missing, unreadable or invalid.
        """
        try:
            data = load_json(path)
            return ProjectManifest.from_dict(data)
        except (OSError, ValueError, pydantic.ValidationError) as exc:
            # json.JSONDecodeError is a ValueError subclass
            raise ManifestParseError(f"Could not parse manifest {path}: {exc}") from exc

    def write(self, manifest: ProjectManifest, path: Path) -> None:
        """Atomically persist *manifest* to *path*.

        Raises:
            FileSystemError: If the write fails.
        """
        try:
            save_json(manifest.to_dict(), path)
        except OSError as exc:
            raise FileSystemError(f"Could not write manifest {path}: {exc}") from exc

    async def apply(self, project_dir: str | Path, overlay: ManifestOverlay) -> ProjectManifest:
        """Merge *overlay* into ``<project_dir>/package.json`` and save it."""
        path = Path(project_dir) / self.filename
        base = await asyncio.to_thread(self.read, path)
        merged = merge(base, overlay)
        await asyncio.to_thread(self.write, merged, path)
        return merged
