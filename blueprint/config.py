"""Blueprint configuration.

Typed settings for the generator.  Uses Pydantic v2 models so values are
validated at construction time and can be round-tripped through JSON or built
from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_TEMPLATE_ROOT = Path(__file__).parent / "templates"


class Config(BaseModel):
    """Global generator configuration.

    Created once by the CLI (or a test) and handed to the
    :class:`~blueprint.scaffolder.generator.ProjectGenerator`.
    """

    template_root: Path = Field(default=DEFAULT_TEMPLATE_ROOT)
    output_dir: Path = Field(default=Path("."))
    package_manager: str = Field(default="pnpm", min_length=1)

    # Explicit argument vectors override the package-manager defaults.
    init_command: list[str] | None = Field(default=None)
    install_command: list[str] | None = Field(default=None)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def init_args(self) -> list[str]:
        """Argument vector that creates the base ``package.json``."""
        return list(self.init_command or [self.package_manager, "init"])

    @property
    def install_args(self) -> list[str]:
        """Argument vector that installs the project's dependencies."""
        return list(self.install_command or [self.package_manager, "install"])

    def project_path(self, project_name: str) -> Path:
        """Directory a project called *project_name* is generated into."""
        return self.output_dir / project_name

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            BLUEPRINT_TEMPLATE_ROOT, BLUEPRINT_OUTPUT_DIR,
            BLUEPRINT_PACKAGE_MANAGER.
        """
        kwargs: dict[str, object] = {}
        if os.environ.get("BLUEPRINT_TEMPLATE_ROOT"):
            kwargs["template_root"] = Path(os.environ["BLUEPRINT_TEMPLATE_ROOT"])
        if os.environ.get("BLUEPRINT_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["BLUEPRINT_OUTPUT_DIR"])
        if os.environ.get("BLUEPRINT_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["BLUEPRINT_PACKAGE_MANAGER"]
        return cls(**kwargs)
