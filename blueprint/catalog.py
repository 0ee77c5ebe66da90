"""Static catalog of template variants and plugins.

The catalog is built once at start-up and handed to the components that need
it.  It is read-only: lookups return frozen Pydantic models and the
underlying mappings are exposed as ``MappingProxyType`` views.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field

from .errors import TemplateNotFoundError, UnknownPluginError

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class PluginDescriptor(BaseModel):
    """A selectable feature module.

    ``fragment`` is a path relative to the template root.  Plugins without a
    fragment only contribute a dependency to the generated manifest.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    package: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    fragment: str | None = Field(default=None)
    destination: str | None = Field(
        default=None,
        description="Path inside the generated project; defaults to plugins/<id>",
    )

    @property
    def target(self) -> str:
        """Relative location the fragment is spliced to."""
        return self.destination or f"plugins/{self.id}"


class TemplateDefinition(BaseModel):
    """A starter layout plus the manifest metadata it contributes."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    directory: str = Field(..., min_length=1, description="Tree directory under the template root")
    main: str = Field(default="")
    author: str = Field(default="")
    description: str = Field(default="")
    scripts: dict[str, str] = Field(default_factory=dict)
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class Catalog:
    """Read-only lookup table of templates and plugins."""

    def __init__(
        self,
        plugins: Iterable[PluginDescriptor] = (),
        templates: Iterable[TemplateDefinition] = (),
    ) -> None:
        self._plugins = MappingProxyType({p.id: p for p in plugins})
        self._templates = MappingProxyType({t.id: t for t in templates})

    @property
    def plugins(self) -> Mapping[str, PluginDescriptor]:
        return self._plugins

    @property
    def templates(self) -> Mapping[str, TemplateDefinition]:
        return self._templates

    def plugin(self, plugin_id: str) -> PluginDescriptor:
        try:
            return self._plugins[plugin_id]
        except KeyError:
            raise UnknownPluginError(plugin_id) from None

    def template(self, template_id: str) -> TemplateDefinition:
        try:
            return self._templates[template_id]
        except KeyError:
            raise TemplateNotFoundError(template_id) from None


# ---------------------------------------------------------------------------
# Built-in data
# ---------------------------------------------------------------------------

AUXILIARY_DOCKER_DIR = "docker"

DOCKER_SCRIPTS: dict[str, str] = {
    "docker:build": "docker-compose build",
    "docker:up": "docker-compose up -d",
    "docker:down": "docker-compose down",
    "docker:logs": "docker-compose logs -f",
}

_BASE_DEPENDENCIES: dict[str, str] = {
    "@fastify/autoload": "^6.3.0",
    "fastify": "^5.3.3",
    "fastify-plugin": "^5.0.1",
    "fastify-type-provider-zod": "^4.0.2",
    "pino": "^9.7.0",
    "pino-pretty": "^13.0.0",
    "zennv": "^0.1.1",
    "zod": "^3.24.2",
}

_BASE_DEV_DEPENDENCIES: dict[str, str] = {
    "typescript": "^5.8.3",
    "@types/node": "^22.15.21",
    "prettier": "^3.5.3",
    "tsx": "^4.19.4",
    "tsc-alias": "^1.8.13",
}

BUILTIN_TEMPLATES: tuple[TemplateDefinition, ...] = (
    TemplateDefinition(
        id="base",
        directory="app-base",
        main="server.ts",
        description="My awesome project",
        scripts={
            "dev": "tsx --watch src/server.ts",
            "build": "tsc && tsc-alias",
        },
        dependencies=dict(_BASE_DEPENDENCIES),
        dev_dependencies=dict(_BASE_DEV_DEPENDENCIES),
    ),
    TemplateDefinition(
        id="drizzle",
        directory="app-drizzle",
        main="server.ts",
        description="My awesome project",
        scripts={
            "dev": "tsx --watch src/main.ts",
            "build": "tsc && tsc-alias",
            "db:push": "drizzle-kit push",
            "db:studio": "drizzle-kit studio",
            "db:generate": "drizzle-kit generate",
            "db:migrate": "drizzle-kit migrate",
            "db:seed:dev": "tsx src/db/seeds/dev.ts",
            "dbml:generate": "tsx src/db/dbml.ts",
        },
        dependencies={
            **_BASE_DEPENDENCIES,
            "drizzle-orm": "^0.41.0",
            "drizzle-zod": "^0.7.0",
            "pg": "^8.16.0",
            "postgres": "^3.4.7",
        },
        dev_dependencies={
            **_BASE_DEV_DEPENDENCIES,
            "drizzle-dbml-generator": "^0.10.0",
            "drizzle-kit": "^0.31.1",
        },
    ),
)

BUILTIN_PLUGINS: tuple[PluginDescriptor, ...] = (
    PluginDescriptor(id="cors", package="@fastify/cors", version="^11.0.1"),
    PluginDescriptor(
        id="jwt",
        package="@fastify/jwt",
        version="^9.1.0",
        fragment="plugins/jwt.ts",
        destination="src/plugins/jwt.ts",
    ),
    PluginDescriptor(id="rate-limit", package="@fastify/rate-limit", version="^10.2.2"),
    PluginDescriptor(
        id="swagger",
        package="@fastify/swagger",
        version="^9.4.2",
        fragment="plugins/swagger.ts",
        destination="src/plugins/swagger.ts",
    ),
    PluginDescriptor(id="swagger-ui", package="@fastify/swagger-ui", version="^5.2.2"),
)


def default_catalog() -> Catalog:
    """Return the catalog of built-in templates and plugins."""
    return Catalog(plugins=BUILTIN_PLUGINS, templates=BUILTIN_TEMPLATES)
