"""Shared pytest fixtures for the Blueprint test suite.

Provides reusable fixtures for:
- A small on-disk template root (one template, plugin fragments, docker tree)
- A catalog describing that template root
- Configs whose external commands are ``python -c`` one-liners
- A mocked progress reporter
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from blueprint.catalog import Catalog, PluginDescriptor, TemplateDefinition
from blueprint.config import Config


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

NOOP_COMMAND = [sys.executable, "-c", "pass"]
FAIL_COMMAND = [sys.executable, "-c", "import sys; print('boom'); sys.exit(3)"]

# Mimics ``pnpm init``: writes a minimal manifest unless one already exists.
INIT_COMMAND = [
    sys.executable,
    "-c",
    (
        "import json, pathlib\n"
        "p = pathlib.Path('package.json')\n"
        "if not p.exists():\n"
        "    p.write_text(json.dumps({'name': pathlib.Path.cwd().name, 'version': '1.0.0',"
        " 'main': 'index.js', 'scripts': {'test': 'echo no tests'}, 'author': '',"
        " 'license': 'ISC'}, indent=2))\n"
    ),
]


# ---------------------------------------------------------------------------
# Template root
# ---------------------------------------------------------------------------

BASE_MANIFEST = {
    "name": "{{name}}",
    "version": "1.0.0",
    "main": "index.js",
    "author": "",
    "description": "",
    "scripts": {"test": "echo no tests"},
    "license": "ISC",
}


@pytest.fixture
def template_root(tmp_path: Path) -> Path:
    """Template root with an ``app`` tree, plugin fragments and a docker tree."""
    root = tmp_path / "templates"

    app = root / "app"
    (app / "src" / "routes").mkdir(parents=True)
    (app / "server.txt").write_text("server for {{name}}\n", encoding="utf-8")
    (app / "package.json").write_text(json.dumps(BASE_MANIFEST, indent=2), encoding="utf-8")
    (app / "src" / "main.ts").write_text(
        'const name = "{{name}}"; // by {{author}} {{unknown}}\n', encoding="utf-8"
    )
    (app / "src" / "routes" / "users.ts").write_text("export {};\n", encoding="utf-8")
    (app / "logo.bin").write_bytes(b"\x89PNG\x00\xff{{name}}\x00")

    plugins = root / "plugins"
    plugins.mkdir()
    (plugins / "cors.txt").write_text("cors fragment for {{name}}\n", encoding="utf-8")
    (plugins / "jwt.ts").write_text("export const jwt = true;\n", encoding="utf-8")

    docker = root / "docker"
    docker.mkdir()
    (docker / "Dockerfile").write_text("# image for {{projectName}}\n", encoding="utf-8")

    yield root


@pytest.fixture
def catalog() -> Catalog:
    """Catalog matching :func:`template_root`."""
    return Catalog(
        plugins=[
            PluginDescriptor(
                id="cors", package="@fastify/cors", version="^11.0.1", fragment="plugins/cors.txt"
            ),
            PluginDescriptor(
                id="jwt",
                package="@fastify/jwt",
                version="^9.1.0",
                fragment="plugins/jwt.ts",
                destination="src/plugins/jwt.ts",
            ),
            PluginDescriptor(id="rate-limit", package="@fastify/rate-limit", version="^10.2.2"),
            PluginDescriptor(
                id="ghost", package="ghost-pkg", version="1.0.0", fragment="plugins/ghost.ts"
            ),
        ],
        templates=[
            TemplateDefinition(
                id="app",
                directory="app",
                main="server.ts",
                description="My awesome project",
                scripts={"dev": "tsx --watch src/server.ts"},
                dependencies={"fastify": "^5.3.3"},
                dev_dependencies={"typescript": "^5.8.3"},
            ),
            TemplateDefinition(id="missing", directory="does-not-exist"),
        ],
    )


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Parent directory generated projects are written into."""
    out = tmp_path / "out"
    out.mkdir()
    yield out


@pytest.fixture
def config(template_root: Path, output_dir: Path) -> Config:
    """Config whose init/install commands always succeed."""
    return Config(
        template_root=template_root,
        output_dir=output_dir,
        init_command=list(NOOP_COMMAND),
        install_command=list(NOOP_COMMAND),
    )


@pytest.fixture
def reporter() -> MagicMock:
    """Mocked progress/failure sink."""
    return MagicMock()


@pytest.fixture
def noop_command() -> list[str]:
    return list(NOOP_COMMAND)


@pytest.fixture
def fail_command() -> list[str]:
    """Prints ``boom`` and exits with status 3."""
    return list(FAIL_COMMAND)


@pytest.fixture
def init_command() -> list[str]:
    """Stand-in for ``pnpm init``."""
    return list(INIT_COMMAND)
