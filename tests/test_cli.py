"""Tests for the command-line entry point (blueprint.cli)."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from blueprint.cli import build_parser, main
from blueprint.config import Config

pytestmark = pytest.mark.unit


class TestParser:
    def test_generate_arguments(self):
        args = build_parser().parse_args(
            ["generate", "--name", "svc", "--orm", "drizzle", "-p", "cors", "-p", "jwt", "--docker"]
        )
        assert args.command == "generate"
        assert args.name == "svc"
        assert args.template == "drizzle"
        assert args.plugins == ["cors", "jwt"]
        assert args.docker is True

    def test_generate_defaults(self):
        args = build_parser().parse_args(["generate", "--name", "svc"])
        assert args.template == "base"
        assert args.plugins == []
        assert args.author == ""
        assert args.output is None

    def test_name_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["generate"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestMain:
    def test_list_plugins(self, capsys):
        main(["plugins"])
        out = capsys.readouterr().out
        assert "@fastify/cors" in out
        assert "swagger-ui" in out

    def test_list_templates(self, capsys):
        main(["templates"])
        out = capsys.readouterr().out
        assert "drizzle" in out
        assert "app-base" in out

    def test_generate_success(self, tmp_path: Path):
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir()
        init = bin_dir / "init.py"
        init.write_text(
            "import json, pathlib\n"
            "pathlib.Path('package.json').write_text(json.dumps({'name': 'svc', 'version': '1.0.0'}))\n"
        )
        noop = bin_dir / "noop.py"
        noop.write_text("")

        config = Config(
            output_dir=tmp_path,
            init_command=[sys.executable, str(init)],
            install_command=[sys.executable, str(noop)],
        )
        with patch("blueprint.cli.Config.from_env", return_value=config):
            with pytest.raises(SystemExit) as exc_info:
                main(["generate", "--name", "svc", "-p", "jwt", "--author", "A", "--quiet"])

        assert exc_info.value.code == 0
        manifest = json.loads((tmp_path / "svc" / "package.json").read_text())
        assert manifest["author"] == "A"
        assert manifest["dependencies"]["@fastify/jwt"] == "^9.1.0"
        assert (tmp_path / "svc" / "src" / "plugins" / "jwt.ts").is_file()

    def test_generate_failure_exit_code(self, tmp_path: Path, capsys):
        (tmp_path / "svc").mkdir()
        with patch.dict(os.environ, {"BLUEPRINT_OUTPUT_DIR": str(tmp_path)}):
            with pytest.raises(SystemExit) as exc_info:
                main(["generate", "--name", "svc", "--quiet"])
        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "validating" in out

    def test_unknown_plugin_exit_code(self, tmp_path: Path):
        with patch.dict(os.environ, {"BLUEPRINT_OUTPUT_DIR": str(tmp_path)}):
            with pytest.raises(SystemExit) as exc_info:
                main(["generate", "--name", "svc", "-p", "graphql", "--quiet"])
        assert exc_info.value.code == 1
        assert not (tmp_path / "svc").exists()
