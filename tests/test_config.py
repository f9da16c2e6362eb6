"""Unit tests for Config (nest_scaffold.config).

Tests cover:
- Config defaults and derived paths
- constants() producing the shared ProjectConstants
- load from JSON
- from_env
- validation
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from nest_scaffold.config import Config
from nest_scaffold.scaffolder.constants import DEFAULT_JWT_SECRET, ProjectConstants

pytestmark = pytest.mark.unit


class TestConfigDefaults:
    def test_defaults(self):
        config = Config()
        assert config.project_dir == Path.cwd()
        assert config.nest_version is None
        assert config.jwt_secret == DEFAULT_JWT_SECRET
        assert config.package_manager == "npm"
        assert config.install_flags == ["--legacy-peer-deps"]
        assert config.schema_command == ["npx", "prisma", "init"]
        assert config.run_install is True
        assert config.run_schema_init is True
        assert config.command_timeout is None

    def test_source_root(self, tmp_path: Path):
        assert Config(project_dir=tmp_path).source_root == tmp_path / "src"

    def test_install_flags_not_shared(self):
        a = Config()
        a.install_flags.append("--force")
        assert Config().install_flags == ["--legacy-peer-deps"]

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            Config(command_timeout=0)


class TestConfigConstants:
    def test_secret_threaded_into_constants(self):
        constants = Config(jwt_secret="s3cr3t").constants()
        assert isinstance(constants, ProjectConstants)
        assert constants.jwt_secret == "s3cr3t"

    def test_constants_frozen(self):
        constants = Config().constants()
        with pytest.raises(ValidationError):
            constants.jwt_secret = "other"


class TestConfigLoad:
    def test_load_json(self, tmp_path: Path):
        path = tmp_path / "scaffold.json"
        path.write_text(
            json.dumps({
                "project_dir": str(tmp_path),
                "nest_version": "10.4.9",
                "run_install": False,
            }),
            encoding="utf-8",
        )
        config = Config.load(path)
        assert config.project_dir == tmp_path
        assert config.nest_version == "10.4.9"
        assert config.run_install is False

    def test_load_invalid(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text('{"command_timeout": -5}', encoding="utf-8")
        with pytest.raises(ValidationError):
            Config.load(path)


class TestConfigFromEnv:
    def test_empty_env(self):
        with patch.dict(os.environ, {}, clear=True):
            config = Config.from_env()
        assert config.nest_version is None
        assert config.run_install is True

    def test_all_variables(self, tmp_path: Path):
        env = {
            "NEST_SCAFFOLD_PROJECT_DIR": str(tmp_path),
            "NEST_SCAFFOLD_VERSION": "latest",
            "NEST_SCAFFOLD_JWT_SECRET": "env-secret",
            "NEST_SCAFFOLD_PACKAGE_MANAGER": "pnpm",
            "NEST_SCAFFOLD_SKIP_INSTALL": "true",
            "NEST_SCAFFOLD_SKIP_SCHEMA": "1",
            "NEST_SCAFFOLD_COMMAND_TIMEOUT": "90",
        }
        with patch.dict(os.environ, env, clear=True):
            config = Config.from_env()
        assert config.project_dir == tmp_path
        assert config.nest_version == "latest"
        assert config.jwt_secret == "env-secret"
        assert config.package_manager == "pnpm"
        assert config.run_install is False
        assert config.run_schema_init is False
        assert config.command_timeout == 90.0

    def test_empty_version_is_kept(self):
        with patch.dict(os.environ, {"NEST_SCAFFOLD_VERSION": ""}, clear=True):
            assert Config.from_env().nest_version == ""

    def test_skip_flags_falsy(self):
        with patch.dict(os.environ, {"NEST_SCAFFOLD_SKIP_INSTALL": "no"}, clear=True):
            assert Config.from_env().run_install is True
