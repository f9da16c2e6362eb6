"""Shared pytest fixtures for the nest-scaffold test suite.

Provides reusable fixtures for:
- Temporary NestJS project directories
- Shared project constants and template registry
- Mock subprocess helpers for the installer and schema tool
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from nest_scaffold.config import Config
from nest_scaffold.scaffolder.constants import ProjectConstants
from nest_scaffold.scaffolder.registry import TemplateRegistry


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary NestJS project root with a package.json (auto-cleanup)."""
    project_dir = tmp_path / "test-project"
    project_dir.mkdir()
    (project_dir / "package.json").write_text('{"name": "test-project"}\n', encoding="utf-8")
    yield project_dir


STOCK_APP_MODULE = """import { Module } from '@nestjs/common';
import { AppController } from './app.controller';
import { AppService } from './app.service';

@Module({
  imports: [],
  controllers: [AppController],
  providers: [AppService],
})
export class AppModule {}
"""


@pytest.fixture
def stock_app_module(tmp_project_dir: Path) -> Path:
    """Write the root module generated by ``nest new`` into the project."""
    path = tmp_project_dir / "src" / "app.module.ts"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(STOCK_APP_MODULE, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Constants / registry
# ---------------------------------------------------------------------------

@pytest.fixture
def constants() -> ProjectConstants:
    """Project constants with a recognisable secret."""
    return ProjectConstants(jwt_secret="test-secret")


@pytest.fixture
def registry() -> TemplateRegistry:
    """The default template registry."""
    return TemplateRegistry()


@pytest.fixture
def make_config(tmp_project_dir: Path):
    """Factory for a Config pointing at the temporary project.

    Usage:
        def test_run(make_config):
            config = make_config(nest_version="latest")
    """
    def factory(**overrides: Any) -> Config:
        return Config(**{"project_dir": tmp_project_dir, "jwt_secret": "test-secret", **overrides})

    return factory


# ---------------------------------------------------------------------------
# Subprocess mocks
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


@pytest.fixture
def fake_run_command():
    """Replacement for ``nest_scaffold.pipeline.run_command``.

    Records every command and returns the exit code configured for its
    executable (``0`` unless set in ``returncodes``).

    Usage:
        def test_pipeline(fake_run_command):
            fake = fake_run_command(returncodes={"npm": 1})
            with patch("nest_scaffold.pipeline.run_command", fake):
                ...
            assert fake.calls[0][0] == "npm"
    """
    def factory(returncodes: dict[str, int] | None = None) -> AsyncMock:
        codes = returncodes or {}
        calls: list[list[str]] = []

        async def _run(cmd: list[str], **kwargs: Any) -> tuple[int, str, str]:
            calls.append(list(cmd))
            return (codes.get(cmd[0], 0), "", "")

        fake = AsyncMock(side_effect=_run)
        fake.calls = calls
        return fake

    return factory
