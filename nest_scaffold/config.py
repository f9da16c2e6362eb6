"""nest-scaffold configuration.

Typed settings for one generation run.  Values come from command-line
flags, ``NEST_SCAFFOLD_*`` environment variables or a JSON file; the
pipeline receives a single validated ``Config`` instance.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from nest_scaffold.scaffolder.constants import DEFAULT_JWT_SECRET, ProjectConstants
from nest_scaffold.scaffolder.dependencies import DEFAULT_INSTALL_FLAGS
from nest_scaffold.scaffolder.skeleton import SOURCE_ROOT

_TRUTHY = {"1", "true", "yes", "on"}


class Config(BaseModel):
    """Settings for a scaffolding run.

    ``nest_version`` left as ``None`` means the pipeline prompts for it.
    """

    project_dir: Path = Field(default_factory=Path.cwd)
    nest_version: str | None = Field(default=None)
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET)
    package_manager: str = Field(default="npm")
    install_flags: list[str] = Field(default_factory=lambda: list(DEFAULT_INSTALL_FLAGS))
    schema_command: list[str] = Field(default_factory=lambda: ["npx", "prisma", "init"])
    run_install: bool = Field(default=True)
    run_schema_init: bool = Field(default=True)
    command_timeout: float | None = Field(
        default=None, gt=0, description="Per external command timeout in seconds"
    )

    @property
    def source_root(self) -> Path:
        """The conventional ``src/`` directory of the target project."""
        return self.project_dir / SOURCE_ROOT

    def constants(self) -> ProjectConstants:
        """Build the run's single :class:`ProjectConstants` record."""
        return ProjectConstants(jwt_secret=self.jwt_secret)

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load settings from a JSON file."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            NEST_SCAFFOLD_PROJECT_DIR, NEST_SCAFFOLD_VERSION,
            NEST_SCAFFOLD_JWT_SECRET, NEST_SCAFFOLD_PACKAGE_MANAGER,
            NEST_SCAFFOLD_SKIP_INSTALL, NEST_SCAFFOLD_SKIP_SCHEMA,
            NEST_SCAFFOLD_COMMAND_TIMEOUT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("NEST_SCAFFOLD_PROJECT_DIR"):
            kwargs["project_dir"] = Path(os.environ["NEST_SCAFFOLD_PROJECT_DIR"])
        if "NEST_SCAFFOLD_VERSION" in os.environ:
            kwargs["nest_version"] = os.environ["NEST_SCAFFOLD_VERSION"]
        if os.environ.get("NEST_SCAFFOLD_JWT_SECRET"):
            kwargs["jwt_secret"] = os.environ["NEST_SCAFFOLD_JWT_SECRET"]
        if os.environ.get("NEST_SCAFFOLD_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["NEST_SCAFFOLD_PACKAGE_MANAGER"]
        if os.environ.get("NEST_SCAFFOLD_SKIP_INSTALL", "").lower() in _TRUTHY:
            kwargs["run_install"] = False
        if os.environ.get("NEST_SCAFFOLD_SKIP_SCHEMA", "").lower() in _TRUTHY:
            kwargs["run_schema_init"] = False
        if os.environ.get("NEST_SCAFFOLD_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = float(os.environ["NEST_SCAFFOLD_COMMAND_TIMEOUT"])
        return cls(**kwargs)
