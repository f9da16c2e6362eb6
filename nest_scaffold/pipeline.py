"""nest-scaffold pipeline orchestrator.

Drives one scaffolding run through a fixed sequence of stages:

AWAITING_PARAMETERS    -- read the NestJS version token (flag, env or prompt).
RESOLVING_DEPENDENCIES -- build the npm dependency specifiers.
INSTALLING_PACKAGES    -- ``npm install <specifiers> --legacy-peer-deps``.
INITIALIZING_SCHEMA    -- ``npx prisma init``.
BUILDING_DIRECTORIES   -- create the ``src/`` skeleton.
RENDERING_TEMPLATES    -- render and write every registered template, then
                          import the new modules from ``src/app.module.ts``.
DONE

Any failure moves the run to ``FAILED``; nothing already written is rolled
back.

Usage::

    python -m nest_scaffold --nest-version 10.4.9 --secret s3cr3t
    nest-scaffold --project-dir ./my-api --skip-install
"""

from __future__ import annotations

import asyncio
import sys
import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

from rich.markup import escape
from rich.panel import Panel

from nest_scaffold.config import Config
from nest_scaffold.exceptions import ExternalCommandFailure
from nest_scaffold.scaffolder.dependencies import (
    DependencySpecifier,
    build_dependency_set,
    install_command,
    resolve_version,
)
from nest_scaffold.scaffolder.generator import ProjectGenerator
from nest_scaffold.utils import (
    console,
    format_duration,
    print_error,
    print_stage_header,
    print_success,
    print_summary_table,
    print_warning,
    run_command,
)

VERSION_PROMPT = 'Enter the NestJS version you are using (e.g., 10.4.9 or "latest"): '


class Stage(str, Enum):
    """Stages of a scaffolding run, in execution order."""

    AWAITING_PARAMETERS = "awaiting_parameters"
    RESOLVING_DEPENDENCIES = "resolving_dependencies"
    INSTALLING_PACKAGES = "installing_packages"
    INITIALIZING_SCHEMA = "initializing_schema"
    BUILDING_DIRECTORIES = "building_directories"
    RENDERING_TEMPLATES = "rendering_templates"
    DONE = "done"
    FAILED = "failed"


_STAGE_ORDER: list[Stage] = [
    Stage.AWAITING_PARAMETERS,
    Stage.RESOLVING_DEPENDENCIES,
    Stage.INSTALLING_PACKAGES,
    Stage.INITIALIZING_SCHEMA,
    Stage.BUILDING_DIRECTORIES,
    Stage.RENDERING_TEMPLATES,
    Stage.DONE,
]

_STAGE_TITLES: dict[Stage, str] = {
    Stage.AWAITING_PARAMETERS: "Parameters",
    Stage.RESOLVING_DEPENDENCIES: "Resolve dependencies",
    Stage.INSTALLING_PACKAGES: "Install packages",
    Stage.INITIALIZING_SCHEMA: "Initialize Prisma",
    Stage.BUILDING_DIRECTORIES: "Create directories",
    Stage.RENDERING_TEMPLATES: "Write source files",
}


def prompt_version() -> str:
    """Ask the operator for the NestJS version; EOF counts as an empty answer."""
    try:
        return console.input(VERSION_PROMPT)
    except EOFError:
        return ""


class Pipeline:
    """Sequences one scaffolding run.

    Attributes:
        config: Settings for the run.
        stage: The stage the run is currently in.
        history: Every stage entered so far, in order.
        state: Results accumulated by the stages.
    """

    def __init__(
        self,
        config: Config,
        prompt: Callable[[], str] = prompt_version,
    ) -> None:
        self.config = config
        self.prompt = prompt
        self.stage = Stage.AWAITING_PARAMETERS
        self.history: list[Stage] = [Stage.AWAITING_PARAMETERS]
        self.generator = ProjectGenerator(config.project_dir, config.constants())
        self.state: dict[str, Any] = {
            "project_dir": str(config.project_dir),
            "success": False,
        }

    # ------------------------------------------------------------------
    # Stage bookkeeping
    # ------------------------------------------------------------------

    def _enter(self, stage: Stage) -> None:
        self.stage = stage
        self.history.append(stage)
        if stage in _STAGE_TITLES:
            step = _STAGE_ORDER.index(stage) + 1
            print_stage_header(step, len(_STAGE_TITLES), _STAGE_TITLES[stage])

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self) -> dict[str, Any]:
        """Execute every stage in order.

        Returns:
            The final state dictionary with a top-level ``success`` boolean;
            on failure it also carries ``error`` and ``failed_stage``.
        """
        started = time.monotonic()
        console.print(
            Panel(
                f"[bold bright_cyan]nest-scaffold[/bold bright_cyan]\n"
                f"Project : {escape(str(self.config.project_dir.resolve()))}",
                border_style="bright_cyan",
            )
        )
        print_stage_header(1, len(_STAGE_TITLES), _STAGE_TITLES[Stage.AWAITING_PARAMETERS])

        try:
            token = self._await_parameters()

            self._enter(Stage.RESOLVING_DEPENDENCIES)
            specifiers = build_dependency_set(token)
            self.state["dependencies"] = [str(s) for s in specifiers]
            console.print(
                f"  {len(specifiers)} package(s) for NestJS version [bold]{escape(token)}[/bold]"
            )

            self._enter(Stage.INSTALLING_PACKAGES)
            await self._install_packages(specifiers)

            self._enter(Stage.INITIALIZING_SCHEMA)
            await self._initialize_schema()

            self._enter(Stage.BUILDING_DIRECTORIES)
            directories = await self.generator.build_directories()
            self.state["directories"] = [str(d) for d in directories]

            self._enter(Stage.RENDERING_TEMPLATES)
            written = await self.generator.render_templates()
            self.state["files"] = [str(p) for p in written]
            for path in written:
                console.print(
                    f"  [green]+[/green] {escape(str(path.relative_to(self.config.project_dir)))}"
                )
            app_module = await self.generator.register_modules()
            self.state["app_module"] = str(app_module)
            console.print(
                f"  [green]~[/green] {escape(str(app_module.relative_to(self.config.project_dir)))}"
            )

            self._enter(Stage.DONE)
            self.state["success"] = True

        except Exception as exc:
            failed = self.stage
            self.state["failed_stage"] = failed.value
            self.state["error"] = str(exc)
            self.stage = Stage.FAILED
            self.history.append(Stage.FAILED)
            print_error(f"Scaffolding failed ({_STAGE_TITLES.get(failed, failed.value)}): {exc}")

        self.state["stage"] = self.stage.value
        self.state["duration"] = format_duration(time.monotonic() - started)
        if self.state["success"]:
            self._print_summary()
        return self.state

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _await_parameters(self) -> str:
        raw = self.config.nest_version
        if raw is None:
            raw = self.prompt()
        token = resolve_version(raw)
        self.state["nest_version"] = token
        return token

    async def _install_packages(self, specifiers: list[DependencySpecifier]) -> None:
        if not self.config.run_install:
            print_warning("  Package installation skipped")
            self.state["install"] = "skipped"
            return
        cmd = install_command(
            specifiers, self.config.package_manager, self.config.install_flags
        )
        await self._run_external(cmd)
        self.state["install"] = " ".join(cmd)

    async def _initialize_schema(self) -> None:
        if not self.config.run_schema_init:
            print_warning("  Prisma initialization skipped")
            self.state["schema_init"] = "skipped"
            return
        cmd = list(self.config.schema_command)
        await self._run_external(cmd)
        self.state["schema_init"] = " ".join(cmd)

    async def _run_external(self, cmd: list[str]) -> None:
        """Run *cmd* in the project directory with inherited streams.

        Raises:
            ExternalCommandFailure: On a missing executable, a timeout or a
                non-zero exit status.
        """
        console.print(f"  [dim]$ {escape(' '.join(cmd))}[/dim]")
        try:
            returncode, _, stderr = await run_command(
                cmd,
                cwd=self.config.project_dir,
                timeout=self.config.command_timeout,
            )
        except FileNotFoundError as exc:
            raise ExternalCommandFailure(cmd, 127, f"executable not found: {cmd[0]}") from exc
        if returncode != 0:
            raise ExternalCommandFailure(cmd, returncode, stderr)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _print_summary(self) -> None:
        print_summary_table(
            {
                "NestJS version": self.state.get("nest_version", ""),
                "Packages": str(len(self.state.get("dependencies", []))),
                "Directories": str(len(self.state.get("directories", []))),
                "Files written": str(len(self.state.get("files", []))),
                "Duration": self.state["duration"],
            },
            title="Scaffolding complete",
        )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_config(args: Any) -> Config:
    """Merge a JSON config file (if given), the environment and CLI flags."""
    config = Config.load(Path(args.config)) if args.config else Config.from_env()
    updates: dict[str, Any] = {}
    if args.project_dir is not None:
        updates["project_dir"] = Path(args.project_dir)
    if args.nest_version is not None:
        updates["nest_version"] = args.nest_version
    if args.secret is not None:
        updates["jwt_secret"] = args.secret
    if args.package_manager is not None:
        updates["package_manager"] = args.package_manager
    if args.skip_install:
        updates["run_install"] = False
    if args.skip_schema:
        updates["run_schema_init"] = False
    if args.timeout is not None:
        updates["command_timeout"] = args.timeout
    return Config.model_validate({**config.model_dump(), **updates})


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``nest-scaffold`` / ``python -m nest_scaffold``."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Scaffold JWT auth, Prisma and response formatting into a NestJS project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  nest-scaffold\n"
            "  nest-scaffold --nest-version 10.4.9 --secret s3cr3t\n"
            "  nest-scaffold --project-dir ./my-api --nest-version latest --skip-install\n"
        ),
    )
    parser.add_argument(
        "--project-dir", "-p",
        default=None,
        help="NestJS project root (default: current directory)",
    )
    parser.add_argument(
        "--nest-version",
        default=None,
        help='NestJS version to pin framework packages to, or "latest" (prompted if omitted)',
    )
    parser.add_argument(
        "--secret",
        default=None,
        help="JWT signing secret written into the generated constants",
    )
    parser.add_argument(
        "--package-manager",
        default=None,
        help="Installer executable (default: npm)",
    )
    parser.add_argument(
        "--skip-install",
        action="store_true",
        help="Do not run the package installer",
    )
    parser.add_argument(
        "--skip-schema",
        action="store_true",
        help="Do not run prisma init",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for each external command (default: no limit)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON file with settings (replaces environment variables)",
    )

    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except Exception as exc:
        print_error(f"Invalid configuration: {exc}")
        sys.exit(1)

    result = asyncio.run(Pipeline(config).run())

    if result.get("success"):
        print_success("Setup complete! Your NestJS project is ready.")
    else:
        sys.exit(1)


if __name__ == "__main__":
    main()
