"""Writes the directory skeleton and every registered template into a project.

The generator covers the filesystem stages of a run.  The pipeline calls
:meth:`ProjectGenerator.build_directories`,
:meth:`ProjectGenerator.render_templates` and
:meth:`ProjectGenerator.register_modules` separately so each step is
reported on its own; :meth:`ProjectGenerator.generate` runs all three.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from .app_module import APP_MODULE_DESTINATION, ROOT_MODULES, update_app_module
from .constants import ProjectConstants
from .registry import TemplateRegistry, relative_import
from .skeleton import DIRECTORY_SPEC, build_skeleton, check_directory_coverage
from .templates import TemplateRenderer


class ProjectGenerator:
    """Materializes the registry into *project_dir*.

    All writes happen one after another in registry order.  Existing files
    at a destination are replaced; nothing already written is removed when
    a later write fails.
    """

    def __init__(
        self,
        project_dir: str | Path,
        constants: ProjectConstants | None = None,
        registry: TemplateRegistry | None = None,
        directories: tuple[str, ...] = DIRECTORY_SPEC,
    ) -> None:
        self.project_dir = Path(project_dir)
        self.constants = constants or ProjectConstants()
        self.registry = registry or TemplateRegistry()
        self.directories = directories

    async def build_directories(self) -> list[Path]:
        """Create the skeleton directories (idempotent)."""
        return await build_skeleton(self.project_dir, self.directories)

    async def render_templates(self) -> list[Path]:
        """Render every registered template and write it under the project root.

        Returns:
            The written file paths, in registry order.
        """
        renderer: TemplateRenderer = self.registry.renderer
        written: list[Path] = []
        for descriptor in self.registry:
            context = self.registry.context_for(descriptor.identifier, self.constants)
            path = await renderer.render_to_file(
                descriptor.template,
                self.project_dir / descriptor.destination,
                context,
            )
            written.append(path)
        return written

    async def register_modules(self) -> Path:
        """Import the generated Prisma and auth modules from the root ``AppModule``.

        Returns:
            The path of the patched (or newly created) root module.
        """
        modules = [
            (
                name,
                relative_import(APP_MODULE_DESTINATION, self.registry.get(identifier).destination),
            )
            for name, identifier in ROOT_MODULES
        ]
        return await asyncio.to_thread(
            update_app_module,
            self.project_dir / APP_MODULE_DESTINATION,
            modules,
            self.registry.renderer,
        )

    async def generate(self) -> list[Path]:
        """Build the skeleton, write every template, then register the new modules."""
        await self.build_directories()
        written = await self.render_templates()
        await self.register_modules()
        return written

    def uncovered_destinations(self) -> list[str]:
        """Destinations whose parent directory the skeleton does not create."""
        return check_directory_coverage(self.registry.destinations(), self.directories)
