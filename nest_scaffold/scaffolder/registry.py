"""Registry of the generated source files.

Each :class:`TemplateDescriptor` ties a stable identifier to the file it
produces and the Jinja2 payload that renders it.  The registry is the only
place destination paths are spelled out: the relative import one generated
file uses to reach another is computed from this table, so the guard and
the decorator it imports can never disagree about where the decorator
lives.

Rendering is pure.  The registry reads its packaged templates but never
writes; the generator hands the ``(destination, text)`` pairs to
:func:`~nest_scaffold.scaffolder.templates.write_file`.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Any

from nest_scaffold.exceptions import TemplateError

from .constants import ProjectConstants
from .templates import TemplateRenderer


@dataclass(frozen=True)
class TemplateDescriptor:
    """One generated file."""

    identifier: str
    destination: str
    template: str


DEFAULT_TEMPLATES: tuple[TemplateDescriptor, ...] = (
    TemplateDescriptor(
        "jwt-constants",
        "src/common/guards/jwt.constants.ts",
        "common/guards/jwt.constants.ts.j2",
    ),
    TemplateDescriptor(
        "public-decorator",
        "src/common/decorators/auth/public.decorator.ts",
        "common/decorators/auth/public.decorator.ts.j2",
    ),
    TemplateDescriptor(
        "response-message-decorator",
        "src/common/decorators/response/response-message.decorator.ts",
        "common/decorators/response/response-message.decorator.ts.j2",
    ),
    TemplateDescriptor(
        "auth-guard",
        "src/common/guards/auth.guard.ts",
        "common/guards/auth.guard.ts.j2",
    ),
    TemplateDescriptor(
        "response-interceptor",
        "src/common/interceptors/response.interceptor.ts",
        "common/interceptors/response.interceptor.ts.j2",
    ),
    TemplateDescriptor(
        "prisma-service",
        "src/prisma/prisma.service.ts",
        "prisma/prisma.service.ts.j2",
    ),
    TemplateDescriptor(
        "prisma-module",
        "src/prisma/prisma.module.ts",
        "prisma/prisma.module.ts.j2",
    ),
    TemplateDescriptor(
        "register-dto",
        "src/auth/dto/register.dto.ts",
        "auth/dto/register.dto.ts.j2",
    ),
    TemplateDescriptor(
        "login-dto",
        "src/auth/dto/login.dto.ts",
        "auth/dto/login.dto.ts.j2",
    ),
    TemplateDescriptor(
        "auth-service",
        "src/auth/auth.service.ts",
        "auth/auth.service.ts.j2",
    ),
    TemplateDescriptor(
        "auth-controller",
        "src/auth/auth.controller.ts",
        "auth/auth.controller.ts.j2",
    ),
    TemplateDescriptor(
        "auth-module",
        "src/auth/auth.module.ts",
        "auth/auth.module.ts.j2",
    ),
    TemplateDescriptor(
        "main",
        "src/main.ts",
        "main.ts.j2",
    ),
)


def relative_import(from_path: str, to_path: str) -> str:
    """Return the TypeScript module specifier that *from_path* uses to import *to_path*.

    Both paths are project-relative POSIX paths of ``.ts`` files.

    Examples::

        relative_import("src/common/guards/auth.guard.ts",
                        "src/common/guards/jwt.constants.ts")  -> "./jwt.constants"
        relative_import("src/auth/auth.module.ts",
                        "src/prisma/prisma.module.ts")         -> "../prisma/prisma.module"
    """
    target = to_path[: -len(".ts")] if to_path.endswith(".ts") else to_path
    rel = posixpath.relpath(target, posixpath.dirname(from_path) or ".")
    if not rel.startswith("."):
        rel = f"./{rel}"
    return rel


class TemplateRegistry:
    """Fixed mapping from template identifier to descriptor."""

    def __init__(
        self,
        descriptors: tuple[TemplateDescriptor, ...] = DEFAULT_TEMPLATES,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self._descriptors: dict[str, TemplateDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.identifier in self._descriptors:
                raise TemplateError(f"Duplicate template identifier: {descriptor.identifier}")
            self._descriptors[descriptor.identifier] = descriptor
        self.renderer = renderer or TemplateRenderer()

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self):
        return iter(self._descriptors.values())

    def identifiers(self) -> list[str]:
        return list(self._descriptors)

    def destinations(self) -> list[str]:
        return [d.destination for d in self._descriptors.values()]

    def get(self, identifier: str) -> TemplateDescriptor:
        try:
            return self._descriptors[identifier]
        except KeyError:
            raise TemplateError(f"Unknown template: {identifier}") from None

    def context_for(self, identifier: str, constants: ProjectConstants) -> dict[str, Any]:
        """Build the render context for one template.

        The context holds every shared constant plus ``imports``, a mapping
        of template identifier to the relative module specifier this
        template must use to import it.
        """
        descriptor = self.get(identifier)
        imports = {
            other.identifier: relative_import(descriptor.destination, other.destination)
            for other in self._descriptors.values()
            if other.identifier != identifier
        }
        return {**constants.as_context(), "imports": imports}

    def render(self, identifier: str, constants: ProjectConstants) -> str:
        """Render one template to its final, trimmed text."""
        descriptor = self.get(identifier)
        context = self.context_for(identifier, constants)
        return self.renderer.render(descriptor.template, context).strip()

    def render_all(self, constants: ProjectConstants) -> list[tuple[str, str]]:
        """Render every template, returning ``(destination, text)`` pairs in registry order."""
        return [
            (descriptor.destination, self.render(descriptor.identifier, constants))
            for descriptor in self._descriptors.values()
        ]
