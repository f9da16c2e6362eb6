"""Template materialization and dependency resolution.

Renders the TypeScript sources added to a NestJS project and computes the
npm packages they need.

Quick usage::

    from nest_scaffold.scaffolder import ProjectConstants, ProjectGenerator

    generator = ProjectGenerator("./my-api", ProjectConstants(jwt_secret="s3cr3t"))
    written = await generator.generate()
"""

from nest_scaffold.scaffolder.constants import ProjectConstants
from nest_scaffold.scaffolder.dependencies import (
    DependencySpecifier,
    build_dependency_set,
    resolve_version,
)
from nest_scaffold.scaffolder.generator import ProjectGenerator
from nest_scaffold.scaffolder.registry import TemplateDescriptor, TemplateRegistry
from nest_scaffold.scaffolder.templates import TemplateRenderer, write_file

__all__ = [
    "DependencySpecifier",
    "ProjectConstants",
    "ProjectGenerator",
    "TemplateDescriptor",
    "TemplateRegistry",
    "TemplateRenderer",
    "build_dependency_set",
    "resolve_version",
    "write_file",
]
