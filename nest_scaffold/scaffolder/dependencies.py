"""Version token resolution and the npm dependency set.

The version token selects which NestJS release line the framework packages
are pinned to.  No semantic version resolution happens here: the token is
interpolated verbatim into ``name@token`` specifiers.
"""

from __future__ import annotations

from dataclasses import dataclass

from nest_scaffold.exceptions import MissingParameter

LATEST = "latest"

# (package name, receives the version qualifier).  Order is the order the
# installer receives the arguments in.  The last entry repeats a package the
# auth setup also asked for; deduplication keeps the first occurrence.
DEFAULT_PACKAGES: tuple[tuple[str, bool], ...] = (
    ("@nestjs/jwt", False),
    ("@nestjs/core", True),
    ("@nestjs/common", True),
    ("@prisma/client", False),
    ("prisma", False),
    ("class-validator", False),
    ("class-transformer", False),
    ("@nestjs/swagger", True),
    ("swagger-ui-express", False),
    ("@nestjs/passport", False),
    ("passport", False),
    ("passport-jwt", False),
    ("bcrypt", False),
    ("@nestjs/swagger", False),
)

DEFAULT_INSTALL_FLAGS: tuple[str, ...] = ("--legacy-peer-deps",)


@dataclass(frozen=True)
class DependencySpecifier:
    """A package name with an optional version suffix."""

    name: str
    version: str | None = None

    def __str__(self) -> str:
        if self.version is None:
            return self.name
        return f"{self.name}@{self.version}"


def resolve_version(raw: str | None) -> str:
    """Normalise the raw version input into a canonical token.

    Any casing of ``latest`` collapses to :data:`LATEST`.  Everything else is
    returned verbatim, including the empty string; ``None`` (no input at all)
    is treated as the empty string.
    """
    if raw is None:
        return ""
    if raw.lower() == LATEST:
        return LATEST
    return raw


def build_dependency_set(
    token: str | None,
    packages: tuple[tuple[str, bool], ...] = DEFAULT_PACKAGES,
) -> list[DependencySpecifier]:
    """Build the ordered, de-duplicated list of specifiers for *token*.

    Raises:
        MissingParameter: If *token* is ``None``.
    """
    if token is None:
        raise MissingParameter("nest_version")

    qualifier = None if token == LATEST else token
    seen: set[str] = set()
    specifiers: list[DependencySpecifier] = []
    for name, qualified in packages:
        if name in seen:
            continue
        seen.add(name)
        specifiers.append(DependencySpecifier(name, qualifier if qualified else None))
    return specifiers


def install_command(
    specifiers: list[DependencySpecifier],
    package_manager: str = "npm",
    flags: tuple[str, ...] | list[str] = DEFAULT_INSTALL_FLAGS,
) -> list[str]:
    """Return the argv for installing *specifiers* in one invocation."""
    return [package_manager, "install", *(str(s) for s in specifiers), *flags]
