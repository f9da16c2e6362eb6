"""Directory skeleton for the generated files.

Every directory is created with ``parents=True, exist_ok=True`` so running
the builder twice against the same project is a no-op the second time.
"""

from __future__ import annotations

import asyncio
import posixpath
from collections.abc import Iterable
from pathlib import Path

from nest_scaffold.exceptions import DirectoryCreationError

SOURCE_ROOT = "src"

DIRECTORY_SPEC: tuple[str, ...] = (
    f"{SOURCE_ROOT}/common/guards",
    f"{SOURCE_ROOT}/common/interceptors",
    f"{SOURCE_ROOT}/common/decorators/auth",
    f"{SOURCE_ROOT}/common/decorators/response",
    f"{SOURCE_ROOT}/prisma",
    f"{SOURCE_ROOT}/auth/dto",
)


def ensure_directory(path: Path) -> Path:
    """Create *path* and any missing parents.

    Raises:
        DirectoryCreationError: If the path exists as a non-directory or the
            filesystem refuses the creation.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except FileExistsError as exc:
        raise DirectoryCreationError(path, "a file with that name already exists") from exc
    except OSError as exc:
        raise DirectoryCreationError(path, exc.strerror or str(exc)) from exc
    return path


async def build_skeleton(
    root: str | Path,
    spec: Iterable[str] = DIRECTORY_SPEC,
) -> list[Path]:
    """Create every directory in *spec* under *root*, in order.

    Returns:
        The absolute directory paths, in *spec* order.
    """
    base = Path(root)
    created: list[Path] = []
    for rel in spec:
        path = await asyncio.to_thread(ensure_directory, base / rel)
        created.append(path)
    return created


def is_covered(parent: str, spec: Iterable[str] = DIRECTORY_SPEC) -> bool:
    """Return ``True`` if *parent* is listed in *spec* or is an ancestor of an entry.

    The project root itself always exists and counts as covered.
    """
    parent = posixpath.normpath(parent)
    if parent == ".":
        return True
    for entry in spec:
        entry = posixpath.normpath(entry)
        if entry == parent or entry.startswith(parent + "/"):
            return True
    return False


def check_directory_coverage(
    destinations: Iterable[str],
    spec: Iterable[str] = DIRECTORY_SPEC,
) -> list[str]:
    """Return destinations whose parent directory the skeleton does not provide."""
    spec = tuple(spec)
    return [d for d in destinations if not is_covered(posixpath.dirname(d), spec)]
