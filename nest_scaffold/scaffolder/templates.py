"""Jinja2 template rendering and file materialization.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``nest_scaffold/scaffolder/templates/`` directory and renders them with the
shared project constants, plus :func:`write_file`, the single place where
rendered text reaches the disk.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import jinja2
from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from nest_scaffold.exceptions import TemplateError, WriteError


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders the TypeScript payload templates.

    Undefined variables raise instead of rendering as empty strings, so a
    template can only reference values the shared context actually carries.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["ts_str"] = _ts_string_filter

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Raises:
            TemplateError: If the template is missing or references an
                undefined value.
        """
        try:
            template = self.env.get_template(template_path)
            return template.render(**context)
        except jinja2.TemplateError as exc:
            raise TemplateError(f"Failed to render {template_path}: {exc}") from exc

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*."""
        content = self.render(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(write_file, out, content)
        return out

    def list_templates(self) -> list[str]:
        """Return a sorted list of all ``.j2`` template paths."""
        if not self.template_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in self.template_dir.rglob("*.j2")
        )


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _ts_string_filter(value: Any) -> str:
    """Quote *value* as a single-quoted TypeScript string literal."""
    text = str(value)
    text = (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f"'{text}'"


# ---------------------------------------------------------------------------
# File materialization
# ---------------------------------------------------------------------------

def write_file(path: str | Path, content: str) -> Path:
    """Write *content*, trimmed, to *path*, replacing any existing file.

    The parent directory is created when missing.  No merge or backup of a
    previous file takes place.

    Raises:
        WriteError: If the parent cannot be created or the write fails.
    """
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content.strip(), encoding="utf-8")
    except OSError as exc:
        raise WriteError(target, exc.strerror or str(exc)) from exc
    return target
