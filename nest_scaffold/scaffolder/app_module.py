"""Registration of the generated modules in the project's root ``AppModule``.

``src/app.module.ts`` belongs to the project, so it is patched rather than
rendered over: for every generated module the file does not reference yet,
an import statement is added after the existing ones and the class name is
appended to the ``imports`` array of the ``@Module`` decorator.  A project
without a root module gets a minimal one from ``app.module.ts.j2``.

Patching is idempotent; a second run leaves the file byte-for-byte intact.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from nest_scaffold.exceptions import ModuleRegistrationError, WriteError

from .templates import TemplateRenderer, write_file

APP_MODULE_DESTINATION = "src/app.module.ts"
APP_MODULE_TEMPLATE = "app.module.ts.j2"

# (class name, template identifier) of each module the root module imports.
ROOT_MODULES: tuple[tuple[str, str], ...] = (
    ("PrismaModule", "prisma-module"),
    ("AuthModule", "auth-module"),
)

_IMPORT_STATEMENT = re.compile(r"^import\s[^;]*;[ \t]*$", re.MULTILINE)
_MODULE_DECORATOR = re.compile(r"@Module\(\s*\{")
_IMPORTS_KEY = re.compile(r"\bimports\s*:\s*\[")

_OPENERS = "[({"
_CLOSERS = "])}"


def _word(name: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![\w$]){re.escape(name)}(?![\w$])")


def _matching_close(text: str, start: int) -> int:
    """Index of the bracket closing the one that ends just before *start*, or -1."""
    depth = 1
    for index in range(start, len(text)):
        char = text[index]
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
            if depth == 0:
                return index
    return -1


def add_import_statement(source: str, name: str, module: str) -> str:
    """Import *name* from *module* unless an import statement already names it."""
    statements = list(_IMPORT_STATEMENT.finditer(source))
    if any(_word(name).search(m.group(0)) for m in statements):
        return source
    line = f"import {{ {name} }} from '{module}';"
    if not statements:
        return f"{line}\n{source}"
    end = statements[-1].end()
    return f"{source[:end]}\n{line}{source[end:]}"


def add_module_import(source: str, name: str, path: str | Path = APP_MODULE_DESTINATION) -> str:
    """Append *name* to the ``imports`` array of the ``@Module`` decorator.

    Raises:
        ModuleRegistrationError: If *source* has no parsable ``@Module({...})``.
    """
    decorator = _MODULE_DECORATOR.search(source)
    if decorator is None:
        raise ModuleRegistrationError(path, "no @Module({...}) decorator found")
    body_start = decorator.end()
    body_end = _matching_close(source, body_start)
    if body_end < 0:
        raise ModuleRegistrationError(path, "unterminated @Module decorator")

    key = _IMPORTS_KEY.search(source, body_start, body_end)
    if key is None:
        if not source[body_start:body_end].strip():
            return f"{source[:body_start]}\n  imports: [{name}],\n{source[body_end:]}"
        return f"{source[:body_start]}\n  imports: [{name}],{source[body_start:]}"

    open_end = key.end()
    close = _matching_close(source, open_end)
    if close < 0:
        raise ModuleRegistrationError(path, "unterminated imports array")
    entries = source[open_end:close]
    if _word(name).search(entries):
        return source

    filled = entries.rstrip()
    if not filled.strip():
        return f"{source[:open_end]}{name}{source[close:]}"
    insert_at = open_end + len(filled)
    trailing_comma = filled.endswith(",")
    if "\n" in filled:
        last_line = filled.rsplit("\n", 1)[1]
        indent = last_line[: len(last_line) - len(last_line.lstrip())]
        addition = f"{'' if trailing_comma else ','}\n{indent}{name}{',' if trailing_comma else ''}"
    else:
        addition = f"{' ' if trailing_comma else ', '}{name}"
    return f"{source[:insert_at]}{addition}{source[insert_at:]}"


def register_modules(
    source: str,
    modules: Iterable[tuple[str, str]],
    path: str | Path = APP_MODULE_DESTINATION,
) -> str:
    """Return *source* with every ``(class name, module specifier)`` registered."""
    text = source
    for name, module in modules:
        text = add_import_statement(text, name, module)
        text = add_module_import(text, name, path)
    return text


def update_app_module(
    path: str | Path,
    modules: list[tuple[str, str]],
    renderer: TemplateRenderer,
) -> Path:
    """Register *modules* in the root module at *path*, creating it if absent.

    Raises:
        ModuleRegistrationError: If the existing file cannot be read or patched.
        WriteError: If the result cannot be written.
    """
    target = Path(path)
    try:
        source = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        context = {"modules": [{"name": n, "module": m} for n, m in modules]}
        return write_file(target, renderer.render(APP_MODULE_TEMPLATE, context))
    except OSError as exc:
        raise ModuleRegistrationError(target, exc.strerror or str(exc)) from exc

    updated = register_modules(source, modules, target)
    if updated != source:
        try:
            target.write_text(updated, encoding="utf-8")
        except OSError as exc:
            raise WriteError(target, exc.strerror or str(exc)) from exc
    return target
