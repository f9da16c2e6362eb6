"""Tests for version token resolution and the dependency set.

Covers:
- resolve_version: latest in any case, verbatim passthrough, None/empty
- build_dependency_set: qualification, deduplication, ordering, missing token
- DependencySpecifier rendering
- install_command argv construction
"""

from __future__ import annotations

import pytest

from nest_scaffold.exceptions import MissingParameter
from nest_scaffold.scaffolder.dependencies import (
    DEFAULT_PACKAGES,
    LATEST,
    DependencySpecifier,
    build_dependency_set,
    install_command,
    resolve_version,
)

pytestmark = pytest.mark.unit

QUALIFIED = {"@nestjs/core", "@nestjs/common", "@nestjs/swagger"}


def _by_name(specifiers: list[DependencySpecifier]) -> dict[str, DependencySpecifier]:
    return {s.name: s for s in specifiers}


# ---------------------------------------------------------------------------
# resolve_version
# ---------------------------------------------------------------------------


class TestResolveVersion:
    @pytest.mark.parametrize("raw", ["latest", "LATEST", "Latest", "lAtEsT"])
    def test_latest_any_case(self, raw):
        assert resolve_version(raw) == LATEST

    def test_explicit_version_verbatim(self):
        assert resolve_version("10.4.9") == "10.4.9"

    def test_no_syntax_validation(self):
        assert resolve_version("^11 || next") == "^11 || next"

    def test_whitespace_is_not_stripped(self):
        assert resolve_version(" latest ") == " latest "

    def test_empty_string(self):
        assert resolve_version("") == ""

    def test_none_is_empty_literal(self):
        assert resolve_version(None) == ""


# ---------------------------------------------------------------------------
# DependencySpecifier
# ---------------------------------------------------------------------------


class TestDependencySpecifier:
    def test_unqualified(self):
        assert str(DependencySpecifier("prisma")) == "prisma"

    def test_qualified(self):
        assert str(DependencySpecifier("@nestjs/core", "10.4.9")) == "@nestjs/core@10.4.9"

    def test_frozen(self):
        specifier = DependencySpecifier("prisma")
        with pytest.raises(AttributeError):
            specifier.name = "other"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# build_dependency_set
# ---------------------------------------------------------------------------


class TestBuildDependencySet:
    @pytest.mark.parametrize("token", ["10.4.9", "9.0.0", "next", ""])
    def test_explicit_token_qualifies_framework_packages(self, token):
        specs = _by_name(build_dependency_set(token))
        for name in QUALIFIED:
            assert specs[name].version == token
            assert str(specs[name]) == f"{name}@{token}"

    @pytest.mark.parametrize("token", ["10.4.9", "latest"])
    def test_auxiliary_packages_never_qualified(self, token):
        for specifier in build_dependency_set(token):
            if specifier.name not in QUALIFIED:
                assert specifier.version is None
                assert "@" not in str(specifier)[1:]

    def test_latest_has_no_suffix(self):
        specs = build_dependency_set(LATEST)
        assert all(s.version is None for s in specs)

    def test_resolved_latest_any_case(self):
        specs = build_dependency_set(resolve_version("LaTeSt"))
        assert all(s.version is None for s in specs)

    @pytest.mark.parametrize("token", ["latest", "10.4.9"])
    def test_no_duplicate_names(self, token):
        names = [s.name for s in build_dependency_set(token)]
        assert len(names) == len(set(names))

    def test_duplicate_keeps_first_occurrence(self):
        specs = _by_name(build_dependency_set("10.4.9"))
        assert specs["@nestjs/swagger"].version == "10.4.9"

    def test_insertion_order(self):
        names = [s.name for s in build_dependency_set("latest")]
        expected: list[str] = []
        for name, _ in DEFAULT_PACKAGES:
            if name not in expected:
                expected.append(name)
        assert names == expected
        assert names[:3] == ["@nestjs/jwt", "@nestjs/core", "@nestjs/common"]

    def test_includes_auth_packages(self):
        names = {s.name for s in build_dependency_set("latest")}
        assert {"@nestjs/passport", "passport", "passport-jwt", "bcrypt"} <= names

    def test_custom_package_list(self):
        specs = build_dependency_set("1.0.0", (("a", True), ("b", False), ("a", False)))
        assert [str(s) for s in specs] == ["a@1.0.0", "b"]

    def test_missing_token_raises(self):
        with pytest.raises(MissingParameter) as exc_info:
            build_dependency_set(None)
        assert exc_info.value.parameter == "nest_version"


# ---------------------------------------------------------------------------
# install_command
# ---------------------------------------------------------------------------


class TestInstallCommand:
    def test_default_npm_command(self):
        cmd = install_command(build_dependency_set("10.4.9"))
        assert cmd[:2] == ["npm", "install"]
        assert cmd[-1] == "--legacy-peer-deps"
        assert "@nestjs/core@10.4.9" in cmd
        assert "@prisma/client" in cmd

    def test_specifier_order_preserved(self):
        specs = build_dependency_set("latest")
        cmd = install_command(specs)
        assert cmd[2:-1] == [str(s) for s in specs]

    def test_custom_package_manager_and_flags(self):
        cmd = install_command([DependencySpecifier("prisma")], "pnpm", ["--save-dev"])
        assert cmd == ["pnpm", "install", "prisma", "--save-dev"]
