# This file is part of nmutool, a tool for scheduling binNMUs for Debian release management.
#
# Copyright 2026 The nmutool Authors
#
# SPDX-License-Identifier: GPL-3.0-only
#
# nmutool is free software: you can redistribute it and/or modify it under
# the terms of the GNU General Public License version 3, as published by the
# Free Software Foundation.
#
# nmutool is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranties of MERCHANTABILITY,
# SATISFACTORY QUALITY, or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with
# nmutool. If not, see <http://www.gnu.org/licenses/>.

"""Package names and versioned package references."""

from __future__ import annotations

import re
from dataclasses import dataclass

from nmutool.core.exceptions import InvalidPackageName, ParseError
from nmutool.debpkg.version import Version

_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9.+-]+$")
# "foo (= 1.0-1)" in Built-Using, "foo (1.0-1)" in Source
_VERSIONED_RE = re.compile(r"^(?P<name>\S+)\s*\(\s*(?:=\s*)?(?P<version>[^()\s]+)\s*\)$")


class PackageName(str):
    """A validated Debian package name.

    Package names are at least two characters long, consist of lowercase
    alphanumerics and ``.+-``, and start with an alphanumeric character.
    """

    __slots__ = ()

    def __new__(cls, value: str) -> PackageName:
        if isinstance(value, PackageName):
            return value
        if not isinstance(value, str) or not _NAME_RE.match(value):
            raise InvalidPackageName(name=str(value))
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"PackageName({str.__repr__(self)})"


@dataclass(frozen=True, order=True)
class VersionedPackage:
    """A package together with a specific version of it."""

    name: PackageName
    version: Version

    def __str__(self) -> str:
        return f"{self.name} (= {self.version})"


def parse_versioned_package(value: str) -> VersionedPackage:
    """Parse ``name (= version)`` or ``name (version)``.

    Raises:
        ParseError: If the reference is malformed or has no version.
    """
    match = _VERSIONED_RE.match(value.strip())
    if not match:
        raise ParseError(location=value, reason="expected 'name (= version)'")
    return VersionedPackage(PackageName(match.group("name")), Version.parse(match.group("version")))


def split_source_field(value: str) -> tuple[PackageName, Version | None]:
    """Split a binary package's ``Source`` field into name and optional version."""
    value = value.strip()
    if "(" not in value:
        return PackageName(value), None
    ref = parse_versioned_package(value)
    return ref.name, ref.version
