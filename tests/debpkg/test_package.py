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

"""Tests for nmutool.debpkg.package module."""

from __future__ import annotations

import pytest

from nmutool.core.exceptions import InvalidPackageName, ParseError
from nmutool.debpkg.package import PackageName, VersionedPackage, parse_versioned_package, split_source_field
from nmutool.debpkg.version import Version


class TestPackageName:
    """Tests for PackageName validation."""

    @pytest.mark.parametrize("name", ["zathura", "libc6", "g++-14", "python3.12", "0ad"])
    def test_valid_names(self, name: str) -> None:
        assert PackageName(name) == name

    @pytest.mark.parametrize("name", ["", "a", "Zathura", "-foo", "foo_bar", "foo bar", ".foo"])
    def test_invalid_names(self, name: str) -> None:
        with pytest.raises(InvalidPackageName):
            PackageName(name)

    def test_is_a_string(self) -> None:
        name = PackageName("zathura")
        assert isinstance(name, str)
        assert {"zathura": 1}[name] == 1


class TestVersionedPackage:
    """Tests for versioned package references."""

    def test_built_using_form(self) -> None:
        ref = parse_versioned_package("poppler (= 22.08.0-2)")
        assert ref == VersionedPackage(PackageName("poppler"), Version.parse("22.08.0-2"))
        assert str(ref) == "poppler (= 22.08.0-2)"

    def test_source_form(self) -> None:
        ref = parse_versioned_package("zathura (0.5.2-1)")
        assert ref.version == Version.parse("0.5.2-1")

    def test_missing_version(self) -> None:
        with pytest.raises(ParseError):
            parse_versioned_package("poppler")

    def test_split_source_field(self) -> None:
        assert split_source_field("zathura") == ("zathura", None)
        name, version = split_source_field("zathura (0.5.2-1)")
        assert name == "zathura"
        assert version == Version.parse("0.5.2-1")
