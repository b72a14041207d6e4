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

"""Tests for nmutool.analysis.eso module."""

from __future__ import annotations

import pytest

from nmutool.analysis.eso import (
    ESO_MESSAGE,
    eso_commands,
    find_outdated_built_using,
    rebuild_sources,
    source_skip_binnmu,
)
from nmutool.apt.packages import parse_packages, parse_sources
from nmutool.target.arch import Architecture

SOURCES = """\
Package: liba
Version: 1.0-1
Extra-Source-Only: yes

Package: liba
Version: 1.1-1

Package: libb
Version: 2.0-1
Extra-Source-Only: yes

Package: libb
Version: 2.1-1

Package: libc
Version: 3.0-1
"""


def packages(*paragraphs: str) -> list:
    return parse_packages("\n".join(paragraphs)).records


def binary(name: str, arch: str = "amd64", built_using: str = "liba (= 1.0-1)", extra: str = "", source: str = "") -> str:
    text = f"Package: {name}\nVersion: 1.0-1\nArchitecture: {arch}\nBuilt-Using: {built_using}\n"
    if source:
        text += f"Source: {source}\n"
    return text + extra


class TestSourceSkipBinNMU:
    @pytest.mark.parametrize(
        "source",
        ["gcc-14", "binutils", "binutils-mingw-w64", "grub-efi-amd64-signed", "linux-signed-amd64", "shim-signed"],
    )
    def test_skipped(self, source: str) -> None:
        assert source_skip_binnmu(source) is not None

    @pytest.mark.parametrize("source", ["zathura", "linux", "grub2", "gcc", "signed-foo-signed"])
    def test_not_skipped(self, source: str) -> None:
        assert source_skip_binnmu(source) is None


class TestFindOutdatedBuiltUsing:
    """Tests for find_outdated_built_using()."""

    def sources(self) -> list:
        return parse_sources(SOURCES).records

    def test_sample(self, sample_packages: str, sample_sources: str) -> None:
        results = find_outdated_built_using(
            parse_packages(sample_packages).records, parse_sources(sample_sources).records
        )

        assert len(results) == 1
        assert results[0].package == "zathura"
        assert results[0].source == "zathura"
        assert results[0].architectures == {Architecture.AMD64}
        assert results[0].describe() == "poppler 22.08.0-2 < 24.02.0-1"

    def test_one_result_per_binary(self) -> None:
        records = packages(
            binary("foo", "amd64", "liba (= 1.0-1), libb (= 2.0-1), libc (= 3.0-1)"),
            binary("foo", "arm64", "libb (= 2.0-1)"),
        )

        [result] = find_outdated_built_using(records, self.sources())

        assert result.architectures == {Architecture.AMD64, Architecture.ARM64}
        assert result.describe() == "liba 1.0-1 < 1.1-1, libb 2.0-1 < 2.1-1"

    def test_results_sorted_by_package(self) -> None:
        records = packages(binary("zzz"), binary("aaa"))
        assert [r.package for r in find_outdated_built_using(records, self.sources())] == ["aaa", "zzz"]

    def test_current_reference_is_fine(self) -> None:
        records = packages(binary("foo", built_using="liba (= 1.1-1)"))
        assert find_outdated_built_using(records, self.sources()) == []

    def test_reference_without_newer_source(self) -> None:
        sources = parse_sources("Package: liba\nVersion: 1.0-1\nExtra-Source-Only: yes\n").records
        assert find_outdated_built_using(packages(binary("foo")), sources) == []

    @pytest.mark.parametrize(
        "paragraph",
        [
            binary("foo-doc", arch="all"),
            binary("foo-udeb", extra="Package-Type: udeb\n"),
            binary("foo-di", extra="Section: debian-installer\n"),
            binary("gcc-14-base", source="gcc-14"),
            binary("grub-efi-amd64-bin", source="grub-efi-amd64-signed"),
        ],
    )
    def test_skipped_binaries(self, paragraph: str) -> None:
        assert find_outdated_built_using(packages(paragraph), self.sources()) == []

    def test_ftbfs_sources_are_skipped(self) -> None:
        records = packages(binary("foo", source="broken"), binary("bar"))
        results = find_outdated_built_using(records, self.sources(), ftbfs={"broken"})
        assert [r.package for r in results] == ["bar"]


class TestEsoCommands:
    """Tests for eso_commands()."""

    def test_one_command_per_source(self) -> None:
        records = packages(binary("libfoo1", source="foo"), binary("foo-bin", source="foo"), binary("bar"))
        results = find_outdated_built_using(records, parse_sources(SOURCES).records)

        assert rebuild_sources(results) == ["bar", "foo"]
        assert [str(line) for c in eso_commands(results) for line in c.lines()] == [
            f'nmu bar . ANY . unstable . -m "{ESO_MESSAGE}"',
            "bp -50 bar . ANY . unstable",
            f'nmu foo . ANY . unstable . -m "{ESO_MESSAGE}"',
            "bp -50 foo . ANY . unstable",
        ]

    def test_architectures_and_priority(self) -> None:
        results = find_outdated_built_using(packages(binary("foo")), parse_sources(SOURCES).records)
        [command] = eso_commands(results, build_priority=0, architectures=[Architecture.ARM64, Architecture.AMD64])
        assert command.lines() == [f'nmu foo . amd64 arm64 . unstable . -m "{ESO_MESSAGE}"']
