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

"""Tests for nmutool.target.release module."""

from __future__ import annotations

from nmutool.target.arch import RELEASE_ARCHITECTURES, Architecture
from nmutool.target.release import parse_release, release_architectures
from nmutool.target.suite import TESTING


class TestParseRelease:
    """Tests for parse_release."""

    def test_fields(self, sample_release: str) -> None:
        release = parse_release(sample_release)
        assert release.suite == TESTING
        assert str(release.codename) == "forky"
        assert release.date is not None and release.date.year == 2026
        assert "main" in release.components

    def test_architectures_exclude_all(self, sample_release: str) -> None:
        release = parse_release(sample_release)
        assert Architecture.ALL not in release.architectures
        assert release.architectures[0] is Architecture.AMD64
        assert Architecture.RISCV64 in release.architectures

    def test_unknown_architectures_are_dropped(self) -> None:
        release = parse_release("Suite: unstable\nArchitectures: amd64 vax\n")
        assert release.architectures == [Architecture.AMD64]


class TestReleaseArchitectures:
    """Tests for release_architectures."""

    def test_from_release_file(self, sample_release: str) -> None:
        archs = release_architectures(sample_release)
        assert Architecture.ARMEL not in archs
        assert Architecture.ARMHF in archs

    def test_fallback_without_file(self) -> None:
        assert release_architectures(None) == list(RELEASE_ARCHITECTURES)

    def test_fallback_without_field(self) -> None:
        assert release_architectures("Suite: unstable\n") == list(RELEASE_ARCHITECTURES)
