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

"""Tests for nmutool.core.context module."""

from __future__ import annotations

import dataclasses
import lzma
from pathlib import Path

import pytest
import responses

from nmutool.core.context import CommandContext, GlobalOptions
from nmutool.core.exceptions import FetchError
from nmutool.target.arch import RELEASE_ARCHITECTURES, Architecture
from nmutool.target.suite import TESTING, UNSTABLE

MIRROR = "http://deb.example.org/debian"
EXCUSES_URL = "http://release.example.org/britney/excuses.yaml"


class TestGlobalOptions:
    """Tests for GlobalOptions dataclass."""

    def test_default_values(self) -> None:
        """Test default option values."""
        options = GlobalOptions()
        assert options.dry_run is False
        assert options.force_processing is False
        assert options.verbose == 0
        assert options.buildd is None

    def test_frozen(self) -> None:
        """Test that options cannot be modified after parsing."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            GlobalOptions().dry_run = True  # type: ignore[misc]


class TestCommandContext:
    """Tests for CommandContext."""

    def test_create_uses_config(self, mock_config: Path, temp_home: Path) -> None:
        """Test that configuration and cache directories are set up."""
        context = CommandContext.create(GlobalOptions())

        assert context.buildd == "buildd.example.org"
        assert context.mirror == MIRROR
        assert context.suite == UNSTABLE
        assert context.components == ["main"]
        assert context.paths["documents"].is_dir()
        assert context.scheduled_binnmus_path == context.paths["data_root"] / "scheduled-binnmus.yaml"

    def test_options_override_config(self, mock_config: Path) -> None:
        """Test that command line flags win over the configuration."""
        options = GlobalOptions(dry_run=True, buildd="other.example.org", mirror="http://mirror.example.org/debian")
        context = CommandContext.create(options)

        assert context.dry_run is True
        assert context.buildd == "other.example.org"
        assert context.mirror == "http://mirror.example.org/debian"

    def test_configured_architectures(self, mock_config: Path) -> None:
        """Test that configured architectures skip the Release file."""
        context = CommandContext.create(GlobalOptions())
        assert context.architectures(TESTING) == [Architecture.AMD64, Architecture.ARM64]

    @responses.activate
    def test_architectures_from_release(self, temp_home: Path, sample_release: str) -> None:
        """Test that architectures come from the Release file when not configured."""
        responses.add(responses.GET, "https://deb.debian.org/debian/dists/testing/Release", body=sample_release)
        context = CommandContext.create(GlobalOptions())

        archs = context.architectures(TESTING)

        assert Architecture.ALL not in archs
        assert [a.value for a in archs] == ["amd64", "arm64", "armhf", "i386", "ppc64el", "riscv64", "s390x"]

    def test_architectures_fallback_offline(self, temp_home: Path) -> None:
        """Test the built-in list when the Release file is unavailable."""
        context = CommandContext.create(GlobalOptions(offline=True))
        assert context.architectures(TESTING) == list(RELEASE_ARCHITECTURES)

    @responses.activate
    def test_excuses_and_unchanged(self, mock_config: Path, sample_excuses: str) -> None:
        """Test that a document served from the cache counts as unchanged."""
        responses.add(responses.GET, EXCUSES_URL, body=sample_excuses, headers={"ETag": '"v1"'})
        responses.add(responses.GET, EXCUSES_URL, status=304)

        first = CommandContext.create(GlobalOptions())
        report, _ = first.excuses()
        assert len(report.entries) == 4
        assert not first.unchanged("excuses.yaml")

        second = CommandContext.create(GlobalOptions())
        second.excuses()
        assert second.unchanged("excuses.yaml")

        forced = CommandContext.create(GlobalOptions(offline=True, force_processing=True))
        forced.excuses()
        assert not forced.unchanged("excuses.yaml")

    @responses.activate
    def test_packages_and_sources(self, mock_config: Path, sample_packages: str, sample_sources: str) -> None:
        """Test decoding of xz compressed indices."""
        responses.add(
            responses.GET,
            f"{MIRROR}/dists/unstable/main/binary-amd64/Packages.xz",
            body=lzma.compress(sample_packages.encode()),
        )
        responses.add(
            responses.GET,
            f"{MIRROR}/dists/unstable/main/source/Sources.xz",
            body=lzma.compress(sample_sources.encode()),
        )
        context = CommandContext.create(GlobalOptions())

        packages = context.packages(UNSTABLE, [Architecture.AMD64])
        sources = context.sources(UNSTABLE)

        assert [p.package for p in packages] == ["libzathura-dev", "zathura", "zathura-doc"]
        assert [s.package for s in sources] == ["poppler", "poppler", "zathura"]

    @responses.activate
    def test_ftbfs_bugs_from_udd(self, mock_config: Path, sample_ftbfs_bugs: str) -> None:
        """Test that the FTBFS URL is filled in with the codename."""
        responses.add(responses.GET, "http://udd.example.org/ftbfs.yaml?codename=sid", body=sample_ftbfs_bugs)
        context = CommandContext.create(GlobalOptions())

        bugs = context.ftbfs_bugs(UNSTABLE)

        assert "broken" in bugs
        assert len(bugs) == 1

    def test_ftbfs_bugs_from_file(self, mock_config: Path, temp_home: Path, sample_ftbfs_bugs: str) -> None:
        path = temp_home / "bugs.yaml"
        path.write_text(sample_ftbfs_bugs)
        context = CommandContext.create(GlobalOptions(offline=True))
        assert "broken" in context.ftbfs_bugs(UNSTABLE, path)

    def test_offline_without_cache(self, mock_config: Path) -> None:
        context = CommandContext.create(GlobalOptions(offline=True))
        with pytest.raises(FetchError):
            context.excuses()
