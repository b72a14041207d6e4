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

"""Tests for the binNMU scheduling commands."""

from __future__ import annotations

import lzma
from pathlib import Path

import responses
from typer.testing import CliRunner

from nmutool.cli import app

runner = CliRunner()

MIRROR = "http://deb.example.org/debian"
EXCUSES_URL = "http://release.example.org/britney/excuses.yaml"

ARM64_PACKAGES = """\
Package: libzathura-dev
Source: zathura (0.5.2-2)
Version: 0.5.2-2+b1
Architecture: arm64
Multi-Arch: same
"""


def add_packages(amd64: str, arm64: str = "") -> None:
    for arch, text in (("amd64", amd64), ("arm64", arm64)):
        responses.add(
            responses.GET,
            f"{MIRROR}/dists/unstable/main/binary-{arch}/Packages.xz",
            body=lzma.compress(text.encode()),
        )


class TestProcessUnblocks:
    """Tests for the process-unblocks command."""

    @responses.activate
    def test_unblocks(self, mock_config: Path, sample_excuses: str) -> None:
        responses.add(responses.GET, EXCUSES_URL, body=sample_excuses)

        result = runner.invoke(app, ["process-unblocks"])

        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == [
            "# Unblocks",
            "unblock libfoo_tpu/1.2-1+deb13u1",
            "unblock ffmpeg/7:7.1-3/armel",
        ]


class TestNmuEso:
    """Tests for the nmu-eso command."""

    @responses.activate
    def test_dry_run(self, mock_config: Path, sample_packages: str, sample_sources: str) -> None:
        add_packages(sample_packages)
        responses.add(
            responses.GET,
            f"{MIRROR}/dists/unstable/main/source/Sources.xz",
            body=lzma.compress(sample_sources.encode()),
        )

        result = runner.invoke(app, ["--dry-run", "--force-processing", "nmu-eso"])

        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == [
            'nmu zathura . ANY . unstable . -m "Rebuild for outdated Built-Using"',
            "bp -50 zathura . ANY . unstable",
        ]

    def test_rejects_pseudo_architectures(self, mock_config: Path) -> None:
        result = runner.invoke(app, ["--dry-run", "nmu-eso", "--architecture", "all"])
        assert result.exit_code == 2
        assert "not valid for --architecture" in result.output


class TestNmuVersionSkew:
    """Tests for the nmu-version-skew command."""

    @responses.activate
    def test_dry_run(self, mock_config: Path, sample_packages: str, sample_ftbfs_bugs: str) -> None:
        add_packages(sample_packages, ARM64_PACKAGES)
        responses.add(responses.GET, "http://udd.example.org/ftbfs.yaml?codename=sid", body=sample_ftbfs_bugs)

        result = runner.invoke(app, ["--dry-run", "nmu-version-skew", "--bp=-10"])

        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == [
            'nmu 1 zathura_0.5.2-2 . amd64 . unstable . -m "Rebuild to sync binNMU versions"',
            "bp -10 zathura_0.5.2-2 . amd64 . unstable",
        ]


class TestNmuTransition:
    """Tests for the nmu-transition command."""

    def test_from_stdin(self, mock_config: Path) -> None:
        listing = "Dependency level 1\nzathura [build logs] (0.5.2-1) good\ngirara (sid only) [build logs] (0.4.0-1)\n"

        result = runner.invoke(
            app,
            ["--dry-run", "-f", "nmu-transition", "-m", "Rebuild for libfoo2", "-s", "experimental"],
            input=listing,
        )

        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == [
            'nmu zathura_0.5.2-1 . ANY . experimental . -m "Rebuild for libfoo2"',
            'nmu girara_0.4.0-1 . ANY . experimental . -m "Rebuild for libfoo2"',
        ]

    @responses.activate
    def test_ftbfs_sources_skipped(self, mock_config: Path, sample_ftbfs_bugs: str) -> None:
        responses.add(responses.GET, "http://udd.example.org/ftbfs.yaml?codename=sid", body=sample_ftbfs_bugs)
        listing = "zathura [build logs] (0.5.2-1)\nbroken [build logs] (1.0-1)\n"

        result = runner.invoke(app, ["--dry-run", "nmu-transition", "-m", "Rebuild"], input=listing)

        assert result.exit_code == 0, result.output
        assert "broken" not in result.stdout
        assert "zathura_0.5.2-1" in result.stdout

    def test_message_required(self, mock_config: Path) -> None:
        result = runner.invoke(app, ["--dry-run", "nmu-transition"], input="")
        assert result.exit_code != 0

    def test_unknown_suite(self, mock_config: Path) -> None:
        result = runner.invoke(app, ["--dry-run", "nmu-transition", "-m", "Rebuild", "-s", "potato"], input="")
        assert result.exit_code == 2


class TestPrepareBinNMUs:
    """Tests for the prepare-binnmus command."""

    def test_from_file(self, mock_config: Path, temp_home: Path) -> None:
        listing = temp_home / "list.txt"
        listing.write_text("zathura [build logs] (0.5.2-1)\ngirara  0.4.0-1\nnot a package\n")

        result = runner.invoke(
            app,
            [
                "--dry-run",
                "prepare-binnmus",
                str(listing),
                "-m",
                "Rebuild against libfoo2",
                "-a",
                "ANY,-i386",
                "--bp",
                "10",
                "--dw",
                "libfoo-dev (>= 2)",
            ],
        )

        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == [
            'nmu zathura_0.5.2-1 . ANY -i386 . unstable . -m "Rebuild against libfoo2"',
            'dw zathura_0.5.2-1 . ANY -i386 . unstable . -m "libfoo-dev (>= 2)"',
            "bp 10 zathura_0.5.2-1 . ANY -i386 . unstable",
            'nmu girara_0.4.0-1 . ANY -i386 . unstable . -m "Rebuild against libfoo2"',
            'dw girara_0.4.0-1 . ANY -i386 . unstable . -m "libfoo-dev (>= 2)"',
            "bp 10 girara_0.4.0-1 . ANY -i386 . unstable",
        ]

    def test_missing_file(self, mock_config: Path, temp_home: Path) -> None:
        result = runner.invoke(app, ["--dry-run", "prepare-binnmus", str(temp_home / "missing"), "-m", "Rebuild"])
        assert result.exit_code == 2

    @responses.activate
    def test_corrupt_bug_list(self, mock_config: Path) -> None:
        responses.add(
            responses.GET,
            "http://udd.example.org/ftbfs.yaml?codename=sid",
            body="- id: 1\n  source: [unclosed\n",
        )

        listing = "zathura [build logs] (0.5.2-1)\n"

        result = runner.invoke(app, ["--dry-run", "nmu-transition", "-m", "Rebuild"], input=listing)

        assert result.exit_code == 2
        assert "invalid YAML" in result.output
