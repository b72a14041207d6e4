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

"""Tests for nmutool.commands.grep_excuses module."""

from __future__ import annotations

from pathlib import Path

import responses
from typer.testing import CliRunner

from nmutool.cli import app
from nmutool.commands.grep_excuses import format_excuse, grep_report, strip_tags
from nmutool.excuses import parse_excuses

runner = CliRunner()

EXCUSES_URL = "http://release.example.org/britney/excuses.yaml"


class TestFormatting:
    """Tests for excuse formatting helpers."""

    def test_strip_tags(self) -> None:
        assert strip_tags('<a href="#">Will attempt migration</a> (1 day)') == "Will attempt migration (1 day)"

    def test_format_excuse(self, sample_excuses: str) -> None:
        zathura = parse_excuses(sample_excuses).entries[0]

        lines = format_excuse(zathura)

        assert lines[0] == "zathura (0.5.2-1 to 0.5.2-2)"
        assert lines[1] == "  Maintainer: Sebastian Ramacher"
        assert lines[2] == "  Migration status for zathura (0.5.2-1 to 0.5.2-2): Will attempt migration"


class TestGrepReport:
    """Tests for grep_report()."""

    def test_by_source(self, sample_excuses: str) -> None:
        lines = grep_report(parse_excuses(sample_excuses), ["mpv"])
        assert lines[0] == "mpv (0.38.0-1 to 0.38.0-2)"
        assert "  Not built on buildd" in lines

    def test_by_maintainer(self, sample_excuses: str) -> None:
        lines = grep_report(parse_excuses(sample_excuses), ["Debian Multimedia Maintainers"])
        assert lines[0].startswith("mpv ")

    def test_removal(self, sample_excuses: str) -> None:
        assert grep_report(parse_excuses(sample_excuses), ["oldpkg"]) == ["oldpkg (removal)"]

    def test_no_match(self, sample_excuses: str) -> None:
        assert grep_report(parse_excuses(sample_excuses), ["nothing"]) == []


class TestGrepExcusesCommand:
    """Tests for the grep-excuses command."""

    @responses.activate
    def test_grep(self, mock_config: Path, sample_excuses: str) -> None:
        responses.add(responses.GET, EXCUSES_URL, body=sample_excuses)

        result = runner.invoke(app, ["grep-excuses", "zathura", "libfoo"])

        assert result.exit_code == 0, result.output
        assert "zathura (0.5.2-1 to 0.5.2-2)" in result.stdout
        assert "libfoo_tpu (1.2-1 to 1.2-1+deb13u1)" in result.stdout

    def test_requires_argument(self, mock_config: Path) -> None:
        result = runner.invoke(app, ["grep-excuses"])
        assert result.exit_code != 0
