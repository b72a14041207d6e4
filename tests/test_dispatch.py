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

"""Tests for nmutool.dispatch module."""

from __future__ import annotations

import subprocess
from unittest import mock

import pytest

from nmutool import dispatch
from nmutool.core.exceptions import DispatchError
from nmutool.wb import ScheduleBinNMU, SourceSpecifier

NMU = ScheduleBinNMU(SourceSpecifier("zathura"), "Rebuild on buildd", build_priority=-50)  # type: ignore[arg-type]
LINES = ['nmu zathura . ANY . unstable . -m "Rebuild on buildd"', "bp -50 zathura . ANY . unstable"]


class TestExecuteWbCommands:
    """Tests for execute_wb_commands function."""

    def test_dry_run_only_echoes(self) -> None:
        echoed: list[str] = []
        with mock.patch.object(dispatch.subprocess, "run") as run:
            count = dispatch.execute_wb_commands([NMU], dry_run=True, echo=echoed.append)

        run.assert_not_called()
        assert echoed == LINES
        assert count == 2

    def test_nothing_to_do(self) -> None:
        with mock.patch.object(dispatch.subprocess, "run") as run:
            assert dispatch.execute_wb_commands([], echo=lambda line: None) == 0
        run.assert_not_called()

    def test_pipes_commands_over_ssh(self) -> None:
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="ok\n", stderr="")
        with mock.patch.object(dispatch.subprocess, "run", return_value=completed) as run:
            dispatch.execute_wb_commands([NMU], host="buildd.example.org", echo=lambda line: None)

        args, kwargs = run.call_args
        assert args[0] == ["ssh", "buildd.example.org", "wb"]
        assert kwargs["input"] == "\n".join(LINES) + "\n"

    def test_wb_failure(self) -> None:
        completed = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="permission denied")
        with mock.patch.object(dispatch.subprocess, "run", return_value=completed):
            with pytest.raises(DispatchError, match="permission denied"):
                dispatch.execute_wb_commands([NMU], echo=lambda line: None)

    def test_ssh_missing(self) -> None:
        with mock.patch.object(dispatch.subprocess, "run", side_effect=FileNotFoundError("ssh")):
            with pytest.raises(DispatchError, match="ssh not found"):
                dispatch.execute_wb_commands([NMU], echo=lambda line: None)

    def test_timeout(self) -> None:
        with mock.patch.object(dispatch.subprocess, "run", side_effect=subprocess.TimeoutExpired("ssh", 600)):
            with pytest.raises(DispatchError, match="timed out"):
                dispatch.execute_wb_commands([NMU], echo=lambda line: None)
