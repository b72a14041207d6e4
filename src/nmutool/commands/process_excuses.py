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

"""Implementation of `nmutool process-excuses`.

Schedules binNMUs for packages that would migrate to testing if their
binaries were (re)built on the buildds. Commands that were already sent
are remembered and not sent again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import typer
import yaml

from nmutool.analysis.excuses import AnalysisOptions, analyze_report, binnmu_commands
from nmutool.apt.packages import ma_same_sources
from nmutool.commands.options import global_options, handle_errors
from nmutool.core.context import CommandContext
from nmutool.dispatch import execute_wb_commands
from nmutool.spinner import activity
from nmutool.target.suite import TESTING, UNSTABLE

logger = logging.getLogger(__name__)


@dataclass
class ScheduledBinNMUs:
    """The binNMU commands already handed to wanna-build."""

    path: Path
    binnmus: list[str] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path) -> ScheduledBinNMUs:
        if not path.exists():
            return cls(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            logger.warning("Ignoring unreadable %s: %s", path, e)
            return cls(path)
        binnmus = data.get("binnmus", []) if isinstance(data, dict) else []
        return cls(path, [str(line) for line in binnmus])

    def __contains__(self, command: object) -> bool:
        return str(command) in self.binnmus

    def add(self, command: object) -> None:
        if command not in self:
            self.binnmus.append(str(command))

    def store(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(yaml.safe_dump({"binnmus": self.binnmus}), encoding="utf-8")


def process_excuses(
    ctx: typer.Context,
    no_rebuilds: bool = typer.Option(False, help="Only analyze, do not prepare binNMUs"),
    force: bool = typer.Option(
        False,
        "--force",
        help="Also consider packages that look complete, are blocked by RC bugs or are too young",
    ),
) -> None:
    """Rebuild packages on the buildds so that they can migrate to testing."""
    options = global_options(ctx)
    with handle_errors():
        context = CommandContext.create(options)
        report, _ = context.excuses()
        if context.unchanged("excuses.yaml"):
            activity("excuses", "excuses.yaml is unchanged; nothing to do")
            return

        architectures = context.architectures(TESTING)
        analysis = analyze_report(report, architectures, AnalysisOptions(force=force))
        activity("excuses", f"{len(analysis.candidates)} packages need binNMUs")
        if no_rebuilds or not analysis.candidates:
            return

        records = context.packages(UNSTABLE, architectures)
        commands = binnmu_commands(analysis, UNSTABLE, ma_same_sources(records))

        scheduled = ScheduledBinNMUs.load(context.scheduled_binnmus_path)
        pending = []
        for command in commands:
            if command in scheduled:
                logger.info("%s: skipping, already scheduled", command)
            else:
                pending.append(command)

        typer.echo("# Rebuild on buildds for testing migration")
        execute_wb_commands(pending, dry_run=context.dry_run, host=context.buildd)
        if not context.dry_run:
            for command in pending:
                scheduled.add(command)
            scheduled.store()
