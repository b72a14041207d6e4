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

"""Implementation of `nmutool binnmu-buildinfo`."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from nmutool.analysis.buildinfo import Skipped, buildinfo_command, newest_source_versions
from nmutool.apt.packages import ma_same_sources
from nmutool.bugs import UDDBugs
from nmutool.buildinfo import iter_buildinfo_paths, load_buildinfo
from nmutool.commands.options import global_options, handle_errors, make_binnmu_options
from nmutool.core.context import CommandContext
from nmutool.core.exceptions import InvalidCommand, ParseError
from nmutool.dispatch import execute_wb_commands
from nmutool.spinner import activity
from nmutool.wb import ScheduleBinNMU

logger = logging.getLogger(__name__)


def binnmu_buildinfo(
    ctx: typer.Context,
    inputs: list[Path] = typer.Argument(..., help=".buildinfo files or directories containing them"),
    message: str = typer.Option(..., "--message", "-m", help="Message for the binNMUs"),
    suite: str = typer.Option("", "--suite", "-s", help="Suite for binNMUs (default from config)"),
    build_priority: int = typer.Option(0, "--bp", help="Build priority of the binNMUs"),
    dep_wait: str = typer.Option("", "--dw", help="Dependency-wait for the binNMUs"),
    extra_depends: str = typer.Option("", "--extra-depends", help="Extra build dependencies"),
) -> None:
    """Rebuild maintainer built uploads on the buildds, based on their .buildinfo files."""
    options = global_options(ctx)
    with handle_errors():
        context = CommandContext.create(options)
        binnmu_options = make_binnmu_options(
            context, message, suite, build_priority=build_priority, dep_wait=dep_wait, extra_depends=extra_depends
        )
        target = binnmu_options.suite

        records = context.packages(target, context.architectures(target))
        source_versions = newest_source_versions(records)
        ma_same = ma_same_sources(records)
        ftbfs = UDDBugs() if options.force_processing else context.ftbfs_bugs(target)

        commands: list[ScheduleBinNMU] = []
        seen: set[str] = set()
        skipped = 0
        for path in iter_buildinfo_paths(inputs):
            try:
                result = buildinfo_command(load_buildinfo(path), binnmu_options, source_versions, ma_same, ftbfs)
            except (ParseError, InvalidCommand) as e:
                logger.warning("Skipping %s: %s", path, e)
                skipped += 1
                continue
            if isinstance(result, Skipped):
                logger.warning("Skipping %s: %s", path, result.reason)
                skipped += 1
                continue
            if str(result) not in seen:
                seen.add(str(result))
                commands.append(result)

        activity("buildinfo", f"{len(commands)} binNMUs, {skipped} files skipped")
        execute_wb_commands(commands, dry_run=context.dry_run, host=context.buildd)
