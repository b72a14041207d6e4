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

"""Implementation of `nmutool nmu-version-skew`."""

from __future__ import annotations

import logging

import typer

from nmutool.analysis.skew import SKEW_BUILD_PRIORITY, find_version_skew, skew_commands
from nmutool.bugs import UDDBugs
from nmutool.commands.options import global_options, handle_errors, parse_suite
from nmutool.core.context import CommandContext
from nmutool.dispatch import execute_wb_commands
from nmutool.spinner import activity, activity_spinner

logger = logging.getLogger(__name__)


def nmu_version_skew(
    ctx: typer.Context,
    suite: str = typer.Option("", "--suite", "-s", help="Suite for binNMUs (default from config)"),
    build_priority: int = typer.Option(SKEW_BUILD_PRIORITY, "--bp", help="Build priority of the binNMUs"),
) -> None:
    """Rebuild Multi-Arch: same packages whose versions differ across architectures."""
    options = global_options(ctx)
    with handle_errors():
        context = CommandContext.create(options)
        target = parse_suite(suite, context)

        records = context.packages(target, context.architectures(target))
        ftbfs = UDDBugs() if options.force_processing else context.ftbfs_bugs(target)

        with activity_spinner("skew", "Looking for version skew", disable=options.verbose > 0):
            results = find_version_skew(records, ftbfs)
        for result in results:
            logger.info(
                "%s: %s behind %s",
                result.package,
                ", ".join(sorted(arch.value for arch in result.architectures)),
                result.target,
            )
        activity("skew", f"{len(results)} packages out of sync")

        commands = skew_commands(results, target, build_priority)
        execute_wb_commands(commands, dry_run=context.dry_run, host=context.buildd)
