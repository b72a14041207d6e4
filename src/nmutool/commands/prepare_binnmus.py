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

"""Implementation of `nmutool prepare-binnmus`."""

from __future__ import annotations

import logging

import typer

from nmutool.analysis.transition import parse_binnmu_list, request_commands
from nmutool.commands.options import global_options, handle_errors, make_binnmu_options, read_input
from nmutool.core.context import CommandContext
from nmutool.dispatch import execute_wb_commands

logger = logging.getLogger(__name__)


def prepare_binnmus(
    ctx: typer.Context,
    input_file: str = typer.Argument("", help="Lines of 'package ... (version)' (default: stdin)"),
    message: str = typer.Option(..., "--message", "-m", help="Message for the binNMUs"),
    suite: str = typer.Option("", "--suite", "-s", help="Suite for binNMUs (default from config)"),
    architecture: str = typer.Option("", "--architecture", "-a", help="Architectures: ANY, arch or -arch"),
    build_priority: int = typer.Option(0, "--bp", help="Build priority of the binNMUs"),
    dep_wait: str = typer.Option("", "--dw", help="Dependency-wait for the binNMUs"),
    extra_depends: str = typer.Option("", "--extra-depends", help="Extra build dependencies"),
) -> None:
    """Prepare binNMUs from a list of packages and versions."""
    options = global_options(ctx)
    with handle_errors():
        context = CommandContext.create(options)
        binnmu_options = make_binnmu_options(
            context, message, suite, architecture, build_priority, dep_wait, extra_depends
        )
        parsed = parse_binnmu_list(read_input(input_file))
        for line in parsed.unsupported:
            logger.debug("Ignoring line: %s", line)
        commands = request_commands(parsed.requests, binnmu_options)
        execute_wb_commands(commands, dry_run=context.dry_run, host=context.buildd)
