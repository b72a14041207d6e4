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

"""Implementation of `nmutool process-unblocks`."""

from __future__ import annotations

import typer

from nmutool.analysis.excuses import unblock_for
from nmutool.commands.options import global_options, handle_errors
from nmutool.core.context import CommandContext


def process_unblocks(ctx: typer.Context) -> None:
    """Print unblock hints for tpu uploads and binNMUs awaiting approval."""
    options = global_options(ctx)
    with handle_errors():
        context = CommandContext.create(options)
        report, _ = context.excuses()
        typer.echo("# Unblocks")
        for entry in report.entries:
            unblock = unblock_for(entry)
            if unblock is not None:
                typer.echo(str(unblock))
