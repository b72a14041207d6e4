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

"""Implementation of `nmutool grep-excuses`."""

from __future__ import annotations

import re

import typer

from nmutool.commands.options import global_options, handle_errors
from nmutool.core.context import CommandContext
from nmutool.excuses import ExcuseEntry, ExcusesReport

_TAG_RE = re.compile(r"<[^>]*>")


def strip_tags(text: str) -> str:
    return _TAG_RE.sub("", text)


def format_excuse(entry: ExcuseEntry) -> list[str]:
    old = str(entry.old_version) if entry.old_version is not None else "-"
    lines = [f"{entry.item_name} ({old} to {entry.new_version})"]
    if entry.maintainer:
        lines.append(f"  Maintainer: {entry.maintainer}")
    lines.extend(f"  {strip_tags(line)}" for line in entry.excuses)
    return lines


def grep_report(report: ExcusesReport, needles: list[str]) -> list[str]:
    """Excuses of the given sources or of packages maintained by the given people."""
    wanted = set(needles)
    lines: list[str] = []
    for entry in report.entries:
        if entry.source in wanted or (entry.maintainer and entry.maintainer in wanted):
            lines.extend(format_excuse(entry))
    for removal in report.removals:
        if removal in wanted:
            lines.append(f"{removal} (removal)")
    return lines


def grep_excuses(
    ctx: typer.Context,
    maintainer_package: list[str] = typer.Argument(..., help="Maintainers or source packages to look for"),
) -> None:
    """Show the excuses of packages or maintainers."""
    options = global_options(ctx)
    with handle_errors():
        context = CommandContext.create(options)
        report, _ = context.excuses()
        lines = grep_report(report, maintainer_package)
        if not lines:
            typer.echo("No excuses found.", err=True)
        for line in lines:
            typer.echo(line)
