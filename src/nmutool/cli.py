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

"""CLI application definition for nmutool."""

from __future__ import annotations

import logging

import typer
from typer import Typer

from nmutool.commands.binnmu_buildinfo import binnmu_buildinfo
from nmutool.commands.grep_excuses import grep_excuses
from nmutool.commands.nmu_eso import nmu_eso
from nmutool.commands.nmu_transition import nmu_transition
from nmutool.commands.nmu_version_skew import nmu_version_skew
from nmutool.commands.prepare_binnmus import prepare_binnmus
from nmutool.commands.process_excuses import process_excuses
from nmutool.commands.process_unblocks import process_unblocks
from nmutool.core.context import GlobalOptions

app: Typer = Typer(
    name="nmutool",
    help="A tool for scheduling binNMUs for Debian release management.",
    add_completion=False,
)


def configure_logging(verbose: int) -> None:
    """Send log output to stderr; -v for info, -vv for debug."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", force=True)


@app.callback()
def main(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Only print wb commands without running them"),
    force_download: bool = typer.Option(False, "--force-download", help="Download all documents again"),
    force_processing: bool = typer.Option(
        False, "--force-processing", "-f", help="Process documents even if they did not change"
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase verbosity"),
    offline: bool = typer.Option(False, "--offline", help="Only use cached documents"),
    buildd: str = typer.Option("", "--buildd", help="Host to run wb on (default from config)"),
    mirror: str = typer.Option("", "--mirror", help="Debian archive mirror (default from config)"),
) -> None:
    """Schedule binNMUs and unblocks for Debian release management."""
    configure_logging(verbose)
    ctx.obj = GlobalOptions(
        dry_run=dry_run,
        force_download=force_download,
        force_processing=force_processing,
        verbose=verbose,
        offline=offline,
        buildd=buildd or None,
        mirror=mirror or None,
    )


# Register commands
app.command(name="process-excuses")(process_excuses)
app.command(name="process-unblocks")(process_unblocks)
app.command(name="nmu-eso")(nmu_eso)
app.command(name="nmu-version-skew")(nmu_version_skew)
app.command(name="nmu-transition")(nmu_transition)
app.command(name="prepare-binnmus")(prepare_binnmus)
app.command(name="grep-excuses")(grep_excuses)
app.command(name="binnmu-buildinfo")(binnmu_buildinfo)
