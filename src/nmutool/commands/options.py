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

"""Option parsing and error handling shared by the CLI commands."""

from __future__ import annotations

import contextlib
import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import typer

from nmutool.analysis.transition import BinNMUOptions
from nmutool.core.context import CommandContext, GlobalOptions
from nmutool.core.exceptions import NmutoolError, ParseError
from nmutool.target.arch import Architecture, parse_architectures
from nmutool.target.suite import SuiteOrCodename, parse_suite_or_codename
from nmutool.wb import WBArchitecture

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_USAGE_ERROR = 2


def global_options(ctx: typer.Context) -> GlobalOptions:
    obj = ctx.find_root().obj
    return obj if isinstance(obj, GlobalOptions) else GlobalOptions()


@contextlib.contextmanager
def handle_errors() -> Iterator[None]:
    """Turn nmutool errors into an error message and their exit code."""
    try:
        yield
    except NmutoolError as e:
        logger.debug("Command failed", exc_info=True)
        typer.echo(f"Error: {e}", err=True)
        sys.exit(e.exit_code)


def split_list(value: str) -> list[str]:
    """Split a comma or whitespace separated option value."""
    return [item for item in value.replace(",", " ").split() if item]


def parse_suite(value: str, context: CommandContext) -> SuiteOrCodename:
    """The suite given on the command line, or the configured default."""
    return parse_suite_or_codename(value) if value else context.suite


def parse_arch_option(value: str) -> list[Architecture]:
    """Parse a list of concrete architectures.

    Raises:
        ParseError: On unknown architectures.
        InvalidArchitecture: On pseudo architectures.
    """
    known, unknown = parse_architectures(split_list(value))
    if unknown:
        raise ParseError(location="--architecture", reason=f"unknown architectures: {', '.join(unknown)}")
    return [arch.require_concrete("--architecture") for arch in known]


def parse_wb_arch_option(value: str) -> tuple[WBArchitecture, ...]:
    """Parse wb architectures: ``ANY``, ``arch`` or ``-arch``."""
    return tuple(WBArchitecture.parse(token) for token in split_list(value))


def read_input(path: str) -> list[str]:
    """Read the lines of ``path``, or of stdin if it is empty or ``-``."""
    if not path or path == "-":
        return sys.stdin.read().splitlines()
    try:
        return Path(path).read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise NmutoolError(message=f"Unable to read {path}: {e}", exit_code=EXIT_USAGE_ERROR) from e


def make_binnmu_options(
    context: CommandContext,
    message: str,
    suite: str = "",
    architecture: str = "",
    build_priority: int = 0,
    dep_wait: str = "",
    extra_depends: str = "",
) -> BinNMUOptions:
    """Collect the binNMU command line options of the list based commands."""
    return BinNMUOptions(
        message=message,
        suite=parse_suite(suite, context),
        architectures=parse_wb_arch_option(architecture),
        build_priority=build_priority,
        dep_wait=dep_wait or None,
        extra_depends=extra_depends or None,
    )
