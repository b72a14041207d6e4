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

"""Hand wb commands to wanna-build.

Commands are piped to ``wb`` on the buildd host over SSH. In dry-run mode
they are only printed, so the output can be pasted on the host directly.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable, Sequence

import typer

from nmutool.core.exceptions import DispatchError
from nmutool.wb import WBCommand, render_commands

logger = logging.getLogger(__name__)

DEFAULT_BUILDD = "wuiet.debian.org"


def execute_wb_commands(
    commands: Sequence[WBCommand],
    dry_run: bool = False,
    host: str = DEFAULT_BUILDD,
    echo: Callable[[str], None] = typer.echo,
) -> int:
    """Print the commands and, unless ``dry_run``, run them on ``host``.

    Returns:
        The number of command lines handed over.

    Raises:
        DispatchError: If ssh cannot be run or ``wb`` fails.
    """
    text = render_commands(commands)
    if not text:
        logger.debug("No wb commands to execute")
        return 0

    for line in text.splitlines():
        echo(line)
    if dry_run:
        return len(text.splitlines())

    cmd = ["ssh", host, "wb"]
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, input=text + "\n", capture_output=True, text=True, timeout=600)
    except FileNotFoundError as e:
        raise DispatchError(message="ssh not found") from e
    except subprocess.TimeoutExpired as e:
        raise DispatchError(message=f"wb on {host} timed out") from e

    if result.stdout:
        logger.info("wb: %s", result.stdout.strip())
    if result.returncode != 0:
        raise DispatchError(message=f"wb on {host} failed ({result.returncode}): {result.stderr.strip()}")
    return len(text.splitlines())
