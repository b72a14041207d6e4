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

"""TTY-aware spinner for activity indication.

Uses Rich spinners when stderr is a TTY, falls back to plain text otherwise.
Activity output goes to the real terminal (sys.__stderr__) so that the
generated wb commands on stdout stay clean.
"""

from __future__ import annotations

import contextlib
import sys
from collections.abc import Iterator

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.text import Text


def is_tty() -> bool:
    """Return True if stderr is a TTY."""
    try:
        if sys.__stderr__ is None:
            return False  # pragma: no cover
        return sys.__stderr__.isatty()
    except (AttributeError, ValueError):  # pragma: no cover
        return False


def activity(phase: str, description: str) -> None:
    """Print a ``[phase] description`` line."""
    with contextlib.suppress(OSError, ValueError):
        print(f"[{phase}] {description}", file=sys.__stderr__, flush=True)


@contextlib.contextmanager
def activity_spinner(phase: str, description: str, disable: bool = False) -> Iterator[None]:
    """Context manager that shows a spinner while the wrapped block runs.

    Args:
        phase: Short phase label (e.g., "fetch", "excuses").
        description: Human-readable description of current activity.
        disable: Force disable spinner even on TTY.
    """
    if disable or not is_tty():
        activity(phase, description)
        yield
        return

    console = Console(file=sys.__stderr__, force_terminal=True)
    spinner = Spinner("dots", text=Text(f"[{phase}] {description}"))
    with Live(spinner, console=console, refresh_per_second=12, transient=True):
        yield
    activity(phase, description)
