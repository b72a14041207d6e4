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

"""Turn hand-picked package lists into binNMUs.

Two input formats are understood. Transition tracker listings look like::

    zathura [build logs] (0.5.2-1) ...
    zathura-pdf (sid only) [build logs] (0.4.9-2) ...

and free-form lists only need a package name followed somewhere by a version,
optionally in parentheses.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field

from nmutool.core.exceptions import InvalidCommand, InvalidPackageName, VersionParseError
from nmutool.debpkg.package import PackageName
from nmutool.debpkg.version import Version
from nmutool.target.suite import UNSTABLE, SuiteOrCodename
from nmutool.wb import ScheduleBinNMU, SourceSpecifier, WBArchitecture

logger = logging.getLogger(__name__)

_LIST_LINE_RE = re.compile(r"([a-z0-9+.-]+)[ \t].* \(?([0-9][^() \t]*)\)?")


@dataclass(frozen=True)
class BinNMURequest:
    source: PackageName
    version: Version


@dataclass
class BinNMUOptions:
    """Options shared by all binNMUs of one batch."""

    message: str
    suite: SuiteOrCodename = UNSTABLE
    architectures: tuple[WBArchitecture, ...] = ()
    build_priority: int = 0
    dep_wait: str | None = None
    extra_depends: str | None = None


@dataclass
class ParsedList:
    requests: list[BinNMURequest] = field(default_factory=list)
    unsupported: list[str] = field(default_factory=list)


def _request(source: str, version: str) -> BinNMURequest:
    return BinNMURequest(PackageName(source), Version.parse(version))


def parse_transition_list(lines: Iterable[str]) -> ParsedList:
    """Parse a transition tracker listing.

    Header lines (``Dependency level ...``) and blank lines are ignored;
    lines in other formats end up in ``unsupported``.
    """
    parsed = ParsedList()
    for line in lines:
        line = line.rstrip("\n")
        if not line.strip() or line.startswith("Dependency level"):
            continue

        tokens = line.split()
        index = 5 if "(sid only)" in line else 3
        if len(tokens) <= index:
            parsed.unsupported.append(line)
            continue
        version = tokens[index]
        if not (version.startswith("(") and version.endswith(")")):
            logger.warning("Unable to parse version: %s / %s", tokens[0], version)
            parsed.unsupported.append(line)
            continue
        try:
            parsed.requests.append(_request(tokens[0], version[1:-1]))
        except (InvalidPackageName, VersionParseError) as e:
            logger.warning("Skipping %s: %s", tokens[0], e)
            parsed.unsupported.append(line)
    return parsed


def parse_binnmu_list(lines: Iterable[str]) -> ParsedList:
    """Parse lines of the form ``name ... (version)``."""
    parsed = ParsedList()
    for line in lines:
        line = line.rstrip("\n")
        if not line.strip():
            continue
        match = _LIST_LINE_RE.search(line)
        if not match:
            parsed.unsupported.append(line)
            continue
        try:
            parsed.requests.append(_request(match.group(1), match.group(2)))
        except (InvalidPackageName, VersionParseError) as e:
            logger.warning("Skipping %s: %s", match.group(1), e)
            parsed.unsupported.append(line)
    return parsed


def request_commands(
    requests: Iterable[BinNMURequest],
    options: BinNMUOptions,
    ftbfs: Collection[str] | None = None,
) -> list[ScheduleBinNMU]:
    """Build one ``nmu`` per request, skipping sources that fail to build."""
    ftbfs = ftbfs if ftbfs is not None else ()
    commands = []
    for request in requests:
        if request.source in ftbfs:
            logger.info("Skipping %s due to FTBFS bugs", request.source)
            continue
        try:
            specifier = SourceSpecifier(request.source, request.version, options.architectures, options.suite)
            commands.append(
                ScheduleBinNMU(
                    specifier,
                    options.message,
                    extra_depends=options.extra_depends,
                    build_priority=options.build_priority,
                    dep_wait=options.dep_wait,
                )
            )
        except InvalidCommand as e:
            logger.error("Unable to build binNMU for %s: %s", request.source, e)
    return commands
