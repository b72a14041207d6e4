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

"""Detect ``Multi-Arch: same`` packages whose versions differ across architectures.

Co-installable packages must carry the same version on every architecture,
so a binNMU on some architectures has to be repeated on the others.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass

from nmutool.analysis.eso import source_skip_binnmu
from nmutool.apt.packages import BuildProvenanceRecord, MultiArch
from nmutool.core.exceptions import InvalidCommand
from nmutool.debpkg.package import PackageName
from nmutool.debpkg.version import Version
from nmutool.target.arch import Architecture
from nmutool.target.suite import UNSTABLE, SuiteOrCodename
from nmutool.wb import ScheduleBinNMU, SourceSpecifier

logger = logging.getLogger(__name__)

SKEW_MESSAGE = "Rebuild to sync binNMU versions"
SKEW_BUILD_PRIORITY = -50


@dataclass(frozen=True)
class VersionSkew:
    """A binary package that is out of sync.

    Attributes:
        package: The binary package.
        source: Its source package.
        target: The greatest version found on any architecture.
        architectures: Architectures lagging behind ``target``.
        versions: The version found on each architecture.
    """

    package: PackageName
    source: PackageName
    target: Version
    architectures: frozenset[Architecture]
    versions: Mapping[Architecture, Version]


def find_version_skew(
    records: Iterable[BuildProvenanceRecord],
    ftbfs: Collection[str] | None = None,
) -> list[VersionSkew]:
    """Group ``Multi-Arch: same`` binaries by name and report version skew.

    Returns:
        Results sorted by binary package name.
    """
    ftbfs = ftbfs if ftbfs is not None else ()
    groups: dict[PackageName, tuple[PackageName, dict[Architecture, Version]]] = {}
    for record in records:
        if record.multi_arch != MultiArch.SAME or record.architecture == Architecture.ALL:
            continue
        _, versions = groups.setdefault(record.package, (record.source, {}))
        # several suites may be merged, keep the newest build
        if record.architecture not in versions or versions[record.architecture] < record.version:
            versions[record.architecture] = record.version

    results = []
    for package, (source, versions) in sorted(groups.items()):
        if len(set(versions.values())) <= 1:
            continue
        reason = source_skip_binnmu(source)
        if reason is not None:
            logger.debug("Skipping %s: %s", package, reason)
            continue
        if source in ftbfs:
            logger.debug("Skipping %s: %s fails to build", package, source)
            continue

        target = max(versions.values())
        lagging = frozenset(arch for arch, version in versions.items() if version < target)
        logger.debug("%s: %s behind %s", package, ", ".join(sorted(a.value for a in lagging)), target)
        results.append(VersionSkew(package, source, target, lagging, dict(versions)))
    return results


def skew_commands(
    results: Iterable[VersionSkew],
    suite: SuiteOrCodename = UNSTABLE,
    build_priority: int = SKEW_BUILD_PRIORITY,
) -> list[ScheduleBinNMU]:
    """binNMUs bringing the lagging architectures to the target version.

    Binaries of the same source and target are rebuilt with one command.
    If the target is itself a binNMU, its binNMU number is reused so all
    architectures end up with identical versions.
    """
    merged: dict[tuple[PackageName, Version], set[Architecture]] = {}
    for result in results:
        merged.setdefault((result.source, result.target), set()).update(result.architectures)

    commands = []
    for (source, target), archs in sorted(merged.items()):
        try:
            specifier = SourceSpecifier.for_architectures(
                source, sorted(archs, key=lambda a: a.value), target.without_binnmu_version(), suite
            )
            commands.append(
                ScheduleBinNMU(
                    specifier,
                    SKEW_MESSAGE,
                    nmu_version=target.binnmu_version,
                    build_priority=build_priority,
                )
            )
        except InvalidCommand as e:
            logger.error("Unable to build binNMU for %s: %s", source, e)
    return commands
