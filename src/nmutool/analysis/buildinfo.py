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

"""Reschedule maintainer built uploads from their ``.buildinfo`` files."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass

from nmutool.analysis.transition import BinNMUOptions
from nmutool.apt.packages import BuildProvenanceRecord
from nmutool.buildinfo import Buildinfo
from nmutool.debpkg.package import PackageName
from nmutool.debpkg.version import Version
from nmutool.wb import ScheduleBinNMU, SourceSpecifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Skipped:
    """A buildinfo that did not result in a binNMU, and why."""

    source: PackageName
    reason: str


def newest_source_versions(records: Iterable[BuildProvenanceRecord]) -> dict[PackageName, Version]:
    """The highest binary version in the archive per source package."""
    versions: dict[PackageName, Version] = {}
    for record in records:
        current = versions.get(record.source)
        if current is None or record.version > current:
            versions[record.source] = record.version
    return versions


def buildinfo_command(
    buildinfo: Buildinfo,
    options: BinNMUOptions,
    source_versions: Mapping[PackageName, Version],
    ma_same_sources: Collection[str] = frozenset(),
    ftbfs: Collection[str] = frozenset(),
) -> ScheduleBinNMU | Skipped:
    """The binNMU rebuilding the upload described by ``buildinfo``.

    The binNMU is scheduled on the architectures the maintainer built,
    or on ``ANY`` if the source ships ``Multi-Arch: same`` binaries.
    Uploads that were superseded, removed or only built arch:all are
    skipped, as are sources with FTBFS bugs.

    Raises:
        InvalidCommand: If the options do not form a valid ``nmu``.
    """
    source = buildinfo.source
    architectures = buildinfo.binnmu_architectures()
    if not architectures:
        return Skipped(source, "no binNMU-able architecture")

    archive_version = source_versions.get(source)
    if archive_version is None:
        return Skipped(source, "removed from the archive")
    if archive_version > buildinfo.version:
        return Skipped(source, f"newer version {archive_version} in archive")
    if source in ftbfs:
        return Skipped(source, "FTBFS bugs")

    version = buildinfo.version.without_binnmu_version()
    if source in ma_same_sources:
        specifier = SourceSpecifier(source, version, (), options.suite)
    else:
        specifier = SourceSpecifier.for_architectures(source, architectures, version, options.suite)
    return ScheduleBinNMU(
        specifier,
        options.message,
        extra_depends=options.extra_depends,
        build_priority=options.build_priority,
        dep_wait=options.dep_wait,
    )
