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

"""Find binaries built against sources that are only kept for Built-Using.

When a source is superseded but still referenced by another binary's
``Built-Using`` field, the archive keeps it around as "extra source only".
Rebuilding the referencing binaries lets the old source go away.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable
from dataclasses import dataclass

from nmutool.apt.packages import BuildProvenanceRecord, SourceRecord
from nmutool.core.exceptions import InvalidCommand
from nmutool.debpkg.package import PackageName, VersionedPackage
from nmutool.debpkg.version import Version
from nmutool.target.arch import Architecture
from nmutool.target.suite import UNSTABLE, SuiteOrCodename
from nmutool.wb import ScheduleBinNMU, SourceSpecifier

logger = logging.getLogger(__name__)

ESO_MESSAGE = "Rebuild for outdated Built-Using"
ESO_BUILD_PRIORITY = -50

# Naming conventions of sources that cannot be usefully binNMU'd. This
# follows current archive practice and needs revisiting when it changes.
TOOLCHAIN_PREFIXES = ("gcc-", "binutils")
SIGNED_TEMPLATE_PREFIXES = ("grub-", "linux-", "shim-", "fwupd-")
SIGNED_SUFFIX = "-signed"


def source_skip_binnmu(source: str) -> str | None:
    """Return why ``source`` must not be binNMU'd, or None."""
    if source.startswith(TOOLCHAIN_PREFIXES):
        return "toolchain package"
    if source.endswith(SIGNED_SUFFIX) and source.startswith(SIGNED_TEMPLATE_PREFIXES):
        return "signed package"
    return None


def _skip_binary(record: BuildProvenanceRecord) -> str | None:
    if record.architecture == Architecture.ALL:
        return "architecture independent"
    if record.section == "debian-installer" or record.package_type == "udeb":
        return "debian-installer package"
    return source_skip_binnmu(record.source)


@dataclass(frozen=True)
class StaleReference:
    """A Built-Using reference to a superseded source."""

    built_using: VersionedPackage
    current: Version

    def __str__(self) -> str:
        return f"{self.built_using.name} {self.built_using.version} < {self.current}"


@dataclass(frozen=True)
class OutdatedBuiltUsing:
    """A binary package built against superseded sources.

    Attributes:
        package: The binary package.
        source: Its source package, the one to binNMU.
        architectures: Architectures whose builds carry stale references.
        causes: Every stale reference, sorted.
    """

    package: PackageName
    source: PackageName
    architectures: frozenset[Architecture]
    causes: tuple[StaleReference, ...]

    def describe(self) -> str:
        return ", ".join(str(cause) for cause in self.causes)


def _current_versions(sources: Iterable[SourceRecord]) -> tuple[set[VersionedPackage], dict[str, Version]]:
    eso: set[VersionedPackage] = set()
    current: dict[str, Version] = {}
    for record in sources:
        if record.extra_source_only:
            eso.add(VersionedPackage(record.package, record.version))
        elif record.package not in current or current[record.package] < record.version:
            current[record.package] = record.version
    return eso, current


def find_outdated_built_using(
    records: Iterable[BuildProvenanceRecord],
    sources: Iterable[SourceRecord],
    ftbfs: Collection[str] | None = None,
) -> list[OutdatedBuiltUsing]:
    """Find binaries whose Built-Using cites an extra-source-only source.

    A reference is stale if the cited source version is marked
    extra-source-only and is older than the current version of that
    source. Each binary package is reported once, with all of its stale
    references across architectures.

    Args:
        records: Binary package records.
        sources: Source records, including the extra-source-only ones.
        ftbfs: Sources known to fail to build; they are skipped.

    Returns:
        Results sorted by binary package name.
    """
    eso, current = _current_versions(sources)
    ftbfs = ftbfs if ftbfs is not None else ()

    found: dict[PackageName, tuple[PackageName, set[Architecture], set[StaleReference]]] = {}
    for record in records:
        if not record.built_using:
            continue
        reason = _skip_binary(record)
        if reason is not None:
            logger.debug("Skipping %s/%s: %s", record.package, record.architecture, reason)
            continue
        if record.source in ftbfs:
            logger.debug("Skipping %s: %s fails to build", record.package, record.source)
            continue

        causes = {
            StaleReference(ref, current[ref.name])
            for ref in record.built_using
            if ref in eso and ref.name in current and ref.version < current[ref.name]
        }
        if not causes:
            continue
        _, archs, stale = found.setdefault(record.package, (record.source, set(), set()))
        archs.add(record.architecture)
        stale.update(causes)

    return [
        OutdatedBuiltUsing(
            package=package,
            source=source,
            architectures=frozenset(archs),
            causes=tuple(sorted(stale, key=lambda c: (c.built_using.name, c.built_using.version))),
        )
        for package, (source, archs, stale) in sorted(found.items())
    ]


def rebuild_sources(results: Iterable[OutdatedBuiltUsing]) -> list[PackageName]:
    """The unique sources to rebuild, sorted."""
    return sorted({result.source for result in results})


def eso_commands(
    results: Iterable[OutdatedBuiltUsing],
    suite: SuiteOrCodename = UNSTABLE,
    build_priority: int = ESO_BUILD_PRIORITY,
    architectures: Collection[Architecture] = (),
) -> list[ScheduleBinNMU]:
    """One ``nmu`` per source; without ``architectures`` on ``ANY``."""
    commands = []
    for source in rebuild_sources(results):
        try:
            specifier = SourceSpecifier.for_architectures(source, architectures, suite=suite)
            commands.append(ScheduleBinNMU(specifier, ESO_MESSAGE, build_priority=build_priority))
        except InvalidCommand as e:
            logger.error("Unable to build binNMU for %s: %s", source, e)
    return commands
