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

"""Decide which packages in the migration report need binNMUs.

A source is rebuilt on an architecture when its binaries there are still
the ones built from the old version, or when they were uploaded by the
maintainer instead of being built on a buildd. Only candidates that are
otherwise ready to migrate are considered, so the rebuild is the last thing
standing between the package and testing.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass, field

from nmutool.core.exceptions import InvalidCommand
from nmutool.debpkg.package import PackageName
from nmutool.debpkg.version import Version
from nmutool.excuses import ExcuseEntry, ExcusesReport, Verdict
from nmutool.target.arch import Architecture
from nmutool.target.suite import UNSTABLE, SuiteOrCodename
from nmutool.wb import ScheduleBinNMU, SourceSpecifier

logger = logging.getLogger(__name__)

BINNMU_MESSAGE = "Rebuild on buildd"

# Policies that only complain about the builds themselves.
_BUILD_POLICIES = frozenset({"builtonbuildd", "age"})


@dataclass
class AnalysisOptions:
    """Knobs for :func:`analyze_excuses`.

    Attributes:
        force: Also consider entries that look complete or are held by
            RC bugs or their age.
        min_age_fraction: Fraction of the age requirement an entry must
            have reached before it is worth rebuilding.
    """

    force: bool = False
    min_age_fraction: float = 0.5


@dataclass(frozen=True)
class BinNMUCandidate:
    source: PackageName
    version: Version
    architectures: frozenset[Architecture]
    reasons: Mapping[Architecture, str] = field(default_factory=dict)

    def sorted_architectures(self) -> list[Architecture]:
        return sorted(self.architectures, key=lambda arch: arch.value)


@dataclass(frozen=True)
class Unblock:
    """An ``unblock`` hint for an upload that needs release team approval."""

    source: PackageName
    version: Version
    tpu: bool = False
    architecture: str | None = None

    def __str__(self) -> str:
        name = f"{self.source}_tpu" if self.tpu else str(self.source)
        hint = f"unblock {name}/{self.version}"
        if self.architecture:
            hint += f"/{self.architecture}"
        return hint


@dataclass
class ExcusesAnalysis:
    """Result of :func:`analyze_excuses`.

    Attributes:
        candidates: Sources needing binNMUs, in order of first appearance.
        unblocks: Hints for uploads that only wait for approval.
        skipped: Report items dropped because they could not be decoded.
    """

    candidates: dict[PackageName, BinNMUCandidate] = field(default_factory=dict)
    unblocks: list[Unblock] = field(default_factory=list)
    skipped: int = 0

    @property
    def binnmus(self) -> dict[PackageName, frozenset[Architecture]]:
        return {name: candidate.architectures for name, candidate in self.candidates.items()}


def _is_actionable(entry: ExcuseEntry) -> bool:
    """Whether the entry is a plain unstable upload of a main source."""
    if entry.is_binnmu:
        logger.debug("Skipping %s: binNMU item", entry.item_name)
        return False
    if entry.is_from_pu or entry.is_from_tpu:
        logger.debug("Skipping %s: not from unstable", entry.item_name)
        return False
    if entry.component not in (None, "main"):
        logger.debug("Skipping %s: in %s", entry.item_name, entry.component)
        return False
    if entry.invalidated_by_other_package:
        logger.debug("Skipping %s: invalidated by another package", entry.item_name)
        return False
    return True


def _only_blocked_by_builds(entry: ExcuseEntry) -> bool:
    """True if every policy except the build related ones passes."""
    if entry.policy_info is None:
        return False
    builtonbuildd = entry.policy_info.builtonbuildd
    if builtonbuildd is None or builtonbuildd.verdict.is_pass:
        return False
    if builtonbuildd.verdict == Verdict.REJECTED_CANNOT_DETERMINE_IF_PERMANENT:
        # builds are still missing, nothing to rebuild yet
        return False
    return all(
        verdict.is_pass for name, verdict in entry.policy_info.verdicts().items() if name not in _BUILD_POLICIES
    )


def _blocking_reason(entry: ExcuseEntry, options: AnalysisOptions) -> str | None:
    """Why the entry should be left alone, or None if it is worth rebuilding."""
    if not (entry.is_candidate or _only_blocked_by_builds(entry)):
        return "not a migration candidate"
    if options.force or entry.policy_info is None:
        return None

    info = entry.policy_info
    if info.rc_bugs is not None and not info.rc_bugs.verdict.is_pass:
        return "blocked by RC bugs"
    if info.age is not None:
        required = info.age.age_requirement
        threshold = min(int(required * options.min_age_fraction), required - 1)
        if info.age.current_age < threshold:
            return f"too young ({info.age.current_age}/{required} days)"
    return None


def _rebuild_architectures(
    entry: ExcuseEntry,
    architectures: Collection[Architecture],
) -> dict[Architecture, str]:
    maintainer_built: set[Architecture] = set()
    if entry.policy_info is not None and entry.policy_info.builtonbuildd is not None:
        maintainer_built = entry.policy_info.builtonbuildd.maintainer_built()

    if Architecture.ALL in maintainer_built:
        # builtonbuildd keeps rejecting the source until arch:all is rebuilt
        logger.debug("%s: arch:all binaries were not built on a buildd, cannot binNMU", entry.source)
        return {}

    reasons: dict[Architecture, str] = {}
    for arch in sorted(entry.architectures_ok - entry.missing_builds, key=lambda a: a.value):
        if arch == Architecture.ALL:
            continue
        if arch not in architectures:
            logger.debug("%s: ignoring %s, not in the working set", entry.source, arch)
            continue

        old_binary = entry.old_binaries.get(arch)
        if entry.old_version is not None and old_binary is not None and old_binary == entry.old_version:
            reasons[arch] = f"binaries still at {old_binary}"
        elif arch in maintainer_built:
            reasons[arch] = "not built on a buildd"
    return reasons


def analyze_excuses(
    entries: Iterable[ExcuseEntry],
    architectures: Collection[Architecture],
    options: AnalysisOptions | None = None,
) -> ExcusesAnalysis:
    """Compute binNMUs and unblock hints for the given report entries.

    Args:
        entries: Decoded report items, in report order.
        architectures: The working architecture set.
        options: Analysis options.

    Returns:
        The analysis. Sources with nothing to rebuild are not listed.
    """
    options = options or AnalysisOptions()
    analysis = ExcusesAnalysis()

    for entry in entries:
        unblock = unblock_for(entry)
        if unblock is not None:
            analysis.unblocks.append(unblock)

        if not _is_actionable(entry):
            continue
        reason = _blocking_reason(entry, options)
        if reason is not None:
            logger.debug("Skipping %s: %s", entry.source, reason)
            continue

        rebuilds = _rebuild_architectures(entry, architectures)
        if not rebuilds:
            logger.debug("Skipping %s: nothing to rebuild", entry.source)
            continue
        if entry.source in analysis.candidates:
            logger.debug("Skipping %s: already listed", entry.item_name)
            continue

        analysis.candidates[entry.source] = BinNMUCandidate(
            source=entry.source,
            version=entry.new_version,
            architectures=frozenset(rebuilds),
            reasons=rebuilds,
        )
        logger.info("%s needs binNMUs on %s", entry.source, ", ".join(arch.value for arch in rebuilds))

    return analysis


def analyze_report(
    report: ExcusesReport,
    architectures: Collection[Architecture],
    options: AnalysisOptions | None = None,
) -> ExcusesAnalysis:
    """Like :func:`analyze_excuses`, carrying over the report's skip count."""
    analysis = analyze_excuses(report.entries, architectures, options)
    analysis.skipped = report.skipped
    if report.skipped:
        logger.warning("Skipped %d report items with invalid data", report.skipped)
    return analysis


def unblock_for(entry: ExcuseEntry) -> Unblock | None:
    """The unblock hint for tpu uploads and binNMUs awaiting approval."""
    if entry.is_from_pu or entry.invalidated_by_other_package:
        return None
    if not (entry.is_from_tpu or entry.is_binnmu):
        return None
    if entry.migration_policy_verdict != Verdict.REJECTED_NEEDS_APPROVAL:
        return None
    return Unblock(
        source=entry.source,
        version=entry.new_version,
        tpu=entry.is_from_tpu,
        architecture=entry.binnmu_arch,
    )


def binnmu_commands(
    analysis: ExcusesAnalysis,
    suite: SuiteOrCodename = UNSTABLE,
    ma_same_sources: Collection[str] = frozenset(),
    message: str = BINNMU_MESSAGE,
) -> list[ScheduleBinNMU]:
    """Turn the analysis into ``nmu`` commands.

    Sources shipping ``Multi-Arch: same`` binaries are scheduled on ``ANY``
    so that their binaries stay co-installable. Commands that fail
    validation are logged and left out.
    """
    commands: list[ScheduleBinNMU] = []
    for candidate in analysis.candidates.values():
        archs = [] if candidate.source in ma_same_sources else candidate.sorted_architectures()
        try:
            source = SourceSpecifier.for_architectures(candidate.source, archs, candidate.version, suite)
            commands.append(ScheduleBinNMU(source, message))
        except InvalidCommand as e:
            logger.error("Unable to build binNMU for %s: %s", candidate.source, e)
    return commands
