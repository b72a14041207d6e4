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

"""Context objects shared by the CLI commands.

- GlobalOptions: the global command line flags (frozen).
- CommandContext: configuration, cache paths and the document fetcher of
  one command invocation, plus loaders for the documents commands need.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from nmutool.apt.packages import BuildProvenanceRecord, SourceRecord, load_packages, load_sources
from nmutool.archive import DocumentFetcher, FetchResult, packages_url, release_url, sources_url
from nmutool.bugs import UDDBugs, load_bugs
from nmutool.config import load_config
from nmutool.core.exceptions import FetchError
from nmutool.excuses import ExcusesReport, load_excuses
from nmutool.paths import ensure_directories
from nmutool.spinner import activity, activity_spinner
from nmutool.target.arch import Architecture, parse_architectures
from nmutool.target.release import release_architectures
from nmutool.target.suite import SuiteOrCodename, as_codename, as_suite, parse_suite_or_codename

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GlobalOptions:
    """Flags accepted by every command.

    Attributes:
        dry_run: Only print wb commands, do not run them.
        force_download: Download documents even if cached copies are current.
        force_processing: Process documents even if they did not change.
        verbose: Verbosity level (0 warnings, 1 info, 2 debug).
        offline: Only use cached documents.
        buildd: Host running wanna-build; from the config if None.
        mirror: Debian archive mirror; from the config if None.
    """

    dry_run: bool = False
    force_download: bool = False
    force_processing: bool = False
    verbose: int = 0
    offline: bool = False
    buildd: str | None = None
    mirror: str | None = None


@dataclass
class CommandContext:
    options: GlobalOptions
    cfg: dict[str, Any]
    paths: dict[str, Path]
    fetcher: DocumentFetcher
    _fetched: dict[str, FetchResult] = field(default_factory=dict)

    @classmethod
    def create(cls, options: GlobalOptions) -> CommandContext:
        cfg = load_config()
        paths = ensure_directories(cfg)
        behavior = cfg.get("behavior", {})
        fetcher = DocumentFetcher(
            paths["documents"],
            offline=options.offline or bool(behavior.get("offline")),
            force=options.force_download,
        )
        return cls(options=options, cfg=cfg, paths=paths, fetcher=fetcher)

    @property
    def dry_run(self) -> bool:
        return self.options.dry_run or bool(self.cfg.get("behavior", {}).get("dry_run"))

    @property
    def buildd(self) -> str:
        return self.options.buildd or self.cfg["defaults"]["buildd"]

    @property
    def mirror(self) -> str:
        return self.options.mirror or self.cfg["mirrors"]["debian_archive"]

    @property
    def suite(self) -> SuiteOrCodename:
        return parse_suite_or_codename(str(self.cfg["defaults"].get("suite", "unstable")))

    @property
    def components(self) -> list[str]:
        return list(self.cfg["defaults"].get("components") or ["main"])

    @property
    def scheduled_binnmus_path(self) -> Path:
        return self.paths["data_root"] / "scheduled-binnmus.yaml"

    def fetch(self, name: str, url: str) -> FetchResult:
        with activity_spinner("fetch", f"Fetching {name}", disable=self.options.verbose > 0):
            result = self.fetcher.fetch(name, url)
        self._fetched[name] = result
        return result

    def excuses(self) -> tuple[ExcusesReport, FetchResult]:
        """Fetch and decode excuses.yaml."""
        result = self.fetch("excuses.yaml", self.cfg["mirrors"]["excuses"])
        with activity_spinner("excuses", "Decoding excuses", disable=self.options.verbose > 0):
            report = load_excuses(result.path)
        activity("excuses", f"{len(report.entries)} items, {report.skipped} skipped")
        return report, result

    def architectures(self, suite: SuiteOrCodename) -> list[Architecture]:
        """The working architecture set of ``suite``.

        Configured architectures win; otherwise they come from the suite's
        Release file, with the built-in list as fallback.
        """
        configured, unknown = parse_architectures(self.cfg["defaults"].get("architectures") or [])
        for value in unknown:
            logger.warning("Ignoring unknown architecture '%s' in configuration", value)
        if configured:
            return [arch for arch in configured if arch.is_concrete]

        name = f"{as_suite(suite)}_Release"
        try:
            result = self.fetch(name, release_url(self.mirror, str(as_suite(suite))))
            text: str | None = result.path.read_text(encoding="utf-8")
        except FetchError as e:
            logger.warning("%s; using default architectures", e)
            text = None
        return release_architectures(text)

    def packages(self, suite: SuiteOrCodename, architectures: list[Architecture]) -> list[BuildProvenanceRecord]:
        """Fetch and decode the Packages indices of ``suite``."""
        records: list[BuildProvenanceRecord] = []
        suite_name = str(as_suite(suite))
        for component in self.components:
            for arch in architectures:
                name = f"{suite_name}_{component}_binary-{arch}_Packages.xz"
                result = self.fetch(name, packages_url(self.mirror, suite_name, component, arch.value))
                parsed = load_packages(result.path)
                if parsed.errors:
                    logger.warning("%s: skipped %d malformed paragraphs", name, len(parsed.errors))
                records.extend(parsed.records)
        return records

    def sources(self, suite: SuiteOrCodename) -> list[SourceRecord]:
        """Fetch and decode the Sources indices of ``suite``."""
        records: list[SourceRecord] = []
        suite_name = str(as_suite(suite))
        for component in self.components:
            name = f"{suite_name}_{component}_Sources.xz"
            result = self.fetch(name, sources_url(self.mirror, suite_name, component))
            parsed = load_sources(result.path)
            if parsed.errors:
                logger.warning("%s: skipped %d malformed paragraphs", name, len(parsed.errors))
            records.extend(parsed.records)
        return records

    def ftbfs_bugs(self, suite: SuiteOrCodename, path: Path | None = None) -> UDDBugs:
        """Load the FTBFS bugs of ``suite`` from ``path`` or UDD."""
        if path is None:
            codename = as_codename(suite)
            url = self.cfg["mirrors"]["udd_ftbfs_bugs"].format(codename=codename)
            path = self.fetch(f"udd-ftbfs-bugs-{codename}.yaml", url).path
        bugs = load_bugs(path.read_text(encoding="utf-8"))
        logger.info("Loaded %d FTBFS bugs", len(bugs))
        return bugs

    def unchanged(self, name: str) -> bool:
        """True if ``name`` was served from the cache and processing is not forced."""
        result = self._fetched.get(name)
        return result is not None and not result.changed and not self.options.force_processing

