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

"""Model and parser for britney's ``excuses.yaml``.

The report lists one item per migration candidate (source uploads, binNMUs,
removals and proposed-updates requests). Only a selection of fields is
decoded into typed attributes; the policy section grows new policies over
time, so any policy without a dedicated type is kept verbatim.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import yaml

from nmutool.core.exceptions import ParseError, UnknownArchitecture
from nmutool.debpkg.package import PackageName
from nmutool.debpkg.version import Version
from nmutool.target.arch import Architecture

logger = logging.getLogger(__name__)

BUILDD_SIGNER_SUFFIX = "@buildd.debian.org"


class Verdict(str, Enum):
    """A policy's verdict."""

    PASS = "PASS"
    PASS_HINTED = "PASS_HINTED"
    REJECTED_NEEDS_APPROVAL = "REJECTED_NEEDS_APPROVAL"
    REJECTED_PERMANENTLY = "REJECTED_PERMANENTLY"
    REJECTED_TEMPORARILY = "REJECTED_TEMPORARILY"
    REJECTED_CANNOT_DETERMINE_IF_PERMANENT = "REJECTED_CANNOT_DETERMINE_IF_PERMANENT"
    REJECTED_BLOCKED_BY_ANOTHER_ITEM = "REJECTED_BLOCKED_BY_ANOTHER_ITEM"
    REJECTED_WAITING_FOR_ANOTHER_ITEM = "REJECTED_WAITING_FOR_ANOTHER_ITEM"
    UNKNOWN = "UNKNOWN"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Any) -> Verdict:
        try:
            return cls(str(value))
        except ValueError:
            logger.debug("Unknown policy verdict: %s", value)
            return cls.UNKNOWN

    @property
    def is_pass(self) -> bool:
        return self in (Verdict.PASS, Verdict.PASS_HINTED)


@dataclass(frozen=True)
class PolicyVerdict:
    """A policy without a dedicated type: its verdict plus the raw data."""

    verdict: Verdict
    raw: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AgeInfo:
    age_requirement: int
    current_age: int
    verdict: Verdict


@dataclass(frozen=True)
class BuiltOnBuildd:
    """Who signed the binaries on each architecture."""

    signed_by: Mapping[Architecture, str | None]
    verdict: Verdict

    def maintainer_built(self) -> set[Architecture]:
        """Architectures whose binaries were not built (and signed) by a buildd."""
        return {arch for arch, signer in self.signed_by.items() if signer and not signer.endswith(BUILDD_SIGNER_SUFFIX)}


@dataclass(frozen=True)
class RcBugsInfo:
    unique_source_bugs: tuple[str, ...]
    shared_bugs: tuple[str, ...]
    unique_target_bugs: tuple[str, ...]
    verdict: Verdict


@dataclass(frozen=True)
class PolicyInfo:
    """Collected policy verdicts of one excuse."""

    age: AgeInfo | None = None
    builtonbuildd: BuiltOnBuildd | None = None
    rc_bugs: RcBugsInfo | None = None
    extras: Mapping[str, PolicyVerdict] = field(default_factory=dict)

    def verdicts(self) -> dict[str, Verdict]:
        """All verdicts keyed by policy name."""
        result = {name: info.verdict for name, info in self.extras.items()}
        if self.age is not None:
            result["age"] = self.age.verdict
        if self.builtonbuildd is not None:
            result["builtonbuildd"] = self.builtonbuildd.verdict
        if self.rc_bugs is not None:
            result["rc-bugs"] = self.rc_bugs.verdict
        return result


@dataclass(frozen=True)
class ExcuseEntry:
    """One item of the migration report.

    ``old_version`` is None for sources new to testing. Removals have no
    new version and are listed separately on :class:`ExcusesReport`.
    """

    source: PackageName
    item_name: str
    new_version: Version
    old_version: Version | None = None
    is_candidate: bool = False
    architectures_ok: frozenset[Architecture] = frozenset()
    missing_builds: frozenset[Architecture] = frozenset()
    old_binaries: Mapping[Architecture, Version] = field(default_factory=dict)
    policy_info: PolicyInfo | None = None
    migration_policy_verdict: Verdict = Verdict.UNKNOWN
    component: str | None = None
    maintainer: str | None = None
    invalidated_by_other_package: bool = False
    excuses: tuple[str, ...] = ()
    unknown_architectures: tuple[str, ...] = ()

    @property
    def is_binnmu(self) -> bool:
        """BinNMU items are named ``source/arch``."""
        return "/" in self.item_name

    @property
    def binnmu_arch(self) -> str | None:
        if not self.is_binnmu:
            return None
        return self.item_name.split("/", 1)[1].split("_", 1)[0]

    @property
    def is_from_pu(self) -> bool:
        return self.item_name.endswith("_pu")

    @property
    def is_from_tpu(self) -> bool:
        return self.item_name.endswith("_tpu")

    @property
    def is_new_source(self) -> bool:
        return self.old_version is None


@dataclass
class ExcusesReport:
    """The decoded report.

    Attributes:
        generated_date: When britney produced the report.
        entries: Decoded items, in document order.
        removals: Source names of removal items.
        errors: Items that could not be decoded (e.g. invalid versions).
    """

    generated_date: datetime.datetime | None = None
    entries: list[ExcuseEntry] = field(default_factory=list)
    removals: list[str] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.errors)


def _kebab(data: Mapping[str, Any], name: str, default: Any = None) -> Any:
    """Look up ``name`` accepting both kebab-case and snake_case keys."""
    if name in data:
        return data[name]
    return data.get(name.replace("-", "_"), default)


def _version_or_none(value: Any) -> Version | None:
    if value is None or str(value) == "-":
        return None
    return Version.parse(str(value))


def _parse_arch_list(values: Iterable[Any], unknown: list[str]) -> frozenset[Architecture]:
    result = set()
    for value in values or ():
        try:
            result.add(Architecture.parse(str(value)))
        except UnknownArchitecture:
            unknown.append(str(value))
    return frozenset(result)


def _parse_date(value: Any) -> datetime.datetime | None:
    if value is None or isinstance(value, datetime.datetime):
        return value
    try:
        return datetime.datetime.fromisoformat(str(value))
    except ValueError:
        logger.warning("Unparsable generated-date: %s", value)
        return None


def _int_field(data: Mapping[str, Any], name: str, policy: str) -> int:
    value = _kebab(data, name, 0)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ParseError(location=f"policy {policy}", reason=f"invalid {name} '{value}'") from None


def parse_policy_info(data: Mapping[str, Any], unknown: list[str] | None = None) -> PolicyInfo:
    """Decode the ``policy_info`` section, keeping unknown policies verbatim.

    Raises:
        ParseError: If a field of a known policy has the wrong type.
    """
    unknown = unknown if unknown is not None else []
    age = builtonbuildd = rc_bugs = None
    extras: dict[str, PolicyVerdict] = {}

    for name, raw in data.items():
        if not isinstance(raw, Mapping):
            logger.debug("Ignoring non-mapping policy %s", name)
            continue
        verdict = Verdict.parse(raw.get("verdict"))
        if name == "age":
            age = AgeInfo(
                age_requirement=_int_field(raw, "age-requirement", "age"),
                current_age=_int_field(raw, "current-age", "age"),
                verdict=verdict,
            )
        elif name == "builtonbuildd":
            signed_by: dict[Architecture, str | None] = {}
            signers = _kebab(raw, "signed-by", {}) or {}
            if not isinstance(signers, Mapping):
                raise ParseError(location="policy builtonbuildd", reason="signed-by is not a mapping")
            for arch_name, signer in signers.items():
                try:
                    signed_by[Architecture.parse(str(arch_name))] = signer
                except UnknownArchitecture:
                    unknown.append(str(arch_name))
            builtonbuildd = BuiltOnBuildd(signed_by=signed_by, verdict=verdict)
        elif name in ("rc-bugs", "rc_bugs"):
            rc_bugs = RcBugsInfo(
                unique_source_bugs=tuple(str(b) for b in _kebab(raw, "unique-source-bugs", []) or []),
                shared_bugs=tuple(str(b) for b in _kebab(raw, "shared-bugs", []) or []),
                unique_target_bugs=tuple(str(b) for b in _kebab(raw, "unique-target-bugs", []) or []),
                verdict=verdict,
            )
        else:
            extras[str(name)] = PolicyVerdict(verdict=verdict, raw=dict(raw))

    return PolicyInfo(age=age, builtonbuildd=builtonbuildd, rc_bugs=rc_bugs, extras=extras)


def _parse_old_binaries(data: Mapping[Any, Any], unknown: list[str]) -> dict[Architecture, Version]:
    """Map ``{version: [binary/arch, ...]}`` to the old version per architecture."""
    result: dict[Architecture, Version] = {}
    for version_str, binaries in (data or {}).items():
        version = Version.parse(str(version_str))
        for binary in binaries or ():
            if "/" not in str(binary):
                continue
            arch_name = str(binary).rsplit("/", 1)[1]
            try:
                arch = Architecture.parse(arch_name)
            except UnknownArchitecture:
                unknown.append(arch_name)
                continue
            if arch not in result or result[arch] < version:
                result[arch] = version
    return result


def parse_entry(data: Mapping[str, Any], source: str | None = None) -> ExcuseEntry | None:
    """Decode one report item. Returns None for removals.

    Raises:
        ParseError: If ``source`` or ``new-version`` is missing, or if a
            version or the package name is invalid.
    """
    source = data.get("source", source)
    if not source:
        raise ParseError(location=str(_kebab(data, "item-name", "?")), reason="missing field 'source'")
    new_version_raw = _kebab(data, "new-version")
    if new_version_raw is None:
        raise ParseError(location=str(source), reason="missing field 'new-version'")

    name = PackageName(str(source))
    new_version = _version_or_none(new_version_raw)
    if new_version is None:
        return None

    unknown: list[str] = []
    policy_data = data.get("policy_info") or data.get("policy-info")
    policy_info = parse_policy_info(policy_data, unknown) if isinstance(policy_data, Mapping) else None
    missing = _kebab(data, "missing-builds") or {}
    missing_builds = _parse_arch_list(_kebab(missing, "on-architectures", []), unknown)
    old_binaries = _parse_old_binaries(_kebab(data, "old-binaries", {}), unknown)

    architectures_ok: frozenset[Architecture] = frozenset()
    if policy_info is not None and policy_info.builtonbuildd is not None:
        architectures_ok = frozenset(policy_info.builtonbuildd.signed_by)

    if unknown:
        logger.warning("%s: ignoring unknown architectures %s", name, ", ".join(sorted(set(unknown))))

    return ExcuseEntry(
        source=name,
        item_name=str(_kebab(data, "item-name", name)),
        new_version=new_version,
        old_version=_version_or_none(_kebab(data, "old-version")),
        is_candidate=bool(_kebab(data, "is-candidate", False)),
        architectures_ok=architectures_ok,
        missing_builds=missing_builds,
        old_binaries=old_binaries,
        policy_info=policy_info,
        migration_policy_verdict=Verdict.parse(_kebab(data, "migration-policy-verdict")),
        component=_kebab(data, "component"),
        maintainer=data.get("maintainer"),
        invalidated_by_other_package=bool(_kebab(data, "invalidated-by-other-package", False)),
        excuses=tuple(str(line) for line in data.get("excuses", []) or []),
        unknown_architectures=tuple(sorted(set(unknown))),
    )


def _iter_items(document: Mapping[str, Any]) -> Iterable[tuple[str | None, Any]]:
    if "sources" in document:
        sources = document["sources"]
        if not isinstance(sources, list):
            raise ParseError(location="sources", reason="expected a list of items")
        for item in sources:
            yield None, item
        return
    for key, item in document.items():
        if key == "generated-date":
            continue
        yield str(key), item


def parse_excuses(document: str | Mapping[str, Any]) -> ExcusesReport:
    """Decode the migration report.

    Accepts the YAML text or an already loaded mapping, either in britney's
    layout (``sources:`` list) or keyed by source package name.

    Raises:
        ParseError: If the document is structurally invalid.
    """
    if isinstance(document, str):
        try:
            document = yaml.safe_load(document)
        except yaml.YAMLError as e:
            raise ParseError(location="excuses", reason=f"invalid YAML: {e}") from None
    if not isinstance(document, Mapping):
        raise ParseError(location="excuses", reason="expected a mapping at top level")

    report = ExcusesReport(generated_date=_parse_date(document.get("generated-date")))
    for key, item in _iter_items(document):
        if not isinstance(item, Mapping):
            raise ParseError(location=str(key or "sources"), reason="expected a mapping per item")
        if "source" not in item and key is None:
            raise ParseError(location=str(_kebab(item, "item-name", "?")), reason="missing field 'source'")
        if _kebab(item, "new-version") is None:
            raise ParseError(location=str(item.get("source", key)), reason="missing field 'new-version'")
        try:
            entry = parse_entry(item, key)
        except ParseError as e:
            logger.warning("Skipping excuse %s: %s", item.get("source", key), e)
            report.errors.append(e)
            continue
        if entry is None:
            report.removals.append(str(item.get("source", key)))
            continue
        report.entries.append(entry)
    return report


def load_excuses(path: Any) -> ExcusesReport:
    """Read and decode ``excuses.yaml`` from ``path``."""
    with open(path, encoding="utf-8") as f:
        return parse_excuses(f.read())
