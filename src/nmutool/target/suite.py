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

"""Debian archive suites and codenames.

Suites (``unstable``, ``testing``, ...) and codenames (``sid``, ``forky``, ...)
name the same archive targets; both may carry an extension such as
``-backports`` or ``-proposed-updates``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from nmutool.core.exceptions import UnknownSuite


class Extension(str, Enum):
    BACKPORTS = "backports"
    SECURITY = "security"
    UPDATES = "updates"
    PROPOSED_UPDATES = "proposed-updates"

    def __str__(self) -> str:
        return self.value


class SuiteName(str, Enum):
    UNSTABLE = "unstable"
    TESTING = "testing"
    STABLE = "stable"
    OLDSTABLE = "oldstable"
    EXPERIMENTAL = "experimental"

    def __str__(self) -> str:
        return self.value


class CodenameName(str, Enum):
    SID = "sid"
    FORKY = "forky"
    TRIXIE = "trixie"
    BOOKWORM = "bookworm"
    RC_BUGGY = "rc-buggy"

    def __str__(self) -> str:
        return self.value


SUITE_TO_CODENAME: dict[SuiteName, CodenameName] = {
    SuiteName.UNSTABLE: CodenameName.SID,
    SuiteName.TESTING: CodenameName.FORKY,
    SuiteName.STABLE: CodenameName.TRIXIE,
    SuiteName.OLDSTABLE: CodenameName.BOOKWORM,
    SuiteName.EXPERIMENTAL: CodenameName.RC_BUGGY,
}
CODENAME_TO_SUITE: dict[CodenameName, SuiteName] = {v: k for k, v in SUITE_TO_CODENAME.items()}

# unstable and experimental have no -updates/-backports counterparts
_EXTENSIBLE = frozenset({SuiteName.TESTING, SuiteName.STABLE, SuiteName.OLDSTABLE})


def _split(value: str) -> tuple[str, Extension | None]:
    # longest suffix first: "-proposed-updates" also ends in "-updates"
    for ext in sorted(Extension, key=lambda e: len(e.value), reverse=True):
        suffix = f"-{ext.value}"
        if value.endswith(suffix) and len(value) > len(suffix):
            return value[: -len(suffix)], ext
    return value, None


@dataclass(frozen=True)
class Suite:
    """An archive suite, e.g. ``testing`` or ``stable-proposed-updates``."""

    name: SuiteName
    extension: Extension | None = None

    def __post_init__(self) -> None:
        if self.extension is not None and self.name not in _EXTENSIBLE:
            raise UnknownSuite(value=f"{self.name}-{self.extension}")

    def __str__(self) -> str:
        if self.extension is None:
            return self.name.value
        return f"{self.name.value}-{self.extension.value}"

    @classmethod
    def parse(cls, value: str) -> Suite:
        base, ext = _split(value)
        try:
            name = SuiteName(base)
        except ValueError:
            raise UnknownSuite(value=value) from None
        return cls(name, ext)

    @property
    def codename(self) -> Codename:
        return Codename(SUITE_TO_CODENAME[self.name], self.extension)


@dataclass(frozen=True)
class Codename:
    """An archive codename, e.g. ``sid`` or ``trixie-backports``."""

    name: CodenameName
    extension: Extension | None = None

    def __post_init__(self) -> None:
        if self.extension is not None and CODENAME_TO_SUITE[self.name] not in _EXTENSIBLE:
            raise UnknownSuite(value=f"{self.name}-{self.extension}")

    def __str__(self) -> str:
        if self.extension is None:
            return self.name.value
        return f"{self.name.value}-{self.extension.value}"

    @classmethod
    def parse(cls, value: str) -> Codename:
        base, ext = _split(value)
        try:
            name = CodenameName(base)
        except ValueError:
            raise UnknownSuite(value=value) from None
        return cls(name, ext)

    @property
    def suite(self) -> Suite:
        return Suite(CODENAME_TO_SUITE[self.name], self.extension)


SuiteOrCodename = Suite | Codename

UNSTABLE = Suite(SuiteName.UNSTABLE)
TESTING = Suite(SuiteName.TESTING)


def parse_suite_or_codename(value: str) -> SuiteOrCodename:
    """Parse either a suite or a codename, keeping the spelling the caller used.

    Raises:
        UnknownSuite: If ``value`` is neither.
    """
    try:
        return Suite.parse(value)
    except UnknownSuite:
        return Codename.parse(value)


def as_suite(value: SuiteOrCodename) -> Suite:
    return value if isinstance(value, Suite) else value.suite


def as_codename(value: SuiteOrCodename) -> Codename:
    return value if isinstance(value, Codename) else value.codename
