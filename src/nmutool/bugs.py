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

"""FTBFS bug lists exported from UDD.

Sources with open "fails to build from source" bugs are not worth a binNMU:
the rebuild would fail as well.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import yaml

from nmutool.core.exceptions import ParseError

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    WISHLIST = "wishlist"
    MINOR = "minor"
    NORMAL = "normal"
    IMPORTANT = "important"
    SERIOUS = "serious"
    GRAVE = "grave"
    CRITICAL = "critical"

    def __str__(self) -> str:
        return self.value

    @property
    def is_rc(self) -> bool:
        return self in (Severity.SERIOUS, Severity.GRAVE, Severity.CRITICAL)


@dataclass(frozen=True)
class UDDBug:
    id: int
    source: str
    severity: Severity
    title: str


class UDDBugs:
    """Bugs indexed by source package."""

    def __init__(self, bugs: Iterable[UDDBug] = ()) -> None:
        self.bugs = list(bugs)
        self._by_source: dict[str, list[UDDBug]] = {}
        for bug in self.bugs:
            self._by_source.setdefault(bug.source, []).append(bug)

    def bugs_for_source(self, source: str) -> list[UDDBug]:
        return list(self._by_source.get(source, []))

    def __contains__(self, source: object) -> bool:
        return source in self._by_source

    def __len__(self) -> int:
        return len(self.bugs)


def _decode_bug(raw: Any, index: int) -> UDDBug:
    if not isinstance(raw, dict):
        raise ParseError(location=f"bug {index}", reason="expected a mapping")
    try:
        return UDDBug(
            id=int(raw["id"]),
            source=str(raw["source"]),
            severity=Severity(str(raw.get("severity", "normal"))),
            title=str(raw.get("title", "")),
        )
    except KeyError as e:
        raise ParseError(location=f"bug {index}", reason=f"missing field {e}") from None
    except ValueError as e:
        raise ParseError(location=f"bug {index}", reason=str(e)) from None


def load_bugs(text: str) -> UDDBugs:
    """Decode a YAML list of bugs. Malformed entries are logged and skipped.

    Raises:
        ParseError: If the document is not valid YAML or not a list.
    """
    try:
        data = yaml.safe_load(text) or []
    except yaml.YAMLError as e:
        raise ParseError(location="bugs", reason=f"invalid YAML: {e}") from None
    if not isinstance(data, list):
        raise ParseError(location="bugs", reason="expected a list of bugs")

    bugs = []
    for index, raw in enumerate(data):
        try:
            bugs.append(_decode_bug(raw, index))
        except ParseError as e:
            logger.warning("Skipping malformed bug entry: %s", e)
    return UDDBugs(bugs)
