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

"""Debian package versions and their ordering.

:class:`Version` validates and keeps the version as written, and knows about
binNMU suffixes. Ordering is delegated to python-debian, which implements
dpkg's comparison algorithm.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering

from debian.debian_support import version_compare

from nmutool.core.exceptions import VersionParseError

_UPSTREAM_CHARS = re.compile(r"^[A-Za-z0-9.+~:-]+$")
_REVISION_CHARS = re.compile(r"^[A-Za-z0-9.+~]+$")
_RUNS = re.compile(r"(\D*)(\d*)")
_BINNMU_SUFFIX = re.compile(r"\+b(\d+)$")


def _fragment_key(value: str) -> tuple[tuple[str, int], ...]:
    """Normalised form of a fragment; equal keys iff the fragments compare equal."""
    runs = [(text, int(digits) if digits else 0) for text, digits in _RUNS.findall(value)]
    while runs and runs[-1] == ("", 0):
        runs.pop()
    return tuple(runs)


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A Debian package version.

    Attributes:
        epoch: The epoch (0 if not specified).
        upstream: The upstream version component.
        revision: The Debian revision (empty for native packages).
        explicit_epoch: Whether the epoch was spelled out (``0:1.0`` vs ``1.0``).
    """

    upstream: str
    epoch: int = 0
    revision: str = ""
    explicit_epoch: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        text = self._render()
        if self.epoch < 0:
            raise VersionParseError(version=text, reason="epoch must not be negative")
        if not self.upstream or not _UPSTREAM_CHARS.match(self.upstream):
            raise VersionParseError(version=text, reason="invalid upstream version")
        if ":" in self.upstream and not (self.epoch or self.explicit_epoch):
            raise VersionParseError(version=text, reason="colon in upstream version without epoch")
        if "-" in self.upstream and not self.revision:
            raise VersionParseError(version=text, reason="hyphen in upstream version without revision")
        if self.revision and not _REVISION_CHARS.match(self.revision):
            raise VersionParseError(version=text, reason="invalid Debian revision")

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse ``[epoch:]upstream[-revision]``.

        Raises:
            VersionParseError: If the string is not a valid version.
        """
        if not isinstance(value, str):
            raise VersionParseError(version=repr(value), reason="version must be a string")
        text = value.strip()
        epoch = 0
        explicit_epoch = False
        if ":" in text:
            epoch_str, text = text.split(":", 1)
            if not (epoch_str.isascii() and epoch_str.isdigit()):
                raise VersionParseError(version=value, reason="invalid epoch")
            epoch = int(epoch_str)
            explicit_epoch = True

        revision = ""
        if "-" in text:
            text, revision = text.rsplit("-", 1)
            if not revision:
                raise VersionParseError(version=value, reason="empty Debian revision")

        return cls(upstream=text, epoch=epoch, revision=revision, explicit_epoch=explicit_epoch)

    def _render(self) -> str:
        parts = []
        if self.epoch or self.explicit_epoch:
            parts.append(f"{self.epoch}:")
        parts.append(self.upstream)
        if self.revision:
            parts.append(f"-{self.revision}")
        return "".join(parts)

    def __str__(self) -> str:
        return self._render()

    @property
    def has_epoch(self) -> bool:
        return self.epoch > 0 or self.explicit_epoch

    @property
    def is_native(self) -> bool:
        """A native version has no Debian revision."""
        return not self.revision

    @property
    def binnmu_version(self) -> int | None:
        """The binNMU number (``1.0-1+b2`` -> 2), if any."""
        match = _BINNMU_SUFFIX.search(self.revision or self.upstream)
        return int(match.group(1)) if match else None

    @property
    def has_binnmu_version(self) -> bool:
        return self.binnmu_version is not None

    def without_binnmu_version(self) -> Version:
        """Return the source version this binNMU was built from."""
        if not self.has_binnmu_version:
            return self
        if self.revision:
            revision = _BINNMU_SUFFIX.sub("", self.revision)
            return Version(self.upstream, self.epoch, revision, self.explicit_epoch)
        return Version(_BINNMU_SUFFIX.sub("", self.upstream), self.epoch, "", self.explicit_epoch)

    def compare(self, other: Version) -> int:
        """Return -1, 0 or 1."""
        result = version_compare(str(self), str(other))
        return (result > 0) - (result < 0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self) -> int:
        return hash((self.epoch, _fragment_key(self.upstream), _fragment_key(self.revision)))


def parse_version(value: str | Version) -> Version:
    """Return ``value`` as a Version, parsing strings."""
    if isinstance(value, Version):
        return value
    return Version.parse(value)


def compare_versions(v1: str | Version, v2: str | Version) -> int:
    """Compare two Debian versions.

    Returns:
        -1 if v1 < v2, 0 if v1 == v2, 1 if v1 > v2.
    """
    return parse_version(v1).compare(parse_version(v2))

