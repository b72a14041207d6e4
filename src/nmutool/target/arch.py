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

"""Debian architectures.

The enumeration covers the release architectures and those on Debian ports,
plus the pseudo architectures ``all``, ``source`` and ``any`` that appear in
package indices and control files but can never be built on their own.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from nmutool.core.exceptions import InvalidArchitecture, UnknownArchitecture


class Architecture(str, Enum):
    ALL = "all"
    SOURCE = "source"
    ANY = "any"
    ALPHA = "alpha"
    AMD64 = "amd64"
    ARM64 = "arm64"
    ARMEL = "armel"
    ARMHF = "armhf"
    HPPA = "hppa"
    HURD_AMD64 = "hurd-amd64"
    HURD_I386 = "hurd-i386"
    I386 = "i386"
    IA64 = "ia64"
    LOONG64 = "loong64"
    M68K = "m68k"
    MIPS64EL = "mips64el"
    MIPSEL = "mipsel"
    POWERPC = "powerpc"
    PPC64 = "ppc64"
    PPC64EL = "ppc64el"
    RISCV64 = "riscv64"
    S390X = "s390x"
    SH4 = "sh4"
    SPARC64 = "sparc64"
    X32 = "x32"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> Architecture:
        """Parse the canonical (case-sensitive) name of an architecture.

        Raises:
            UnknownArchitecture: If ``value`` is not a known architecture.
        """
        try:
            return cls(value)
        except ValueError:
            raise UnknownArchitecture(value=value) from None

    @property
    def is_concrete(self) -> bool:
        """Whether packages can be built for this architecture."""
        return self not in PSEUDO_ARCHITECTURES

    def require_concrete(self, what: str = "this operation") -> Architecture:
        if not self.is_concrete:
            raise InvalidArchitecture(message=f"architecture '{self}' is not valid for {what}")
        return self


PSEUDO_ARCHITECTURES = frozenset({Architecture.ALL, Architecture.SOURCE, Architecture.ANY})

# Release architectures of the current stable/testing cycle. The working set
# is normally derived from the suite's Release file; this list is the fallback.
RELEASE_ARCHITECTURES: tuple[Architecture, ...] = (
    Architecture.AMD64,
    Architecture.ARM64,
    Architecture.ARMEL,
    Architecture.ARMHF,
    Architecture.I386,
    Architecture.PPC64EL,
    Architecture.RISCV64,
    Architecture.S390X,
)


def parse_architectures(values: Iterable[str]) -> tuple[list[Architecture], list[str]]:
    """Parse architecture names, returning the known ones and the rejected tokens."""
    known: list[Architecture] = []
    unknown: list[str] = []
    for value in values:
        try:
            arch = Architecture.parse(value)
        except UnknownArchitecture:
            unknown.append(value)
            continue
        if arch not in known:
            known.append(arch)
    return known, unknown
