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

""".buildinfo files of source uploads.

Only the fields needed to reschedule a maintainer build are decoded: the
source package, its version and the architectures that were built. The
OpenPGP signature is stripped without verification.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from nmutool.apt.packages import iter_paragraphs
from nmutool.core.exceptions import MissingField, ParseError
from nmutool.debpkg.package import PackageName
from nmutool.debpkg.version import Version
from nmutool.target.arch import Architecture, parse_architectures

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Buildinfo:
    """The interesting parts of a ``.buildinfo`` file.

    Attributes:
        source: Source package name.
        version: Version of the build, possibly with a binNMU suffix.
        architectures: Architectures listed in the Architecture field,
            including ``source`` and ``all`` if they were built.
    """

    source: PackageName
    version: Version
    architectures: tuple[Architecture, ...]

    def binnmu_architectures(self) -> list[Architecture]:
        return [arch for arch in self.architectures if arch.is_concrete]


def strip_signature(text: str) -> str:
    """Return the control paragraph of a possibly clearsigned file."""
    lines = text.splitlines()
    start = next((i for i, line in enumerate(lines) if line.startswith("Format: ")), len(lines))
    body = []
    for line in lines[start:]:
        if line.startswith("-----BEGIN"):
            break
        body.append(line)
    return "\n".join(body) + "\n" if body else ""


def parse_buildinfo(text: str, location: str = "buildinfo") -> Buildinfo:
    """Decode a ``.buildinfo`` document.

    Raises:
        ParseError: If the document is empty, a required field is missing
            or a value is malformed.
    """
    paragraph = next(iter_paragraphs(strip_signature(text)), None)
    if paragraph is None:
        raise ParseError(location=location, reason="no buildinfo paragraph")

    for name in ("Source", "Version", "Architecture"):
        if not paragraph.get(name, "").strip():
            raise MissingField(location=location, field_name=name)

    known, unknown = parse_architectures(paragraph["Architecture"].split())
    if unknown:
        logger.warning("%s: ignoring unknown architectures %s", location, ", ".join(unknown))
    return Buildinfo(
        source=PackageName(paragraph["Source"].split()[0]),
        version=Version.parse(paragraph["Version"].strip()),
        architectures=tuple(known),
    )


def iter_buildinfo_paths(paths: Iterable[Path]) -> Iterator[Path]:
    """Expand directories into the files below them, in sorted order."""
    for path in paths:
        if path.is_dir():
            yield from iter_buildinfo_paths(sorted(path.iterdir()))
        else:
            yield path


def load_buildinfo(path: Path) -> Buildinfo:
    """Read and decode the ``.buildinfo`` file at ``path``.

    Raises:
        ParseError: If the file cannot be read or decoded.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(location=str(path), reason=f"unable to read: {e}") from None
    return parse_buildinfo(text, str(path))
