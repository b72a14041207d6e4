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

"""Release file handling.

The set of architectures a suite is built for changes over a release cycle,
so the working architecture list is read from the suite's Release file.
The hardcoded :data:`RELEASE_ARCHITECTURES` are only the fallback.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from email.utils import parsedate_to_datetime

from debian import deb822

from nmutool.core.exceptions import ParseError, UnknownSuite
from nmutool.target.arch import RELEASE_ARCHITECTURES, Architecture, parse_architectures
from nmutool.target.suite import Codename, Suite

logger = logging.getLogger(__name__)


@dataclass
class Release:
    """Selected fields of a Release file."""

    suite: Suite | None = None
    codename: Codename | None = None
    version: str | None = None
    date: datetime.datetime | None = None
    architectures: list[Architecture] = field(default_factory=list)
    components: list[str] = field(default_factory=list)
    has_architectures: bool = False


def _parse_date(value: str | None) -> datetime.datetime | None:
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring unparsable Release date: %s", value)
        return None


def parse_release(text: str) -> Release:
    """Parse the first paragraph of a Release file.

    Raises:
        ParseError: If the document contains no paragraph.
    """
    paragraph = deb822.Release(text)
    if not paragraph:
        raise ParseError(location="Release", reason="empty document")

    release = Release(
        version=paragraph.get("Version"),
        date=_parse_date(paragraph.get("Date")),
        components=paragraph.get("Components", "").split(),
    )
    try:
        if "Suite" in paragraph:
            release.suite = Suite.parse(paragraph["Suite"])
        if "Codename" in paragraph:
            release.codename = Codename.parse(paragraph["Codename"])
    except UnknownSuite as e:
        # third-party archives use their own suite names
        logger.debug("Release names an unknown suite: %s", e)

    if "Architectures" in paragraph:
        release.has_architectures = True
        known, unknown = parse_architectures(paragraph["Architectures"].split())
        for token in unknown:
            logger.warning("Ignoring unknown architecture in Release file: %s", token)
        release.architectures = [arch for arch in known if arch.is_concrete]
    return release


def release_architectures(
    text: str | None,
    fallback: Sequence[Architecture] = RELEASE_ARCHITECTURES,
) -> list[Architecture]:
    """Return the build architectures listed in a Release file.

    Args:
        text: Content of the Release file, or None if it is unavailable.
        fallback: Architectures to use when the file or its field is missing.
    """
    if text is None:
        return list(fallback)
    release = parse_release(text)
    if not release.has_architectures:
        logger.info("Release file has no Architectures field; using default architectures")
        return list(fallback)
    return release.architectures
