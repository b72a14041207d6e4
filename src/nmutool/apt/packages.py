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

"""Package and source index parsing using python-debian.

Both Packages and Sources indices are sequences of RFC-822 style paragraphs.
Decoding never stops at a broken paragraph: every decoder returns the
records it could build together with the errors of the paragraphs it could
not, and the caller decides which errors are fatal.
"""

from __future__ import annotations

import gzip
import logging
import lzma
import warnings
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Generic, TypeVar

from nmutool.core.exceptions import MissingField, ParseError
from nmutool.debpkg.package import PackageName, VersionedPackage, parse_versioned_package, split_source_field
from nmutool.debpkg.version import Version
from nmutool.target.arch import Architecture

# Suppress python3-apt warning - it's optional and not installable via pip
with warnings.catch_warnings():
    warnings.filterwarnings("ignore", message=".*python.*-apt.*")
    warnings.filterwarnings("ignore", message=".*apt_pkg.*")
    from debian import deb822

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MultiArch(str, Enum):
    NO = "no"
    SAME = "same"
    FOREIGN = "foreign"
    ALLOWED = "allowed"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BuildProvenanceRecord:
    """A binary package paragraph from a Packages index.

    Attributes:
        package: Binary package name.
        version: Binary version (may carry a binNMU suffix).
        architecture: Architecture the binary was built for (or ``all``).
        source: Source package name; defaults to the binary name.
        source_version: Source version if it differs from the binary version.
        built_using: Sources whose code was statically included in the build.
        multi_arch: The Multi-Arch field.
        section: Archive section, e.g. ``debian-installer``.
        package_type: ``deb`` or ``udeb``.
    """

    package: PackageName
    version: Version
    architecture: Architecture
    source: PackageName
    source_version: Version | None = None
    built_using: tuple[VersionedPackage, ...] = ()
    multi_arch: MultiArch = MultiArch.NO
    section: str = ""
    package_type: str = "deb"


@dataclass(frozen=True)
class SourceRecord:
    """A source package paragraph from a Sources index."""

    package: PackageName
    version: Version
    architecture: tuple[str, ...] = ()
    extra_source_only: bool = False


@dataclass
class ParseResult(Generic[T]):
    """Successfully decoded records and the per-paragraph failures."""

    records: list[T] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)

    def __iter__(self) -> Iterator[T]:
        return iter(self.records)


def iter_paragraphs(text: str) -> Iterator[deb822.Deb822]:
    """Split a document into paragraphs, folding continuation lines."""
    yield from deb822.Deb822.iter_paragraphs(text.splitlines(), use_apt_pkg=False)


def split_list_field(value: str) -> list[str]:
    """Split a comma separated field, dropping empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _required(paragraph: Mapping[str, str], name: str, location: str) -> str:
    value = paragraph.get(name, "").strip()
    if not value:
        raise MissingField(location=location, field_name=name)
    return value


def decode_packages_paragraph(paragraph: Mapping[str, str], location: str = "") -> BuildProvenanceRecord:
    """Decode one Packages paragraph.

    Raises:
        MissingField: If Package, Version or Architecture is absent.
        ParseError: If a field value is malformed.
    """
    name = PackageName(_required(paragraph, "Package", location))
    location = location or name
    version = Version.parse(_required(paragraph, "Version", location))
    architecture = Architecture.parse(_required(paragraph, "Architecture", location))

    source, source_version = name, None
    if paragraph.get("Source"):
        source, source_version = split_source_field(paragraph["Source"])

    multi_arch = MultiArch.NO
    if paragraph.get("Multi-Arch"):
        try:
            multi_arch = MultiArch(paragraph["Multi-Arch"].strip())
        except ValueError:
            raise ParseError(location=location, reason=f"invalid Multi-Arch '{paragraph['Multi-Arch']}'") from None

    built_using = tuple(parse_versioned_package(item) for item in split_list_field(paragraph.get("Built-Using", "")))

    return BuildProvenanceRecord(
        package=name,
        version=version,
        architecture=architecture,
        source=source,
        source_version=source_version,
        built_using=built_using,
        multi_arch=multi_arch,
        section=paragraph.get("Section", "").strip(),
        package_type=paragraph.get("Package-Type", "deb").strip(),
    )


def decode_sources_paragraph(paragraph: Mapping[str, str], location: str = "") -> SourceRecord:
    """Decode one Sources paragraph.

    Raises:
        MissingField: If Package or Version is absent.
    """
    name = PackageName(_required(paragraph, "Package", location))
    location = location or name
    return SourceRecord(
        package=name,
        version=Version.parse(_required(paragraph, "Version", location)),
        architecture=tuple(paragraph.get("Architecture", "").split()),
        extra_source_only=paragraph.get("Extra-Source-Only", "no").strip().lower() == "yes",
    )


def decode_paragraphs(
    text: str,
    decoder: Callable[[Mapping[str, str], str], T],
) -> ParseResult[T]:
    """Decode every paragraph of ``text``, collecting failures."""
    result: ParseResult[T] = ParseResult()
    for index, paragraph in enumerate(iter_paragraphs(text), start=1):
        location = f"paragraph {index}"
        try:
            result.records.append(decoder(paragraph, location))
        except ParseError as e:
            if not e.location:
                e.location = location
            logger.debug("Skipping %s: %s", location, e)
            result.errors.append(e)
    return result


def parse_packages(text: str) -> ParseResult[BuildProvenanceRecord]:
    """Decode a Packages index."""
    return decode_paragraphs(text, decode_packages_paragraph)


def parse_sources(text: str) -> ParseResult[SourceRecord]:
    """Decode a Sources index."""
    return decode_paragraphs(text, decode_sources_paragraph)


def read_index(path: Path) -> str:
    """Read a plain, gzip or xz compressed index file."""
    if path.suffix == ".gz":
        with gzip.open(path, "rt", encoding="utf-8") as f:
            return f.read()
    if path.suffix == ".xz":
        with lzma.open(path, "rt", encoding="utf-8") as f:
            return f.read()
    return path.read_text(encoding="utf-8")


def load_packages(path: Path) -> ParseResult[BuildProvenanceRecord]:
    return parse_packages(read_index(path))


def load_sources(path: Path) -> ParseResult[SourceRecord]:
    return parse_sources(read_index(path))


def ma_same_sources(records: list[BuildProvenanceRecord]) -> set[PackageName]:
    """Sources building at least one arch-specific ``Multi-Arch: same`` binary."""
    return {
        record.source
        for record in records
        if record.multi_arch is MultiArch.SAME and record.architecture is not Architecture.ALL
    }
