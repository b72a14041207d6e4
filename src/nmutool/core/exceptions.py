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

"""nmutool exception types.

Errors raised by the analysis core are plain values the caller may catch and
count; only the CLI layer maps them to exit codes.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class NmutoolError(Exception):
    """Base class for nmutool errors with an exit code."""

    message: str = "An error occurred"
    exit_code: int = field(default=1)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


@dataclass
class ConfigError(NmutoolError):
    exit_code: int = field(default=1)


@dataclass
class FetchError(NmutoolError):
    """A document could not be retrieved (and no cached copy exists)."""

    exit_code: int = field(default=3)
    url: str = ""


@dataclass
class DispatchError(NmutoolError):
    """Handing commands to wanna-build failed."""

    exit_code: int = field(default=4)


@dataclass
class ParseError(NmutoolError):
    """A document, paragraph or entry could not be decoded.

    Attributes:
        location: Where the problem was found (e.g. "paragraph 3", "zathura").
        reason: Human readable description.
    """

    exit_code: int = field(default=2)
    location: str = ""
    reason: str = ""

    def __post_init__(self) -> None:
        if not self.reason and self.message != "An error occurred":
            self.reason = self.message

    def __str__(self) -> str:
        if not self.reason:
            return self.message
        return f"{self.location}: {self.reason}" if self.location else self.reason


@dataclass
class MissingField(ParseError):
    """A required field is absent from a paragraph."""

    field_name: str = ""

    def __post_init__(self) -> None:
        if not self.reason:
            self.reason = f"missing required field '{self.field_name}'"
        super().__post_init__()


@dataclass
class VersionParseError(ParseError):
    """A version string does not follow the Debian version format."""

    version: str = ""

    def __post_init__(self) -> None:
        if not self.location:
            self.location = self.version
        super().__post_init__()


@dataclass
class InvalidPackageName(ParseError):
    name: str = ""

    def __post_init__(self) -> None:
        if not self.reason:
            self.reason = f"invalid package name '{self.name}'"
        super().__post_init__()


@dataclass
class UnknownArchitecture(ParseError):
    """The string does not name an architecture known to nmutool."""

    value: str = ""

    def __post_init__(self) -> None:
        if not self.reason:
            self.reason = f"unknown architecture '{self.value}'"
        super().__post_init__()


@dataclass
class UnknownSuite(ParseError):
    """The string does not name a suite or codename."""

    value: str = ""

    def __post_init__(self) -> None:
        if not self.reason:
            self.reason = f"unknown suite or codename '{self.value}'"
        super().__post_init__()


@dataclass
class InvalidArchitecture(NmutoolError):
    """A pseudo architecture was used where a build architecture is required."""

    exit_code: int = field(default=2)


@dataclass
class InvalidCommand(NmutoolError):
    """A wanna-build command failed validation on construction."""

    exit_code: int = field(default=2)
    command: str = ""
