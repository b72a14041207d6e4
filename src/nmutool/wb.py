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

"""Commands for Debian's wanna-build service.

Every command renders to one canonical line of the ``wb`` text protocol, e.g.::

    nmu zathura_0.5.2-1 . amd64 arm64 . unstable . -m "Rebuild on buildd"
    bp -50 zathura . ANY . unstable

Commands validate their fields on construction and raise
:class:`~nmutool.core.exceptions.InvalidCommand`; rendering is
deterministic, so equal commands always produce the same text and
:func:`parse_command` reverses :func:`str`.
"""

from __future__ import annotations

import shlex
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import ClassVar

from nmutool.core.exceptions import InvalidCommand, InvalidPackageName, UnknownArchitecture, UnknownSuite, VersionParseError
from nmutool.debpkg.package import PackageName
from nmutool.debpkg.version import Version
from nmutool.target.arch import Architecture
from nmutool.target.suite import UNSTABLE, SuiteOrCodename, parse_suite_or_codename

ANY_MARKER = "ANY"
ALL_MARKER = "ALL"


@dataclass(frozen=True, order=True)
class WBArchitecture:
    """An architecture as understood by ``wb``.

    Besides plain architectures, ``wb`` knows ``ANY`` (all architectures
    except ``all``), ``ALL`` (all architectures) and negations such as
    ``-i386`` (used as ``ANY -i386``).
    """

    # sort key: markers, then included architectures, then exclusions
    rank: int = field(repr=False)
    name: str

    @classmethod
    def any(cls) -> WBArchitecture:
        return cls(0, ANY_MARKER)

    @classmethod
    def all(cls) -> WBArchitecture:
        return cls(0, ALL_MARKER)

    @classmethod
    def of(cls, architecture: Architecture) -> WBArchitecture:
        return cls(1, architecture.value)

    @classmethod
    def excluding(cls, architecture: Architecture) -> WBArchitecture:
        return cls(2, architecture.value)

    @classmethod
    def parse(cls, token: str) -> WBArchitecture:
        """Parse ``ANY``, ``ALL``, ``arch`` or ``-arch``.

        Raises:
            UnknownArchitecture: For anything else.
        """
        if token == ANY_MARKER:
            return cls.any()
        if token == ALL_MARKER:
            return cls.all()
        if token.startswith("-"):
            return cls.excluding(Architecture.parse(token[1:]))
        return cls.of(Architecture.parse(token))

    @property
    def is_marker(self) -> bool:
        return self.rank == 0

    @property
    def is_exclusion(self) -> bool:
        return self.rank == 2

    @property
    def architecture(self) -> Architecture | None:
        return None if self.is_marker else Architecture(self.name)

    def __str__(self) -> str:
        return f"-{self.name}" if self.is_exclusion else self.name


def _check_text(value: str, what: str, command: str) -> str:
    if not value or not value.strip():
        raise InvalidCommand(message=f"{command}: {what} must not be empty", command=command)
    if "\n" in value or "\r" in value:
        raise InvalidCommand(message=f"{command}: {what} must be a single line", command=command)
    if '"' in value:
        raise InvalidCommand(message=f'{command}: {what} must not contain \'"\'', command=command)
    return value


@dataclass(frozen=True)
class SourceSpecifier:
    """A source package with optional version, its architectures and suite.

    Renders as ``source[_version] . ARCH... . suite``; without explicit
    architectures the specifier targets ``ANY``.
    """

    source: PackageName
    version: Version | None = None
    architectures: tuple[WBArchitecture, ...] = ()
    suite: SuiteOrCodename = UNSTABLE

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "source", PackageName(self.source))
        except InvalidPackageName as e:
            raise InvalidCommand(message=str(e), command="source") from None
        object.__setattr__(self, "architectures", tuple(sorted(set(self.architectures))))

    @classmethod
    def for_architectures(
        cls,
        source: str,
        architectures: Iterable[Architecture],
        version: Version | None = None,
        suite: SuiteOrCodename = UNSTABLE,
    ) -> SourceSpecifier:
        return cls(source, version, tuple(WBArchitecture.of(a) for a in architectures), suite)  # type: ignore[arg-type]

    def effective_architectures(self) -> tuple[WBArchitecture, ...]:
        return self.architectures or (WBArchitecture.any(),)

    def __str__(self) -> str:
        name = f"{self.source}_{self.version}" if self.version is not None else str(self.source)
        archs = " ".join(str(arch) for arch in self.effective_architectures())
        return f"{name} . {archs} . {self.suite}"


def _reject_architectures(
    source: SourceSpecifier,
    command: str,
    forbidden: frozenset[Architecture],
    forbid_all_marker: bool = False,
) -> None:
    for arch in source.architectures:
        if (forbid_all_marker and arch == WBArchitecture.all()) or arch.architecture in forbidden:
            raise InvalidCommand(message=f"invalid architecture {arch} for wb command '{command}'", command=command)


class WBCommand:
    """Base class of all wanna-build commands."""

    verb: ClassVar[str] = ""

    def expand(self) -> Iterator[WBCommand]:
        """The command followed by any commands implied by its options."""
        yield self

    def lines(self) -> list[str]:
        return [str(command) for command in self.expand()]


_SOURCE_ONLY = frozenset({Architecture.SOURCE})


@dataclass(frozen=True)
class DependencyWait(WBCommand):
    """``dw``: wait for a dependency before building."""

    source: SourceSpecifier
    dependency: str

    verb: ClassVar[str] = "dw"

    def __post_init__(self) -> None:
        _reject_architectures(self.source, self.verb, _SOURCE_ONLY)
        _check_text(self.dependency, "dependency", self.verb)

    def __str__(self) -> str:
        return f'dw {self.source} . -m "{self.dependency}"'


@dataclass(frozen=True)
class BuildPriority(WBCommand):
    """``bp``: change the build priority."""

    source: SourceSpecifier
    priority: int

    verb: ClassVar[str] = "bp"

    def __post_init__(self) -> None:
        _reject_architectures(self.source, self.verb, _SOURCE_ONLY)

    def __str__(self) -> str:
        return f"bp {self.priority} {self.source}"


@dataclass(frozen=True)
class Fail(WBCommand):
    """``fail``: mark builds as failed."""

    source: SourceSpecifier
    reason: str

    verb: ClassVar[str] = "fail"

    def __post_init__(self) -> None:
        _reject_architectures(self.source, self.verb, _SOURCE_ONLY)
        _check_text(self.reason, "reason", self.verb)

    def __str__(self) -> str:
        return f'fail {self.source} . -m "{self.reason}"'


@dataclass(frozen=True)
class Info(WBCommand):
    """``info``: query the build state."""

    source: SourceSpecifier

    verb: ClassVar[str] = "info"

    def __post_init__(self) -> None:
        _reject_architectures(self.source, self.verb, _SOURCE_ONLY)

    def __str__(self) -> str:
        return f"info {self.source}"


@dataclass(frozen=True)
class ScheduleBinNMU(WBCommand):
    """``nmu``: schedule a binary-only rebuild.

    ``all``, ``source`` and the ``ALL`` marker are rejected: only
    architecture-dependent binaries can be rebuilt. A non-zero
    ``build_priority`` and ``dep_wait`` expand into follow-up ``bp`` and
    ``dw`` commands for the same source.
    """

    source: SourceSpecifier
    message: str
    nmu_version: int | None = None
    extra_depends: str | None = None
    build_priority: int = 0
    dep_wait: str | None = None

    verb: ClassVar[str] = "nmu"

    def __post_init__(self) -> None:
        _reject_architectures(
            self.source,
            self.verb,
            frozenset({Architecture.ALL, Architecture.SOURCE, Architecture.ANY}),
            forbid_all_marker=True,
        )
        _check_text(self.message, "message", self.verb)
        if self.extra_depends is not None:
            _check_text(self.extra_depends, "extra dependencies", self.verb)
        if self.dep_wait is not None:
            _check_text(self.dep_wait, "dependency-wait", self.verb)
        if self.nmu_version is not None and self.nmu_version < 1:
            raise InvalidCommand(message="nmu: binNMU version must be positive", command=self.verb)

    def __str__(self) -> str:
        version = f"{self.nmu_version} " if self.nmu_version is not None else ""
        line = f'nmu {version}{self.source} . -m "{self.message}"'
        if self.extra_depends is not None:
            line += f' --extra-depends "{self.extra_depends}"'
        return line

    def expand(self) -> Iterator[WBCommand]:
        yield self
        if self.dep_wait is not None:
            yield DependencyWait(self.source, self.dep_wait)
        if self.build_priority:
            yield BuildPriority(self.source, self.build_priority)


def render_commands(commands: Iterable[WBCommand]) -> str:
    """Render commands one per line, expanding implied follow-ups."""
    return "\n".join(line for command in commands for line in command.lines())


def _take_source(tokens: list[str], line: str) -> SourceSpecifier:
    """Consume ``source[_version] . ARCH... . suite`` from the front of ``tokens``."""
    try:
        name_token = tokens.pop(0)
        if tokens.pop(0) != ".":
            raise InvalidCommand(message=f"expected '.' after source in: {line}")
        archs = []
        while tokens and tokens[0] != ".":
            archs.append(WBArchitecture.parse(tokens.pop(0)))
        tokens.pop(0)
        suite = parse_suite_or_codename(tokens.pop(0))
    except IndexError:
        raise InvalidCommand(message=f"truncated command: {line}") from None
    except (UnknownArchitecture, UnknownSuite) as e:
        raise InvalidCommand(message=f"{e}: {line}") from None

    name, _, version_str = name_token.partition("_")
    try:
        version = Version.parse(version_str) if version_str else None
    except VersionParseError as e:
        raise InvalidCommand(message=f"{e}: {line}") from None
    # ANY alone is the default rendering
    if archs == [WBArchitecture.any()]:
        archs = []
    return SourceSpecifier(name, version, tuple(archs), suite)  # type: ignore[arg-type]


def _take_message(tokens: list[str], line: str) -> str:
    if len(tokens) < 3 or tokens[0] != "." or tokens[1] != "-m":
        raise InvalidCommand(message=f"expected '. -m \"message\"' in: {line}")
    del tokens[:2]
    return tokens.pop(0)


def parse_command(line: str) -> WBCommand:
    """Parse one rendered command line.

    Raises:
        InvalidCommand: If the line is not a valid command.
    """
    try:
        tokens = shlex.split(line)
    except ValueError as e:
        raise InvalidCommand(message=f"{e}: {line}") from None
    if not tokens:
        raise InvalidCommand(message="empty command")

    verb = tokens.pop(0)
    if verb == "nmu":
        nmu_version = int(tokens.pop(0)) if tokens and tokens[0].isdigit() else None
        source = _take_source(tokens, line)
        message = _take_message(tokens, line)
        extra_depends = None
        if tokens[:1] == ["--extra-depends"] and len(tokens) >= 2:
            extra_depends = tokens[1]
            del tokens[:2]
        command: WBCommand = ScheduleBinNMU(source, message, nmu_version=nmu_version, extra_depends=extra_depends)
    elif verb == "dw":
        source = _take_source(tokens, line)
        command = DependencyWait(source, _take_message(tokens, line))
    elif verb == "fail":
        source = _take_source(tokens, line)
        command = Fail(source, _take_message(tokens, line))
    elif verb == "bp":
        try:
            priority = int(tokens.pop(0))
        except (IndexError, ValueError):
            raise InvalidCommand(message=f"expected a build priority in: {line}") from None
        command = BuildPriority(_take_source(tokens, line), priority)
    elif verb == "info":
        command = Info(_take_source(tokens, line))
    else:
        raise InvalidCommand(message=f"unknown wb command '{verb}'", command=verb)

    if tokens:
        raise InvalidCommand(message=f"trailing tokens {tokens!r} in: {line}", command=verb)
    return command
