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

"""Pytest fixtures and configuration for nmutool tests."""

from __future__ import annotations

import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest import mock

import pytest
import responses

SAMPLE_EXCUSES = """\
generated-date: 2026-10-18 20:02:11.123456
sources:
- item-name: zathura
  source: zathura
  new-version: 0.5.2-2
  old-version: 0.5.2-1
  is-candidate: true
  component: main
  maintainer: Sebastian Ramacher
  migration-policy-verdict: PASS
  old-binaries:
    0.5.2-1:
    - zathura/amd64
  policy_info:
    age:
      age-requirement: 5
      current-age: 6
      verdict: PASS
    builtonbuildd:
      signed-by:
        amd64: buildd_amd64-x86-ubc-01@buildd.debian.org
        arm64: buildd_arm64-arm-conova-01@buildd.debian.org
      verdict: PASS
    rc-bugs:
      shared-bugs: []
      unique-source-bugs: []
      unique-target-bugs: []
      verdict: PASS
  excuses:
  - Migration status for zathura (0.5.2-1 to 0.5.2-2): <a href="#">Will attempt migration</a>
- item-name: mpv
  source: mpv
  new-version: 0.38.0-2
  old-version: 0.38.0-1
  is-candidate: false
  component: main
  maintainer: Debian Multimedia Maintainers
  migration-policy-verdict: REJECTED_PERMANENTLY
  policy_info:
    age:
      age-requirement: 5
      current-age: 10
      verdict: PASS
    builtonbuildd:
      signed-by:
        amd64: Sebastian Ramacher <sramacher@debian.org>
        arm64: buildd_arm64-arm-conova-01@buildd.debian.org
        all: buildd_amd64-x86-ubc-01@buildd.debian.org
      verdict: REJECTED_PERMANENTLY
    autopkgtest:
      mpv:
        amd64:
        - PASS
        - https://ci.debian.net/packages/m/mpv/testing/amd64/
      verdict: PASS
  excuses:
  - Not built on buildd
- item-name: libfoo_tpu
  source: libfoo
  new-version: 1.2-1+deb13u1
  old-version: 1.2-1
  migration-policy-verdict: REJECTED_NEEDS_APPROVAL
  component: main
- item-name: ffmpeg/armel
  source: ffmpeg
  new-version: 7:7.1-3
  old-version: 7:7.1-3
  migration-policy-verdict: REJECTED_NEEDS_APPROVAL
  component: main
- item-name: -oldpkg
  source: oldpkg
  new-version: "-"
  old-version: 1.0-1
  migration-policy-verdict: PASS
"""

SAMPLE_PACKAGES = """\
Package: libzathura-dev
Source: zathura
Version: 0.5.2-2
Architecture: amd64
Multi-Arch: same

Package: zathura
Version: 0.5.2-2
Architecture: amd64
Built-Using: poppler (= 22.08.0-2)

Package: zathura-doc
Source: zathura
Version: 0.5.2-2
Architecture: all
"""

SAMPLE_SOURCES = """\
Package: poppler
Version: 22.08.0-2
Extra-Source-Only: yes

Package: poppler
Version: 24.02.0-1

Package: zathura
Version: 0.5.2-2
Architecture: any all
"""

SAMPLE_RELEASE = """\
Origin: Debian
Label: Debian
Suite: testing
Codename: forky
Date: Sat, 18 Oct 2026 20:11:52 UTC
Architectures: all amd64 arm64 armhf i386 ppc64el riscv64 s390x
Components: main contrib non-free-firmware non-free
Description: Debian x.y Testing distribution - Not Released
"""

SAMPLE_FTBFS_BUGS = """\
- id: 1000001
  source: broken
  severity: serious
  title: "broken: FTBFS: missing build dependency"
"""


@pytest.fixture
def temp_home(monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Create a temporary home directory and set HOME/XDG paths."""
    with tempfile.TemporaryDirectory() as tmpdir:
        home = Path(tmpdir)
        monkeypatch.setenv("HOME", str(home))
        monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
        monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
        # Also patch Path.home() to return our temp home
        monkeypatch.setattr(Path, "home", lambda: home)
        yield home


@pytest.fixture
def mock_config(temp_home: Path) -> Path:
    """Create a minimal config file in the temp home."""
    config_dir = temp_home / ".config" / "nmutool"
    config_dir.mkdir(parents=True, exist_ok=True)
    config_file = config_dir / "config.yaml"
    config_file.write_text(f"""
paths:
  cache_root: "{temp_home}/.cache/nmutool"
  data_root: "{temp_home}/.local/share/nmutool"

mirrors:
  debian_archive: "http://deb.example.org/debian"
  excuses: "http://release.example.org/britney/excuses.yaml"
  udd_ftbfs_bugs: "http://udd.example.org/ftbfs.yaml?codename={{codename}}"

defaults:
  suite: "unstable"
  components: ["main"]
  architectures: ["amd64", "arm64"]
  buildd: "buildd.example.org"

behavior:
  dry_run: false
  offline: false
""")
    return config_file


@pytest.fixture
def sample_excuses() -> str:
    return SAMPLE_EXCUSES


@pytest.fixture
def sample_packages() -> str:
    return SAMPLE_PACKAGES


@pytest.fixture
def sample_sources() -> str:
    return SAMPLE_SOURCES


@pytest.fixture
def sample_release() -> str:
    return SAMPLE_RELEASE


@pytest.fixture
def sample_ftbfs_bugs() -> str:
    return SAMPLE_FTBFS_BUGS


@pytest.fixture
def mock_responses() -> Generator[responses.RequestsMock, None, None]:
    """Activate responses mock for HTTP requests."""
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def non_tty_stderr(monkeypatch: pytest.MonkeyPatch) -> mock.MagicMock:
    """Mock sys.__stderr__ as a non-TTY stream."""
    mock_stderr = mock.MagicMock()
    mock_stderr.isatty.return_value = False
    monkeypatch.setattr("sys.__stderr__", mock_stderr)
    return mock_stderr
