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

"""Path helpers and directory creation for nmutool."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any


def resolve_paths(cfg: Mapping[str, Any]) -> dict[str, Path]:
    """Return resolved Path objects for configured paths."""
    paths: Mapping[str, Any] = cfg.get("paths", {})
    resolved: dict[str, Path] = {}
    for key, val in paths.items():
        resolved[key] = Path(str(val)).expanduser().resolve()
    resolved.setdefault("cache_root", Path("~/.cache/nmutool").expanduser().resolve())
    resolved.setdefault("data_root", Path("~/.local/share/nmutool").expanduser().resolve())
    resolved["documents"] = resolved["cache_root"] / "documents"
    return resolved


def ensure_directories(cfg: Mapping[str, Any]) -> dict[str, Path]:
    """Ensure the cache and data directories exist.

    Returns a mapping of keys to Path objects that were created/ensured.
    """
    paths = resolve_paths(cfg)
    for key in ("cache_root", "data_root", "documents"):
        paths[key].mkdir(parents=True, exist_ok=True)
    return paths
