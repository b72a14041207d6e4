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

"""Configuration utilities for nmutool."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from nmutool.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "paths": {
        "cache_root": "~/.cache/nmutool",
        "data_root": "~/.local/share/nmutool",
    },
    "mirrors": {
        "debian_archive": "https://deb.debian.org/debian",
        "excuses": "https://release.debian.org/britney/excuses.yaml",
        # {codename} is replaced by the codename of the target suite
        "udd_ftbfs_bugs": "https://udd.debian.org/cgi-bin/ftbfs-bugs.yaml?codename={codename}",
    },
    "defaults": {
        "suite": "unstable",
        "components": ["main"],
        "architectures": [],
        "buildd": "wuiet.debian.org",
    },
    "behavior": {"dry_run": False, "offline": False},
}


def get_config_path() -> Path:
    """Return the path to the config file, honouring ``XDG_CONFIG_HOME``."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "nmutool" / "config.yaml"


def ensure_config_exists() -> None:
    """Create the config file with defaults if it does not exist."""
    cfg_path = get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if not cfg_path.exists():
        cfg_path.write_text(yaml.safe_dump(DEFAULT_CONFIG))


def merge_config(raw: dict[str, Any]) -> dict[str, Any]:
    """Merge ``raw`` over DEFAULT_CONFIG, section by section."""
    merged: dict[str, Any] = {}
    for key, val in DEFAULT_CONFIG.items():
        if key in raw and isinstance(raw[key], dict):
            merged[key] = {**val, **raw[key]}
        elif isinstance(val, dict):
            # copy so callers cannot modify DEFAULT_CONFIG
            merged[key] = dict(val)
        else:
            merged[key] = raw.get(key, val)
    return merged


def load_config() -> dict[str, Any]:
    """Load configuration from disk and merge with defaults.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    ensure_config_exists()
    cfg_path = get_config_path()
    try:
        raw = yaml.safe_load(cfg_path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ConfigError(message=f"Invalid config file {cfg_path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(message=f"Invalid config file {cfg_path}: expected a mapping")

    merged = merge_config(raw)
    for pkey, pval in merged.get("paths", {}).items():
        merged["paths"][pkey] = str(Path(str(pval)).expanduser())
    logger.debug("Loaded configuration from %s", cfg_path)
    return merged


def write_config(data: dict[str, Any]) -> None:
    """Write the provided data as YAML to the config path."""
    cfg_path = get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    cfg_path.write_text(yaml.safe_dump(data))
