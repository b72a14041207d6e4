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

"""Fetching and caching of Debian documents.

Documents (excuses.yaml, Release, Packages and Sources indices, UDD bug
lists) are downloaded into the cache directory with HTTP conditional
requests. Each cached file has a ``.meta.json`` sidecar recording the
ETag, Last-Modified header and checksum of the copy on disk.
"""

from __future__ import annotations

import datetime
import hashlib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import requests

from nmutool.core.exceptions import FetchError

logger = logging.getLogger(__name__)


def _utcnow() -> str:
    return datetime.datetime.now(datetime.UTC).isoformat()


@dataclass
class FetchResult:
    """Result of a document fetch."""

    url: str
    path: Path
    etag: str | None = None
    last_modified: str | None = None
    fetched_utc: str = field(default_factory=_utcnow)
    sha256: str = ""
    size: int = 0
    was_cached: bool = False
    error: str | None = None

    @property
    def changed(self) -> bool:
        """True if a new copy was downloaded."""
        return not self.was_cached and self.error is None


def release_url(mirror: str, suite: str) -> str:
    return f"{mirror.rstrip('/')}/dists/{suite}/Release"


def packages_url(mirror: str, suite: str, component: str, arch: str) -> str:
    """URL of a Packages index: ``dists/{suite}/{component}/binary-{arch}/Packages.xz``."""
    return f"{mirror.rstrip('/')}/dists/{suite}/{component}/binary-{arch}/Packages.xz"


def sources_url(mirror: str, suite: str, component: str) -> str:
    return f"{mirror.rstrip('/')}/dists/{suite}/{component}/source/Sources.xz"


class DocumentFetcher:
    """Fetch documents into a cache directory with conditional requests.

    Args:
        cache_dir: Directory holding the cached documents.
        session: Optional requests session.
        timeout: Request timeout in seconds.
        offline: Never touch the network, only use cached copies.
        force: Download even if the cached copy is current.
    """

    def __init__(
        self,
        cache_dir: Path,
        session: requests.Session | None = None,
        timeout: int = 60,
        offline: bool = False,
        force: bool = False,
    ) -> None:
        self.cache_dir = cache_dir
        self.session = session or requests.Session()
        self.timeout = timeout
        self.offline = offline
        self.force = force

    def path_for(self, name: str) -> Path:
        return self.cache_dir / name

    def _cached(self, result: FetchResult, meta: dict[str, Any] | None, error: str | None = None) -> FetchResult:
        dest = result.path
        result.was_cached = True
        result.error = error
        result.sha256 = compute_sha256(dest)
        result.size = dest.stat().st_size
        if meta:
            result.etag = meta.get("etag")
            result.last_modified = meta.get("last_modified")
            result.fetched_utc = meta.get("fetched_utc", result.fetched_utc)
        return result

    def fetch(self, name: str, url: str) -> FetchResult:
        """Fetch ``url`` into the cache file ``name``.

        A cached copy is used when the server reports it as unchanged, in
        offline mode, and (with a warning) when the server cannot be reached.

        Raises:
            FetchError: If the document is unavailable and not cached.
        """
        dest = self.path_for(name)
        result = FetchResult(url=url, path=dest)
        meta = load_metadata(dest) if dest.exists() else None

        if self.offline:
            if dest.exists():
                logger.debug("Offline: using cached %s", dest)
                return self._cached(result, meta)
            raise FetchError(message=f"{name} is not cached and offline mode is enabled", url=url)

        headers: dict[str, str] = {}
        if meta and not self.force:
            if meta.get("etag"):
                headers["If-None-Match"] = meta["etag"]
            if meta.get("last_modified"):
                headers["If-Modified-Since"] = meta["last_modified"]

        try:
            resp = self.session.get(url, headers=headers, timeout=self.timeout, stream=True)
        except requests.RequestException as e:
            if dest.exists():
                logger.warning("Unable to fetch %s (%s), using cached copy", url, e)
                return self._cached(result, meta, error=str(e))
            raise FetchError(message=f"Unable to fetch {url}: {e}", url=url) from e

        if resp.status_code == 304 and dest.exists():
            logger.debug("%s not modified", url)
            return self._cached(result, meta)

        if resp.status_code != 200:
            if dest.exists():
                logger.warning("Fetching %s failed with HTTP %d, using cached copy", url, resp.status_code)
                return self._cached(result, meta, error=f"HTTP {resp.status_code}")
            raise FetchError(message=f"Fetching {url} failed with HTTP {resp.status_code}", url=url)

        dest.parent.mkdir(parents=True, exist_ok=True)
        tmp = dest.with_name(dest.name + ".part")
        with tmp.open("wb") as f:
            for chunk in resp.iter_content(chunk_size=65536):
                f.write(chunk)
        tmp.replace(dest)

        result.etag = resp.headers.get("ETag")
        result.last_modified = resp.headers.get("Last-Modified")
        result.sha256 = compute_sha256(dest)
        result.size = dest.stat().st_size
        result.fetched_utc = _utcnow()
        write_metadata(dest, result)
        logger.info("Fetched %s (%d bytes)", url, result.size)
        return result

    def close(self) -> None:
        self.session.close()


def compute_sha256(path: Path) -> str:
    """Compute the SHA-256 hash of a file."""
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def metadata_path(dest: Path) -> Path:
    return dest.with_name(dest.name + ".meta.json")


def write_metadata(dest: Path, result: FetchResult) -> None:
    """Write the ``.meta.json`` sidecar of a cached document."""
    meta = {
        "url": result.url,
        "etag": result.etag,
        "last_modified": result.last_modified,
        "fetched_utc": result.fetched_utc,
        "sha256": result.sha256,
        "size": result.size,
    }
    metadata_path(dest).write_text(json.dumps(meta, indent=2))


def load_metadata(dest: Path) -> dict[str, Any] | None:
    """Load the sidecar of a cached document if it exists and is valid."""
    meta_path = metadata_path(dest)
    if not meta_path.exists():
        return None
    try:
        data: dict[str, Any] = json.loads(meta_path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        logger.debug("Ignoring unreadable metadata %s: %s", meta_path, e)
        return None
    return data
