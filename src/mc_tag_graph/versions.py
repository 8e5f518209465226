"""Version manifest and client jar retrieval.

Thin HTTP layer in front of the graph core: list published versions, resolve a
version to its client jar URL, stream the jar, and read its pack format.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass

import httpx
from loguru import logger

from mc_tag_graph.adapters.base_adapter import ArchiveAdapter
from mc_tag_graph.config import MANIFEST_URL
from mc_tag_graph.core.exceptions import ArchiveOpenError, EntryNotFoundError, VersionFetchError

VERSION_KINDS = ("all", "release", "snapshot")
VERSION_INFO_ENTRY = "version.json"

ProgressCallback = Callable[[str, int], None]


@dataclass(frozen=True)
class VersionEntry:
    id: str
    kind: str
    detail_url: str


def _get_json(url: str, client: httpx.Client | None, timeout: float) -> dict:
    try:
        if client is None:
            response = httpx.get(url, follow_redirects=True, timeout=timeout)
        else:
            response = client.get(url, follow_redirects=True, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as e:
        raise VersionFetchError(url, str(e)) from e
    except json.JSONDecodeError as e:
        raise VersionFetchError(url, f"invalid JSON ({e.msg})") from e

    if not isinstance(data, dict):
        raise VersionFetchError(url, f"expected a JSON object, got {type(data).__name__}")
    return data


def fetch_version_manifest(
    url: str = MANIFEST_URL,
    client: httpx.Client | None = None,
    timeout: float = 30.0,
) -> list[VersionEntry]:
    """Fetch the version manifest.

    Args:
        url: Manifest URL
        client: Optional shared httpx client
        timeout: Request timeout in seconds

    Returns:
        Versions in manifest order (newest first)

    Raises:
        VersionFetchError: Request failed or the document is malformed
    """
    data = _get_json(url, client, timeout)
    raw_versions = data.get("versions")
    if not isinstance(raw_versions, list):
        raise VersionFetchError(url, "manifest has no 'versions' array")

    entries: list[VersionEntry] = []
    for raw in raw_versions:
        try:
            entries.append(VersionEntry(id=raw["id"], kind=raw["type"], detail_url=raw["url"]))
        except (KeyError, TypeError):
            logger.warning(f"Skipping malformed manifest entry: {raw!r}")

    logger.info(f"Fetched {len(entries)} versions from {url}")
    return entries


def filter_versions(entries: list[VersionEntry], kind: str = "all") -> list[VersionEntry]:
    """Filter by version type ("all", "release" or "snapshot")."""
    if kind not in VERSION_KINDS:
        raise ValueError(f"Unknown version kind {kind!r}. Valid kinds: {VERSION_KINDS}")
    if kind == "all":
        return list(entries)
    return [entry for entry in entries if entry.kind == kind]


def select_default_version(entries: list[VersionEntry]) -> VersionEntry:
    """Latest snapshot, falling back to the latest release.

    Raises:
        VersionFetchError: Neither a snapshot nor a release is listed
    """
    for kind in ("snapshot", "release"):
        for entry in entries:
            if entry.kind == kind:
                return entry
    raise VersionFetchError(MANIFEST_URL, "No versions found")


def find_version(entries: list[VersionEntry], version_id: str) -> VersionEntry:
    """Look up a version by id ("latest" selects the default version).

    Raises:
        VersionFetchError: Unknown version id
    """
    if version_id == "latest":
        return select_default_version(entries)
    for entry in entries:
        if entry.id == version_id:
            return entry
    raise VersionFetchError(MANIFEST_URL, f"Unknown version: {version_id}")


def fetch_archive_url(
    detail_url: str,
    client: httpx.Client | None = None,
    timeout: float = 30.0,
) -> str:
    """Resolve a version detail document to its client jar URL.

    Raises:
        VersionFetchError: Request failed or downloads.client.url is missing
    """
    data = _get_json(detail_url, client, timeout)
    try:
        url = data["downloads"]["client"]["url"]
    except (KeyError, TypeError) as e:
        raise VersionFetchError(detail_url, "missing downloads.client.url") from e
    if not isinstance(url, str):
        raise VersionFetchError(detail_url, "downloads.client.url is not a string")
    return url


def download_archive(
    url: str,
    on_progress: ProgressCallback | None = None,
    client: httpx.Client | None = None,
    timeout: float = 300.0,
) -> bytes:
    """Stream an archive into memory.

    Progress is reported as a percentage when Content-Length is known,
    otherwise as megabytes received.

    Raises:
        VersionFetchError: Request failed
    """

    def _report(message: str, percent: int) -> None:
        if on_progress is not None:
            on_progress(message, percent)

    _report("Starting download...", 0)
    chunks: list[bytes] = []
    received = 0

    try:
        if client is None:
            stream = httpx.stream("GET", url, follow_redirects=True, timeout=timeout)
        else:
            stream = client.stream("GET", url, follow_redirects=True, timeout=timeout)
        with stream as r:
            r.raise_for_status()
            content_length = int(r.headers.get("Content-Length") or 0)
            for chunk in r.iter_bytes():
                chunks.append(chunk)
                received += len(chunk)
                if content_length:
                    pct = round(received / content_length * 100)
                    _report(f"Downloading JAR... {pct}%", pct)
                else:
                    _report(f"Downloading JAR... {received / 1024 / 1024:.1f}MB", 50)
    except httpx.HTTPError as e:
        raise VersionFetchError(url, str(e)) from e

    logger.info(f"Downloaded {received / 1024 / 1024:.2f} MB from {url}")
    return b"".join(chunks)


def read_archive_pack_format(archive: ArchiveAdapter) -> int | None:
    """Read the data pack format embedded in a client jar's version.json.

    `pack_version` is an integer in older versions and an object with
    `data` (or `data_major` in newer snapshots) afterwards.
    """
    try:
        version_info = json.loads(archive.read_entry(VERSION_INFO_ENTRY))
    except (
        EntryNotFoundError,
        ArchiveOpenError,
        UnicodeDecodeError,
        json.JSONDecodeError,
        RecursionError,
    ) as e:
        logger.warning(f"Could not read pack format from archive: {e}")
        return None

    if not isinstance(version_info, dict):
        return None
    fmt = version_info.get("pack_version")
    if isinstance(fmt, dict):
        if "data" in fmt:
            fmt = fmt["data"]
        elif "data_major" in fmt:
            fmt = fmt["data_major"]
    if isinstance(fmt, bool) or not isinstance(fmt, int):
        return None
    return fmt
