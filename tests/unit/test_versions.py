"""Unit tests for version manifest retrieval (httpx.MockTransport)."""

import io
import json
import zipfile

import httpx
import pytest

from mc_tag_graph.adapters.zip_adapter import open_archive
from mc_tag_graph.core.exceptions import VersionFetchError
from mc_tag_graph.versions import (
    VersionEntry,
    download_archive,
    fetch_archive_url,
    fetch_version_manifest,
    filter_versions,
    find_version,
    read_archive_pack_format,
    select_default_version,
)

MANIFEST = {
    "latest": {"release": "1.21.4", "snapshot": "25w02a"},
    "versions": [
        {"id": "25w02a", "type": "snapshot", "url": "https://meta.test/25w02a.json"},
        {"id": "1.21.4", "type": "release", "url": "https://meta.test/1.21.4.json"},
        {"id": "b1.7.3", "type": "old_beta", "url": "https://meta.test/b1.7.3.json"},
    ],
}


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def _jar(version_json: object | None) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("data/minecraft/tags/block/logs.json", "{}")
        if version_json is not None:
            zf.writestr("version.json", json.dumps(version_json))
    return buf.getvalue()


class TestManifest:
    def test_fetch_version_manifest(self) -> None:
        client = _client(lambda request: httpx.Response(200, json=MANIFEST))

        entries = fetch_version_manifest("https://meta.test/manifest.json", client=client)

        assert entries[0] == VersionEntry("25w02a", "snapshot", "https://meta.test/25w02a.json")
        assert len(entries) == 3

    def test_http_error(self) -> None:
        client = _client(lambda request: httpx.Response(503))

        with pytest.raises(VersionFetchError, match="Failed to fetch"):
            fetch_version_manifest("https://meta.test/manifest.json", client=client)

    def test_missing_versions_array(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"latest": {}}))

        with pytest.raises(VersionFetchError, match="no 'versions' array"):
            fetch_version_manifest("https://meta.test/manifest.json", client=client)

    def test_filter_versions(self) -> None:
        entries = [VersionEntry(v["id"], v["type"], v["url"]) for v in MANIFEST["versions"]]

        assert [e.id for e in filter_versions(entries, "release")] == ["1.21.4"]
        assert [e.id for e in filter_versions(entries, "snapshot")] == ["25w02a"]
        assert len(filter_versions(entries, "all")) == 3
        with pytest.raises(ValueError, match="Unknown version kind"):
            filter_versions(entries, "beta")

    def test_select_default_prefers_snapshot(self) -> None:
        entries = [VersionEntry(v["id"], v["type"], v["url"]) for v in MANIFEST["versions"]]
        assert select_default_version(entries).id == "25w02a"

    def test_select_default_falls_back_to_release(self) -> None:
        entries = [VersionEntry("1.20", "release", "u"), VersionEntry("b1.7.3", "old_beta", "u")]
        assert select_default_version(entries).id == "1.20"

    def test_select_default_none(self) -> None:
        with pytest.raises(VersionFetchError, match="No versions found"):
            select_default_version([VersionEntry("b1.7.3", "old_beta", "u")])

    def test_find_version(self) -> None:
        entries = [VersionEntry(v["id"], v["type"], v["url"]) for v in MANIFEST["versions"]]

        assert find_version(entries, "1.21.4").kind == "release"
        assert find_version(entries, "latest").id == "25w02a"
        with pytest.raises(VersionFetchError, match="Unknown version"):
            find_version(entries, "9.9")


class TestArchiveDownload:
    def test_fetch_archive_url(self) -> None:
        detail = {"downloads": {"client": {"url": "https://files.test/client.jar"}}}
        client = _client(lambda request: httpx.Response(200, json=detail))

        assert fetch_archive_url("https://meta.test/1.21.4.json", client=client) == "https://files.test/client.jar"

    def test_fetch_archive_url_missing(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"downloads": {}}))

        with pytest.raises(VersionFetchError, match="downloads.client.url"):
            fetch_archive_url("https://meta.test/1.21.4.json", client=client)

    def test_download_archive_reports_progress(self) -> None:
        payload = b"x" * 1000
        client = _client(lambda request: httpx.Response(200, content=payload))
        events: list[tuple[str, int]] = []

        data = download_archive("https://files.test/client.jar", lambda m, p: events.append((m, p)), client=client)

        assert data == payload
        assert events[0] == ("Starting download...", 0)
        assert events[-1] == ("Downloading JAR... 100%", 100)

    def test_download_archive_http_error(self) -> None:
        client = _client(lambda request: httpx.Response(404))

        with pytest.raises(VersionFetchError):
            download_archive("https://files.test/client.jar", client=client)


class TestReadArchivePackFormat:
    def test_integer_pack_version(self) -> None:
        assert read_archive_pack_format(open_archive(_jar({"pack_version": 10}))) == 10

    def test_object_pack_version(self) -> None:
        archive = open_archive(_jar({"pack_version": {"resource": 46, "data": 61}}))
        assert read_archive_pack_format(archive) == 61

    def test_data_major_pack_version(self) -> None:
        archive = open_archive(_jar({"pack_version": {"resource_major": 70, "data_major": 88}}))
        assert read_archive_pack_format(archive) == 88

    def test_missing_version_json(self) -> None:
        assert read_archive_pack_format(open_archive(_jar(None))) is None

    def test_unusable_value(self) -> None:
        assert read_archive_pack_format(open_archive(_jar({"pack_version": "10"}))) is None

    def test_corrupt_version_json(self) -> None:
        """version.json のCRCが壊れていても None を返すこと."""
        data = _jar({"pack_version": 61})
        original = b'"pack_version": 61'
        assert data.count(original) == 1
        archive = open_archive(data.replace(original, b'"pack_version": 62'))
        assert read_archive_pack_format(archive) is None
