"""ZipArchive for reading zip/jar archives from memory.

Client jars and uploaded data packs are both plain zip files, so one adapter
handles the base archive and overlay packs (including nested packs).
"""

from __future__ import annotations

import io
import zipfile
import zlib
from pathlib import Path

from mc_tag_graph.core.exceptions import ArchiveOpenError, EntryNotFoundError

from .base_adapter import ArchiveAdapter


class ZipArchive(ArchiveAdapter):
    """Adapter for in-memory zip archives.

    Args:
        data: Raw archive bytes
        source: Label used in error messages (file name, URL, entry path)
    """

    def __init__(self, data: bytes, source: str = "<memory>") -> None:
        """Open the archive.

        Raises:
            ArchiveOpenError: Bytes are not a readable zip archive
        """
        self.source = source
        try:
            self._zip = zipfile.ZipFile(io.BytesIO(data))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
            raise ArchiveOpenError(source, str(e) or type(e).__name__) from e

        self._entries = [info.filename for info in self._zip.infolist() if not info.is_dir()]
        self._entry_set = set(self._entries)

    def list_entries(self) -> list[str]:
        return list(self._entries)

    def has_entry(self, path: str) -> bool:
        return path in self._entry_set

    def read_bytes(self, path: str) -> bytes:
        if path not in self._entry_set:
            raise EntryNotFoundError(path)
        try:
            return self._zip.read(path)
        except (zipfile.BadZipFile, OSError, RuntimeError, NotImplementedError, zlib.error) as e:
            # encrypted entry, unsupported compression or corrupt data
            raise ArchiveOpenError(f"{self.source}!{path}", str(e)) from e


def open_archive(data: bytes, source: str = "<memory>") -> ZipArchive:
    """Open raw bytes as an archive.

    Raises:
        ArchiveOpenError: Corrupt or non-zip input
    """
    return ZipArchive(data, source)


def open_archive_file(path: Path | str) -> ZipArchive:
    """Read a zip/jar from disk.

    Raises:
        FileNotFoundError: File does not exist
        ArchiveOpenError: File is not a readable archive
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Archive not found: {path}")
    return ZipArchive(path.read_bytes(), str(path))
