"""アーカイブ読み込みアダプタ群."""

from .base_adapter import ArchiveAdapter
from .zip_adapter import ZipArchive, open_archive, open_archive_file

__all__ = [
    "ArchiveAdapter",
    "ZipArchive",
    "open_archive",
    "open_archive_file",
]
