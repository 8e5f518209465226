"""アーカイブ読み込みアダプタ（基底クラス）.

コアはアーカイブ形式（zip/jar）を直接扱わず、エントリ一覧と読み出しだけに依存する。
"""

from abc import ABC, abstractmethod


class ArchiveAdapter(ABC):
    """アーカイブの基底クラス.

    全てのアーカイブ実装はこのクラスを継承し、
    list_entries()/read_entry()/read_bytes() を実装します。
    """

    @abstractmethod
    def list_entries(self) -> list[str]:
        """ファイルエントリのパス一覧（ディレクトリは含めない）."""
        ...

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        """エントリをバイト列で読み出す.

        Raises:
            EntryNotFoundError: エントリが存在しない場合
        """
        ...

    def read_entry(self, path: str) -> str:
        """エントリをUTF-8テキストとして読み出す.

        Raises:
            EntryNotFoundError: エントリが存在しない場合
            UnicodeDecodeError: UTF-8として読めない場合
        """
        return self.read_bytes(path).decode("utf-8-sig")

    def has_entry(self, path: str) -> bool:
        return path in self.list_entries()
