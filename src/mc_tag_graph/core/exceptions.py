"""タググラフ構築の例外.

アーカイブ単位で致命的なもの（ArchiveOpenError）以外は、呼び出し側で
件数カウント or エラー状態のデータパックへ変換される前提。
"""

from __future__ import annotations


class TagGraphError(Exception):
    """mc_tag_graph の例外基底クラス."""


class ArchiveOpenError(TagGraphError):
    """アーカイブ（zip/jar）として開けないバイト列.

    Attributes:
        source: 入力の識別子（ファイル名やURL）
        reason: 失敗理由
    """

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to open archive: {source} ({reason})")


class EntryNotFoundError(TagGraphError, KeyError):
    """アーカイブ内にエントリが存在しない."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Entry not found: {path}")

    def __str__(self) -> str:
        # KeyError は repr() を返すため上書き
        return f"Entry not found: {self.path}"


class EntryParseError(TagGraphError):
    """タグファイル1件の解析失敗.

    抽出処理は中断せず、件数をカウントして次のエントリへ進む。

    Attributes:
        path: エントリパス
        reason: 失敗理由
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse tag file {path}: {reason}")


class NoDefinitionsFoundError(TagGraphError):
    """アップロードされたパックからタグ定義が1件も得られなかった."""

    def __init__(self, pack_name: str, message: str = "No valid tags found in data pack") -> None:
        self.pack_name = pack_name
        super().__init__(message)


class MissingPackMetadataError(TagGraphError):
    """pack.mcmeta が無い、または pack_format を読めない."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Could not read pack.mcmeta: {reason}")


class ExtractionCancelledError(TagGraphError):
    """バッチ境界でキャンセルが検出された."""

    def __init__(self, processed: int, total: int) -> None:
        self.processed = processed
        self.total = total
        super().__init__(f"Extraction cancelled after {processed}/{total} entries")


class VersionFetchError(TagGraphError):
    """バージョンマニフェスト / アーカイブ取得の失敗."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")
