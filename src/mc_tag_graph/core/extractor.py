"""ベースアーカイブ（client jar）からタグ依存グラフを抽出する.

- タグファイルは一定件数ごとのバッチで処理し、バッチ間でイベントループに制御を返す
- 1ファイルの解析失敗は件数に数えてスキップ（抽出全体は止めない）
- キャンセルはバッチ境界でのみ検出する
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

from loguru import logger

from .definitions import BASE_TAG_PATTERN, TagDefinition, parse_tag_definition
from .exceptions import ArchiveOpenError, EntryParseError, ExtractionCancelledError
from .graph import TagGraph
from .identifiers import DEFAULT_NAMESPACE, NodeKind, resolve_reference

if TYPE_CHECKING:
    from mc_tag_graph.adapters.base_adapter import ArchiveAdapter

DEFAULT_BATCH_SIZE = 100

ProgressCallback = Callable[[str, int], None]


def _chunked(seq: list, size: int) -> Iterator[list]:
    for i in range(0, len(seq), size):
        yield seq[i : i + size]


def find_tag_entries(archive: ArchiveAdapter) -> list[str]:
    """ベース用パターンに一致するエントリ（アーカイブ内の順序を維持）."""
    return [path for path in archive.list_entries() if BASE_TAG_PATTERN.match(path)]


def register_definition(
    graph: TagGraph,
    definition: TagDefinition,
    default_namespace: str = DEFAULT_NAMESPACE,
) -> None:
    """タグ定義1件をグラフへ登録する（ノード昇格 + 参照先ノード + エッジ）."""
    source_id = definition.id
    graph.add_node(
        source_id,
        NodeKind.TAG,
        definition.category,
        path=definition.path,
        payload=definition.payload,
    )

    for ref in definition.values:
        target_id, kind = resolve_reference(ref.id, definition.category, default_namespace)
        graph.add_node(target_id, kind, definition.category)
        graph.add_edge(source_id, target_id)


def _load_entry(archive: ArchiveAdapter, path: str) -> TagDefinition:
    try:
        text = archive.read_entry(path)
    except UnicodeDecodeError as e:
        raise EntryParseError(path, f"not UTF-8 text ({e.reason})") from e
    except ArchiveOpenError as e:
        raise EntryParseError(path, e.reason) from e
    return parse_tag_definition(path, text, BASE_TAG_PATTERN)


async def extract_base_graph(
    archive: ArchiveAdapter,
    on_progress: ProgressCallback | None = None,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    default_namespace: str = DEFAULT_NAMESPACE,
    cancel_event: asyncio.Event | None = None,
) -> TagGraph:
    """アーカイブ内の全タグファイルからベースグラフを構築する.

    Args:
        archive: 読み込み済みアーカイブ
        on_progress: `(message, percent)` を受け取るコールバック（バッチ毎に呼ばれる）
        batch_size: 1バッチのエントリ数
        default_namespace: namespace 省略時の既定値
        cancel_event: セットされていればバッチ境界で中断する

    Returns:
        構築済みのグラフ（stats.errors に解析失敗件数）

    Raises:
        ExtractionCancelledError: cancel_event がセットされた場合
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    def _report(message: str, percent: int) -> None:
        if on_progress is not None:
            on_progress(message, percent)

    tag_entries = find_tag_entries(archive)
    total = len(tag_entries)
    logger.info(f"Found {total} tag files in {getattr(archive, 'source', 'archive')}")
    _report(f"Found {total} tags. Parsing...", 0)

    graph = TagGraph()
    processed = 0

    for batch in _chunked(tag_entries, batch_size):
        if cancel_event is not None and cancel_event.is_set():
            logger.warning(f"Extraction cancelled after {processed}/{total} entries")
            raise ExtractionCancelledError(processed, total)

        for path in batch:
            try:
                definition = _load_entry(archive, path)
            except EntryParseError as e:
                graph.stats.errors += 1
                logger.warning(f"Skipped tag file: {e}")
                continue
            register_definition(graph, definition, default_namespace)

        processed += len(batch)
        pct = round(processed / total * 100)
        _report(f"Parsing tags... {pct}%", pct)

        # 描画等のためにイベントループへ制御を返す
        await asyncio.sleep(0)

    if graph.stats.errors > 0:
        logger.error(f"Failed to load {graph.stats.errors} tag file(s)")

    logger.info(
        f"Extraction complete: {graph.stats.tags} tags, {graph.stats.elements} elements, "
        f"{len(graph.edges)} edges, {len(graph.category_set)} categories"
    )
    return graph
