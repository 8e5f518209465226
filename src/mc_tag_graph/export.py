"""グラフの書き出し.

- ノード/エッジを Polars DataFrame に変換して Parquet 出力
- 統計・カテゴリ・データパック一覧をまとめたメタデータJSON
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

import polars as pl
from loguru import logger

from mc_tag_graph.core.graph import TagGraph
from mc_tag_graph.core.packs import DataPack

NODE_SCHEMA = {
    "id": pl.String,
    "label": pl.String,
    "kind": pl.String,
    "category": pl.String,
    "path": pl.String,
    "attribution_pack": pl.String,
    "attribution_color": pl.String,
    "replaced_by_pack": pl.String,
    "replaced_by_color": pl.String,
}

EDGE_SCHEMA = {
    "id": pl.String,
    "source": pl.String,
    "target": pl.String,
}


def graph_to_frames(graph: TagGraph) -> tuple[pl.DataFrame, pl.DataFrame]:
    """グラフを (nodes, edges) の DataFrame に変換する."""
    node_rows = [
        {
            "id": node.id,
            "label": node.label,
            "kind": node.kind.value,
            "category": node.category,
            "path": node.path,
            "attribution_pack": node.attribution.pack_id if node.attribution else None,
            "attribution_color": node.attribution.color if node.attribution else None,
            "replaced_by_pack": node.replaced_by.pack_name if node.replaced_by else None,
            "replaced_by_color": node.replaced_by.color if node.replaced_by else None,
        }
        for node in graph.nodes.values()
    ]
    edge_rows = [
        {"id": edge.key, "source": edge.source_id, "target": edge.target_id}
        for edge in graph.edges.values()
    ]

    nodes_df = pl.DataFrame(node_rows, schema=NODE_SCHEMA)
    edges_df = pl.DataFrame(edge_rows, schema=EDGE_SCHEMA)
    return nodes_df, edges_df


def category_summary(graph: TagGraph) -> pl.DataFrame:
    """category × kind ごとのノード数."""
    nodes_df, _ = graph_to_frames(graph)
    if nodes_df.is_empty():
        return pl.DataFrame(schema={"category": pl.String, "kind": pl.String, "count": pl.UInt32})
    return nodes_df.group_by(["category", "kind"]).agg(pl.len().alias("count")).sort(["category", "kind"])


def export_graph_parquet(graph: TagGraph, output_dir: Path | str) -> list[Path]:
    """nodes.parquet / edges.parquet を書き出す.

    Returns:
        出力されたファイルのパス
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    nodes_df, edges_df = graph_to_frames(graph)
    exported: list[Path] = []
    for name, df in (("nodes", nodes_df), ("edges", edges_df)):
        output_path = output_dir / f"{name}.parquet"
        df.write_parquet(output_path)
        logger.info(f"Exported {name}: {len(df)} rows → {output_path.name}")
        exported.append(output_path)
    return exported


def generate_graph_metadata(
    graph: TagGraph,
    output_path: Path | str | None = None,
    packs: Iterable[DataPack] = (),
) -> dict:
    """グラフのメタデータを生成する（output_path 指定時はJSONにも書く).

    Args:
        graph: 対象グラフ（通常は作業グラフ）
        output_path: メタデータJSONの出力パス
        packs: アップロード済みデータパック

    Returns:
        メタデータ辞書
    """
    metadata = {
        "generated_at": datetime.now(UTC).isoformat(),
        "pack_format": graph.pack_format,
        "statistics": {
            "total_nodes": len(graph.nodes),
            "total_edges": len(graph.edges),
            "tags": graph.stats.tags,
            "elements": graph.stats.elements,
            "parse_errors": graph.stats.errors,
        },
        "categories": graph.categories,
        "data_packs": [pack.summary() for pack in packs],
    }

    if output_path is not None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w", encoding="utf-8") as f:
            json.dump(metadata, f, indent=2, ensure_ascii=False)
        logger.info(f"Metadata written to {output_path}")

    return metadata
