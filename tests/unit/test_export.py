"""Unit tests for graph export."""

import json
from pathlib import Path

import polars as pl

from mc_tag_graph.core.definitions import PlainReference, TagDefinition
from mc_tag_graph.core.extractor import register_definition
from mc_tag_graph.core.graph import PackAttribution, TagGraph
from mc_tag_graph.core.packs import DataPack
from mc_tag_graph.export import (
    category_summary,
    export_graph_parquet,
    generate_graph_metadata,
    graph_to_frames,
)


def _graph() -> TagGraph:
    graph = TagGraph(pack_format=61)
    register_definition(
        graph,
        TagDefinition(
            path="data/minecraft/tags/block/logs.json",
            namespace="minecraft",
            category="block",
            name="logs",
            values=[PlainReference("oak_log"), PlainReference("#minecraft:stripped_logs")],
            payload={"values": ["oak_log", "#minecraft:stripped_logs"]},
        ),
    )
    graph.nodes["block:minecraft:oak_log"].attribution = PackAttribution("dp_1", "#3b82f6")
    return graph


class TestGraphToFrames:
    def test_frames(self) -> None:
        nodes_df, edges_df = graph_to_frames(_graph())

        assert nodes_df.height == 3
        assert edges_df.height == 2
        assert nodes_df.filter(pl.col("id") == "block:minecraft:oak_log")["attribution_pack"].to_list() == ["dp_1"]
        assert nodes_df.filter(pl.col("kind") == "tag")["id"].to_list() == [
            "block:minecraft:logs",
            "block:minecraft:stripped_logs",
        ]
        assert edges_df["source"].unique().to_list() == ["block:minecraft:logs"]

    def test_empty_graph(self) -> None:
        nodes_df, edges_df = graph_to_frames(TagGraph())

        assert nodes_df.is_empty()
        assert "attribution_pack" in nodes_df.columns
        assert edges_df.columns == ["id", "source", "target"]

    def test_category_summary(self) -> None:
        summary = category_summary(_graph())

        assert summary.to_dicts() == [
            {"category": "block", "kind": "element", "count": 1},
            {"category": "block", "kind": "tag", "count": 2},
        ]


class TestWriters:
    def test_export_graph_parquet(self, tmp_path: Path) -> None:
        paths = export_graph_parquet(_graph(), tmp_path / "out")

        assert [p.name for p in paths] == ["nodes.parquet", "edges.parquet"]
        assert pl.read_parquet(paths[1]).height == 2

    def test_generate_graph_metadata(self, tmp_path: Path) -> None:
        output = tmp_path / "meta" / "graph.json"
        pack = DataPack(id="dp_1", name="Pack", color="#3b82f6")

        metadata = generate_graph_metadata(_graph(), output, [pack])

        written = json.loads(output.read_text(encoding="utf-8"))
        assert written["statistics"] == metadata["statistics"]
        assert metadata["statistics"]["tags"] == 2
        assert metadata["statistics"]["elements"] == 1
        assert metadata["pack_format"] == 61
        assert metadata["categories"] == ["block"]
        assert written["data_packs"][0]["name"] == "Pack"
