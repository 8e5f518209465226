"""タグ依存グラフのコア処理群.

- 識別子の正規化（参照値 → category:namespace:name）
- ベース抽出（client jar → ベースグラフ）
- マージ（ベースグラフ + データパック → 作業グラフ）
- pack_format 互換性チェック
"""

from .compatibility import Compatibility, check_compatibility, compatibility_message, get_pack_format
from .extractor import extract_base_graph
from .graph import GraphEdge, GraphNode, TagGraph
from .identifiers import NodeKind, build_definition_id, resolve_reference
from .merge import rebuild_working_graph
from .packs import DataPack

__all__ = [
    "Compatibility",
    "DataPack",
    "GraphEdge",
    "GraphNode",
    "NodeKind",
    "TagGraph",
    "build_definition_id",
    "check_compatibility",
    "compatibility_message",
    "extract_base_graph",
    "get_pack_format",
    "rebuild_working_graph",
    "resolve_reference",
]
