"""タグ依存グラフのデータモデル.

- ノードIDはグラフ内で一意（プレースホルダーは定義が来たらその場で昇格）
- エッジは `source->target` キーで一意（再追加は no-op）
- エッジの両端ノードは必ず存在する（存在しない端点は KeyError）

ベースグラフはスナップショットとして扱い、マージ時は clone() した複製のみを変更する。
"""

from __future__ import annotations

import copy
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from .identifiers import NodeKind, node_label

UNKNOWN_CATEGORY = "unknown"


@dataclass(frozen=True)
class PackAttribution:
    """ノードを持ち込んだデータパック."""

    pack_id: str
    color: str


@dataclass(frozen=True)
class ReplacementMark:
    """replace=true でノードを上書きしたデータパック."""

    pack_name: str
    color: str


@dataclass
class GraphNode:
    id: str
    kind: NodeKind
    category: str
    path: str | None = None
    payload: dict[str, Any] | None = None
    attribution: PackAttribution | None = None
    replaced_by: ReplacementMark | None = None

    @property
    def label(self) -> str:
        return node_label(self.id)

    @property
    def is_placeholder(self) -> bool:
        return self.path is None

    def as_element(self) -> dict[str, Any]:
        """描画側に渡すノードレコード."""
        record: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "kind": self.kind.value,
            "category": self.category,
        }
        if self.path is not None:
            record["path"] = self.path
        if self.payload is not None:
            record["payload"] = self.payload
        if self.attribution is not None:
            record["attribution"] = {"packId": self.attribution.pack_id, "packColor": self.attribution.color}
        if self.replaced_by is not None:
            record["replacedBy"] = {"packName": self.replaced_by.pack_name, "packColor": self.replaced_by.color}
        return record


def edge_key(source_id: str, target_id: str) -> str:
    return f"{source_id}->{target_id}"


@dataclass(frozen=True)
class GraphEdge:
    source_id: str
    target_id: str

    @property
    def key(self) -> str:
        return edge_key(self.source_id, self.target_id)

    def as_element(self) -> dict[str, str]:
        return {"id": self.key, "sourceId": self.source_id, "targetId": self.target_id}


@dataclass
class GraphStats:
    tags: int = 0
    elements: int = 0
    errors: int = 0


@dataclass(frozen=True)
class NodeRelations:
    """ノードの子（参照先）と親（参照元）."""

    children: list[str]
    parents: list[str]


@dataclass
class TagGraph:
    """ノードとエッジの集合（挿入順を保持）."""

    nodes: dict[str, GraphNode] = field(default_factory=dict)
    edges: dict[str, GraphEdge] = field(default_factory=dict)
    stats: GraphStats = field(default_factory=GraphStats)
    category_set: set[str] = field(default_factory=set)
    pack_format: int | None = None

    # ------------------------------------------------------------------
    # 構築
    # ------------------------------------------------------------------
    def add_node(
        self,
        node_id: str,
        kind: NodeKind,
        category: str,
        path: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> tuple[GraphNode, bool]:
        """ノードを登録する.

        既存がプレースホルダーで、今回の登録が定義パスを持つ場合はその場で昇格する
        （レコードは増やさない）。

        Returns:
            (ノード, 新規作成されたか)
        """
        node = self.nodes.get(node_id)
        if node is None:
            node = GraphNode(id=node_id, kind=kind, category=category, path=path, payload=payload)
            self.nodes[node_id] = node
            self._count(kind, +1)
            self._observe_category(category)
            return node, True

        if path is not None and node.path is None:
            if node.kind != kind:
                self._count(node.kind, -1)
                self._count(kind, +1)
            node.path = path
            if payload is not None:
                node.payload = payload
            node.category = category
            node.kind = kind
            self._observe_category(category)
        return node, False

    def add_edge(self, source_id: str, target_id: str) -> bool:
        """エッジを追加する. 既存キーなら False.

        Raises:
            KeyError: 端点ノードが存在しない場合
        """
        for endpoint in (source_id, target_id):
            if endpoint not in self.nodes:
                raise KeyError(f"Edge endpoint is not a node: {endpoint}")

        key = edge_key(source_id, target_id)
        if key in self.edges:
            return False
        self.edges[key] = GraphEdge(source_id, target_id)
        return True

    def remove_outbound_edges(self, source_id: str) -> list[GraphEdge]:
        """source_id から出るエッジを全て削除して返す."""
        removed = [edge for edge in self.edges.values() if edge.source_id == source_id]
        for edge in removed:
            del self.edges[edge.key]
        return removed

    def clone(self) -> TagGraph:
        return copy.deepcopy(self)

    def _count(self, kind: NodeKind, delta: int) -> None:
        if kind is NodeKind.TAG:
            self.stats.tags += delta
        else:
            self.stats.elements += delta

    def _observe_category(self, category: str) -> None:
        if category and category != UNKNOWN_CATEGORY:
            self.category_set.add(category)

    # ------------------------------------------------------------------
    # 参照
    # ------------------------------------------------------------------
    @property
    def categories(self) -> list[str]:
        return sorted(self.category_set)

    def get(self, node_id: str) -> GraphNode | None:
        return self.nodes.get(node_id)

    def outbound(self, node_id: str) -> list[GraphEdge]:
        return [edge for edge in self.edges.values() if edge.source_id == node_id]

    def inbound(self, node_id: str) -> list[GraphEdge]:
        return [edge for edge in self.edges.values() if edge.target_id == node_id]

    def relations(self, node_id: str) -> NodeRelations:
        """詳細パネル用の子/親一覧.

        Raises:
            KeyError: ノードが存在しない場合
        """
        if node_id not in self.nodes:
            raise KeyError(node_id)
        return NodeRelations(
            children=[edge.target_id for edge in self.outbound(node_id)],
            parents=[edge.source_id for edge in self.inbound(node_id)],
        )

    def search(self, term: str, kind: NodeKind | None = None) -> list[str]:
        """IDに term を含むノード（大文字小文字無視）をID順で返す."""
        needle = term.strip().lower()
        hits = [
            node.id
            for node in self.nodes.values()
            if needle in node.id.lower() and (kind is None or node.kind is kind)
        ]
        return sorted(hits)

    def iter_elements(self) -> Iterator[dict[str, Any]]:
        for node in self.nodes.values():
            yield node.as_element()
        for edge in self.edges.values():
            yield edge.as_element()

    def export_elements(self) -> list[dict[str, Any]]:
        """ノード → エッジの順に並べたフラットなレコード列."""
        return list(self.iter_elements())

