"""ベースグラフへのデータパック重ね合わせ.

作業グラフは毎回ベースのディープコピーから作り直す（差分パッチはしない）。

- 適用順はアップロード順
- replace=true の定義は、そのタグから出るエッジを一度全て消してから自身の values を張る
- replace=false の定義は既存エッジに追記される（複数パック分が蓄積）
- 流入エッジ（他タグ → このタグ）は replace でも触らない
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from .definitions import TagDefinition
from .graph import PackAttribution, ReplacementMark, TagGraph
from .identifiers import DEFAULT_NAMESPACE, NodeKind, resolve_reference
from .packs import DataPack


def _apply_definition(
    graph: TagGraph,
    pack: DataPack,
    definition: TagDefinition,
    default_namespace: str,
) -> None:
    attribution = PackAttribution(pack.id, pack.color)
    source_id = definition.id

    # 1) 定義ノード（プレースホルダーなら昇格）
    node, created = graph.add_node(
        source_id,
        NodeKind.TAG,
        definition.category,
        path=definition.path,
        payload=definition.payload,
    )
    if created or node.attribution is None or definition.replace:
        node.attribution = attribution

    # 2) replace: 既存の流出エッジを破棄して payload を差し替える
    if definition.replace:
        removed = graph.remove_outbound_edges(source_id)
        node.replaced_by = ReplacementMark(pack.name, pack.color)
        node.payload = definition.payload
        logger.debug(f"{pack.name}: replaced {source_id} ({len(removed)} edge(s) dropped)")

    # 3) values の参照先ノードとエッジ
    for ref in definition.values:
        target_id, kind = resolve_reference(ref.id, definition.category, default_namespace)
        target, target_created = graph.add_node(target_id, kind, definition.category)
        if target_created:
            target.attribution = attribution
        graph.add_edge(source_id, target_id)


def rebuild_working_graph(
    base: TagGraph,
    enabled_packs: Iterable[DataPack],
    default_namespace: str = DEFAULT_NAMESPACE,
) -> TagGraph:
    """ベースグラフ + 有効なデータパックから作業グラフを作る.

    Args:
        base: ベースグラフ（変更しない）
        enabled_packs: 有効なデータパック（アップロード順）
        default_namespace: namespace 省略時の既定値

    Returns:
        新しい作業グラフ
    """
    working = base.clone()
    packs = list(enabled_packs)
    if not packs:
        return working

    for pack in packs:
        for definition in pack.tag_definitions.values():
            _apply_definition(working, pack, definition, default_namespace)

    logger.info(
        f"Merged {len(packs)} data pack(s): {len(working.nodes)} nodes "
        f"(+{len(working.nodes) - len(base.nodes)}), {len(working.edges)} edges"
    )
    return working
