"""リソース識別子の正規化.

生の参照値（`minecraft:oak_log` / `#minecraft:logs` / `oak_log`）を
グラフ上のノードID `category:namespace:name` に変換する純粋関数群。

- `#` 付きはタグ参照、それ以外は要素（ブロック/アイテム等）参照
- namespace 省略時は既定 namespace（`minecraft`）を補う
- category は常に「宣言側タグ」の category を使う（カテゴリ跨ぎ参照は表現しない）
"""

from __future__ import annotations

from enum import Enum

DEFAULT_NAMESPACE = "minecraft"
TAG_REFERENCE_MARKER = "#"


class NodeKind(str, Enum):
    """ノード種別."""

    TAG = "tag"
    ELEMENT = "element"


def with_default_namespace(raw: str, default_namespace: str = DEFAULT_NAMESPACE) -> str:
    """namespace が無ければ補う.

    Examples:
        >>> with_default_namespace("oak_log")
        'minecraft:oak_log'
        >>> with_default_namespace("create:gear")
        'create:gear'
    """
    if ":" in raw:
        return raw
    return f"{default_namespace}:{raw}"


def build_definition_id(namespace: str, category: str, name: str) -> str:
    """タグ定義ファイルのノードIDを組み立てる."""
    return f"{category}:{namespace}:{name}"


def resolve_reference(
    raw_value: str,
    declaring_category: str,
    default_namespace: str = DEFAULT_NAMESPACE,
) -> tuple[str, NodeKind]:
    """参照値をノードIDと種別に解決する.

    Args:
        raw_value: タグファイルの values に書かれた参照（`#` 付きならタグ）
        declaring_category: 参照を宣言したタグの category
        default_namespace: namespace 省略時の既定値

    Returns:
        (ノードID, NodeKind)

    Examples:
        >>> resolve_reference("#minecraft:logs", "block")
        ('block:minecraft:logs', <NodeKind.TAG: 'tag'>)
        >>> resolve_reference("oak_log", "block")
        ('block:minecraft:oak_log', <NodeKind.ELEMENT: 'element'>)
    """
    if raw_value.startswith(TAG_REFERENCE_MARKER):
        location = with_default_namespace(raw_value[len(TAG_REFERENCE_MARKER) :], default_namespace)
        return f"{declaring_category}:{location}", NodeKind.TAG

    location = with_default_namespace(raw_value, default_namespace)
    return f"{declaring_category}:{location}", NodeKind.ELEMENT


def node_label(node_id: str) -> str:
    """表示用ラベル（IDの最後の `:` 以降）."""
    return node_id.rsplit(":", 1)[-1]

