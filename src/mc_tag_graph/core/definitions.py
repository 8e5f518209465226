"""タグ定義ファイル（data/<namespace>/tags/.../<name>.json）の解析.

ベース抽出とデータパック読み込みでパスの解釈が異なる点に注意:

- ベース: `<category-path>` は複数セグメント可（最後のセグメントのみが name）
- データパック: `<category>` は1セグメント固定（残りは全て name）

深い階層のタグ（worldgen/biome 等）で ID が変わるため、統一はしない。
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from .exceptions import EntryParseError
from .identifiers import build_definition_id

BASE_TAG_PATTERN = re.compile(r"^data/(?P<namespace>[^/]+)/tags/(?P<category>.+)/(?P<name>[^/]+)\.json$")
PACK_TAG_PATTERN = re.compile(r"^data/(?P<namespace>[^/]+)/tags/(?P<category>[^/]+)/(?P<name>.+)\.json$")


@dataclass(frozen=True)
class PlainReference:
    """文字列のみの参照（`"minecraft:oak_log"`）."""

    id: str


@dataclass(frozen=True)
class AnnotatedReference:
    """オブジェクト形式の参照（`{"id": ..., "required": false}`）."""

    id: str
    required: bool | None = None


Reference = PlainReference | AnnotatedReference


@dataclass
class TagDefinition:
    """1つのタグファイルの内容."""

    path: str
    namespace: str
    category: str
    name: str
    replace: bool = False
    values: list[Reference] = field(default_factory=list)
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return build_definition_id(self.namespace, self.category, self.name)


def parse_reference(value: object, path: str = "<unknown>") -> Reference:
    """values の1要素を参照型に変換する.

    Raises:
        EntryParseError: 文字列でも `id` 付きオブジェクトでもない場合
    """
    if isinstance(value, str):
        return PlainReference(value)

    if isinstance(value, dict):
        ref_id = value.get("id")
        if not isinstance(ref_id, str):
            raise EntryParseError(path, f"reference object without string 'id': {value!r}")
        required = value.get("required")
        if required is not None and not isinstance(required, bool):
            raise EntryParseError(path, f"'required' must be a boolean: {value!r}")
        return AnnotatedReference(ref_id, required)

    raise EntryParseError(path, f"unsupported value type {type(value).__name__}: {value!r}")


def match_tag_path(path: str, pattern: re.Pattern[str]) -> tuple[str, str, str] | None:
    """エントリパスから (namespace, category, name) を取り出す. 一致しなければ None."""
    m = pattern.match(path)
    if m is None:
        return None
    return m.group("namespace"), m.group("category"), m.group("name")


def parse_tag_definition(path: str, text: str, pattern: re.Pattern[str]) -> TagDefinition:
    """タグファイル本文を TagDefinition に変換する.

    Args:
        path: エントリパス
        text: JSON文字列
        pattern: BASE_TAG_PATTERN または PACK_TAG_PATTERN

    Raises:
        EntryParseError: パスが一致しない / JSON不正 / スキーマ不正
    """
    matched = match_tag_path(path, pattern)
    if matched is None:
        raise EntryParseError(path, "path does not match tag file layout")
    namespace, category, name = matched

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise EntryParseError(path, f"invalid JSON ({e.msg} at line {e.lineno})") from e
    except RecursionError as e:
        raise EntryParseError(path, "JSON nested too deeply") from e

    if not isinstance(payload, dict):
        raise EntryParseError(path, f"root must be a JSON object, got {type(payload).__name__}")

    replace = payload.get("replace", False)
    if not isinstance(replace, bool):
        raise EntryParseError(path, f"'replace' must be a boolean, got {replace!r}")

    raw_values = payload.get("values") or []
    if not isinstance(raw_values, list):
        raise EntryParseError(path, f"'values' must be an array, got {type(raw_values).__name__}")

    return TagDefinition(
        path=path,
        namespace=namespace,
        category=category,
        name=name,
        replace=replace,
        values=[parse_reference(v, path) for v in raw_values],
        payload=payload,
    )
