"""データパック（オーバーレイ）のレコード."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from .compatibility import Compatibility
from .definitions import TagDefinition

DATAPACK_COLORS: tuple[str, ...] = (
    "#3b82f6",
    "#10b981",
    "#f59e0b",
    "#ef4444",
    "#8b5cf6",
    "#ec4899",
    "#14b8a6",
    "#f97316",
)


@dataclass
class DataPack:
    """アップロードされたデータパック.

    error が設定されているパックはエラー状態（enabled=False、定義なし）。
    """

    id: str
    name: str
    color: str
    enabled: bool = True
    tag_definitions: dict[str, TagDefinition] = field(default_factory=dict)
    pack_format: int | None = None
    version_warning: Compatibility | None = None
    error: str | None = None
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_valid(self) -> bool:
        return self.error is None

    def summary(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "enabled": self.enabled,
            "tag_count": len(self.tag_definitions),
            "pack_format": self.pack_format,
            "error": self.error,
            "uploaded_at": self.uploaded_at.isoformat(),
        }
