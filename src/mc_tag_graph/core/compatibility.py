"""データパックの pack_format 互換性チェック."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Compatibility(str, Enum):
    """互換性の判定結果."""

    COMPATIBLE = "compatible"
    VERSION_MISMATCH = "version_mismatch"
    NO_METADATA = "no_metadata"


@dataclass(frozen=True)
class CompatibilityMessage:
    title: str
    body: str
    color: str


def get_pack_format(pack_meta: object) -> int | None:
    """pack.mcmeta の内容から pack.pack_format を取り出す.

    整数以外（bool含む）や欠損は None。
    """
    if not isinstance(pack_meta, dict):
        return None
    pack = pack_meta.get("pack")
    if not isinstance(pack, dict):
        return None
    value = pack.get("pack_format")
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def check_compatibility(pack_format: int | None, expected_format: int | None) -> Compatibility:
    """pack_format を選択中バージョンの pack_format と比較する.

    Examples:
        >>> check_compatibility(10, 10)
        <Compatibility.COMPATIBLE: 'compatible'>
        >>> check_compatibility(None, 10)
        <Compatibility.NO_METADATA: 'no_metadata'>
        >>> check_compatibility(9, 10)
        <Compatibility.VERSION_MISMATCH: 'version_mismatch'>
    """
    if pack_format is None:
        return Compatibility.NO_METADATA
    # 比較対象が無ければ判定しようがない
    if expected_format is None:
        return Compatibility.COMPATIBLE
    if pack_format == expected_format:
        return Compatibility.COMPATIBLE
    return Compatibility.VERSION_MISMATCH


def compatibility_message(
    level: Compatibility,
    pack_format: int | None,
    expected_format: int | None,
) -> CompatibilityMessage | None:
    """警告表示用のタイトル/本文. COMPATIBLE は None."""
    if level is Compatibility.VERSION_MISMATCH:
        made_for = f"Pack Format {pack_format}"
        expected = (
            f"Selected Version: Pack Format {expected_format}"
            if expected_format is not None
            else "Selected Version: Unknown Format"
        )
        return CompatibilityMessage(
            title="Incompatible Pack Format",
            body=(
                f"{made_for}\n{expected}\n\n"
                "This data pack may not work correctly in the selected Minecraft version."
            ),
            color="orange",
        )

    if level is Compatibility.NO_METADATA:
        return CompatibilityMessage(
            title="Cannot Verify Version",
            body=(
                "This data pack is missing pack.mcmeta or has an invalid pack_format value.\n\n"
                "Cannot determine version compatibility."
            ),
            color="yellow",
        )

    return None
