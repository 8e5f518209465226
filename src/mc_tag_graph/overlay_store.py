"""データパック（オーバーレイ）の読み込みと管理.

upload() は呼び出し側に例外を投げない。失敗は全てエラー状態の DataPack として登録される。
zip の中に zip が入っている場合（複数パックの同梱配布）は1階層だけ展開する。
"""

from __future__ import annotations

import json
import re
import uuid
from collections.abc import Iterable

from loguru import logger

from mc_tag_graph.adapters.base_adapter import ArchiveAdapter
from mc_tag_graph.adapters.zip_adapter import open_archive
from mc_tag_graph.core.compatibility import Compatibility, get_pack_format
from mc_tag_graph.core.definitions import PACK_TAG_PATTERN, TagDefinition, parse_tag_definition
from mc_tag_graph.core.exceptions import (
    ArchiveOpenError,
    EntryParseError,
    MissingPackMetadataError,
    NoDefinitionsFoundError,
    TagGraphError,
)
from mc_tag_graph.core.packs import DATAPACK_COLORS, DataPack

PACK_METADATA_ENTRY = "pack.mcmeta"

_ZIP_SUFFIX = re.compile(r"\.zip$", re.IGNORECASE)


def pack_name_from_path(path: str) -> str:
    """`dir/My Pack.zip` → `My Pack`."""
    return _ZIP_SUFFIX.sub("", path.rsplit("/", 1)[-1])


def extract_pack_definitions(archive: ArchiveAdapter) -> dict[str, TagDefinition]:
    """データパック用パターン（category は1セグメント）でタグ定義を集める.

    解析できないファイルは警告を出してスキップする。
    """
    definitions: dict[str, TagDefinition] = {}
    for path in archive.list_entries():
        if not PACK_TAG_PATTERN.match(path):
            continue
        try:
            text = archive.read_entry(path)
            definition = parse_tag_definition(path, text, PACK_TAG_PATTERN)
        except UnicodeDecodeError as e:
            logger.warning(f"Failed to parse tag at {path}: not UTF-8 text ({e.reason})")
            continue
        except (EntryParseError, ArchiveOpenError) as e:
            logger.warning(f"Failed to parse tag at {path}: {e.reason}")
            continue
        definitions[definition.id] = definition
    return definitions


def read_pack_format(archive: ArchiveAdapter) -> int:
    """pack.mcmeta から pack_format を読む.

    Raises:
        MissingPackMetadataError: pack.mcmeta が無い / 読めない / JSON不正 / pack_format が整数でない
    """
    if not archive.has_entry(PACK_METADATA_ENTRY):
        raise MissingPackMetadataError(f"{PACK_METADATA_ENTRY} not found")
    try:
        meta = json.loads(archive.read_entry(PACK_METADATA_ENTRY))
    except ArchiveOpenError as e:
        raise MissingPackMetadataError(f"unreadable {PACK_METADATA_ENTRY}: {e.reason}") from e
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MissingPackMetadataError(f"invalid {PACK_METADATA_ENTRY}: {e}") from e
    except RecursionError as e:
        raise MissingPackMetadataError(f"{PACK_METADATA_ENTRY} nested too deeply") from e

    pack_format = get_pack_format(meta)
    if pack_format is None:
        raise MissingPackMetadataError("pack.pack_format is missing or not an integer")
    return pack_format


def extract_version_info(archive: ArchiveAdapter) -> tuple[int | None, Compatibility | None]:
    """(pack_format, version_warning). メタデータ欠損は NO_METADATA に落とす."""
    try:
        return read_pack_format(archive), None
    except MissingPackMetadataError as e:
        logger.warning(str(e))
        return None, Compatibility.NO_METADATA


class OverlayStore:
    """アップロード済みデータパックの保持（アップロード順）.

    toggle/remove/recolor/clear の後は、呼び出し側で作業グラフを作り直すこと。
    """

    def __init__(self, palette: Iterable[str] = DATAPACK_COLORS) -> None:
        self._palette = tuple(palette)
        if not self._palette:
            raise ValueError("palette must contain at least one color")
        self._packs: dict[str, DataPack] = {}
        self._color_index = 0

    def __len__(self) -> int:
        return len(self._packs)

    def __contains__(self, pack_id: object) -> bool:
        return pack_id in self._packs

    # ------------------------------------------------------------------
    # アップロード
    # ------------------------------------------------------------------
    def upload(self, file_bytes: bytes, file_name: str) -> DataPack | list[DataPack]:
        """データパックを読み込んで登録する.

        Args:
            file_bytes: zip のバイト列
            file_name: 元のファイル名（パック名に使う）

        Returns:
            通常は DataPack 1件。同梱 zip があった場合はそのパック一覧。
            失敗時はエラー状態の DataPack。
        """
        name = pack_name_from_path(file_name)
        try:
            archive = open_archive(file_bytes, file_name)
            nested = [path for path in archive.list_entries() if path.endswith(".zip")]
            if nested:
                logger.info(f"Found {len(nested)} nested data packs in {file_name}")
                packs = self._upload_nested(archive, nested)
                if not packs:
                    raise NoDefinitionsFoundError(name, "No data packs found")
                return packs

            return self._register(archive, name)
        except TagGraphError as e:
            return self._register_error(name, str(e))

    def _upload_nested(self, archive: ArchiveAdapter, nested_paths: list[str]) -> list[DataPack]:
        uploaded: list[DataPack] = []
        for zip_path in nested_paths:
            try:
                nested_archive = open_archive(archive.read_bytes(zip_path), zip_path)
                uploaded.append(self._register(nested_archive, pack_name_from_path(zip_path)))
            except TagGraphError as e:
                logger.warning(f"Failed to process nested pack {zip_path}: {e}")
        return uploaded

    def _register(self, archive: ArchiveAdapter, name: str) -> DataPack:
        definitions = extract_pack_definitions(archive)
        if not definitions:
            raise NoDefinitionsFoundError(name)
        pack_format, version_warning = extract_version_info(archive)

        pack = DataPack(
            id=self._generate_id(),
            name=name,
            color=self._next_color(),
            enabled=True,
            tag_definitions=definitions,
            pack_format=pack_format,
            version_warning=version_warning,
        )
        self._packs[pack.id] = pack
        logger.info(f"Uploaded data pack {name!r}: {len(definitions)} tag definitions")
        return pack

    def _register_error(self, name: str, message: str) -> DataPack:
        pack = DataPack(
            id=self._generate_id(),
            name=name,
            color=self._next_color(),
            enabled=False,
            error=message or "Unknown error",
        )
        self._packs[pack.id] = pack
        logger.warning(f"Data pack {name!r} failed to load: {pack.error}")
        return pack

    # ------------------------------------------------------------------
    # 管理
    # ------------------------------------------------------------------
    def get(self, pack_id: str) -> DataPack | None:
        return self._packs.get(pack_id)

    def toggle(self, pack_id: str) -> bool:
        """有効/無効を反転して新しい状態を返す. 存在しなければ False."""
        pack = self._packs.get(pack_id)
        if pack is None:
            logger.warning(f"Unknown data pack: {pack_id}")
            return False
        pack.enabled = not pack.enabled
        return pack.enabled

    def remove(self, pack_id: str) -> bool:
        return self._packs.pop(pack_id, None) is not None

    def recolor(self, pack_id: str, color: str) -> bool:
        pack = self._packs.get(pack_id)
        if pack is None:
            logger.warning(f"Unknown data pack: {pack_id}")
            return False
        pack.color = color
        return True

    def list_all(self) -> list[DataPack]:
        return list(self._packs.values())

    def list_enabled(self) -> list[DataPack]:
        return [pack for pack in self._packs.values() if pack.enabled]

    def clear(self) -> None:
        self._packs.clear()
        self._color_index = 0

    def _generate_id(self) -> str:
        return f"dp_{uuid.uuid4().hex[:12]}"

    def _next_color(self) -> str:
        color = self._palette[self._color_index % len(self._palette)]
        self._color_index += 1
        return color
