"""グラフセッション（オーケストレーター）.

ベースグラフ・データパック一覧・作業グラフを1つのセッションが所有する。
データパックに影響する操作（アップロード/削除/有効切替/色変更）の後は、
ベースのコピーから作業グラフを丸ごと作り直す。
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

import httpx
from loguru import logger

from mc_tag_graph.adapters.base_adapter import ArchiveAdapter
from mc_tag_graph.adapters.zip_adapter import open_archive, open_archive_file
from mc_tag_graph.config import GraphConfig, load_config
from mc_tag_graph.core.compatibility import (
    Compatibility,
    CompatibilityMessage,
    check_compatibility,
    compatibility_message,
)
from mc_tag_graph.core.extractor import ProgressCallback, extract_base_graph
from mc_tag_graph.core.graph import TagGraph
from mc_tag_graph.core.merge import rebuild_working_graph
from mc_tag_graph.core.packs import DataPack
from mc_tag_graph.export import export_graph_parquet, generate_graph_metadata
from mc_tag_graph.overlay_store import OverlayStore
from mc_tag_graph.versions import (
    download_archive,
    fetch_archive_url,
    fetch_version_manifest,
    find_version,
    read_archive_pack_format,
)


class GraphSession:
    """1つのゲームバージョンに対するタググラフの状態."""

    def __init__(self, config: GraphConfig | None = None) -> None:
        self.config = config or GraphConfig()
        self.store = OverlayStore(self.config.palette)
        self._base: TagGraph = TagGraph()
        self._working: TagGraph = TagGraph()
        self._base_loaded = False

    @property
    def base(self) -> TagGraph:
        """ベースグラフ（変更しないこと）."""
        return self._base

    @property
    def working(self) -> TagGraph:
        return self._working

    @property
    def base_loaded(self) -> bool:
        return self._base_loaded

    @property
    def expected_pack_format(self) -> int | None:
        return self._base.pack_format

    # ------------------------------------------------------------------
    # ベース
    # ------------------------------------------------------------------
    async def load_base(
        self,
        archive: ArchiveAdapter,
        on_progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> TagGraph:
        """ベースアーカイブからベースグラフを作り、作業グラフを作り直す.

        キャンセル・失敗時は直前のベースグラフがそのまま残る。
        """
        graph = await extract_base_graph(
            archive,
            on_progress,
            batch_size=self.config.batch_size,
            default_namespace=self.config.default_namespace,
            cancel_event=cancel_event,
        )
        graph.pack_format = read_archive_pack_format(archive)
        self._base = graph
        self._base_loaded = True
        self.rebuild()
        return self._base

    # ------------------------------------------------------------------
    # データパック
    # ------------------------------------------------------------------
    def upload_pack(self, file_bytes: bytes, file_name: str) -> list[DataPack]:
        result = self.store.upload(file_bytes, file_name)
        packs = result if isinstance(result, list) else [result]
        self.rebuild()
        return packs

    def toggle_pack(self, pack_id: str) -> bool:
        enabled = self.store.toggle(pack_id)
        self.rebuild()
        return enabled

    def remove_pack(self, pack_id: str) -> bool:
        removed = self.store.remove(pack_id)
        self.rebuild()
        return removed

    def recolor_pack(self, pack_id: str, color: str) -> bool:
        updated = self.store.recolor(pack_id, color)
        self.rebuild()
        return updated

    def clear_packs(self) -> None:
        self.store.clear()
        self.rebuild()

    def rebuild(self) -> TagGraph:
        """作業グラフを作り直す（新しいグラフを作ってから差し替える）."""
        self._working = rebuild_working_graph(
            self._base,
            self.store.list_enabled(),
            self.config.default_namespace,
        )
        return self._working

    # ------------------------------------------------------------------
    # 互換性
    # ------------------------------------------------------------------
    def compatibility(self, pack_id: str) -> Compatibility:
        """pack_id のデータパックと現在のベースとの互換性.

        Raises:
            KeyError: 存在しないパック
        """
        return check_compatibility(self._require_pack(pack_id).pack_format, self.expected_pack_format)

    def compatibility_message(self, pack_id: str) -> CompatibilityMessage | None:
        pack = self._require_pack(pack_id)
        level = check_compatibility(pack.pack_format, self.expected_pack_format)
        return compatibility_message(level, pack.pack_format, self.expected_pack_format)

    def _require_pack(self, pack_id: str) -> DataPack:
        pack = self.store.get(pack_id)
        if pack is None:
            raise KeyError(pack_id)
        return pack


def _log_progress(message: str, percent: int) -> None:
    logger.debug(f"[{percent:3d}%] {message}")


def _load_base_archive(args: argparse.Namespace, config: GraphConfig) -> ArchiveAdapter:
    if args.jar is not None:
        return open_archive_file(args.jar)

    with httpx.Client(timeout=config.download_timeout) as client:
        versions = fetch_version_manifest(config.manifest_url, client=client)
        version = find_version(versions, args.version)
        logger.info(f"Loading version {version.id} ({version.kind})")
        jar_url = fetch_archive_url(version.detail_url, client=client)
        data = download_archive(jar_url, _log_progress, client=client, timeout=config.download_timeout)
    return open_archive(data, jar_url)


def run(args: argparse.Namespace) -> GraphSession:
    config = load_config(args.config)
    session = GraphSession(config)

    archive = _load_base_archive(args, config)
    asyncio.run(session.load_base(archive, _log_progress))

    for pack_path in args.pack:
        pack_path = Path(pack_path)
        for pack in session.upload_pack(pack_path.read_bytes(), pack_path.name):
            if not pack.is_valid:
                logger.warning(f"{pack.name}: {pack.error}")
                continue
            message = session.compatibility_message(pack.id)
            if message is not None:
                logger.warning(f"{pack.name}: {message.title} ({message.body.splitlines()[0]})")

    working = session.working
    logger.info(
        f"Working graph: {working.stats.tags} tags, {working.stats.elements} elements, "
        f"{len(working.edges)} edges, categories={working.categories}"
    )

    if args.export_dir is not None:
        export_graph_parquet(working, args.export_dir)
    if args.metadata is not None:
        generate_graph_metadata(working, args.metadata, session.store.list_all())
    return session


def main() -> None:
    """CLI エントリポイント."""
    parser = argparse.ArgumentParser(description="Build a Minecraft tag dependency graph")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--jar",
        type=Path,
        help="Path to a local client jar",
    )
    source.add_argument(
        "--version",
        type=str,
        help="Version id to download from the version manifest ('latest' for the newest snapshot)",
    )
    parser.add_argument(
        "--pack",
        type=Path,
        action="append",
        default=[],
        help="Data pack zip to overlay (repeatable, applied in order)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file",
    )
    parser.add_argument(
        "--export-dir",
        type=Path,
        default=None,
        help="Directory for nodes.parquet / edges.parquet",
    )
    parser.add_argument(
        "--metadata",
        type=Path,
        default=None,
        help="Output path for metadata JSON",
    )

    args = parser.parse_args()
    run(args)


if __name__ == "__main__":
    main()
