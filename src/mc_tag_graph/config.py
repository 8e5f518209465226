"""実行時設定.

YAML で既定値を上書きできる。

YAML形式:
    default_namespace: minecraft
    batch_size: 100
    palette:
      - "#3b82f6"
      - "#10b981"
    manifest_url: https://piston-meta.mojang.com/mc/game/version_manifest_v2.json
    download_timeout: 300
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml
from loguru import logger

from mc_tag_graph.core.extractor import DEFAULT_BATCH_SIZE
from mc_tag_graph.core.identifiers import DEFAULT_NAMESPACE
from mc_tag_graph.core.packs import DATAPACK_COLORS

MANIFEST_URL = "https://piston-meta.mojang.com/mc/game/version_manifest_v2.json"


@dataclass(frozen=True)
class GraphConfig:
    default_namespace: str = DEFAULT_NAMESPACE
    batch_size: int = DEFAULT_BATCH_SIZE
    palette: tuple[str, ...] = DATAPACK_COLORS
    manifest_url: str = MANIFEST_URL
    download_timeout: float = 300.0

    def __post_init__(self) -> None:
        if not self.default_namespace:
            raise ValueError("default_namespace must not be empty")
        if isinstance(self.batch_size, bool) or not isinstance(self.batch_size, int) or self.batch_size <= 0:
            raise ValueError(f"batch_size must be a positive integer, got {self.batch_size!r}")
        if (
            not isinstance(self.palette, tuple)
            or not self.palette
            or not all(isinstance(c, str) and c for c in self.palette)
        ):
            raise ValueError(f"palette must be a non-empty list of color strings, got {self.palette!r}")
        if not isinstance(self.download_timeout, int | float) or self.download_timeout <= 0:
            raise ValueError(f"download_timeout must be positive, got {self.download_timeout!r}")


def load_config(config_path: Path | str | None = None) -> GraphConfig:
    """YAMLファイルから設定を読み込む.

    Args:
        config_path: 設定ファイルのパス（None なら既定値）

    Returns:
        設定オブジェクト

    Raises:
        FileNotFoundError: ファイルが存在しない場合
        ValueError: YAML形式が不正、未知のキー、値が不正な場合
    """
    if config_path is None:
        return GraphConfig()

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in config file: {config_path}"
        raise ValueError(msg) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"Config file must contain a mapping, got {type(data).__name__}"
        raise ValueError(msg)

    known = {f.name for f in fields(GraphConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        msg = f"Unknown config keys in {config_path}: {unknown}. Valid keys: {sorted(known)}"
        raise ValueError(msg)

    if "palette" in data and isinstance(data["palette"], list):
        data["palette"] = tuple(data["palette"])

    config = replace(GraphConfig(), **data)
    logger.info(f"Loaded config from {config_path}")
    return config
