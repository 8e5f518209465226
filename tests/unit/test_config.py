"""Unit tests for YAML configuration loading."""

from pathlib import Path

import pytest

from mc_tag_graph.config import GraphConfig, load_config
from mc_tag_graph.core.packs import DATAPACK_COLORS


class TestLoadConfig:
    def test_defaults_without_path(self) -> None:
        config = load_config(None)

        assert config == GraphConfig()
        assert config.default_namespace == "minecraft"
        assert config.batch_size == 100
        assert config.palette == DATAPACK_COLORS

    def test_load_valid_yaml(self, tmp_path: Path) -> None:
        """YAMLで既定値を上書きできること."""
        config_file = tmp_path / "config.yml"
        config_file.write_text(
            "batch_size: 25\npalette:\n  - '#000000'\n  - '#ffffff'\n",
            encoding="utf-8",
        )

        config = load_config(config_file)

        assert config.batch_size == 25
        assert config.palette == ("#000000", "#ffffff")
        assert config.default_namespace == "minecraft"

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yml"
        config_file.write_text("", encoding="utf-8")

        assert load_config(config_file) == GraphConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yml"
        config_file.write_text("batch_size: [1, 2\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(config_file)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValueError, match="must contain a mapping"):
            load_config(config_file)

    def test_unknown_keys(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yml"
        config_file.write_text("batchsize: 10\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Unknown config keys"):
            load_config(config_file)

    def test_invalid_batch_size(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yml"
        config_file.write_text("batch_size: 0\n", encoding="utf-8")

        with pytest.raises(ValueError, match="batch_size must be a positive integer"):
            load_config(config_file)

    def test_empty_palette(self) -> None:
        with pytest.raises(ValueError, match="palette"):
            GraphConfig(palette=())
