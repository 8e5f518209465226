"""mc_tag_graph: Minecraft タグ依存グラフの抽出とデータパック重ね合わせ."""

__version__ = "0.1.0"
