"""Unit tests for resource identifier resolution."""

from mc_tag_graph.core.identifiers import (
    NodeKind,
    build_definition_id,
    node_label,
    resolve_reference,
    with_default_namespace,
)


class TestResolveReference:
    """resolve_reference関数のテスト."""

    def test_tag_reference_with_namespace(self) -> None:
        """`#` 付き参照はタグとして解決されること."""
        assert resolve_reference("#minecraft:logs", "block") == ("block:minecraft:logs", NodeKind.TAG)

    def test_tag_reference_without_namespace(self) -> None:
        """namespace 省略のタグ参照に既定 namespace が補われること."""
        assert resolve_reference("#logs", "item") == ("item:minecraft:logs", NodeKind.TAG)

    def test_element_reference(self) -> None:
        """`#` 無しは要素として解決されること."""
        assert resolve_reference("minecraft:oak_log", "block") == ("block:minecraft:oak_log", NodeKind.ELEMENT)

    def test_element_reference_without_namespace(self) -> None:
        assert resolve_reference("oak_log", "block") == ("block:minecraft:oak_log", NodeKind.ELEMENT)

    def test_foreign_namespace_is_kept(self) -> None:
        """minecraft 以外の namespace はそのまま残ること."""
        assert resolve_reference("#create:gears", "item") == ("item:create:gears", NodeKind.TAG)

    def test_declaring_category_scopes_the_target(self) -> None:
        """参照先の category は宣言側タグの category になること."""
        node_id, _ = resolve_reference("minecraft:water", "fluid")
        assert node_id.startswith("fluid:")

    def test_custom_default_namespace(self) -> None:
        assert resolve_reference("gear", "item", "create") == ("item:create:gear", NodeKind.ELEMENT)


class TestHelpers:
    def test_build_definition_id(self) -> None:
        assert build_definition_id("minecraft", "block", "logs") == "block:minecraft:logs"

    def test_with_default_namespace(self) -> None:
        assert with_default_namespace("dirt") == "minecraft:dirt"
        assert with_default_namespace("mod:dirt") == "mod:dirt"

    def test_node_label(self) -> None:
        assert node_label("block:minecraft:logs") == "logs"
        assert node_label("worldgen/biome:minecraft:is_ocean") == "is_ocean"
