"""Unit tests for pack format compatibility checks."""

from mc_tag_graph.core.compatibility import (
    Compatibility,
    check_compatibility,
    compatibility_message,
    get_pack_format,
)


class TestCheckCompatibility:
    def test_equal(self) -> None:
        assert check_compatibility(10, 10) is Compatibility.COMPATIBLE

    def test_missing_pack_format(self) -> None:
        assert check_compatibility(None, 10) is Compatibility.NO_METADATA

    def test_mismatch(self) -> None:
        assert check_compatibility(9, 10) is Compatibility.VERSION_MISMATCH

    def test_missing_expected_format(self) -> None:
        """比較対象が無い場合は互換扱いになること."""
        assert check_compatibility(10, None) is Compatibility.COMPATIBLE

    def test_both_missing(self) -> None:
        assert check_compatibility(None, None) is Compatibility.NO_METADATA


class TestCompatibilityMessage:
    def test_mismatch_message(self) -> None:
        message = compatibility_message(Compatibility.VERSION_MISMATCH, 9, 10)

        assert message is not None
        assert message.title == "Incompatible Pack Format"
        assert message.body.startswith("Pack Format 9\nSelected Version: Pack Format 10")
        assert message.color == "orange"

    def test_mismatch_unknown_expected(self) -> None:
        message = compatibility_message(Compatibility.VERSION_MISMATCH, 9, None)
        assert "Selected Version: Unknown Format" in message.body

    def test_no_metadata_message(self) -> None:
        message = compatibility_message(Compatibility.NO_METADATA, None, 10)

        assert message.title == "Cannot Verify Version"
        assert message.color == "yellow"

    def test_compatible_has_no_message(self) -> None:
        assert compatibility_message(Compatibility.COMPATIBLE, 10, 10) is None


class TestGetPackFormat:
    def test_valid(self) -> None:
        assert get_pack_format({"pack": {"pack_format": 48}}) == 48

    def test_missing(self) -> None:
        assert get_pack_format({}) is None
        assert get_pack_format({"pack": {}}) is None
        assert get_pack_format(None) is None

    def test_non_integer(self) -> None:
        assert get_pack_format({"pack": {"pack_format": "48"}}) is None
        assert get_pack_format({"pack": {"pack_format": True}}) is None
