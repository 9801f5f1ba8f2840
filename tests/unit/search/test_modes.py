"""Tests for metadata mode parsing."""

import pytest

from metasearch.core.exceptions import MalformedRequestError
from metasearch.search.modes import UNBOUNDED, Direction, MetadataMode


class TestMetadataMode:
    """Tests for MetadataMode.parse."""

    def test_default_is_resource(self):
        """No mode should return only the subject."""
        assert MetadataMode.parse(None) == MetadataMode.parse("resource")
        assert MetadataMode.parse("").traversals == []

    @pytest.mark.parametrize(
        "name,traversals,include_self",
        [
            ("parents", [(Direction.UP, UNBOUNDED)], True),
            ("parentsOnly", [(Direction.UP, UNBOUNDED)], False),
            ("children", [(Direction.DOWN, 1)], True),
            ("childrenOnly", [(Direction.DOWN, 1)], False),
            ("relatives", [(Direction.UP, UNBOUNDED), (Direction.DOWN, UNBOUNDED)], True),
            ("relativesOnly", [(Direction.UP, UNBOUNDED), (Direction.DOWN, UNBOUNDED)], False),
        ],
    )
    def test_named_modes(self, name, traversals, include_self):
        """Named modes should map onto traversals."""
        mode = MetadataMode.parse(name)

        assert mode.traversals == traversals
        assert mode.include_self is include_self

    def test_none_and_ids(self):
        """none returns no statements, ids only labels."""
        assert not MetadataMode.parse("none").include_statements
        assert MetadataMode.parse("ids").labels_only

    def test_descriptor_equals_named_mode(self):
        """A descriptor should be equivalent to the matching named mode."""
        assert MetadataMode.parse("0_0_0_-1") == MetadataMode.parse("parents")
        assert MetadataMode.parse("1_0_1_0") == MetadataMode.parse("childrenOnly")

    def test_short_descriptor(self):
        """Missing trailing slots should default to 0."""
        mode = MetadataMode.parse("2")

        assert mode.descendants == 2
        assert mode.ancestors == 0
        assert mode.include_self

    @pytest.mark.parametrize("mode", ["bogus", "0_1_0_0", "0_0_2_0", "-2", "1_0_0_0_0", "a_b"])
    def test_invalid_modes(self, mode):
        """Unknown names and invalid descriptors should be rejected."""
        with pytest.raises(MalformedRequestError, match="Bad metadata mode"):
            MetadataMode.parse(mode)
