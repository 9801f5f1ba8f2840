"""Tests for SearchConfig request parameter handling."""

from metasearch.search.config import SearchConfig


class TestSearchConfigForm:
    """Tests for SearchConfig.from_form and to_dict."""

    def test_camel_case_keys(self):
        """camelCase and [] keys should map onto fields."""
        config = SearchConfig.from_form(
            {
                "limit": "10",
                "offset": "5",
                "orderBy[]": ["^https://date.prop"],
                "ftsQuery": "ipsum",
                "ftsMaxWords[]": ["3", "4"],
                "ftsHighlightAll": "true",
                "metadataMode": "parents",
            }
        )

        assert config.limit == 10
        assert config.offset == 5
        assert config.order_by == ["^https://date.prop"]
        assert config.fts_query == "ipsum"
        assert config.fts_max_words == [3, 4]
        assert config.fts_highlight_all is True
        assert config.metadata_mode == "parents"

    def test_snake_case_keys(self):
        """snake_case keys should be accepted too."""
        config = SearchConfig.from_form({"order_by": "https://p", "fts_start_sel": "#"})

        assert config.order_by == ["https://p"]
        assert config.fts_start_sel == "#"

    def test_count_is_not_read(self):
        """count is output only."""
        assert SearchConfig.from_form({"count": "5"}).count is None

    def test_to_dict(self):
        """to_dict should list set request parameters in camelCase."""
        config = SearchConfig(limit=10, fts_query=["a", "b"], metadata_mode="parents")
        config.count = 7

        assert config.to_dict() == {"limit": 10, "ftsQuery": ["a", "b"]}

    def test_round_trip(self):
        """from_form should read what to_dict writes."""
        config = SearchConfig(limit=3, offset=2, order_by=["https://p"], fts_max_fragments=2)

        assert SearchConfig.from_form(config.to_dict()) == config
