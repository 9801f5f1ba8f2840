"""Tests for statements and assembled graphs."""

from metasearch.core.types import RESOURCE, XSD_STRING, AssembledGraph, Statement


def _graph() -> AssembledGraph:
    graph = AssembledGraph("https://r/2")
    graph.add(Statement("https://r/2", "https://title", "child"))
    graph.add(Statement("https://r/2", "https://parent", "https://r/1", RESOURCE))
    graph.add(Statement("https://r/1", "https://title", "parent"))
    return graph


class TestAssembledGraph:
    """Tests for AssembledGraph navigation."""

    def test_literal_of_subject(self):
        """literal should read the matched subject's values."""
        assert _graph().literal("https://title") == "child"

    def test_resource_follows_relation(self):
        """resource should navigate to the related subject inside the graph."""
        parent = _graph().resource("https://parent")

        assert parent is not None
        assert parent.uri == "https://r/1"
        assert parent.literal("https://title") == "parent"

    def test_missing_values(self):
        """Missing properties should yield None."""
        graph = _graph()

        assert graph.literal("https://missing") is None
        assert graph.resource("https://title") is None

    def test_add_deduplicates(self):
        """Adding the same statement twice should keep one copy."""
        graph = _graph()
        graph.add(Statement("https://r/2", "https://title", "child", XSD_STRING))

        assert len(graph) == 3

    def test_subjects_in_first_seen_order(self):
        """subjects should list every subject once."""
        assert _graph().subjects() == ["https://r/2", "https://r/1"]

    def test_empty_graph(self):
        """A graph without statements should be empty."""
        assert AssembledGraph("https://r/3").is_empty
        assert not _graph().is_empty
