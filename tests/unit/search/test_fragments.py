"""Tests for headline fragment building."""

from metasearch.search.fragments import MARK_START, MARK_STOP, FragmentOptions, build_fragments


def mark(word: str) -> str:
    return f"{MARK_START}{word}{MARK_STOP}"


SELECTORS = dict(start_sel="#", stop_sel="#")


class TestBuildFragments:
    """Tests for build_fragments."""

    def test_window_around_match(self):
        """A fragment should hold max_words words around the match."""
        text = f"Lorem {mark('ipsum')} dolor sit amet"
        options = FragmentOptions(min_words=2, max_words=3, **SELECTORS)

        assert build_fragments(text, options) == ["Lorem #ipsum# dolor"]

    def test_short_edge_words_are_trimmed(self):
        """Short non-matching words at the edges should be dropped down to min_words."""
        text = f"Aenean eleifend {mark('ipsum')} eu placerat"
        options = FragmentOptions(min_words=2, max_words=3, max_fragments=10, **SELECTORS)

        assert build_fragments(text, options) == ["eleifend #ipsum#"]

    def test_several_fragments(self):
        """Each distant match should produce its own fragment."""
        text = f"Lorem {mark('ipsum')} dolor sit amet Aenean eleifend {mark('ipsum')} eu placerat"
        options = FragmentOptions(min_words=2, max_words=3, max_fragments=10, **SELECTORS)

        assert build_fragments(text, options) == ["Lorem #ipsum# dolor", "eleifend #ipsum#"]

    def test_max_fragments_zero_gives_one_headline(self):
        """max_fragments 0 should produce a single fragment."""
        text = f"{mark('a1')} b2 c3 d4 e5 f6 {mark('g7')}"
        options = FragmentOptions(min_words=1, max_words=2, max_fragments=0)

        assert len(build_fragments(text, options)) == 1

    def test_max_fragments_bounds_output(self):
        """No more than max_fragments fragments should be produced."""
        words = " ".join(f"{mark('hit')} filler words here" for _ in range(5))
        options = FragmentOptions(min_words=1, max_words=2, max_fragments=3)

        assert len(build_fragments(words, options)) == 3

    def test_highlight_all(self):
        """highlight_all should return the whole text."""
        text = f"one two {mark('three')} four"
        options = FragmentOptions(highlight_all=True, **SELECTORS)

        assert build_fragments(text, options) == ["one two #three# four"]

    def test_default_selectors(self):
        """Matches should be wrapped in <b> tags by default."""
        assert build_fragments(f"quick {mark('fox')}", FragmentOptions()) == ["quick <b>fox</b>"]

    def test_phrase_cut_by_window_stays_balanced(self):
        """A highlighted phrase cut by the window should keep both selectors."""
        text = f"alpha {MARK_START}beta gamma delta{MARK_STOP} omega"
        options = FragmentOptions(min_words=2, max_words=2, **SELECTORS)

        fragment = build_fragments(text, options)[0]
        assert fragment.count("#") == 2

    def test_no_match_returns_leading_words(self):
        """Text without markers should yield its first max_words words."""
        options = FragmentOptions(min_words=1, max_words=2)

        assert build_fragments("one two three", options) == ["one two"]

    def test_empty_text(self):
        """Empty text should produce no fragments."""
        assert build_fragments("", FragmentOptions()) == []
