"""Headline fragments built from FTS5 highlighted text.

FTS5's ``highlight()`` wraps matched phrases in the MARK_START/MARK_STOP
control characters. This module cuts such text into word windows around the
matches, in the manner of PostgreSQL's ``ts_headline``, and replaces the
markers with the configured selectors.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

MARK_START = "\x02"
MARK_STOP = "\x03"

_NON_WORD = re.compile(r"\W", re.UNICODE)


@dataclass(frozen=True)
class FragmentOptions:
    """Fragment shaping options.

    Attributes:
        start_sel: Inserted before a match.
        stop_sel: Inserted after a match.
        min_words: Fragments are not shortened below this many words.
        max_words: Maximum number of words in a fragment.
        short_word: Non-matching words of this length or shorter are dropped
            from fragment edges.
        max_fragments: Maximum number of fragments; 0 produces one headline.
        highlight_all: Return the whole text instead of fragments.
        delimiter: Separator used when fragments are joined.
    """

    start_sel: str = "<b>"
    stop_sel: str = "</b>"
    min_words: int = 15
    max_words: int = 35
    short_word: int = 3
    max_fragments: int = 0
    highlight_all: bool = False
    delimiter: str = " ... "


@dataclass
class _Word:
    text: str
    matched: bool


def _split(marked: str) -> list[_Word]:
    words = []
    inside = False
    for token in marked.split():
        matched = inside or MARK_START in token
        last_start, last_stop = token.rfind(MARK_START), token.rfind(MARK_STOP)
        if last_start > last_stop:
            inside = True
        elif last_stop > last_start:
            inside = False
        words.append(_Word(token, matched))
    return words


def _short(word: _Word, short_word: int) -> bool:
    return not word.matched and len(_NON_WORD.sub("", word.text)) <= short_word


def _trim(words: list[_Word], start: int, stop: int, options: FragmentOptions) -> tuple[int, int]:
    min_words = min(options.min_words, options.max_words)
    while stop - start > min_words:
        if _short(words[start], options.short_word):
            start += 1
        elif _short(words[stop - 1], options.short_word):
            stop -= 1
        else:
            break
    return start, stop


def _render(words: list[_Word], options: FragmentOptions) -> str:
    text = " ".join(w.text for w in words)
    # a window may cut a highlighted phrase in two
    first_start, first_stop = text.find(MARK_START), text.find(MARK_STOP)
    if first_stop != -1 and (first_start == -1 or first_stop < first_start):
        text = MARK_START + text
    if text.rfind(MARK_START) > text.rfind(MARK_STOP):
        text += MARK_STOP
    return text.replace(MARK_START, options.start_sel).replace(MARK_STOP, options.stop_sel)


def build_fragments(marked: str, options: FragmentOptions) -> list[str]:
    """Cut highlighted text into fragments.

    Args:
        marked: Text with matches wrapped in MARK_START/MARK_STOP.
        options: Fragment shaping options.

    Returns:
        Fragments in text order, at most ``options.max_fragments`` of them
        (exactly one when it is 0).

    Example:
        >>> build_fragments("Lorem \\x02ipsum\\x03 dolor sit", FragmentOptions(
        ...     start_sel="#", stop_sel="#", min_words=2, max_words=3))
        ['Lorem #ipsum# dolor']
    """
    words = _split(marked)
    if not words:
        return []
    if options.highlight_all:
        return [_render(words, options)]

    max_words = max(options.max_words, 1)
    matches = [i for i, w in enumerate(words) if w.matched]
    if not matches:
        return [_render(words[:max_words], options)]

    before = (max_words - 1) // 2
    fragments: list[str] = []
    covered = 0
    for m in matches:
        if m < covered:
            continue
        start = max(m - before, covered)
        stop = min(start + max_words, len(words))
        start = max(min(start, stop - max_words), covered)
        start, stop = _trim(words, start, stop, options)
        fragments.append(_render(words[start:stop], options))
        covered = stop
        if len(fragments) >= max(options.max_fragments, 1):
            break
    return fragments
