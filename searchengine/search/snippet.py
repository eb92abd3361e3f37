"""Snippet builder: highlight where a page best matches the query.

The query and the page text are both turned into :class:`LemmaEntry`
sequences.  The longest run of consecutive page words that lines up with
consecutive query words (under :func:`are_equivalent`) is highlighted, and
the surrounding words are added alternately left and right until the
snippet budget is spent.
"""

from __future__ import annotations

from typing import Optional

from searchengine.config import settings
from searchengine.lemmas.extractor import (
    LemmaEntry,
    LemmaExtractor,
    are_equivalent,
    get_extractor,
    split_words,
)


def longest_common_run(query: list[LemmaEntry], page: list[LemmaEntry]) -> list[LemmaEntry]:
    """Longest contiguous run of *page* entries matching a run of *query*.

    Classic longest-common-substring DP with one rolling row.  When several
    runs share the maximum length the last one found wins.  Returns an empty
    list when nothing matches.
    """
    best_length = 0
    best_end = 0
    row = [0] * len(page)

    for i, query_entry in enumerate(query):
        diagonal = 0
        for j, page_entry in enumerate(page):
            above = row[j]
            if are_equivalent(query_entry, page_entry):
                row[j] = 1 if i == 0 or j == 0 else diagonal + 1
                if row[j] >= best_length:
                    best_length = row[j]
                    best_end = j
            else:
                row[j] = 0
            diagonal = above

    if best_length == 0:
        return []
    return page[best_end - best_length + 1:best_end + 1]


def build_snippet(text: str, match: list[LemmaEntry], size: Optional[int] = None) -> str:
    """Render *text* around *match* with the matched words in ``<b>``.

    Raises:
        ValueError: If *match* is empty.
    """
    if not match:
        raise ValueError("Cannot build a snippet without a matched span")
    budget = settings.snippet_size if size is None else size
    words = split_words(text)

    start = match[0].position
    end = match[-1].position + 1
    left, right = start, end
    length = 0

    while length < budget and (left > 0 or right < len(words)):
        if left > 0:
            left -= 1
            length += len(words[left]) + 1
        if right < len(words):
            length += len(words[right]) + 1
            right += 1

    parts = words[left:start]
    parts.append("<b>" + " ".join(words[start:end]) + "</b>")
    parts.extend(words[end:right])
    return " ".join(parts)


def generate_snippet(
    query: str,
    text: str,
    extractor: Optional[LemmaExtractor] = None,
    size: Optional[int] = None,
) -> str:
    """Snippet of plain *text* for *query*; empty when no word matches."""
    extractor = extractor or get_extractor()
    match = longest_common_run(extractor.match_entries(query), extractor.match_entries(text))
    if not match:
        return ""
    return build_snippet(text, match, size)
