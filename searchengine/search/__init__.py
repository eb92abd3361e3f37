"""Search package — ranking and snippets."""

from searchengine.search.ranking import SearchHit, SearchResult, search
from searchengine.search.snippet import build_snippet, generate_snippet, longest_common_run

__all__ = [
    "search",
    "SearchHit",
    "SearchResult",
    "generate_snippet",
    "build_snippet",
    "longest_common_run",
]
