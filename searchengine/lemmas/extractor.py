"""Turn text into lemmas.

Two modes share the same tokenisation and filtering:

``parse_lemmas``
    lemma → occurrence count over a whole document, used for indexing and
    for the query's lemma set.

``match_entries``
    one :class:`LemmaEntry` per surviving word, keeping its surface form,
    all candidate normal forms and its word position, used to align a query
    with page text.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Optional

from searchengine.lemmas.analyzer import (
    CONJUNCTION,
    INTERJECTION,
    PARTICLE,
    PREPOSITION,
    MorphAnalyzer,
    get_analyzer,
)

IGNORED_POS = frozenset({PARTICLE, INTERJECTION, CONJUNCTION, PREPOSITION})

_NON_ALPHABET = re.compile(r"[^а-яё]")


@dataclass(frozen=True, eq=False)
class LemmaEntry:
    """A word of a text together with its candidate normal forms.

    Identity comparison only: entries are matched with :func:`are_equivalent`,
    which is not transitive and therefore unusable as ``__eq__``/``__hash__``.
    """

    word: str
    normal_forms: frozenset[str]
    position: int


def are_equivalent(a: LemmaEntry, b: LemmaEntry) -> bool:
    """Same surface word, or at least one normal form in common."""
    return a.word == b.word or not a.normal_forms.isdisjoint(b.normal_forms)


def normalize(word: str) -> str:
    """Lowercase *word* and drop every character outside the alphabet."""
    return _NON_ALPHABET.sub("", word.lower())


def split_words(text: str) -> list[str]:
    return text.split()


class LemmaExtractor:
    def __init__(self, analyzer: Optional[MorphAnalyzer] = None) -> None:
        self.analyzer = analyzer if analyzer is not None else get_analyzer()

    def is_function_word(self, word: str) -> bool:
        """True when every reading of *word* is a particle, interjection,
        conjunction or preposition."""
        readings = self.analyzer.normal_forms_and_tags(word)
        return bool(readings) and all(tag in IGNORED_POS for _, tag in readings)

    def first_normal_form(self, word: str) -> str:
        readings = self.analyzer.normal_forms_and_tags(word)
        return readings[0][0] if readings else ""

    def _content_words(self, text: str):
        """Yield ``(position, surface, normalized)`` for words worth indexing."""
        for position, surface in enumerate(split_words(text)):
            word = normalize(surface)
            if word and not self.is_function_word(word):
                yield position, surface, word

    def parse_lemmas(self, text: str) -> dict[str, int]:
        counts: Counter[str] = Counter()
        for _, _, word in self._content_words(text):
            lemma = self.first_normal_form(word)
            if lemma:
                counts[lemma] += 1
        return dict(counts)

    def match_entries(self, text: str) -> list[LemmaEntry]:
        return [
            LemmaEntry(
                word=surface,
                normal_forms=frozenset(
                    form for form, _ in self.analyzer.normal_forms_and_tags(word)
                ),
                position=position,
            )
            for position, surface, word in self._content_words(text)
        ]


_extractor: Optional[LemmaExtractor] = None


def get_extractor() -> LemmaExtractor:
    """Return a shared extractor bound to the default analyzer."""
    global _extractor
    if _extractor is None:
        _extractor = LemmaExtractor()
    return _extractor
