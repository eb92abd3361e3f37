"""Morphological analyzer interface and its pymorphy3 implementation.

The rest of the package only depends on :class:`MorphAnalyzer`, a protocol
with a single method.  :func:`get_analyzer` returns the process-wide default
backed by ``pymorphy3`` (Russian dictionaries), created lazily because the
dictionaries take a noticeable moment to load.
"""

from __future__ import annotations

import threading
from typing import Any, Optional, Protocol

from searchengine.config import settings

# Coarse part-of-speech tags of function words, in OpenCorpora notation.
PARTICLE = "PRCL"
INTERJECTION = "INTJ"
CONJUNCTION = "CONJ"
PREPOSITION = "PREP"


class MorphAnalyzer(Protocol):
    def normal_forms_and_tags(self, word: str) -> list[tuple[str, str]]:
        """Return ``(normal_form, pos_tag)`` pairs for *word*.

        Pairs are unique and ordered from the most to the least probable
        reading; the first normal form is the dictionary head form.
        """
        ...


# Grammemes of readings that spell out a letter or an abbreviation ("и" as
# the letter name, "в" as "век").  They never count as a content reading.
_SKIPPED_GRAMMEMES = frozenset({"Abbr", "Init"})


class PymorphyAnalyzer:
    """:class:`MorphAnalyzer` backed by ``pymorphy3.MorphAnalyzer``.

    Readings scoring below ``min_score_ratio`` times the best reading, and
    abbreviation or initial readings, are dropped unless nothing else is
    left.  pymorphy3 lists such readings for most short words.

    Args:
        lang: Dictionary language.
        min_score_ratio: Defaults to ``settings.morph_min_score_ratio``.
        morph: Pre-built ``pymorphy3.MorphAnalyzer`` (or a compatible
            object); created from *lang* when omitted.
    """

    def __init__(
        self,
        lang: str = "ru",
        min_score_ratio: Optional[float] = None,
        morph: Any = None,
    ) -> None:
        if morph is None:
            import pymorphy3  # noqa: PLC0415

            morph = pymorphy3.MorphAnalyzer(lang=lang)
        self._morph: Any = morph
        self.min_score_ratio = (
            settings.morph_min_score_ratio if min_score_ratio is None else min_score_ratio
        )

    def _likely_parses(self, word: str) -> list[Any]:
        every = self._morph.parse(word)
        parses = [
            p for p in every
            if not any(grammeme in p.tag for grammeme in _SKIPPED_GRAMMEMES)
        ] or every
        if not parses:
            return []
        cutoff = max(p.score for p in parses) * self.min_score_ratio
        return [p for p in parses if p.score >= cutoff]

    def normal_forms_and_tags(self, word: str) -> list[tuple[str, str]]:
        pairs: list[tuple[str, str]] = []
        for parse in self._likely_parses(word):
            pair = (parse.normal_form, parse.tag.POS or "")
            if pair not in pairs:
                pairs.append(pair)
        return pairs


_analyzer: Optional[MorphAnalyzer] = None
_analyzer_lock = threading.Lock()


def get_analyzer() -> MorphAnalyzer:
    """Return the shared default analyzer, creating it on first use."""
    global _analyzer
    with _analyzer_lock:
        if _analyzer is None:
            _analyzer = PymorphyAnalyzer()
        return _analyzer
