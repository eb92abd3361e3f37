"""Lemma extraction: morphology-aware tokenisation."""

from searchengine.lemmas.analyzer import MorphAnalyzer, PymorphyAnalyzer, get_analyzer
from searchengine.lemmas.extractor import (
    LemmaEntry,
    LemmaExtractor,
    are_equivalent,
    get_extractor,
    normalize,
)

__all__ = [
    "MorphAnalyzer",
    "PymorphyAnalyzer",
    "get_analyzer",
    "LemmaEntry",
    "LemmaExtractor",
    "are_equivalent",
    "get_extractor",
    "normalize",
]
