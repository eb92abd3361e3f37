"""Shared fixtures.

The suite never loads real morphology dictionaries: :class:`FakeAnalyzer`
answers from a small hand-written table shaped like pymorphy3 output.
"""

from __future__ import annotations

import sqlite3
from typing import Generator

import pytest

from searchengine.db.connection import get_connection
from searchengine.db.migrations import init_db
from searchengine.lemmas.extractor import LemmaExtractor

# word -> [(normal_form, POS)], most probable reading first
_READINGS: dict[str, list[tuple[str, str]]] = {
    "кот": [("кот", "NOUN")],
    "кота": [("кот", "NOUN")],
    "коты": [("кот", "NOUN")],
    "котов": [("кот", "NOUN")],
    "дом": [("дом", "NOUN")],
    "дома": [("дом", "NOUN"), ("дома", "ADVB")],
    "домом": [("дом", "NOUN")],
    "стали": [("стать", "VERB"), ("сталь", "NOUN")],
    "сталь": [("сталь", "NOUN")],
    "большой": [("большой", "ADJF")],
    "и": [("и", "CONJ")],
    "в": [("в", "PREP")],
    "на": [("на", "PREP")],
    "не": [("не", "PRCL")],
    "ой": [("ой", "INTJ")],
    "так": [("так", "ADVB"), ("так", "CONJ")],
}


class FakeAnalyzer:
    """Table-driven analyzer; unknown words are their own noun lemma."""

    def normal_forms_and_tags(self, word: str) -> list[tuple[str, str]]:
        return list(_READINGS.get(word, [(word, "NOUN")]))


@pytest.fixture()
def extractor() -> LemmaExtractor:
    return LemmaExtractor(FakeAnalyzer())


@pytest.fixture()
def conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory connection with the schema initialised."""
    connection = get_connection(db_path=":memory:")
    init_db(connection)
    yield connection
    connection.close()
