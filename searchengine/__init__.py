"""Site crawler, lemma index and ranked full-text search."""
