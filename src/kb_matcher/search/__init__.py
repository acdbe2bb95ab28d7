"""
Knowledge base matching engine.

This package provides a pure-Python matching stack:
- analyzers: Tokenizer and stopword filtering
- synonyms: One-level query expansion (English and Roman Urdu bridges)
- fuzzy: Edit-distance similarity and fuzzy keyword overlap
- stats: TF-IDF weights and cosine similarity
- scorer: Weighted combination of the two scores
- snippet: Reply sentence selection
- matcher: Best-match selection over a page collection
- formatter: Reply payload for the chat layer
"""
