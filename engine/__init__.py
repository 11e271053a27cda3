from .lucene import build_lucene_terms, construct_lucene_query, escape_lucene, fuzzy_distance

__all__ = [
    "build_lucene_terms",
    "construct_lucene_query",
    "escape_lucene",
    "fuzzy_distance",
]
