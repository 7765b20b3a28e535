"""
Agreement search engine: segmentation and relevance ranking.

Pipeline:
- normalizer: lowercase + strip non-alphanumerics
- segmenter: split raw agreement text into heading-delimited sections
- synonyms: expand query tokens through a fixed concept table
- ranker: whole-word term-frequency scoring, top-N sections
- excerpt: bounded, whitespace-collapsed previews for display

All functions are pure and synchronous; callers own any caching.
"""

from .normalizer import normalize
from .segmenter import HeadingKind, Section, classify_heading, segment, table_of_contents
from .synonyms import DEFAULT_SYNONYMS, MAX_QUERY_TOKENS, SynonymTable, expand_query
from .ranker import ScoredSection, best_matches, count_whole_word, rank_sections
from .excerpt import excerpt

__all__ = [
    "normalize",
    "HeadingKind",
    "Section",
    "classify_heading",
    "segment",
    "table_of_contents",
    "DEFAULT_SYNONYMS",
    "MAX_QUERY_TOKENS",
    "SynonymTable",
    "expand_query",
    "ScoredSection",
    "best_matches",
    "count_whole_word",
    "rank_sections",
    "excerpt",
]
