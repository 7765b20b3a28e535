"""
Relevance ranker - term-frequency scoring of agreement sections.

Score(section) = Σ whole-word occurrences of each expanded query token in
lowercase(heading + "\\n" + body).

No IDF, no length normalization: agreements are short and the synonym table
already carries the domain knowledge. Sections scoring 0 are dropped; ties
keep document order (stable sort).
"""

import logging
import re
from dataclasses import dataclass
from typing import List

from .segmenter import Section, segment
from .synonyms import DEFAULT_SYNONYMS, MAX_QUERY_TOKENS, SynonymTable, expand_query

logger = logging.getLogger(__name__)

DEFAULT_TOP = 3


@dataclass(frozen=True)
class ScoredSection:
    """Section with its total term-match count"""
    section: Section
    score: int

    @property
    def heading(self) -> str:
        return self.section.heading

    @property
    def body(self) -> str:
        return self.section.body


def count_whole_word(haystack: str, token: str) -> int:
    """
    Count word-boundary-delimited occurrences of token in haystack.

    Regex metacharacters in token are escaped, so "cat" never matches inside
    "category" and "a.b" matches literally.

    Examples:
        >>> count_whole_word("cat category cat", "cat")
        2
    """
    if not token:
        return 0
    pattern = re.compile(r'\b' + re.escape(token) + r'\b', re.ASCII)
    return len(pattern.findall(haystack))


def rank_sections(
    sections: List[Section],
    query: str,
    top: int = DEFAULT_TOP,
    table: SynonymTable = DEFAULT_SYNONYMS,
    max_tokens: int = MAX_QUERY_TOKENS
) -> List[ScoredSection]:
    """
    Rank sections against a query.

    Args:
        sections: Ordered sections of one agreement snapshot
        query: User question (expanded through the synonym table)
        top: Maximum number of results
        table: Synonym table for expansion
        max_tokens: Cap on expanded tokens

    Returns:
        Up to `top` sections with score > 0, highest score first.
        Empty list means nothing relevant was found (not an error).

    Example:
        >>> sections = segment("SECTION 1: FEES\\nA late fee applies.\\nSECTION 2: SNOW\\nPlowing at 2 inches.")
        >>> [(s.heading, s.score) for s in rank_sections(sections, "late fee")]
        [('SECTION 1: FEES', 2)]
    """
    tokens = expand_query(query, table=table, max_tokens=max_tokens)
    if not tokens:
        return []

    scored = []
    for section in sections:
        haystack = (section.heading + "\n" + section.body).lower()
        score = sum(count_whole_word(haystack, token) for token in tokens)
        if score > 0:
            scored.append(ScoredSection(section=section, score=score))

    # sorted() is stable: equal scores keep document order
    ranked = sorted(scored, key=lambda s: s.score, reverse=True)[:top]

    logger.debug(
        f"Ranked {len(sections)} sections with {len(tokens)} tokens: "
        f"{[(s.heading, s.score) for s in ranked]}"
    )

    return ranked


def best_matches(
    agreement_text: str,
    query: str,
    top: int = DEFAULT_TOP,
    table: SynonymTable = DEFAULT_SYNONYMS
) -> List[ScoredSection]:
    """Segment agreement_text and rank its sections against query"""
    return rank_sections(segment(agreement_text), query, top=top, table=table)
