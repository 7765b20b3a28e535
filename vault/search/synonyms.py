"""
Synonym expansion for agreement search queries.

A query like "cancel my service" only shares a few words with the clause that
answers it ("Client may terminate ... deposits are non-refundable"). Each
concept group below maps a canonical key to related terms; when any query
token hits a group, the whole group joins the search terms.

The table is an immutable value passed to the expander explicitly. The
default groups cover a landscaping / snow-removal service agreement.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple, Union

from .normalizer import normalize

logger = logging.getLogger(__name__)

MAX_QUERY_TOKENS = 30
MIN_TOKEN_LENGTH = 3


class SynonymTable:
    """
    Read-only mapping: concept key -> related terms.

    Iteration order follows construction order, which decides which terms
    survive the token cap.
    """

    def __init__(self, groups: Mapping[str, Iterable[str]]):
        self._groups = MappingProxyType({
            str(concept).lower(): tuple(str(term).lower() for term in terms)
            for concept, terms in groups.items()
        })

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "SynonymTable":
        """
        Load a table from a JSON object file: {"concept": ["term", ...], ...}

        Raises:
            ValueError: If the file is not a JSON object of string lists
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict) or not all(
            isinstance(terms, list) and all(isinstance(t, str) for t in terms)
            for terms in data.values()
        ):
            raise ValueError(f"Synonym file must map concept keys to lists of strings: {path}")

        logger.info(f"Loaded {len(data)} synonym groups from {path}")
        return cls(data)

    def items(self) -> Iterator[Tuple[str, Tuple[str, ...]]]:
        return iter(self._groups.items())

    def __getitem__(self, concept: str) -> Tuple[str, ...]:
        return self._groups[concept]

    def __contains__(self, concept: object) -> bool:
        return concept in self._groups

    def __len__(self) -> int:
        return len(self._groups)

    def __repr__(self) -> str:
        return f"SynonymTable({len(self)} groups)"


DEFAULT_SYNONYMS = SynonymTable({
    "cancel": [
        "cancellation", "terminate", "termination", "quit", "end", "refund", "deposit",
    ],
    "payment": [
        "payments", "invoice", "billing", "net", "fee", "charge", "cost", "price",
    ],
    "late": [
        "late", "overdue", "past", "due", "interest", "finance", "charge", "apr", "penalty",
    ],
    "liability": [
        "liability", "damage", "damages", "responsible", "responsibility", "injury",
        "slip", "fall", "warranty", "warranties", "indemnify", "indemnification",
    ],
    "dispute": [
        "dispute", "arbitration", "court", "lawsuit", "sue", "venue", "jury", "mediation",
    ],
    "snow": [
        "snow", "ice", "plow", "plowing", "trigger", "accumulation", "storm", "berm",
        "salt", "deice",
    ],
    "scope": [
        "scope", "work", "change", "order", "extras", "additional", "addendum",
    ],
    "mowing": [
        "mowing", "mow", "lawn", "grass", "turf", "cut", "trim", "edge",
    ],
    "season": [
        "season", "term", "duration", "length", "period", "year", "annual",
    ],
})


def expand_query(
    query: str,
    table: SynonymTable = DEFAULT_SYNONYMS,
    max_tokens: int = MAX_QUERY_TOKENS
) -> List[str]:
    """
    Expand a query into the set of search terms.

    Process:
    1. Normalize the query and split into raw tokens
    2. Seed the result with the raw tokens
    3. For each concept group hit by a raw token (key or synonym),
       add the key and every synonym
    4. Keep tokens of 3+ characters, first max_tokens in insertion order

    Args:
        query: User question
        table: Synonym table to expand through
        max_tokens: Cap on returned tokens

    Returns:
        Unique tokens in insertion order

    Examples:
        >>> expand_query("cancel")[:4]
        ['cancel', 'cancellation', 'terminate', 'termination']

        >>> expand_query("a b")
        []
    """
    raw_tokens = [t for t in normalize(query).split(' ') if t]

    # dict as insertion-ordered set
    expanded: Dict[str, None] = dict.fromkeys(raw_tokens)

    for concept, synonyms in table.items():
        if any(token == concept or token in synonyms for token in raw_tokens):
            expanded[concept] = None
            expanded.update(dict.fromkeys(synonyms))

    tokens = [t for t in expanded if len(t) >= MIN_TOKEN_LENGTH]
    return tokens[:max_tokens]
