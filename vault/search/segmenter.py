"""
Agreement segmenter - splits raw agreement text into heading-delimited sections.

Heading detection runs a prioritized list of predicates over each trimmed line
(first match wins):
1. ARTICLE_SECTION: "ARTICLE ..." / "SECTION ..." (any case, whole word)
2. NUMERIC_OUTLINE: outline numbering followed by whitespace ("1.2 Scope")
3. ALL_CAPS_BLOCK: short all-uppercase line ("PAYMENT TERMS & FEES")

Text before the first heading is collected under "INTRODUCTION". Sections whose
body is blank are dropped, so a heading directly followed by another heading
disappears. When nothing survives, the whole input becomes a single
"AGREEMENT" section.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)

INTRODUCTION_HEADING = "INTRODUCTION"
FALLBACK_HEADING = "AGREEMENT"

# ASCII mode keeps word boundaries to plain Latin text. The outline gap uses
# unicode \s so the NBSP in Google Docs exports ("1.2\u00a0Scope") still counts.
_ARTICLE_SECTION = re.compile(r'^(ARTICLE|SECTION)\b', re.IGNORECASE | re.ASCII)
_NUMERIC_OUTLINE = re.compile(r'^[0-9]+(\.[0-9]+)*\s+')
_ALL_CAPS_BLOCK = re.compile(r'^[A-Z0-9][A-Z0-9 \-:&]{8,69}$')

_LINE_BREAK = re.compile(r'\r?\n')


class HeadingKind(str, Enum):
    """Which heuristic classified a line as a heading"""
    ARTICLE_SECTION = "article_section"
    NUMERIC_OUTLINE = "numeric_outline"
    ALL_CAPS_BLOCK = "all_caps_block"
    NONE = "none"


@dataclass(frozen=True)
class Section:
    """Contiguous span of an agreement: heading line plus following text"""
    heading: str
    body: str


def _is_all_caps_block(line: str) -> bool:
    return bool(_ALL_CAPS_BLOCK.match(line)) and line == line.upper()


# Evaluated in order, first match wins
HEADING_RULES: Tuple[Tuple[HeadingKind, Callable[[str], bool]], ...] = (
    (HeadingKind.ARTICLE_SECTION, lambda line: bool(_ARTICLE_SECTION.match(line))),
    (HeadingKind.NUMERIC_OUTLINE, lambda line: bool(_NUMERIC_OUTLINE.match(line))),
    (HeadingKind.ALL_CAPS_BLOCK, _is_all_caps_block),
)


def classify_heading(line: str) -> HeadingKind:
    """
    Classify a single line as a heading kind.

    Args:
        line: Raw line (trimmed before matching)

    Returns:
        Matching HeadingKind, or HeadingKind.NONE for body text and blank lines

    Examples:
        >>> classify_heading("SECTION 2: CANCELLATION POLICY")
        <HeadingKind.ARTICLE_SECTION: 'article_section'>

        >>> classify_heading("1.2 Scope of Work")
        <HeadingKind.NUMERIC_OUTLINE: 'numeric_outline'>

        >>> classify_heading("Payment is due within 30 days.")
        <HeadingKind.NONE: 'none'>
    """
    stripped = (line or "").strip()
    if not stripped:
        return HeadingKind.NONE

    for kind, predicate in HEADING_RULES:
        if predicate(stripped):
            return kind

    return HeadingKind.NONE


def segment(text: str) -> List[Section]:
    """
    Split agreement text into ordered sections.

    Args:
        text: Full agreement text (None/empty allowed)

    Returns:
        Sections in document order, never empty

    Example:
        >>> segment("SECTION 1: FEES\\nPayment is due in 30 days.")
        [Section(heading='SECTION 1: FEES', body='Payment is due in 30 days.\\n')]

        >>> segment("")
        [Section(heading='AGREEMENT', body='')]
    """
    text = text if isinstance(text, str) else ""

    sections: List[Section] = []
    heading = INTRODUCTION_HEADING
    body_lines: List[str] = []

    def flush():
        body = "".join(body_lines)
        if body.strip():
            sections.append(Section(heading=heading, body=body))

    for line in _LINE_BREAK.split(text):
        if classify_heading(line) is not HeadingKind.NONE:
            flush()
            heading = line.strip()
            body_lines = []
        else:
            body_lines.append(line + "\n")

    flush()

    if not sections:
        logger.debug(f"No sections detected in {len(text)} chars, using {FALLBACK_HEADING} fallback")
        return [Section(heading=FALLBACK_HEADING, body=text)]

    logger.debug(f"Segmented {len(text)} chars into {len(sections)} sections")
    return sections


def table_of_contents(sections: List[Section]) -> List[Dict[str, object]]:
    """Build [{"id": index, "heading": heading}, ...] for navigation"""
    return [{"id": i, "heading": section.heading} for i, section in enumerate(sections)]
