"""Text normalization shared by query expansion and matching."""

import re

_NON_ALNUM = re.compile(r'[^a-z0-9\s]')
_WHITESPACE = re.compile(r'\s+')


def normalize(text) -> str:
    """
    Normalize free text for comparison.
    
    Process:
    1. Convert to lowercase
    2. Replace every character except a-z, 0-9 and whitespace with a space
    3. Collapse whitespace runs to a single space
    4. Trim
    
    Args:
        text: Input text (None and non-strings are treated as empty)
        
    Returns:
        Normalized string, possibly empty
        
    Examples:
        >>> normalize("Section 1.2: Payment Terms")
        'section 1 2 payment terms'
        
        >>> normalize(None)
        ''
    """
    if not isinstance(text, str) or not text:
        return ""
    
    text = _NON_ALNUM.sub(' ', text.lower())
    return _WHITESPACE.sub(' ', text).strip()
