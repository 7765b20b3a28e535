"""Utility functions for the agreement portal"""

import hashlib
import re
import secrets
import time
from typing import Optional, Union

_TAG = re.compile(r'<[^>]*>')
_EMAIL = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def calculate_text_hash(content: Union[str, bytes]) -> str:
    """
    Calculate SHA256 hash of document content
    
    Args:
        content: Text (UTF-8 encoded before hashing) or raw bytes
    
    Returns:
        Hexadecimal hash string (64 characters)
    
    Examples:
        >>> calculate_text_hash("agreement text") == calculate_text_hash(b"agreement text")
        True
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def sanitize_input(value, max_length: int) -> str:
    """
    Strip HTML tags and cap length of untrusted input.
    
    Non-strings become "".
    
    Examples:
        >>> sanitize_input('<script>alert("xss")</script>Hello', 2000)
        'alert("xss")Hello'
    """
    if not isinstance(value, str):
        return ""
    return _TAG.sub('', value)[:max_length]


def truncate(value: Optional[str], max_length: int = 100) -> Optional[str]:
    """Cut to max_length (trailing space trimmed) and append '...'; short/empty values pass through"""
    if not value or len(value) <= max_length:
        return value
    return value[:max_length].strip() + "..."


def is_valid_email(value) -> bool:
    return isinstance(value, str) and bool(_EMAIL.match(value))


def is_non_empty_string(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def generate_session_id() -> str:
    """Session identifier: sess_<base36 ms timestamp>_<random hex>"""
    millis = int(time.time() * 1000)
    return f"sess_{_base36(millis)}_{secrets.token_hex(3)}"


def _base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if number == 0:
        return "0"
    result = ""
    while number:
        number, remainder = divmod(number, 36)
        result = digits[remainder] + result
    return result
