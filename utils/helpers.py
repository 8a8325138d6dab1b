"""
Helper utilities for Blend In.

This module contains utility functions used throughout the application
for code generation and sanitizing client supplied text.
"""

import random
import re
from typing import Optional
from .constants import LOBBY_CODE_ALPHABET, GAME_CONFIG

def generate_lobby_code(length: int = GAME_CONFIG['LOBBY_CODE_LENGTH']) -> str:
    """Generate a random lobby code."""
    return ''.join(random.choices(LOBBY_CODE_ALPHABET, k=length))

def normalize_lobby_code(code) -> Optional[str]:
    """Upper-case and strip a client supplied lobby code, or None if unusable."""
    if not isinstance(code, str):
        return None
    code = code.strip().upper()
    return code or None

def _clean_text(text: str, max_length: int) -> str:
    # Collapse whitespace and strip markup
    text = re.sub(r'<[^>]*>', '', text)
    text = re.sub(r'\s+', ' ', text.strip())
    return text[:max_length]

def sanitize_name(name, max_length: int = GAME_CONFIG['MAX_NAME_LENGTH']) -> Optional[str]:
    """
    Sanitize a display name.

    Names are never checked for uniqueness; only emptiness and length.

    Returns:
        Cleaned name, or None if nothing usable remains
    """
    if not isinstance(name, str):
        return None
    cleaned = _clean_text(name, max_length)
    return cleaned or None

def sanitize_word(word, max_length: int = GAME_CONFIG['MAX_WORD_LENGTH']) -> Optional[str]:
    """
    Sanitize a submitted word (a short clue, may contain spaces).

    Returns:
        Cleaned word, or None if nothing usable remains
    """
    if not isinstance(word, str):
        return None
    cleaned = _clean_text(word, max_length)
    return cleaned or None

def format_time_duration(seconds: int) -> str:
    """
    Format a duration in seconds to a human-readable string.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 60:
        return f"{seconds}s"
    minutes = seconds // 60
    remaining_seconds = seconds % 60
    if remaining_seconds == 0:
        return f"{minutes}m"
    return f"{minutes}m {remaining_seconds}s"
