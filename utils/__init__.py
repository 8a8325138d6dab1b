"""
Utilities module for Blend In.

This module contains constants and helper functions
used throughout the application.
"""

from .constants import TOPICS, ROLES, EVENTS, GAME_CONFIG, LOBBY_CODE_ALPHABET
from .helpers import generate_lobby_code, normalize_lobby_code, sanitize_name, sanitize_word

__all__ = [
    'TOPICS',
    'ROLES',
    'EVENTS',
    'GAME_CONFIG',
    'LOBBY_CODE_ALPHABET',
    'generate_lobby_code',
    'normalize_lobby_code',
    'sanitize_name',
    'sanitize_word'
]
