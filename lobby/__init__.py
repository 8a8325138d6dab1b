"""
Lobby Module for Blend In.

Contains lobby bookkeeping: the registry of live lobbies and
connection tracking.
"""

from .models import LobbyListItem
from .registry import LobbyRegistry
from .connection_manager import ConnectionManager

__all__ = [
    # Data models
    'LobbyListItem',

    # Managers
    'LobbyRegistry',
    'ConnectionManager'
]
