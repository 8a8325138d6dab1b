"""
Data models for lobby management.

These are pure data structures used to pass information between
lobby management and the API handlers.
"""

from dataclasses import dataclass
from typing import Dict, Any
from datetime import datetime

@dataclass
class LobbyListItem:
    """Lightweight lobby info for listing active lobbies."""
    code: str
    phase: str
    round_number: int
    player_count: int
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'code': self.code,
            'phase': self.phase,
            'round': self.round_number,
            'player_count': self.player_count,
            'created_at': self.created_at.isoformat()
        }
