"""
Data models for game management.

These represent game-specific data structures that operate within lobbies.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from datetime import datetime
from enum import Enum

from utils.constants import GAME_CONFIG

class Phase(Enum):
    """Round phase enumeration."""
    WAITING = "waiting"
    ROLE_ASSIGNMENT = "role-assignment"
    SUBMISSION = "submission"
    DISCUSSION = "discussion"
    VOTING = "voting"
    RESULTS = "results"

# Phases in which a new round may be started
ROUND_START_PHASES = (Phase.WAITING, Phase.RESULTS)

# Phases during which a round is in flight
ACTIVE_PHASES = (Phase.ROLE_ASSIGNMENT, Phase.SUBMISSION, Phase.DISCUSSION, Phase.VOTING)

@dataclass(frozen=True)
class GameRules:
    """Rule constants shared by every round of every lobby."""
    discussion_seconds: int = GAME_CONFIG['DISCUSSION_SECONDS']
    faker_escape_points: int = GAME_CONFIG['FAKER_ESCAPE_POINTS']
    catch_points: int = GAME_CONFIG['CATCH_POINTS']
    min_players: int = GAME_CONFIG['MIN_PLAYERS']
    decoy_count: int = GAME_CONFIG['DECOY_COUNT']
    max_word_length: int = GAME_CONFIG['MAX_WORD_LENGTH']

    @classmethod
    def from_config(cls, config) -> 'GameRules':
        """Build rules from a Flask config mapping."""
        defaults = cls()
        return cls(
            discussion_seconds=int(config.get('DISCUSSION_SECONDS', defaults.discussion_seconds)),
            faker_escape_points=int(config.get('FAKER_ESCAPE_POINTS', defaults.faker_escape_points)),
            catch_points=int(config.get('CATCH_POINTS', defaults.catch_points)),
            min_players=max(1, int(config.get('MIN_PLAYERS', defaults.min_players))),
            decoy_count=int(config.get('DECOY_COUNT', defaults.decoy_count)),
            max_word_length=int(config.get('MAX_WORD_LENGTH', defaults.max_word_length))
        )

@dataclass
class Player:
    """Represents a player in a lobby."""
    id: str
    name: str
    score: int = 0
    joined_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'name': self.name,
            'score': self.score
        }

@dataclass
class RoundState:
    """Per-round data, discarded when the next round starts."""
    topic: Optional[str] = None
    faker_id: Optional[str] = None
    turn_index: int = 0
    submitted_words: Dict[str, str] = field(default_factory=dict)  # player id -> word
    votes: Dict[str, str] = field(default_factory=dict)  # voter id -> target id

    def clear(self):
        self.topic = None
        self.faker_id = None
        self.turn_index = 0
        self.submitted_words = {}
        self.votes = {}

@dataclass
class RoundResult:
    """Outcome of a revealed round."""
    round_number: int
    faker_id: str
    topic: Optional[str]
    caught: bool
    votes: Dict[str, str]
    deltas: Dict[str, int]
    scores: Dict[str, int]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'round': self.round_number,
            'faker_id': self.faker_id,
            'topic': self.topic,
            'caught': self.caught,
            'votes': dict(self.votes),
            'deltas': dict(self.deltas),
            'scores': dict(self.scores)
        }

def roster_dicts(players: List[Player]) -> List[Dict[str, Any]]:
    """Serialize a roster in turn order."""
    return [p.to_dict() for p in players]
