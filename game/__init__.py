"""
Game Module for Blend In.

Contains the per-lobby round state machine and its building blocks.
Game operations happen within lobbies but are separate from lobby management.
"""

from .models import Phase, Player, GameRules, RoundState, RoundResult
from .errors import (
    GameError, LobbyNotFound, UnknownPlayer, NotYourTurn, WrongPhase,
    InsufficientPlayers, NotHost, InvalidVote, DuplicateCode, LobbyCodeExhausted
)
from .scoring import score_round, is_faker_caught, tally_votes
from .timer import DiscussionTimer
from .topics import TopicProvider
from .session import LobbySession

__all__ = [
    # Data models
    'Phase',
    'Player',
    'GameRules',
    'RoundState',
    'RoundResult',

    # Errors
    'GameError',
    'LobbyNotFound',
    'UnknownPlayer',
    'NotYourTurn',
    'WrongPhase',
    'InsufficientPlayers',
    'NotHost',
    'InvalidVote',
    'DuplicateCode',
    'LobbyCodeExhausted',

    # Mechanics
    'score_round',
    'is_faker_caught',
    'tally_votes',
    'DiscussionTimer',
    'TopicProvider',
    'LobbySession'
]
