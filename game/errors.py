"""
Error taxonomy for Blend In.

Every rejected action raises a GameError subclass before any state is
mutated. The transport layer reports it to the originating client only,
using ``kind`` as the wire name.
"""


class GameError(Exception):
    """Base class for recoverable game errors."""

    kind = 'GameError'
    default_message = 'Action rejected'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)

    def to_dict(self):
        return {'kind': self.kind, 'message': str(self)}


class LobbyNotFound(GameError):
    kind = 'LobbyNotFound'
    default_message = 'Lobby not found'


class UnknownPlayer(GameError):
    kind = 'UnknownPlayer'
    default_message = 'Player not in this lobby'


class NotYourTurn(GameError):
    kind = 'NotYourTurn'
    default_message = 'Not your turn'


class WrongPhase(GameError):
    kind = 'WrongPhase'
    default_message = 'Action not allowed in the current phase'


class InsufficientPlayers(GameError):
    kind = 'InsufficientPlayers'
    default_message = 'Not enough players to start a round'


class NotHost(GameError):
    kind = 'NotHost'
    default_message = 'Only the host can do that'


class InvalidVote(GameError):
    kind = 'InvalidVote'
    default_message = 'Cannot vote for yourself'


class DuplicateCode(GameError):
    """Internal: a generated code collided with a live lobby. Retried by the registry."""
    kind = 'DuplicateCode'
    default_message = 'Lobby code already exists'


class LobbyCodeExhausted(GameError):
    kind = 'LobbyCodeExhausted'
    default_message = 'Could not allocate a lobby code'
