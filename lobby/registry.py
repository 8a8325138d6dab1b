"""
Lobby Registry for Blend In.

Process-wide map from lobby code to LobbySession. Owns creation, lookup
and deletion of sessions; everything else is delegated to the session,
which also emits every outbound message.
"""

import logging
import random
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from game.errors import LobbyNotFound, UnknownPlayer, DuplicateCode, LobbyCodeExhausted
from game.models import GameRules
from game.session import LobbySession, Sink
from game.topics import TopicProvider
from utils.constants import GAME_CONFIG, CLOSE_REASONS
from utils.helpers import generate_lobby_code, normalize_lobby_code
from .models import LobbyListItem

logger = logging.getLogger(__name__)

class LobbyRegistry:
    """
    Single source of truth mapping codes to sessions.

    Constructed once per process and injected into the transport handlers;
    independent instances share nothing.
    """

    def __init__(self, scheduler,
                 rules: Optional[GameRules] = None,
                 topic_provider: Optional[TopicProvider] = None,
                 code_length: int = GAME_CONFIG['LOBBY_CODE_LENGTH'],
                 max_code_attempts: int = GAME_CONFIG['MAX_CODE_ATTEMPTS'],
                 code_generator: Optional[Callable[[int], str]] = None,
                 rng: Optional[random.Random] = None):
        """
        Args:
            scheduler: Background task runner handed to every session
            rules: Game rules shared by all sessions
            topic_provider: Topic source shared by all sessions
            code_length: Length of generated lobby codes
            max_code_attempts: Collisions tolerated before giving up
            code_generator: Replaces the random code generator (tests)
            rng: Random source handed to sessions for faker selection
        """
        self.scheduler = scheduler
        self.rules = rules or GameRules()
        self.topic_provider = topic_provider or TopicProvider()
        self.code_length = code_length
        self.max_code_attempts = max(1, max_code_attempts)
        self.code_generator = code_generator or generate_lobby_code
        self.rng = rng
        self._lobbies: Dict[str, LobbySession] = {}
        self._lock = threading.Lock()
        logger.debug("Lobby registry initialized")

    def __len__(self) -> int:
        with self._lock:
            return len(self._lobbies)

    def __contains__(self, code) -> bool:
        return self.find_lobby(code) is not None

    def create_lobby(self, host_id: str, host_sink: Optional[Sink] = None) -> str:
        """
        Create a lobby in phase ``waiting`` under a fresh code.

        Args:
            host_id: Connection id of the creator, who becomes host
            host_sink: Outbound sink for the host connection

        Returns:
            The new lobby code

        Raises:
            LobbyCodeExhausted: every attempt collided with a live code
        """
        for attempt in range(1, self.max_code_attempts + 1):
            code = self.code_generator(self.code_length)
            try:
                self._reserve(code, host_id, host_sink)
            except DuplicateCode:
                logger.debug(f"Lobby code {code} collided (attempt {attempt})")
                continue
            logger.info(f"Created lobby {code} for host {host_id}")
            return code

        logger.error(f"Gave up allocating a lobby code after {self.max_code_attempts} attempts")
        raise LobbyCodeExhausted()

    def _reserve(self, code: str, host_id: str, host_sink: Optional[Sink]) -> LobbySession:
        with self._lock:
            if code in self._lobbies:
                raise DuplicateCode()
            session = LobbySession(
                code=code,
                host_id=host_id,
                scheduler=self.scheduler,
                host_sink=host_sink,
                rules=self.rules,
                topic_provider=self.topic_provider,
                rng=self.rng
            )
            self._lobbies[code] = session
            return session

    def find_lobby(self, code) -> Optional[LobbySession]:
        """Get a lobby by code, or None."""
        code = normalize_lobby_code(code)
        if not code:
            return None
        with self._lock:
            return self._lobbies.get(code)

    def get_lobby(self, code) -> LobbySession:
        """
        Get a lobby by code.

        Raises:
            LobbyNotFound: code unknown or already removed
        """
        session = self.find_lobby(code)
        if session is None:
            raise LobbyNotFound(f"Lobby {code} not found")
        return session

    def join_lobby(self, code, player_id: str, name: str, sink: Optional[Sink] = None) -> str:
        """
        Add a player to a lobby.

        Returns:
            The player's id

        Raises:
            LobbyNotFound, WrongPhase
        """
        session = self.get_lobby(code)
        player = session.add_player(player_id, name, sink)
        return player.id

    def remove_lobby(self, code, reason: str = CLOSE_REASONS['SHUTDOWN']) -> bool:
        """
        Remove a lobby and close its session. Idempotent.

        Returns:
            True if a lobby was removed
        """
        code = normalize_lobby_code(code)
        with self._lock:
            session = self._lobbies.pop(code, None) if code else None
        if session is None:
            return False
        session.close(reason)
        logger.info(f"Removed lobby {code} ({reason})")
        return True

    def handle_disconnect(self, code, connection_id: str) -> Optional[str]:
        """
        Apply a disconnect (or voluntary leave) to one lobby.

        The host leaving destroys the lobby; a player leaving is removed
        from the roster.

        Returns:
            'closed', 'left', or None when the lobby is gone or the
            connection is neither its host nor one of its players
        """
        session = self.find_lobby(code)
        if session is None:
            return None
        if session.host_id == connection_id:
            self.remove_lobby(session.code, CLOSE_REASONS['HOST_LEFT'])
            return 'closed'
        try:
            session.remove_player(connection_id)
        except (LobbyNotFound, UnknownPlayer):
            return None
        return 'left'

    def list_lobbies(self) -> List[LobbyListItem]:
        """Lightweight listing of live lobbies."""
        with self._lock:
            sessions = list(self._lobbies.values())
        items = []
        for session in sessions:
            try:
                state = session.snapshot()
            except LobbyNotFound:
                continue
            items.append(LobbyListItem(
                code=state['code'],
                phase=state['phase'],
                round_number=state['round'],
                player_count=state['player_count'],
                created_at=session.created_at
            ))
        return items

    def cleanup_idle_lobbies(self, max_idle: timedelta, now: Optional[datetime] = None) -> List[str]:
        """
        Remove lobbies whose roster has been empty for longer than ``max_idle``.

        Returns:
            Codes of the lobbies removed
        """
        now = now or datetime.now()
        with self._lock:
            idle_codes = [code for code, session in self._lobbies.items() if session.is_idle(now, max_idle)]
        removed = [code for code in idle_codes if self.remove_lobby(code, CLOSE_REASONS['IDLE'])]
        if removed:
            logger.info(f"Cleaned up {len(removed)} idle lobbies")
        return removed

