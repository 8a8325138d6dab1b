"""
Connection Manager for Blend In Lobbies.

Tracks which lobbies each socket connection hosts or plays in, so a
disconnect can be fanned out to exactly those lobbies.
Contains no game logic - purely connection bookkeeping.
"""

import logging
import threading
from typing import Dict, List, Set

logger = logging.getLogger(__name__)

class ConnectionManager:
    """Maps socket ids to the lobby codes they participate in."""

    def __init__(self):
        self._lobbies_by_socket: Dict[str, Set[str]] = {}  # socket_id -> lobby codes
        self._lock = threading.Lock()
        logger.debug("Connection manager initialized")

    def associate(self, socket_id: str, lobby_code: str):
        """Record that a connection hosts or plays in a lobby."""
        with self._lock:
            self._lobbies_by_socket.setdefault(socket_id, set()).add(lobby_code)
        logger.debug(f"Associated {socket_id} with lobby {lobby_code}")

    def disassociate(self, socket_id: str, lobby_code: str) -> bool:
        """
        Forget one lobby for a connection.

        Returns:
            True if the association existed
        """
        with self._lock:
            codes = self._lobbies_by_socket.get(socket_id)
            if not codes or lobby_code not in codes:
                return False
            codes.discard(lobby_code)
            if not codes:
                del self._lobbies_by_socket[socket_id]
        logger.debug(f"Disassociated {socket_id} from lobby {lobby_code}")
        return True

    def pop_connection(self, socket_id: str) -> List[str]:
        """
        Drop a connection entirely.

        Returns:
            The lobby codes it participated in
        """
        with self._lock:
            codes = self._lobbies_by_socket.pop(socket_id, set())
        return sorted(codes)

    def forget_lobby(self, lobby_code: str) -> int:
        """
        Remove a destroyed lobby from every connection.

        Returns:
            Number of connections that referenced it
        """
        affected = 0
        with self._lock:
            for socket_id in list(self._lobbies_by_socket):
                codes = self._lobbies_by_socket[socket_id]
                if lobby_code in codes:
                    codes.discard(lobby_code)
                    affected += 1
                    if not codes:
                        del self._lobbies_by_socket[socket_id]
        return affected

    def connection_count(self) -> int:
        with self._lock:
            return len(self._lobbies_by_socket)
