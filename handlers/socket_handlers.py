"""
Socket.IO Event Handlers for Blend In.

Pure routing layer that delegates to the lobby registry and sessions.
Contains no game rules - only payload validation, event routing and
error reporting. Game errors go back to the originating client only.
"""

import logging
from flask import request
from flask_socketio import emit

from game.errors import GameError, UnknownPlayer
from utils.constants import EVENTS, GAME_CONFIG
from utils.helpers import normalize_lobby_code, sanitize_name, sanitize_word

logger = logging.getLogger(__name__)

def make_sink(socketio, sid):
    """Outbound sink delivering events to one socket connection."""
    def sink(event, payload):
        socketio.emit(event, payload, to=sid)
    return sink

def _lobby_code(data):
    if not isinstance(data, dict):
        return None
    return normalize_lobby_code(data.get('code'))

def _drop(action, reason):
    logger.warning(f"Dropped malformed {action} from {request.sid}: {reason}")

def _report(action, error):
    if isinstance(error, GameError):
        logger.warning(f"Rejected {action} from {request.sid}: {error.kind} ({error})")
        emit(EVENTS['ERROR'], error.to_dict())
    else:
        logger.error(f"Error handling {action}: {error}")
        emit(EVENTS['ERROR'], {'kind': 'InternalError', 'message': f'Failed to {action}'})

def register_socket_handlers(socketio, registry, connection_manager, config=None):
    """
    Register all Socket.IO event handlers.

    Args:
        socketio: SocketIO instance
        registry: LobbyRegistry instance
        connection_manager: ConnectionManager instance
        config: Flask config mapping (sanitizing limits)
    """
    config = config or {}
    max_name_length = int(config.get('MAX_NAME_LENGTH', GAME_CONFIG['MAX_NAME_LENGTH']))
    max_topic_length = int(config.get('MAX_TOPIC_LENGTH', GAME_CONFIG['MAX_TOPIC_LENGTH']))
    max_word_length = registry.rules.max_word_length

    def _leave(code, sid):
        outcome = registry.handle_disconnect(code, sid)
        connection_manager.disassociate(sid, code)
        if outcome == 'closed':
            connection_manager.forget_lobby(code)
        return outcome

    def _topic(data):
        topic = data.get('topic') if isinstance(data, dict) else None
        return sanitize_name(topic, max_topic_length)

    @socketio.on('connect')
    def handle_connect():
        """Handle client connection."""
        logger.info(f"Client connected: {request.sid}")

    @socketio.on('disconnect')
    def handle_disconnect(reason=None):
        """Handle client disconnection in every lobby it hosts or plays in."""
        sid = request.sid
        logger.info(f"Client disconnected: {sid}")
        for code in connection_manager.pop_connection(sid):
            try:
                outcome = registry.handle_disconnect(code, sid)
                if outcome == 'closed':
                    connection_manager.forget_lobby(code)
            except GameError as e:
                logger.warning(f"Disconnect of {sid} from lobby {code} ignored: {e.kind}")
            except Exception as e:
                logger.error(f"Error handling disconnect of {sid} from lobby {code}: {e}")

    @socketio.on('create_lobby')
    def handle_create_lobby(data=None):
        """Handle lobby creation request. The creating connection is the host."""
        try:
            sid = request.sid
            code = registry.create_lobby(sid, make_sink(socketio, sid))
            connection_manager.associate(sid, code)
            emit(EVENTS['LOBBY_CREATED'], {'code': code, 'host_id': sid})
        except Exception as e:
            _report('create lobby', e)

    @socketio.on('join_lobby')
    def handle_join_lobby(data):
        """Handle player joining a lobby."""
        code = _lobby_code(data)
        name = sanitize_name(data.get('name'), max_name_length) if isinstance(data, dict) else None
        if not code or not name:
            _drop('join_lobby', 'missing lobby code or name')
            return
        try:
            sid = request.sid
            registry.join_lobby(code, sid, name, make_sink(socketio, sid))
            connection_manager.associate(sid, code)
        except Exception as e:
            _report('join lobby', e)

    @socketio.on('leave_lobby')
    def handle_leave_lobby(data):
        """Handle player (or host) leaving a lobby voluntarily."""
        code = _lobby_code(data)
        if not code:
            _drop('leave_lobby', 'missing lobby code')
            return
        try:
            session = registry.get_lobby(code)
            if request.sid != session.host_id and not session.has_player(request.sid):
                raise UnknownPlayer()
            _leave(code, request.sid)
            emit(EVENTS['LEFT_LOBBY'], {'code': code})
        except Exception as e:
            _report('leave lobby', e)

    @socketio.on('start_round')
    def handle_start_round(data):
        """Handle host starting a round, optionally with a topic."""
        code = _lobby_code(data)
        if not code:
            _drop('start_round', 'missing lobby code')
            return
        try:
            registry.get_lobby(code).start_round(request.sid, _topic(data))
        except Exception as e:
            _report('start round', e)

    @socketio.on('next_round')
    def handle_next_round(data):
        """Handle host moving from results to a fresh round."""
        code = _lobby_code(data)
        if not code:
            _drop('next_round', 'missing lobby code')
            return
        try:
            registry.get_lobby(code).next_round(request.sid, _topic(data))
        except Exception as e:
            _report('start next round', e)

    @socketio.on('submit_word')
    def handle_submit_word(data):
        """Handle a word submitted by the player whose turn it is."""
        code = _lobby_code(data)
        word = sanitize_word(data.get('word'), max_word_length) if isinstance(data, dict) else None
        if not code or not word:
            _drop('submit_word', 'missing lobby code or word')
            return
        try:
            registry.get_lobby(code).submit_word(request.sid, word)
        except Exception as e:
            _report('submit word', e)

    @socketio.on('submit_vote')
    def handle_submit_vote(data):
        """Handle a vote cast during the voting phase."""
        code = _lobby_code(data)
        target_id = data.get('target_id') if isinstance(data, dict) else None
        if not code or not isinstance(target_id, str) or not target_id:
            _drop('submit_vote', 'missing lobby code or target')
            return
        try:
            registry.get_lobby(code).submit_vote(request.sid, target_id)
        except Exception as e:
            _report('submit vote', e)
