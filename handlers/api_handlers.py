"""
API Route Handlers for Blend In.

Pure routing layer that delegates to the lobby registry.
Contains no business logic - only request/response handling.
"""

import logging
from datetime import timedelta
from flask import jsonify

from game.errors import LobbyNotFound
from utils.constants import GAME_CONFIG

logger = logging.getLogger(__name__)

def register_api_handlers(app, registry, connection_manager):
    """
    Register all API route handlers.

    Args:
        app: Flask application instance
        registry: LobbyRegistry instance
        connection_manager: ConnectionManager instance
    """

    @app.route('/')
    def index():
        """Plain liveness banner."""
        return "Blend In server running."

    @app.route('/api/health')
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'message': 'The Blend In game server is running',
            'version': '1.0.0',
            'active_lobbies': len(registry),
            'connections': connection_manager.connection_count()
        })

    @app.route('/api/lobbies/active')
    def get_active_lobbies():
        """Get list of active lobbies."""
        try:
            lobbies = [item.to_dict() for item in registry.list_lobbies()]
            return jsonify({'lobbies': lobbies})
        except Exception as e:
            logger.error(f"Error getting active lobbies: {e}")
            return jsonify({'error': 'Failed to get lobbies'}), 500

    @app.route('/api/lobbies/<code>')
    def get_lobby(code):
        """Public snapshot of one lobby (never the topic or the faker)."""
        try:
            return jsonify({'lobby': registry.get_lobby(code).snapshot()})
        except LobbyNotFound as e:
            return jsonify({'error': e.kind, 'message': str(e)}), 404

    @app.route('/api/lobbies/cleanup', methods=['POST'])
    def cleanup_inactive():
        """Clean up lobbies that have had no players for too long (admin endpoint)."""
        try:
            idle_minutes = int(app.config.get('LOBBY_IDLE_MINUTES', GAME_CONFIG['LOBBY_IDLE_MINUTES']))
            removed = registry.cleanup_idle_lobbies(timedelta(minutes=idle_minutes))
            for code in removed:
                connection_manager.forget_lobby(code)
            return jsonify({
                'removed': len(removed),
                'codes': removed,
                'message': f'Cleaned up {len(removed)} inactive lobbies'
            })
        except Exception as e:
            logger.error(f"Error cleaning up lobbies: {e}")
            return jsonify({'error': 'Failed to clean up lobbies'}), 500
