"""
Blend In - A Social Deduction Party Game Backend

Flask-SocketIO backend that serves short-lived, in-memory lobbies where one
hidden "faker" tries to blend in among players who share a secret topic.
App.py is purely server setup and handler registration.
"""

import logging
from flask import Flask
from flask_socketio import SocketIO
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from config import settings
from game import GameRules, TopicProvider
from lobby import LobbyRegistry, ConnectionManager
from handlers import register_socket_handlers, register_api_handlers

logger = logging.getLogger(__name__)

def configure_logging(level='INFO'):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

def create_app(config_object=settings, scheduler=None):
    """
    Application factory that creates and configures the Flask app.

    Args:
        config_object: Object or module holding upper-case config values
        scheduler: Background task runner for discussion countdowns;
            defaults to the SocketIO server itself

    Returns:
        Tuple of (app, socketio)
    """
    app = Flask(__name__)
    app.config.from_object(config_object)
    configure_logging(app.config.get('LOG_LEVEL', 'INFO'))

    # CORS configuration for the browser client
    origins = str(app.config.get('CORS_ORIGINS', '*')).split(',')
    CORS(app, origins=origins)

    # ProxyFix for deployment behind reverse proxy
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    socketio = SocketIO(
        app,
        cors_allowed_origins=origins,
        async_mode=app.config.get('SOCKETIO_ASYNC_MODE') or None,
        ping_timeout=60,
        ping_interval=25
    )

    # Business logic (dependency injection)
    rules = GameRules.from_config(app.config)
    registry = LobbyRegistry(
        scheduler=scheduler or socketio,
        rules=rules,
        topic_provider=TopicProvider(),
        code_length=int(app.config.get('LOBBY_CODE_LENGTH', 4)),
        max_code_attempts=int(app.config.get('MAX_CODE_ATTEMPTS', 100))
    )
    connection_manager = ConnectionManager()

    register_socket_handlers(socketio, registry, connection_manager, app.config)
    register_api_handlers(app, registry, connection_manager)

    app.extensions['blend_in'] = {
        'registry': registry,
        'connection_manager': connection_manager,
        'rules': rules
    }

    logger.info(f"Blend In initialized (discussion={rules.discussion_seconds}s, "
                f"escape={rules.faker_escape_points}, catch={rules.catch_points})")
    return app, socketio

def main():
    """Main entry point for development server."""
    if settings.SOCKETIO_ASYNC_MODE == 'eventlet':
        # Session locks and timer sleeps must be green under eventlet
        import eventlet
        eventlet.monkey_patch()

    app, socketio = create_app()

    port = int(app.config.get('PORT', 5000))
    debug = bool(app.config.get('DEBUG', False))

    logger.info(f"Starting Blend In server on port {port}")
    logger.info(f"Debug mode: {debug}")
    logger.info(f"CORS origins: {app.config.get('CORS_ORIGINS', '*')}")

    socketio.run(app, debug=debug, port=port, host='0.0.0.0')

if __name__ == '__main__':
    main()
