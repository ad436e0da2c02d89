"""
Party Hub - Real-time Group Game Backend

Flask-SocketIO backend that connects one presenter display and many
participant handsets to a shared session driven by pluggable games.
App.py is purely server setup and handler registration.
"""

import logging
from flask import Flask
from flask_socketio import SocketIO
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from config import settings
from ai import build_ai_services
from games import GameRegistry, GameServices, TaskScheduler, register_games
from sessions import Broadcaster, ParticipantManager, SessionHub, SessionRegistry
from handlers import register_socket_handlers, register_api_handlers

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _parse_origins(value: str):
    value = (value or '*').strip()
    return '*' if value == '*' else [origin.strip() for origin in value.split(',') if origin.strip()]


def create_app(config_overrides=None, scheduler=None, ai_services=None):
    """
    Application factory that creates and configures the Flask app.

    Args:
        config_overrides: Settings that replace values from config.settings
        scheduler: Task scheduler (defaults to one backed by Socket.IO background tasks)
        ai_services: AI service bundle (defaults to OpenAI-backed services)

    Returns:
        Tuple of (Flask app, SocketIO)
    """
    app = Flask(__name__)
    app.config.update(settings.as_dict())
    if config_overrides:
        app.config.update(config_overrides)

    origins = _parse_origins(app.config['CORS_ORIGINS'])

    # CORS configuration for the web frontend
    CORS(app, origins=origins)

    # ProxyFix for deployment behind reverse proxy
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    socketio = SocketIO(
        app,
        cors_allowed_origins=origins,
        async_mode=app.config['SOCKETIO_ASYNC_MODE'],
        async_handlers=app.config.get('SOCKETIO_ASYNC_HANDLERS', True),
        ping_timeout=app.config['SOCKETIO_PING_TIMEOUT'],
        ping_interval=app.config['SOCKETIO_PING_INTERVAL']
    )

    logger.info("Initializing session hub...")
    scheduler = scheduler or TaskScheduler(socketio)
    if ai_services is None:
        ai_services = build_ai_services(app.config)

    games = GameRegistry()
    broadcaster = Broadcaster(socketio, games)
    services = GameServices(
        broadcaster=broadcaster,
        scheduler=scheduler,
        ai=ai_services,
        settings=dict(app.config)
    )
    register_games(games, services)

    sessions = SessionRegistry(
        grace_seconds=app.config['SESSION_GRACE_SECONDS'],
        code_length=app.config['SESSION_CODE_LENGTH']
    )
    hub = SessionHub(
        sessions,
        games,
        broadcaster,
        scheduler,
        participants=ParticipantManager(max_name_length=app.config['MAX_NAME_LENGTH'])
    )

    # Register handlers (pure routing layer)
    logger.info("Registering handlers...")
    register_socket_handlers(socketio, hub)
    register_api_handlers(app, hub, ai_services)

    app.extensions['party_hub'] = hub
    logger.info("Application initialization complete")

    return app, socketio


def main():
    """Main entry point for the server."""
    app, socketio = create_app()

    port = app.config['PORT']
    debug = app.config['DEBUG']

    logger.info(f"Starting Party Hub server on port {port}")
    logger.info(f"Debug mode: {debug}")
    logger.info(f"CORS origins: {app.config['CORS_ORIGINS']}")

    socketio.run(app, debug=debug, port=port, host='0.0.0.0')


if __name__ == '__main__':
    main()
