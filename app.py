"""
Who Lies Tonight - A Mafia-style Social Deduction Game Backend

Flask-SocketIO backend that serves a React frontend. App.py is purely
server setup and handler registration; rooms, game rules and persistence
live in their own packages.
"""

import eventlet
eventlet.monkey_patch()

import logging
from flask import Flask
from flask_socketio import SocketIO
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from config import settings
from database import init_database, record_game_result
from game import GameManager, PhaseScheduler
from handlers import SocketIOBroadcaster, register_api_handlers, register_socket_handlers
from handlers.timers import make_timer_factory
from rooms import ConnectionManager, PlayerManager, RoomManager, RoomRegistry
from utils.constants import GAME_CONFIG

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def make_result_recorder(socketio):
    """Write finished games off the room lock, in a background task."""
    def save(result):
        try:
            record_game_result(result)
        except Exception as e:
            logger.error(f"Failed to save game result for room {result.room_code}: {e}")

    def recorder(result):
        socketio.start_background_task(save, result)
    return recorder

def start_cleanup_loop(socketio, room_manager, interval=GAME_CONFIG['ROOM_CLEANUP_INTERVAL']):
    """Periodically evict rooms that have been idle too long."""
    def cleanup_loop():
        while True:
            socketio.sleep(interval)
            try:
                room_manager.cleanup_idle()
            except Exception as e:
                logger.error(f"Error during room cleanup: {e}")

    socketio.start_background_task(cleanup_loop)

def create_app():
    """
    Application factory that creates and configures the Flask app.

    Returns:
        Configured Flask app with SocketIO
    """

    # Flask configuration
    app = Flask(__name__)
    app.config['SECRET_KEY'] = settings.SECRET_KEY

    # CORS configuration for React frontend
    cors_origins = settings.CORS_ORIGINS.split(',')
    CORS(app, origins=cors_origins)

    # ProxyFix for deployment behind reverse proxy
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    # SocketIO configuration
    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=settings.SOCKETIO_ASYNC_MODE,
        ping_timeout=settings.PING_TIMEOUT,
        ping_interval=settings.PING_INTERVAL
    )

    # Initialize business logic managers
    logger.info("Initializing room and game managers...")
    broadcaster = SocketIOBroadcaster(socketio)
    timer_factory = make_timer_factory(socketio)

    registry = RoomRegistry()
    player_manager = PlayerManager()
    scheduler = PhaseScheduler(
        registry,
        broadcaster,
        timer_factory=timer_factory,
        result_recorder=make_result_recorder(socketio)
    )
    connection_manager = ConnectionManager(
        registry, player_manager, scheduler, broadcaster, timer_factory=timer_factory
    )
    room_manager = RoomManager(registry, player_manager, connection_manager, broadcaster)
    game_manager = GameManager(registry, player_manager, connection_manager, scheduler, broadcaster)

    # Register handlers (pure routing layer)
    logger.info("Registering handlers...")
    register_socket_handlers(socketio, room_manager, connection_manager, game_manager)
    register_api_handlers(app, room_manager, registry)

    # Initialize database
    logger.info("Initializing database...")
    init_database()

    start_cleanup_loop(socketio, room_manager)

    logger.info("Application initialization complete")
    return app, socketio

def main():
    """Main entry point for the game server."""
    app, socketio = create_app()

    logger.info(f"Starting Who Lies Tonight game server on port {settings.PORT}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"CORS origins: {settings.CORS_ORIGINS}")

    socketio.run(app, debug=settings.DEBUG, port=settings.PORT, host='0.0.0.0')

if __name__ == '__main__':
    main()
