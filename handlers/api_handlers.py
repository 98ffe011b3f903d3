"""
API Route Handlers for Who Lies Tonight.

Pure routing layer that delegates to appropriate business logic modules.
Contains no business logic - only request/response handling.
"""

import logging
from datetime import datetime, timezone
from flask import jsonify, request
from database import get_game_statistics, get_leaderboard
from utils.helpers import format_time_duration, normalize_room_code

logger = logging.getLogger(__name__)

def register_api_handlers(app, room_manager, registry):
    """
    Register all API route handlers.

    Args:
        app: Flask application instance
        room_manager: Room management instance
        registry: Room registry (for status counters)
    """

    @app.route('/api/health')
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'ok',
            'message': 'Who Lies Tonight game server is running',
            'time': datetime.now(timezone.utc).isoformat(),
            'rooms': registry.get_status()
        })

    @app.route('/api/leaderboard')
    def leaderboard():
        """Top scores, optionally filtered by ?room=CODE."""
        try:
            room_code = normalize_room_code(request.args.get('room')) or None
            return jsonify(get_leaderboard(room_code=room_code))

        except Exception as e:
            logger.error(f"Error getting leaderboard: {e}")
            return jsonify({'error': 'Failed to get leaderboard'}), 500

    @app.route('/api/stats')
    def get_stats():
        """Game statistics endpoint."""
        try:
            stats = get_game_statistics()
            stats['avg_game_duration_display'] = format_time_duration(int(stats['avg_game_duration']))
            return jsonify(stats)

        except Exception as e:
            logger.error(f"Error getting statistics: {e}")
            return jsonify({'error': 'Failed to get statistics'}), 500

    @app.route('/api/rooms/active')
    def get_active_rooms():
        """Get list of active rooms."""
        try:
            return jsonify({'rooms': room_manager.get_active_rooms()})

        except Exception as e:
            logger.error(f"Error getting active rooms: {e}")
            return jsonify({'error': 'Failed to get rooms'}), 500

    # Error handlers
    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        return jsonify({'error': 'Internal server error'}), 500

    logger.info("API handlers registered successfully")
