"""
Socket.IO Event Handlers for Who Lies Tonight.

Pure routing layer that delegates to appropriate business logic modules.
Contains no business logic - only event routing and error reporting.
Successful operations broadcast their own events; failures are reported
to the calling connection only.
"""

import logging
from flask import request
from flask_socketio import emit

logger = logging.getLogger(__name__)

def register_socket_handlers(socketio, room_manager, connection_manager, game_manager):
    """
    Register all Socket.IO event handlers.

    Args:
        socketio: SocketIO instance
        room_manager: Room creation/joining
        connection_manager: Disconnect, reconnect and leave handling
        game_manager: Game actions and chat
    """

    def _payload(data=None):
        return data if isinstance(data, dict) else {}

    def _report(success, message):
        if not success and message:
            emit('error', {'message': message})

    @socketio.on('connect')
    def handle_connect(auth=None):
        """Handle client connection."""
        logger.info(f"Client connected: {request.sid}")

    @socketio.on('disconnect')
    def handle_disconnect(reason=None):
        """Handle client disconnection."""
        logger.info(f"Client disconnected: {request.sid} ({reason})")

        try:
            success, message, room_code = connection_manager.handle_disconnect(request.sid)
            if success:
                logger.debug(f"{message} ({room_code})")

        except Exception as e:
            logger.error(f"Error handling disconnect: {e}")

    @socketio.on('create_room')
    def handle_create_room(data=None):
        """Handle room creation request."""
        try:
            data = _payload(data)
            success, message, _ = room_manager.create_room(
                request.sid, data.get('username'), data.get('avatar')
            )
            _report(success, message)

        except Exception as e:
            logger.error(f"Error creating room: {e}")
            emit('error', {'message': 'Failed to create room'})

    @socketio.on('join_room')
    def handle_join_room(data=None):
        """Handle player joining a room."""
        try:
            data = _payload(data)
            if not data.get('code') or not data.get('username'):
                emit('error', {'message': 'Missing room code or username'})
                return

            success, message, _ = room_manager.join_room(
                request.sid, data.get('code'), data.get('username'), data.get('avatar')
            )
            _report(success, message)

        except Exception as e:
            logger.error(f"Error joining room: {e}")
            emit('error', {'message': 'Failed to join room'})

    @socketio.on('start_game')
    def handle_start_game(data=None):
        """Handle the host starting the game."""
        try:
            success, message, _ = game_manager.start_game(request.sid, _payload(data).get('code'))
            _report(success, message)

        except Exception as e:
            logger.error(f"Error starting game: {e}")
            emit('error', {'message': 'Failed to start game'})

    @socketio.on('night_action')
    def handle_night_action(data=None):
        """Handle a kill, save or investigate action."""
        try:
            data = _payload(data)
            success, message, _ = game_manager.night_action(
                request.sid, data.get('code'), data.get('action'), data.get('targetId')
            )
            _report(success, message)

        except Exception as e:
            logger.error(f"Error handling night action: {e}")
            emit('error', {'message': 'Failed to submit night action'})

    @socketio.on('day_vote')
    def handle_day_vote(data=None):
        """Handle a day vote."""
        try:
            data = _payload(data)
            success, message, _ = game_manager.day_vote(request.sid, data.get('code'), data.get('targetId'))
            _report(success, message)

        except Exception as e:
            logger.error(f"Error handling vote: {e}")
            emit('error', {'message': 'Failed to submit vote'})

    @socketio.on('skip_discussion')
    def handle_skip_discussion(data=None):
        """Handle the host skipping the day discussion."""
        try:
            success, message, _ = game_manager.skip_discussion(request.sid, _payload(data).get('code'))
            _report(success, message)

        except Exception as e:
            logger.error(f"Error skipping discussion: {e}")
            emit('error', {'message': 'Failed to skip discussion'})

    @socketio.on('play_again')
    def handle_play_again(data=None):
        """Handle the host restarting an ended game."""
        try:
            success, message, _ = game_manager.play_again(request.sid, _payload(data).get('code'))
            _report(success, message)

        except Exception as e:
            logger.error(f"Error restarting game: {e}")
            emit('error', {'message': 'Failed to restart game'})

    @socketio.on('chat_message')
    def handle_chat_message(data=None):
        """Handle a chat message on the global or mafia channel."""
        try:
            data = _payload(data)
            success, message, _ = game_manager.chat_message(
                request.sid, data.get('code'), data.get('text'), data.get('channel')
            )
            _report(success, message)

        except Exception as e:
            logger.error(f"Error sending chat message: {e}")
            emit('error', {'message': 'Failed to send message'})

    @socketio.on('reconnect_player')
    def handle_reconnect_player(data=None):
        """Handle a returning player reclaiming their seat."""
        try:
            data = _payload(data)
            success, message, _ = connection_manager.reconnect(
                request.sid, data.get('sessionId'), data.get('code')
            )
            _report(success, message)

        except Exception as e:
            logger.error(f"Error reconnecting player: {e}")
            emit('error', {'message': 'Failed to reconnect'})

    @socketio.on('leave_room')
    def handle_leave_room(data=None):
        """Handle a player leaving a room voluntarily."""
        try:
            success, message, _ = connection_manager.leave_room(request.sid, _payload(data).get('code'))
            _report(success, message)

        except Exception as e:
            logger.error(f"Error leaving room: {e}")
            emit('error', {'message': 'Failed to leave room'})
