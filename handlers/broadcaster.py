"""
Socket.IO broadcaster.

Delivers the core's outbound events through Flask-SocketIO. Works both
inside request handlers and from timer threads, so it never relies on the
Flask request context.
"""

import logging
import time
from typing import Any, Dict
from rooms.broadcaster import Broadcaster

logger = logging.getLogger(__name__)

NAMESPACE = '/'

class SocketIOBroadcaster(Broadcaster):
    """Broadcaster backed by a flask_socketio.SocketIO instance."""

    def __init__(self, socketio, clock=time.time):
        super().__init__(clock)
        self.socketio = socketio

    def to_room(self, room_code: str, event: str, payload: Dict[str, Any]) -> None:
        self.socketio.emit(event, payload, to=room_code, namespace=NAMESPACE)

    def to_connection(self, connection_id: str, event: str, payload: Dict[str, Any]) -> None:
        self.socketio.emit(event, payload, to=connection_id, namespace=NAMESPACE)

    def join(self, connection_id: str, room_code: str) -> None:
        self.socketio.server.enter_room(connection_id, room_code, namespace=NAMESPACE)

    def leave(self, connection_id: str, room_code: str) -> None:
        try:
            self.socketio.server.leave_room(connection_id, room_code, namespace=NAMESPACE)
        except Exception as e:
            logger.debug(f"Could not remove {connection_id} from {room_code}: {e}")
