"""
Outbound event interface for rooms.

The core never talks to the transport directly. It hands events to a
Broadcaster; handlers/broadcaster.py provides the Socket.IO implementation.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional
from .models import Player, Room
from utils.constants import CHAT_CHANNELS

logger = logging.getLogger(__name__)

class Broadcaster:
    """
    Base broadcaster that only logs.

    Subclasses override to_room, to_connection, join and leave.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock

    def to_room(self, room_code: str, event: str, payload: Dict[str, Any]) -> None:
        logger.debug(f"[{room_code}] {event}")

    def to_connection(self, connection_id: str, event: str, payload: Dict[str, Any]) -> None:
        logger.debug(f"[{connection_id}] {event}")

    def join(self, connection_id: str, room_code: str) -> None:
        pass

    def leave(self, connection_id: str, room_code: str) -> None:
        pass

    def to_player(self, player: Optional[Player], event: str, payload: Dict[str, Any]) -> None:
        """Send to a player's current connection if they are connected."""
        if player and player.connected and player.connection_id:
            self.to_connection(player.connection_id, event, payload)

    def room_update(self, room: Room) -> None:
        """Broadcast the public roster/phase snapshot."""
        self.to_room(room.code, 'room_updated', room.to_dict())

    def system_message(self, room: Room, text: str) -> None:
        """Send a system chat line to everyone in the room."""
        self.to_room(room.code, 'chat', {
            'senderId': 'system',
            'senderName': 'System',
            'text': text,
            'channel': CHAT_CHANNELS['GLOBAL'],
            'timestamp': int(self.clock() * 1000)
        })
