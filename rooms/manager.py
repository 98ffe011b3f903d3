"""
Main room management system.

Handles room creation and joining, and coordinates between the registry,
player management and connection tracking.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from .broadcaster import Broadcaster
from .connection_manager import ConnectionManager
from .models import Player, Room
from .player_manager import PlayerManager
from .registry import RoomRegistry
from utils.helpers import normalize_room_code

logger = logging.getLogger(__name__)

class RoomManager:
    """Main room management coordinator."""

    def __init__(self,
                 registry: RoomRegistry,
                 player_manager: PlayerManager,
                 connection_manager: ConnectionManager,
                 broadcaster: Broadcaster):
        self.registry = registry
        self.player_manager = player_manager
        self.connection_manager = connection_manager
        self.broadcaster = broadcaster

    def create_room(self, connection_id: str, username: str,
                    avatar: Any = None) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
        """
        Create a new room with the caller as host.

        Args:
            connection_id: Creator's transport id
            username: Creator's chosen username
            avatar: Opaque avatar reference

        Returns:
            tuple: (success, message, room_created payload)
        """
        if self.connection_manager.resolve(connection_id):
            return False, "Leave your current room first.", None

        room = self.registry.create_room()
        with self.registry.locked(room.code) as locked_room:
            if locked_room is None:
                return False, "Failed to create room.", None

            success, message, player = self.player_manager.add_player(
                locked_room, connection_id, username, avatar, now=self.registry.clock()
            )
            if not success:
                self.registry.delete_room(room.code)
                return False, message, None

            payload = self._welcome(connection_id, locked_room, player, 'room_created')

        logger.info(f"{player.name} created room {room.code}")
        return True, "Room created successfully", payload

    def join_room(self, connection_id: str, room_code: Optional[str], username: str,
                  avatar: Any = None) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
        """
        Join an existing room that has not started yet.

        Returns:
            tuple: (success, message, room_joined payload)
        """
        if self.connection_manager.resolve(connection_id):
            return False, "Leave your current room first.", None

        code = normalize_room_code(room_code)
        with self.registry.locked(code) as room:
            if room is None:
                return False, "Room not found.", None

            success, message, player = self.player_manager.add_player(
                room, connection_id, username, avatar, now=self.registry.clock()
            )
            if not success:
                return False, message, None

            payload = self._welcome(connection_id, room, player, 'room_joined')
            self.broadcaster.system_message(room, f"{player.name} joined the room.")

        logger.info(f"{player.name} joined room {code}")
        return True, "Joined room successfully", payload

    def _welcome(self, connection_id: str, room: Room, player: Player, event: str) -> Dict[str, Any]:
        """Bind the new player, send their private welcome and refresh the roster."""
        self.connection_manager.bind(connection_id, room, player)
        self.registry.touch(room)

        payload = {
            'code': room.code,
            'playerId': player.player_id,
            'sessionId': player.session_id,
            'players': room.public_players(),
            'isHost': self.player_manager.is_host(room, player.player_id)
        }
        self.broadcaster.to_connection(connection_id, event, payload)
        self.broadcaster.room_update(room)
        return payload

    def get_active_rooms(self) -> List[Dict[str, Any]]:
        """Summaries of every live room."""
        summaries = []
        for code in self.registry.active_room_codes():
            with self.registry.locked(code) as room:
                if room is None:
                    continue
                host = room.get_player(room.host_id)
                summaries.append({
                    'code': room.code,
                    'phase': room.phase,
                    'round': room.round,
                    'players': room.player_count,
                    'started': room.started,
                    'host': host.name if host else None
                })
        return summaries

    def cleanup_idle(self) -> List[str]:
        """Evict rooms idle past the timeout."""
        return self.registry.evict_idle()
