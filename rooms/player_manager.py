"""
Player management for rooms.

Handles player operations like joining, leaving, validation, and host promotion.
"""

import logging
from typing import Any, Optional, Tuple
from .models import Player, Room
from utils.constants import GAME_CONFIG
from utils.helpers import generate_player_id, generate_session_id, validate_username

logger = logging.getLogger(__name__)

class PlayerManager:
    """Manages player operations within rooms."""

    def __init__(self, max_players: int = GAME_CONFIG['MAX_PLAYERS']):
        self.max_players = max_players

    def add_player(self, room: Room, connection_id: str, username: str,
                   avatar: Any = None, now: float = 0.0) -> Tuple[bool, str, Optional[Player]]:
        """
        Add a player to a room.

        Args:
            room: The room to add player to
            connection_id: Player's current transport id
            username: Player's chosen username
            avatar: Opaque avatar reference
            now: Current time, used to start the chat window

        Returns:
            tuple: (success, message, player)
        """
        if room.started:
            return False, "Game already in progress.", None

        if room.player_count >= self.max_players:
            return False, f"Room is full (max {self.max_players} players).", None

        is_valid, error_msg, name = validate_username(username)
        if not is_valid:
            return False, error_msg or "Invalid username.", None

        if room.is_name_taken(name):
            return False, "Username already taken in this room.", None

        player = Player(
            player_id=generate_player_id(),
            session_id=generate_session_id(),
            connection_id=connection_id,
            name=name,
            avatar=avatar,
            chat_window_start=now
        )
        room.players[player.player_id] = player

        if room.host_id is None:
            room.host_id = player.player_id

        logger.info(f"Player {name} added to room {room.code}")
        return True, "Player added successfully", player

    def remove_player(self, room: Room, player_id: str) -> Tuple[bool, str, Optional[Player]]:
        """
        Remove a player from a room, promoting a new host if needed.

        Args:
            room: The room to remove player from
            player_id: Id of player to remove

        Returns:
            tuple: (success, message, removed_player)
        """
        player = room.players.pop(player_id, None)
        if not player:
            return False, "Player not found in room.", None

        player.cancel_grace_timer()

        if room.host_id == player_id:
            room.host_id = self.promote_host(room)

        logger.info(f"Player {player.name} removed from room {room.code}")
        return True, f"{player.name} left the room.", player

    def promote_host(self, room: Room) -> Optional[str]:
        """Pick the longest-standing remaining player as host."""
        new_host_id = next(iter(room.players), None)
        if new_host_id:
            logger.info(f"{room.players[new_host_id].name} is now the host of room {room.code}")
        return new_host_id

    def is_host(self, room: Room, player_id: Optional[str]) -> bool:
        return player_id is not None and room.host_id == player_id
