"""
Chat gate for Who Lies Tonight.

Decides whether a player may speak on a channel and enforces the
per-player rate limit. Delivery is left to the caller.
"""

import logging
from typing import Optional, Tuple
from rooms.models import Player, Room
from utils.constants import CHAT_CHANNELS, GAME_CONFIG

logger = logging.getLogger(__name__)

class ChatGate:
    """Channel authorization plus a fixed-window rate limit."""

    def __init__(self,
                 rate_limit: int = GAME_CONFIG['CHAT_RATE_LIMIT'],
                 window_seconds: float = GAME_CONFIG['CHAT_RATE_WINDOW']):
        """
        Initialize the chat gate.

        Args:
            rate_limit: Maximum accepted messages per window
            window_seconds: Length of the rate-limit window
        """
        self.rate_limit = rate_limit
        self.window_seconds = window_seconds

    def authorize(self, room: Room, player: Optional[Player], channel: str) -> Tuple[bool, str]:
        """
        Check whether a player may post on a channel.

        Returns:
            Tuple of (allowed, error_message)
        """
        if not player or not player.connected:
            return False, "You are not connected to this room."

        if channel == CHAT_CHANNELS['MAFIA']:
            if not player.is_mafia:
                return False, "Only mafia can use mafia chat."
            if len(room.get_alive_mafia()) <= 1:
                return False, "Mafia chat disabled (only 1 mafia left)."
            return True, "OK"

        if channel != CHAT_CHANNELS['GLOBAL']:
            return False, "Unknown chat channel."

        if not player.alive:
            return False, "Spectators cannot send messages."

        return True, "OK"

    def consume(self, player: Player, now: float) -> Tuple[bool, str]:
        """
        Count one message against the player's rate limit.

        The window restarts once more than window_seconds have passed since
        it opened; inside the window, messages beyond the limit are rejected.
        """
        if now - player.chat_window_start > self.window_seconds:
            player.chat_window_start = now
            player.chat_count = 0

        if player.chat_count >= self.rate_limit:
            logger.debug(f"Rate limited chat from {player.name}")
            return False, "Slow down! (rate limit)"

        player.chat_count += 1
        return True, "OK"
