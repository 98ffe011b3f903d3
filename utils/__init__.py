"""
Utilities module for Who Lies Tonight.

This module contains constants and helper functions
used throughout the application.
"""

from .constants import (
    ROLES, PHASES, NIGHT_ACTIONS, CHAT_CHANNELS, WINNER_TYPES,
    NIGHT_OUTCOMES, ELIMINATION_CAUSES, GAME_CONFIG
)
from .helpers import (
    generate_room_code, validate_username, sanitize_username,
    sanitize_message, normalize_room_code, start_timer
)

__all__ = [
    'ROLES',
    'PHASES',
    'NIGHT_ACTIONS',
    'CHAT_CHANNELS',
    'WINNER_TYPES',
    'NIGHT_OUTCOMES',
    'ELIMINATION_CAUSES',
    'GAME_CONFIG',
    'generate_room_code',
    'validate_username',
    'sanitize_username',
    'sanitize_message',
    'normalize_room_code',
    'start_timer'
]
