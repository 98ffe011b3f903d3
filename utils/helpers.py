"""
Helper utilities for Who Lies Tonight.

This module contains utility functions used throughout the application
for validation, generation, and text cleanup.
"""

import random
import re
import threading
import uuid
from typing import Callable, Optional, Tuple
from .constants import GAME_CONFIG, ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH

def generate_room_code(length: int = ROOM_CODE_LENGTH) -> str:
    """Generate a random room code from the unambiguous alphabet."""
    return ''.join(random.choices(ROOM_CODE_ALPHABET, k=length))

def generate_player_id() -> str:
    """Generate a public player identifier."""
    return uuid.uuid4().hex[:12]

def generate_session_id() -> str:
    """Generate a secret session identifier used for reconnection."""
    return str(uuid.uuid4())

def normalize_room_code(code: Optional[str]) -> str:
    """Uppercase and trim a client-supplied room code."""
    return (code or '').strip().upper()

def sanitize_username(raw: Optional[str]) -> Optional[str]:
    """
    Clean up a username: strip markup characters and collapse whitespace.

    Args:
        raw: Username as typed by the player

    Returns:
        The cleaned username, or None if it is not 3-16 characters long
    """
    if not raw or not isinstance(raw, str):
        return None

    cleaned = re.sub(r'[<>&"\'/\\]', '', raw)
    cleaned = re.sub(r'\s+', ' ', cleaned).strip()

    if len(cleaned) < GAME_CONFIG['USERNAME_MIN_LENGTH'] or len(cleaned) > GAME_CONFIG['USERNAME_MAX_LENGTH']:
        return None

    return cleaned

def validate_username(raw: Optional[str]) -> Tuple[bool, Optional[str], Optional[str]]:
    """
    Validate a username for the game.

    Returns:
        tuple: (is_valid, error_message, cleaned_username)
    """
    cleaned = sanitize_username(raw)
    if cleaned is None:
        return False, (
            f"Invalid username ({GAME_CONFIG['USERNAME_MIN_LENGTH']}-"
            f"{GAME_CONFIG['USERNAME_MAX_LENGTH']} chars)."
        ), None
    return True, None, cleaned

def sanitize_message(message: Optional[str]) -> str:
    """
    Sanitize a chat message to prevent abuse.

    Args:
        message: Raw message content

    Returns:
        Sanitized message content (may be empty)
    """
    if not message or not isinstance(message, str):
        return ''

    # Remove potential HTML/script content
    message = re.sub(r'[<>]', '', message)

    return message.strip()[:GAME_CONFIG['CHAT_MAX_LENGTH']]

def start_timer(delay: float, callback: Callable, *args) -> threading.Timer:
    """
    Start a daemon timer that runs callback(*args) after delay seconds.

    The returned handle exposes cancel().
    """
    timer = threading.Timer(delay, callback, args=args)
    timer.daemon = True
    timer.start()
    return timer

def format_time_duration(seconds: int) -> str:
    """
    Format a duration in seconds to a human-readable string.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 60:
        return f"{seconds}s"
    minutes = seconds // 60
    remaining_seconds = seconds % 60
    if remaining_seconds == 0:
        return f"{minutes}m"
    return f"{minutes}m {remaining_seconds}s"
