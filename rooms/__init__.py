"""
Rooms Module for Who Lies Tonight.

Contains the in-memory room registry, player and connection management.
Game rules live in the game package and operate on these rooms.
"""

from .models import Room, Player, PhaseTicket, MafiaVote
from .registry import RoomRegistry
from .player_manager import PlayerManager
from .broadcaster import Broadcaster
from .connection_manager import ConnectionManager
from .manager import RoomManager

__all__ = [
    # Data models
    'Room',
    'Player',
    'PhaseTicket',
    'MafiaVote',

    # Managers
    'RoomRegistry',
    'PlayerManager',
    'ConnectionManager',
    'RoomManager',
    'Broadcaster'
]
