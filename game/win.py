"""
Win evaluation for Who Lies Tonight.

Computed from the living roster only: town wins when no mafia is left,
mafia wins once it matches or outnumbers everyone else.
"""

from rooms.models import Room
from .models import Winner

def evaluate(alive_mafia: int, alive_town: int) -> Winner:
    if alive_mafia == 0:
        return Winner.TOWN
    if alive_mafia >= alive_town:
        return Winner.MAFIA
    return Winner.NONE

def check_win(room: Room) -> Winner:
    """Evaluate a room's current living roster."""
    alive = room.get_alive_players()
    alive_mafia = sum(1 for p in alive if p.is_mafia)
    return evaluate(alive_mafia, len(alive) - alive_mafia)
