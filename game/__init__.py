"""
Game Module for Who Lies Tonight.

Contains all game rules: roles, night and vote resolution, win checks,
the phase scheduler and chat gating. Game operations happen within rooms
but are separate from room management.
"""

from .models import Winner, NightResult, VoteResults, PlayerResult, GameResult
from .roles import assign_roles, mafia_count_for
from .night import NightResolver
from .voting import VoteResolver
from .win import check_win
from .chat import ChatGate
from .narrator import get_narrator_text
from .scheduler import PhaseScheduler
from .manager import GameManager

__all__ = [
    # Data models
    'Winner',
    'NightResult',
    'VoteResults',
    'PlayerResult',
    'GameResult',

    # Rules
    'assign_roles',
    'mafia_count_for',
    'check_win',
    'get_narrator_text',

    # Managers
    'GameManager',
    'PhaseScheduler',
    'NightResolver',
    'VoteResolver',
    'ChatGate'
]
