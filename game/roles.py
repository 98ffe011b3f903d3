"""
Role assignment for Who Lies Tonight.

Mafia is roughly a third of the table (at least one), there is always
one doctor, a detective joins only above four players, and everyone
else is a citizen.
"""

import logging
import math
import random
from typing import Dict, List, Optional
from utils.constants import GAME_CONFIG, ROLES

logger = logging.getLogger(__name__)

def mafia_count_for(player_count: int) -> int:
    return max(1, math.floor(player_count * GAME_CONFIG['MAFIA_RATIO']))

def has_detective(player_count: int) -> bool:
    return player_count > 4

def assign_roles(player_ids: List[str], rng: Optional[random.Random] = None) -> Dict[str, str]:
    """
    Assign a role to every player.

    Args:
        player_ids: Ids of all players in the room (caller guarantees at least 4)
        rng: Optional random source, defaults to the module-level generator

    Returns:
        Mapping of player id to role
    """
    rng = rng or random
    shuffled = list(player_ids)
    rng.shuffle(shuffled)

    total = len(shuffled)
    roles = [ROLES['MAFIA']] * mafia_count_for(total)
    roles.append(ROLES['DOCTOR'])
    if has_detective(total):
        roles.append(ROLES['DETECTIVE'])
    roles.extend([ROLES['CITIZEN']] * (total - len(roles)))

    assignment = dict(zip(shuffled, roles))
    logger.debug(f"Assigned roles for {total} players: {roles.count(ROLES['MAFIA'])} mafia")
    return assignment
