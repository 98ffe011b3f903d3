"""
Narration lines for night outcomes.

Pure function of (outcome, victim name); swap this module out to change
the tone of the game without touching any rules.
"""

import random
from typing import Optional
from utils.constants import NIGHT_OUTCOMES

KILL_LINES = [
    "The rain never stops in this city. Last night it washed {victim} off the streets for good.",
    "A shot in a dark alley, then silence. {victim} won't be seeing the sunrise.",
    "The syndicate collects its debts. {victim} paid in full last night.",
]

SAVE_LINES = [
    "They came for {victim} in the dead of night, but someone with steady hands got there first.",
    "{victim} should be lying in the morgue. A quiet medic had other plans.",
]

NO_KILL_LINES = [
    "The night passed quiet. Too quiet. Nobody was found in the gutters this morning.",
    "No sirens, no chalk outlines. The mob held its fire... for now.",
]

DAY_LINES = [
    "The city wakes up bruised and suspicious. Talk. Accuse. Vote.",
    "Daylight cuts through the smog. Someone at this table is lying.",
]

def get_narrator_text(outcome: str, victim_name: Optional[str] = None,
                      rng: Optional[random.Random] = None) -> str:
    """Pick a narration for the night outcome followed by a dawn line."""
    rng = rng or random
    if outcome == NIGHT_OUTCOMES['KILLED']:
        lines = KILL_LINES
    elif outcome == NIGHT_OUTCOMES['SAVED']:
        lines = SAVE_LINES
    else:
        lines = NO_KILL_LINES

    main_text = rng.choice(lines).replace('{victim}', victim_name or 'someone')
    return f"{main_text}\n\n{rng.choice(DAY_LINES)}"
