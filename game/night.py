"""
Night Resolver for Who Lies Tonight.

Handles mafia vote tallying, the doctor's save and the detective's
private investigation. Contains no scheduling logic - the scheduler
decides when a night is resolved.
"""

import logging
import random
from collections import Counter
from typing import Dict, List, Optional
from rooms.models import MafiaVote, Player, Room
from utils.constants import CUTSCENE_VARIANTS, NIGHT_OUTCOMES, ROLES
from .models import NightResult

logger = logging.getLogger(__name__)

class NightResolver:
    """
    Resolves night actions into a public outcome.

    Mafia votes are tallied by target; the highest count wins and ties
    are broken uniformly at random. A matching doctor save cancels the kill.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Initialize night resolver.

        Args:
            rng: Optional random source for tie-breaks and cutscene picks
        """
        self.rng = rng or random.Random()

    def pick_target(self, mafia_votes: List[MafiaVote]) -> Optional[str]:
        """
        Choose the kill target from the recorded mafia votes.

        Returns:
            The chosen target id, or None when no vote was cast
        """
        if not mafia_votes:
            return None

        counts = Counter(vote.target_id for vote in mafia_votes)
        top_count = max(counts.values())
        candidates = [target for target, count in counts.items() if count == top_count]
        return self.rng.choice(candidates)

    def resolve(self, mafia_votes: List[MafiaVote], doctor_save: Optional[str],
                players: Dict[str, Player]) -> NightResult:
        """
        Resolve one night and apply the kill, if any.

        Args:
            mafia_votes: Votes cast this night (one per mafia member)
            doctor_save: Player id protected by the doctor, or None
            players: Room roster keyed by player id

        Returns:
            NightResult describing what happened
        """
        vote_counts = dict(Counter(vote.target_id for vote in mafia_votes))
        target_id = self.pick_target(mafia_votes)

        if target_id is None:
            return NightResult(outcome=NIGHT_OUTCOMES['NO_KILL'], vote_counts=vote_counts)

        if target_id == doctor_save:
            logger.info(f"Kill on {target_id} blocked by the doctor")
            return NightResult(
                outcome=NIGHT_OUTCOMES['SAVED'],
                target_id=target_id,
                cutscene_variant=self.rng.choice(CUTSCENE_VARIANTS),
                vote_counts=vote_counts
            )

        target = players.get(target_id)
        if not target or not target.alive:
            logger.warning(f"Night target {target_id} is already dead - no kill")
            return NightResult(outcome=NIGHT_OUTCOMES['NO_KILL'], target_id=target_id, vote_counts=vote_counts)

        target.alive = False
        return NightResult(
            outcome=NIGHT_OUTCOMES['KILLED'],
            target_id=target_id,
            killed_player_id=target_id,
            cutscene_variant=self.rng.choice(CUTSCENE_VARIANTS),
            vote_counts=vote_counts
        )

    def resolve_room(self, room: Room) -> NightResult:
        """Resolve a room's night using only votes from still-living mafia."""
        living_ids = {p.player_id for p in room.get_alive_players()}
        living_votes = [vote for vote in room.mafia_votes if vote.voter_id in living_ids]
        result = self.resolve(living_votes, room.doctor_save, room.players)
        logger.info(f"[{room.code}] Night {room.round} resolved: {result.outcome}")
        return result

    def all_actions_submitted(self, room: Room) -> bool:
        """
        Check whether every required living role-holder has acted.

        Every living mafia must have voted; a living doctor must have chosen
        a save; a living detective must have chosen a target.
        """
        alive_mafia = room.get_alive_mafia()
        if not alive_mafia:
            return False

        voters = {vote.voter_id for vote in room.mafia_votes}
        if any(p.player_id not in voters for p in alive_mafia):
            return False

        if room.alive_with_role(ROLES['DOCTOR']) and room.doctor_save is None:
            return False

        if room.alive_with_role(ROLES['DETECTIVE']) and room.detective_target is None:
            return False

        return True

    def investigate(self, target: Player) -> Dict[str, object]:
        """Build the detective's private result for a target."""
        return {
            'targetId': target.player_id,
            'targetName': target.name,
            'isMafia': target.is_mafia
        }
