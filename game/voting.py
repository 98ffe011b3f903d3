"""
Vote Resolver for Who Lies Tonight.

Handles day vote validation, counting, and lynch determination.
Contains no phase logic - purely voting mechanics.
"""

import logging
from collections import Counter
from typing import Dict, Optional, Tuple
from rooms.models import Player, Room
from .models import VoteResults

logger = logging.getLogger(__name__)

class VoteResolver:
    """
    Resolves the day vote.

    Only a strict, untied top count lynches. A tie at the top or
    zero votes leaves everyone alive.
    """

    def validate_vote(self, voter: Optional[Player], target: Optional[Player]) -> Tuple[bool, str]:
        """
        Validate a vote before recording it.

        Args:
            voter: Player casting the vote
            target: Player being voted for

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not voter or not voter.alive:
            return False, "You cannot vote."

        if not target or not target.alive:
            return False, "Invalid vote target."

        if voter.player_id == target.player_id:
            return False, "Cannot vote for yourself."

        return True, "Vote is valid"

    def tally(self, votes: Dict[str, str], players: Dict[str, Player]) -> VoteResults:
        """
        Count votes from living voters and pick the lynch target.

        Args:
            votes: voter id -> target id
            players: Room roster keyed by player id

        Returns:
            VoteResults with the lynched player id (or None)
        """
        counted = {}
        for voter_id, target_id in votes.items():
            voter = players.get(voter_id)
            if not voter or not voter.alive or voter_id == target_id:
                continue
            counted[voter_id] = target_id

        vote_counts = dict(Counter(counted.values()))
        results = VoteResults(vote_counts=vote_counts, total_votes=len(counted))

        if not vote_counts:
            return results

        top_count = max(vote_counts.values())
        leaders = [target for target, count in vote_counts.items() if count == top_count]

        if len(leaders) > 1:
            results.tied_players = leaders
            return results

        results.lynched_player_id = leaders[0]
        return results

    def resolve_room(self, room: Room) -> VoteResults:
        """Resolve a room's day vote and apply the lynch."""
        results = self.tally(room.day_votes, room.players)

        lynched = room.get_player(results.lynched_player_id)
        if lynched and lynched.alive:
            lynched.alive = False
            logger.info(f"[{room.code}] {lynched.name} lynched with {results.vote_counts[lynched.player_id]} votes")
        else:
            results.lynched_player_id = None
            logger.info(f"[{room.code}] No lynch (votes: {results.total_votes}, tie: {results.is_tie})")

        return results

    def all_votes_in(self, room: Room) -> bool:
        """True once every living player has a vote on record."""
        alive_ids = {p.player_id for p in room.get_alive_players()}
        if not alive_ids:
            return False
        return alive_ids.issubset(room.day_votes.keys())
