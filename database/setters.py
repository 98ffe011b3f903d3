"""
Database Setters for Who Lies Tonight.

Contains all write operations to the database. All session management
is contained within this module - other modules should never handle sessions directly.
"""

import logging
from datetime import datetime, timezone

from utils.constants import WIN_SCORES
from .config import get_db_session
from .models import GameRecord, PlayerScore

logger = logging.getLogger(__name__)

# ==============================================================================
# GAME RESULTS
# ==============================================================================

def record_game_result(result) -> int:
    """
    Store a finished game and update every participant's score.

    Scores are keyed by session id, so two players with the same name in
    different rooms keep separate rows. Winners gain the side's score;
    everyone gains a game played.

    Args:
        result: game.models.GameResult

    Returns:
        Id of the new game record
    """
    with get_db_session() as session:
        record = GameRecord(
            room_code=result.room_code,
            winner=result.winner,
            total_rounds=result.rounds,
            total_players=result.player_count,
            started_at=result.started_at,
            ended_at=result.ended_at
        )
        session.add(record)

        for player in result.players:
            update_player_score(session, player.session_id, player.name,
                                result.room_code, result.winner, player.won)

        session.flush()
        logger.info(f"Recorded game in room {result.room_code}: {result.winner} wins "
                    f"({result.player_count} players, {result.rounds} rounds)")
        return record.id

def update_player_score(session, session_id: str, player_name: str, room_code: str,
                        winner: str, won: bool) -> PlayerScore:
    """Create or update a leaderboard row inside an open session."""
    score_gain = WIN_SCORES.get(winner, 0) if won else 0

    score = session.query(PlayerScore).filter_by(session_id=session_id).first()
    if not score:
        score = PlayerScore(
            session_id=session_id,
            player_name=player_name,
            total_score=0,
            games_won=0,
            games_played=0
        )
        session.add(score)

    score.player_name = player_name  # keep the displayed name current
    score.total_score += score_gain
    score.games_won += 1 if won else 0
    score.games_played += 1
    score.last_room_code = room_code
    score.updated_at = datetime.now(timezone.utc)

    logger.debug(f"Score for {player_name}: +{score_gain} (total {score.total_score})")
    return score

def clear_results():
    """Delete every game record and score (used by tests and admin resets)."""
    with get_db_session() as session:
        removed_scores = session.query(PlayerScore).delete()
        removed_games = session.query(GameRecord).delete()
        logger.info(f"Cleared {removed_games} game records and {removed_scores} scores")
