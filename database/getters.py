"""
Database Getters for Who Lies Tonight.

Contains all read operations for persistent data only.
Rooms and games in progress live in memory.
All session management is contained within this module.
"""

import logging
from typing import List, Optional, Dict, Any
from sqlalchemy import func

from .config import get_db_session
from .models import GameRecord, PlayerScore

logger = logging.getLogger(__name__)

# ==============================================================================
# LEADERBOARD
# ==============================================================================

def get_leaderboard(room_code: Optional[str] = None, limit: int = 10) -> List[Dict[str, Any]]:
    """
    Get the top scores, optionally limited to players last seen in a room.

    Args:
        room_code: Only include players whose last game was in this room
        limit: Maximum number of rows

    Returns:
        Rows ordered by total score, highest first
    """
    with get_db_session() as session:
        query = session.query(PlayerScore)
        if room_code:
            query = query.filter(PlayerScore.last_room_code == room_code.upper())

        rows = query.order_by(PlayerScore.total_score.desc(), PlayerScore.id.asc()).limit(limit).all()
        return [row.to_dict() for row in rows]

# ==============================================================================
# STATISTICS
# ==============================================================================

def get_game_statistics() -> Dict[str, Any]:
    """Aggregate statistics over every recorded game."""
    with get_db_session() as session:
        total_games = session.query(func.count(GameRecord.id)).scalar() or 0
        mafia_wins = session.query(func.count(GameRecord.id)).filter(GameRecord.winner == 'mafia').scalar() or 0
        town_wins = session.query(func.count(GameRecord.id)).filter(GameRecord.winner == 'town').scalar() or 0
        avg_rounds = session.query(func.avg(GameRecord.total_rounds)).scalar() or 0.0

        durations = [record.duration_seconds for record in session.query(GameRecord).all()]
        avg_duration = sum(durations) / len(durations) if durations else 0.0

        return {
            'total_games': total_games,
            'mafia_wins': mafia_wins,
            'town_wins': town_wins,
            'mafia_win_rate': (mafia_wins / total_games) * 100 if total_games else 0.0,
            'avg_rounds': round(float(avg_rounds), 2),
            'avg_game_duration': round(avg_duration, 1)
        }
