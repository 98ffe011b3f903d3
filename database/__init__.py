"""
Database Package for Who Lies Tonight.

Provides clean imports for all database functionality.
"""

# Models
from .models import (
    Base,
    GameRecord,
    PlayerScore
)

# Configuration and session management
from .config import (
    engine,
    SessionLocal,
    get_db_session,
    init_database
)

# Import getter functions
from .getters import (
    get_leaderboard,
    get_game_statistics
)

# Import setter functions
from .setters import (
    record_game_result,
    update_player_score,
    clear_results
)

__all__ = [
    # Models
    "Base",
    "GameRecord",
    "PlayerScore",

    # Configuration
    "engine",
    "SessionLocal",
    "get_db_session",
    "init_database",

    # Getters
    "get_leaderboard",
    "get_game_statistics",

    # Setters
    "record_game_result",
    "update_player_score",
    "clear_results",
]
