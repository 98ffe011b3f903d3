"""
Database Models for Who Lies Tonight.

Contains the SQLAlchemy model definitions for finished games and the
leaderboard. Live rooms are never stored here.
Pure data models with no business logic.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Index
from sqlalchemy.orm import declarative_base

# Create the base class for models
Base = declarative_base()

class GameRecord(Base):
    """One completed game."""

    __tablename__ = 'game_records'

    id = Column(Integer, primary_key=True)
    room_code = Column(String(10), nullable=False, index=True)
    winner = Column(String(10), nullable=False)  # mafia, town
    total_rounds = Column(Integer, default=0)
    total_players = Column(Integer, default=0)

    # Timestamps
    started_at = Column(DateTime(timezone=True), nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<GameRecord(room='{self.room_code}', winner='{self.winner}')>"

    @property
    def duration_seconds(self) -> int:
        if not self.started_at or not self.ended_at:
            return 0
        return int((self.ended_at - self.started_at).total_seconds())

class PlayerScore(Base):
    """Accumulated leaderboard score for one player session."""

    __tablename__ = 'player_scores'

    id = Column(Integer, primary_key=True)
    session_id = Column(String(64), unique=True, nullable=False, index=True)
    player_name = Column(String(32), nullable=False)

    # Statistics
    total_score = Column(Integer, default=0)
    games_won = Column(Integer, default=0)
    games_played = Column(Integer, default=0)
    last_room_code = Column(String(10), nullable=True)

    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Indexes
    __table_args__ = (
        Index('idx_score_room_total', 'last_room_code', 'total_score'),
    )

    def __repr__(self):
        return f"<PlayerScore(player='{self.player_name}', score={self.total_score})>"

    def to_dict(self):
        """Leaderboard row representation."""
        return {
            'player_name': self.player_name,
            'total_score': self.total_score,
            'games_won': self.games_won,
            'games_played': self.games_played
        }
