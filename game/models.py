"""
Data models for game resolution.

These represent the results produced by the resolvers and handed
to the scheduler, the broadcaster and the result recorder.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict
from datetime import datetime, timezone
from enum import Enum

class Winner(Enum):
    """Win evaluation result."""
    MAFIA = "mafia"
    TOWN = "town"
    NONE = "none"

    @property
    def is_decided(self) -> bool:
        return self is not Winner.NONE

@dataclass
class NightResult:
    """Outcome of resolving one night."""
    outcome: str  # 'killed', 'saved', 'no_kill'
    target_id: Optional[str] = None
    killed_player_id: Optional[str] = None
    cutscene_variant: Optional[str] = None
    vote_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def saved(self) -> bool:
        return self.outcome == 'saved'

@dataclass
class VoteResults:
    """Results of a day vote."""
    vote_counts: Dict[str, int] = field(default_factory=dict)  # target -> count
    lynched_player_id: Optional[str] = None
    tied_players: List[str] = field(default_factory=list)
    total_votes: int = 0

    @property
    def is_tie(self) -> bool:
        return len(self.tied_players) > 1

@dataclass
class PlayerResult:
    """Per-player line of a finished game."""
    session_id: str
    name: str
    role: str
    won: bool

@dataclass
class GameResult:
    """Everything handed to the result recorder when a game ends."""
    room_code: str
    winner: str
    rounds: int
    player_count: int
    started_at: datetime
    ended_at: datetime
    players: List[PlayerResult] = field(default_factory=list)

def timestamp_to_datetime(value: Optional[float]) -> datetime:
    """Convert an epoch timestamp to an aware UTC datetime (now if missing)."""
    if value is None:
        return datetime.now(timezone.utc)
    return datetime.fromtimestamp(value, tz=timezone.utc)
