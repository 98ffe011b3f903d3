"""
Data models for room management.

These are the in-memory structures every other module operates on.
Rooms are volatile and never written to the database.
"""

import threading
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Set
from utils.constants import DEFAULT_ROLE, PHASES, ROLES

@dataclass
class PhaseTicket:
    """Identifies one instance of a phase; timers only act on the current ticket."""
    serial: int
    phase: str
    resolved: bool = False

@dataclass
class MafiaVote:
    """A single mafia member's night kill vote."""
    voter_id: str
    target_id: str

@dataclass
class Player:
    """Represents a participant in a room."""
    player_id: str
    session_id: str
    connection_id: Optional[str]
    name: str
    avatar: Any = None
    role: str = DEFAULT_ROLE
    alive: bool = True
    connected: bool = True
    disconnected_at: Optional[float] = None
    reconnect_deadline: Optional[float] = None
    grace_timer: Any = None
    chat_count: int = 0
    chat_window_start: float = 0.0

    @property
    def is_mafia(self) -> bool:
        return self.role == ROLES['MAFIA']

    def cancel_grace_timer(self) -> None:
        """Cancel a pending disconnect grace timer, if any."""
        if self.grace_timer is not None:
            self.grace_timer.cancel()
            self.grace_timer = None

    def reset_for_new_game(self, now: float) -> None:
        """Restore the pre-game state kept between rounds of play."""
        self.role = DEFAULT_ROLE
        self.alive = True
        self.chat_count = 0
        self.chat_window_start = now

    def to_public(self, host_id: Optional[str]) -> Dict[str, Any]:
        """Safe representation - omits role and session id."""
        return {
            'id': self.player_id,
            'name': self.name,
            'avatar': self.avatar,
            'alive': self.alive,
            'connected': self.connected,
            'isHost': self.player_id == host_id
        }

    def to_reveal(self) -> Dict[str, Any]:
        """Representation used in the end-of-game role reveal."""
        return {
            'id': self.player_id,
            'name': self.name,
            'role': self.role
        }

@dataclass
class Room:
    """Represents one game instance and all of its volatile state."""
    code: str
    host_id: Optional[str] = None
    phase: str = PHASES['LOBBY']
    round: int = 0
    players: Dict[str, Player] = field(default_factory=dict)  # player_id -> Player
    mafia_votes: List[MafiaVote] = field(default_factory=list)
    doctor_save: Optional[str] = None
    detective_target: Optional[str] = None
    night_submitted: Set[str] = field(default_factory=set)
    day_votes: Dict[str, str] = field(default_factory=dict)  # voter_id -> target_id
    timer: Any = None
    ticket: Optional[PhaseTicket] = None
    ticket_serial: int = 0
    last_activity: float = 0.0
    started: bool = False
    started_at: Optional[float] = None
    lock: Any = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def is_empty(self) -> bool:
        return not self.players

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        """Find player by public id."""
        if player_id is None:
            return None
        return self.players.get(player_id)

    def get_player_by_session(self, session_id: str) -> Optional[Player]:
        """Find player by stable session id."""
        for player in self.players.values():
            if player.session_id == session_id:
                return player
        return None

    def is_name_taken(self, name: str) -> bool:
        """Check name uniqueness (case-insensitive)."""
        lowered = name.lower()
        return any(p.name.lower() == lowered for p in self.players.values())

    def get_alive_players(self) -> List[Player]:
        return [p for p in self.players.values() if p.alive]

    def get_alive_mafia(self) -> List[Player]:
        return [p for p in self.players.values() if p.alive and p.is_mafia]

    def get_mafia(self) -> List[Player]:
        return [p for p in self.players.values() if p.is_mafia]

    def alive_with_role(self, role: str) -> List[Player]:
        return [p for p in self.players.values() if p.alive and p.role == role]

    def cancel_timer(self) -> None:
        """Cancel the active phase timer, if any."""
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None

    def issue_ticket(self, phase: str) -> PhaseTicket:
        """Replace the current phase ticket with a fresh one."""
        self.ticket_serial += 1
        self.ticket = PhaseTicket(serial=self.ticket_serial, phase=phase)
        return self.ticket

    def is_accepting(self, phase: str) -> bool:
        """True while the room is in phase and that phase has not been resolved."""
        return (
            self.phase == phase
            and self.ticket is not None
            and self.ticket.phase == phase
            and not self.ticket.resolved
        )

    def clear_night_state(self) -> None:
        self.mafia_votes = []
        self.doctor_save = None
        self.detective_target = None
        self.night_submitted = set()

    def clear_day_votes(self) -> None:
        self.day_votes = {}

    def forget_player_actions(self, player_id: str) -> None:
        """
        Drop pending votes cast by or aimed at a player who left.

        Anyone whose night action pointed at the leaver gets their action
        back so the night can still complete early.
        """
        for vote in self.mafia_votes:
            if vote.target_id == player_id:
                self.night_submitted.discard(vote.voter_id)
        self.mafia_votes = [
            v for v in self.mafia_votes
            if v.voter_id != player_id and v.target_id != player_id
        ]
        self.day_votes = {
            voter: target for voter, target in self.day_votes.items()
            if voter != player_id and target != player_id
        }
        if self.doctor_save == player_id:
            self.doctor_save = None
            for doctor in self.alive_with_role(ROLES['DOCTOR']):
                self.night_submitted.discard(doctor.player_id)
        self.night_submitted.discard(player_id)

    def public_players(self) -> List[Dict[str, Any]]:
        return [p.to_public(self.host_id) for p in self.players.values()]

    def to_dict(self) -> Dict[str, Any]:
        """Room snapshot for broadcasting (roles hidden)."""
        return {
            'code': self.code,
            'phase': self.phase,
            'round': self.round,
            'players': self.public_players(),
            'started': self.started,
            'hostId': self.host_id
        }

    def vote_snapshot(self) -> Dict[str, Any]:
        """Full vote map plus per-target counts; day votes are public."""
        tally: Dict[str, int] = {}
        for target_id in self.day_votes.values():
            tally[target_id] = tally.get(target_id, 0) + 1
        return {
            'votes': dict(self.day_votes),
            'tally': tally
        }
