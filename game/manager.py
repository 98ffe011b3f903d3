"""
Game Manager - Coordinator for game operations.

Validates every inbound game action against the room's phase, the
player's role and whether they are alive, mutates the room under its lock
and hands phase control to the PhaseScheduler.
"""

import logging
import random
import time
from typing import Any, Callable, Dict, Optional, Tuple
from rooms.broadcaster import Broadcaster
from rooms.connection_manager import ConnectionManager
from rooms.models import MafiaVote, Player, Room
from rooms.player_manager import PlayerManager
from rooms.registry import RoomRegistry
from utils.constants import CHAT_CHANNELS, GAME_CONFIG, NIGHT_ACTIONS, PHASES
from utils.helpers import normalize_room_code, sanitize_message
from .chat import ChatGate
from .roles import assign_roles
from .scheduler import PhaseScheduler

logger = logging.getLogger(__name__)

ROLE_ACTION_ERRORS = {
    'kill': "Only mafia can kill.",
    'save': "Only doctor can save.",
    'investigate': "Only detective can investigate."
}

class GameManager:
    """Coordinates all game operations within rooms."""

    def __init__(self,
                 registry: RoomRegistry,
                 player_manager: PlayerManager,
                 connection_manager: ConnectionManager,
                 scheduler: PhaseScheduler,
                 broadcaster: Broadcaster,
                 chat_gate: Optional[ChatGate] = None,
                 clock: Callable[[], float] = time.time,
                 rng: Optional[random.Random] = None,
                 min_players: int = GAME_CONFIG['MIN_PLAYERS']):
        self.registry = registry
        self.player_manager = player_manager
        self.connection_manager = connection_manager
        self.scheduler = scheduler
        self.broadcaster = broadcaster
        self.chat_gate = chat_gate or ChatGate()
        self.clock = clock
        self.rng = rng
        self.min_players = min_players

    def _player_in(self, room: Room, connection_id: str) -> Optional[Player]:
        """Resolve the caller's player record in a room."""
        player_id = self.connection_manager.player_id_for(connection_id, room.code)
        return room.get_player(player_id)

    def start_game(self, connection_id: str, room_code: str) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
        """
        Start a game: assign roles, tell each player theirs, begin the countdown.

        Args:
            connection_id: Caller's transport id (must be the host)
            room_code: Code of the room

        Returns:
            tuple: (success, message, game_data)
        """
        with self.registry.locked(normalize_room_code(room_code)) as room:
            if room is None:
                return False, "Room not found.", None

            player = self._player_in(room, connection_id)
            if not player:
                return False, "You are not in this room.", None
            if not self.player_manager.is_host(room, player.player_id):
                return False, "Only the host can start.", None
            if room.started:
                return False, "Game already started.", None
            if room.player_count < self.min_players:
                return False, f"Need at least {self.min_players} players to start.", None

            room.started = True
            room.started_at = self.clock()

            role_map = assign_roles(list(room.players.keys()), self.rng)
            for player_id, role in role_map.items():
                room.players[player_id].role = role

            mafia_team = [
                {'id': p.player_id, 'name': p.name, 'avatar': p.avatar}
                for p in room.get_mafia()
            ]
            players = room.public_players()
            for p in room.players.values():
                self.broadcaster.to_player(p, 'game_started', {
                    'role': p.role,
                    'mafiaTeam': mafia_team if p.is_mafia else [],
                    'players': players,
                    'phase': PHASES['NIGHT']
                })

            self.registry.touch(room)
            self.scheduler.begin_game(room)
            self.broadcaster.room_update(room)

            logger.info(f"Started game in room {room.code} with {room.player_count} players "
                        f"({len(mafia_team)} mafia)")
            return True, "Game started", {'code': room.code, 'playerCount': room.player_count}

    def night_action(self, connection_id: str, room_code: str, action: str,
                     target_id: Optional[str]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
        """
        Record a kill vote, a doctor save or a detective investigation.

        Each living role-holder acts at most once per night. The night
        resolves early once every required action is in.

        Returns:
            tuple: (success, message, action_data)
        """
        with self.registry.locked(normalize_room_code(room_code)) as room:
            if room is None:
                return False, "Room not found.", None

            player = self._player_in(room, connection_id)
            if not player:
                return False, "You are not in this room.", None
            if not room.is_accepting(PHASES['NIGHT']):
                return False, "Not night phase.", None
            if not player.alive:
                return False, "You are not alive.", None
            if player.player_id in room.night_submitted:
                return False, "You already submitted a night action.", None

            target = room.get_player(target_id)
            if not target or not target.alive:
                return False, "Invalid target.", None

            required_role = NIGHT_ACTIONS.get(action)
            if required_role is None:
                return False, "Unknown action.", None
            if player.role != required_role:
                return False, ROLE_ACTION_ERRORS[action], None

            if action == 'kill':
                if target.player_id == player.player_id:
                    return False, "Cannot target yourself.", None
                room.mafia_votes.append(MafiaVote(voter_id=player.player_id, target_id=target.player_id))
            elif action == 'save':
                room.doctor_save = target.player_id
            else:
                room.detective_target = target.player_id
                self.broadcaster.to_player(
                    player, 'detective_result', self.scheduler.night_resolver.investigate(target)
                )

            room.night_submitted.add(player.player_id)
            self.registry.touch(room)
            logger.debug(f"[{room.code}] {player.name} submitted night action: {action}")

            self.scheduler.check_early_resolution(room)
            return True, "Action submitted", {'action': action, 'targetId': target.player_id}

    def day_vote(self, connection_id: str, room_code: str,
                 target_id: Optional[str]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
        """
        Cast or change a day vote. Votes are public.

        Returns:
            tuple: (success, message, vote_snapshot)
        """
        with self.registry.locked(normalize_room_code(room_code)) as room:
            if room is None:
                return False, "Room not found.", None

            voter = self._player_in(room, connection_id)
            if not voter:
                return False, "You are not in this room.", None
            if not room.is_accepting(PHASES['VOTE']):
                return False, "Not voting phase.", None

            is_valid, error = self.scheduler.vote_resolver.validate_vote(voter, room.get_player(target_id))
            if not is_valid:
                return False, error, None

            room.day_votes[voter.player_id] = target_id
            self.registry.touch(room)

            snapshot = room.vote_snapshot()
            self.broadcaster.to_room(room.code, 'vote_updated', snapshot)

            self.scheduler.check_early_resolution(room)
            return True, "Vote recorded", snapshot

    def skip_discussion(self, connection_id: str, room_code: str) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
        """Host-only: end the day discussion and open voting."""
        with self.registry.locked(normalize_room_code(room_code)) as room:
            if room is None:
                return False, "Room not found.", None

            player = self._player_in(room, connection_id)
            if not player or not self.player_manager.is_host(room, player.player_id):
                return False, "Only the host can skip discussion.", None
            if not room.is_accepting(PHASES['DAY']):
                return False, "Can only skip during discussion phase.", None

            self.scheduler.skip_discussion(room)
            return True, "Discussion skipped", {'phase': room.phase}

    def play_again(self, connection_id: str, room_code: str) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
        """Host-only: return an ended room to the lobby, keeping its players."""
        with self.registry.locked(normalize_room_code(room_code)) as room:
            if room is None:
                return False, "Room not found.", None

            player = self._player_in(room, connection_id)
            if not player or not self.player_manager.is_host(room, player.player_id):
                return False, "Only the host can restart.", None
            if room.phase != PHASES['ENDED']:
                return False, "Game is still in progress.", None

            self.scheduler.reset(room)

            self.broadcaster.to_room(room.code, 'room_reset', {
                'code': room.code,
                'players': room.public_players()
            })
            self.broadcaster.room_update(room)
            self.broadcaster.system_message(room, "The host started a new round! Waiting for players...")
            return True, "Room reset", room.to_dict()

    def chat_message(self, connection_id: str, room_code: str, text: Optional[str],
                     channel: Optional[str] = None) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
        """
        Deliver a chat message after authorization and rate limiting.

        Mafia-channel messages go to every mafia member, eliminated ones
        included; global messages go to the whole room. Messages that are
        empty after sanitizing are dropped without counting against the
        rate limit.

        Returns:
            tuple: (success, message, chat_payload)
        """
        with self.registry.locked(normalize_room_code(room_code)) as room:
            if room is None:
                return False, "Room not found.", None

            player = self._player_in(room, connection_id)
            if not player:
                return False, "You are not in this room.", None

            channel = channel or CHAT_CHANNELS['GLOBAL']
            allowed, error = self.chat_gate.authorize(room, player, channel)
            if not allowed:
                return False, error, None

            clean_text = sanitize_message(text)
            if not clean_text:
                return True, "Empty message dropped", None

            now = self.clock()
            allowed, error = self.chat_gate.consume(player, now)
            if not allowed:
                return False, error, None

            payload = {
                'senderId': player.player_id,
                'senderName': player.name,
                'text': clean_text,
                'channel': channel,
                'timestamp': int(now * 1000)
            }

            if channel == CHAT_CHANNELS['MAFIA']:
                for member in room.get_mafia():
                    self.broadcaster.to_player(member, 'chat', payload)
            else:
                self.broadcaster.to_room(room.code, 'chat', payload)

            self.registry.touch(room)
            return True, "Message sent", payload
