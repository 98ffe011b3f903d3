"""
Connection Manager for Who Lies Tonight rooms.

Tracks which transport connection belongs to which player, and owns the
disconnect grace period and the reconnect flow. Transport ids are volatile;
players are always addressed by their public player id.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple
from .broadcaster import Broadcaster
from .models import Player, Room
from .player_manager import PlayerManager
from .registry import RoomRegistry
from utils.constants import ELIMINATION_CAUSES, GAME_CONFIG, PHASES
from utils.helpers import normalize_room_code, start_timer

logger = logging.getLogger(__name__)

class ConnectionManager:
    """
    Maps connection ids to (room code, player id) and handles disconnects.

    A disconnected player keeps their seat for a grace period. If they
    reconnect with their session id in time, play continues; otherwise they
    are removed (before the game starts or after it ends) or eliminated
    (while it is running).
    """

    def __init__(self,
                 registry: RoomRegistry,
                 player_manager: PlayerManager,
                 scheduler: Any,
                 broadcaster: Broadcaster,
                 timer_factory: Callable = start_timer,
                 clock: Callable[[], float] = time.time,
                 lobby_grace: float = GAME_CONFIG['LOBBY_GRACE_PERIOD'],
                 game_grace: float = GAME_CONFIG['GAME_GRACE_PERIOD']):
        """
        Initialize the connection manager.

        Args:
            registry: Room registry
            player_manager: Used to remove players and promote hosts
            scheduler: Phase scheduler; runs the win check after forced eliminations
            broadcaster: Outbound event sink
            timer_factory: timer_factory(delay, callback, *args) -> handle with cancel()
            clock: Returns the current time in seconds
            lobby_grace: Grace period before the game has started
            game_grace: Grace period while a game is running
        """
        self.registry = registry
        self.player_manager = player_manager
        self.scheduler = scheduler
        self.broadcaster = broadcaster
        self.timer_factory = timer_factory
        self.clock = clock
        self.lobby_grace = lobby_grace
        self.game_grace = game_grace
        self.connections: Dict[str, Tuple[str, str]] = {}  # connection_id -> (room_code, player_id)
        self._lock = threading.Lock()

        registry.add_deletion_listener(self._forget_room)
        logger.debug("Connection manager initialized")

    # ------------------------------------------------------------------
    # Bindings
    # ------------------------------------------------------------------

    def bind(self, connection_id: str, room: Room, player: Player) -> None:
        """Attach a connection to a player and subscribe it to the room."""
        with self._lock:
            self.connections[connection_id] = (room.code, player.player_id)
        self.registry.register_session(player.session_id, connection_id)
        self.broadcaster.join(connection_id, room.code)

    def unbind(self, connection_id: Optional[str]) -> Optional[Tuple[str, str]]:
        if not connection_id:
            return None
        with self._lock:
            return self.connections.pop(connection_id, None)

    def resolve(self, connection_id: str) -> Optional[Tuple[str, str]]:
        """Get the (room_code, player_id) bound to a connection."""
        with self._lock:
            return self.connections.get(connection_id)

    def player_id_for(self, connection_id: str, room_code: Optional[str]) -> Optional[str]:
        """
        Get the player id a connection holds in a specific room.

        Returns None if the connection is unbound or bound to another room.
        """
        binding = self.resolve(connection_id)
        if not binding or binding[0] != normalize_room_code(room_code):
            return None
        return binding[1]

    def connection_count(self) -> int:
        with self._lock:
            return len(self.connections)

    def _forget_room(self, room: Room) -> None:
        """Deletion listener: drop every binding that points at a deleted room."""
        with self._lock:
            stale = [cid for cid, (code, _) in self.connections.items() if code == room.code]
            for cid in stale:
                del self.connections[cid]
        if stale:
            logger.debug(f"Dropped {len(stale)} connection bindings for deleted room {room.code}")

    # ------------------------------------------------------------------
    # Disconnect / grace period
    # ------------------------------------------------------------------

    def grace_period_for(self, room: Room) -> float:
        return self.game_grace if room.started else self.lobby_grace

    def handle_disconnect(self, connection_id: str) -> Tuple[bool, str, Optional[str]]:
        """
        Handle a dropped transport connection.

        Args:
            connection_id: The connection that went away

        Returns:
            Tuple of (success, message, room_code)
        """
        binding = self.unbind(connection_id)
        if not binding:
            return False, "Connection not bound to a room", None

        room_code, player_id = binding
        with self.registry.locked(room_code) as room:
            if room is None:
                return False, "Room not found", None

            player = room.get_player(player_id)
            if not player or player.connection_id != connection_id:
                # Already replaced by a newer connection
                return False, "Stale connection", room_code

            now = self.clock()
            grace = self.grace_period_for(room)
            player.connected = False
            player.disconnected_at = now
            player.reconnect_deadline = now + grace
            player.cancel_grace_timer()
            player.grace_timer = self.timer_factory(
                grace, self._on_grace_expired, room_code, player_id, connection_id
            )

            if room.phase != PHASES['LOBBY']:
                self.broadcaster.system_message(room, f"{player.name} disconnected. Waiting for reconnect...")
            self.broadcaster.room_update(room)

            logger.info(f"{player.name} disconnected from room {room_code} ({grace}s grace)")
            return True, f"{player.name} disconnected", room_code

    def _on_grace_expired(self, room_code: str, player_id: str, connection_id: str) -> None:
        """Timer callback: the grace period ran out without a reconnect."""
        try:
            with self.registry.locked(room_code) as room:
                if room is None:
                    return

                player = room.get_player(player_id)
                if not player or player.connected or player.connection_id != connection_id:
                    return

                player.grace_timer = None
                if not room.started or room.phase == PHASES['ENDED']:
                    self._remove_player(room, player, f"{player.name} left the room.")
                    return

                self._eliminate_disconnected(room, player)

        except Exception as e:
            logger.error(f"[{room_code}] Error handling grace expiry: {e}")

    def _eliminate_disconnected(self, room: Room, player: Player) -> None:
        """Mid-game expiry: the seat stays, the player dies."""
        if player.alive:
            player.alive = False
            self.broadcaster.to_room(room.code, 'player_eliminated', {
                'playerId': player.player_id,
                'playerName': player.name,
                'cause': ELIMINATION_CAUSES['DISCONNECT']
            })
            self.broadcaster.system_message(room, f"{player.name} did not return and is eliminated.")
            logger.info(f"[{room.code}] {player.name} eliminated after disconnect grace expired")

        self.broadcaster.room_update(room)
        if not self.scheduler.end_if_won(room):
            self.scheduler.check_early_resolution(room)

    def _remove_player(self, room: Room, player: Player, announcement: str) -> None:
        """Remove a player for good, deleting the room once it is empty."""
        started = room.started and room.phase != PHASES['ENDED']

        self.player_manager.remove_player(room, player.player_id)
        self.registry.remove_session(player.session_id)
        if player.connected and player.connection_id:
            self.broadcaster.leave(player.connection_id, room.code)

        if room.is_empty:
            self.registry.delete_room(room.code)
            return

        room.forget_player_actions(player.player_id)
        self.registry.touch(room)
        self.broadcaster.system_message(room, announcement)
        self.broadcaster.room_update(room)

        if started and not self.scheduler.end_if_won(room):
            self.scheduler.check_early_resolution(room)

    # ------------------------------------------------------------------
    # Reconnect / leave
    # ------------------------------------------------------------------

    def reconnect(self, connection_id: str, session_id: str,
                  room_code: str) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
        """
        Rebind a returning player to a new connection.

        Args:
            connection_id: The new connection
            session_id: Secret session id issued on create/join
            room_code: Room the player was in

        Returns:
            Tuple of (success, message, reconnect_payload)
        """
        code = normalize_room_code(room_code)
        if not session_id or not code:
            return False, "Missing session or room code.", None

        with self.registry.locked(code) as room:
            if room is None:
                return False, "Room not found.", None

            player = room.get_player_by_session(session_id)
            if not player:
                return False, "Session not found.", None

            now = self.clock()
            if not player.connected and player.reconnect_deadline is not None and now > player.reconnect_deadline:
                return False, "Reconnect window expired.", None

            old_connection = player.connection_id
            if old_connection and old_connection != connection_id:
                self.unbind(old_connection)
                self.broadcaster.leave(old_connection, code)

            was_disconnected = not player.connected
            player.cancel_grace_timer()
            player.connection_id = connection_id
            player.connected = True
            player.disconnected_at = None
            player.reconnect_deadline = None

            self.bind(connection_id, room, player)
            self.registry.touch(room)

            payload = self.reconnect_payload(room, player)
            self.broadcaster.to_connection(connection_id, 'reconnected', payload)
            if was_disconnected and room.phase != PHASES['LOBBY']:
                self.broadcaster.system_message(room, f"{player.name} reconnected.")
            self.broadcaster.room_update(room)

            logger.info(f"{player.name} reconnected to room {code}")
            return True, "Reconnected", payload

    def reconnect_payload(self, room: Room, player: Player) -> Dict[str, Any]:
        """Private state snapshot sent to a reconnecting player only."""
        payload = {
            'code': room.code,
            'playerId': player.player_id,
            'sessionId': player.session_id,
            'role': player.role if room.started else None,
            'alive': player.alive,
            'phase': room.phase,
            'round': room.round,
            'players': room.public_players(),
            'isHost': self.player_manager.is_host(room, player.player_id)
        }
        if room.started and player.is_mafia:
            payload['mafiaTeam'] = [
                {'id': p.player_id, 'name': p.name} for p in room.get_mafia()
            ]
        if room.phase == PHASES['VOTE']:
            payload['votes'] = room.vote_snapshot()
        return payload

    def leave_room(self, connection_id: str, room_code: Optional[str]) -> Tuple[bool, str, Optional[str]]:
        """
        Voluntary, immediate departure from a room.

        Returns:
            Tuple of (success, message, room_code)
        """
        code = normalize_room_code(room_code)
        player_id = self.player_id_for(connection_id, code)
        if not player_id:
            return False, "You are not in this room.", None

        with self.registry.locked(code) as room:
            self.unbind(connection_id)
            if room is None:
                return False, "Room not found.", None

            player = room.get_player(player_id)
            if not player:
                return False, "You are not in this room.", None

            self._remove_player(room, player, f"{player.name} left the room.")

        self.broadcaster.to_connection(connection_id, 'left_room', {'code': code})
        return True, "Left room", code
