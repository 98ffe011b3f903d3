"""
Room registry for Who Lies Tonight.

Holds every live room in memory, the session -> connection lookup used for
reconnection, and idle-room eviction. Rooms are never persisted.
"""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional
from .models import Room
from utils.constants import GAME_CONFIG
from utils.helpers import generate_room_code

logger = logging.getLogger(__name__)

class RoomRegistry:
    """
    In-memory store of all active rooms.

    The registry lock only guards insert/delete/lookup on the room map.
    Every mutation of a room's state happens under that room's own lock,
    acquired through locked().
    """

    def __init__(self,
                 clock: Callable[[], float] = time.time,
                 idle_timeout: float = GAME_CONFIG['ROOM_IDLE_TIMEOUT']):
        """
        Initialize the room registry.

        Args:
            clock: Returns the current time in seconds
            idle_timeout: Seconds without activity before a room is evicted
        """
        self.clock = clock
        self.idle_timeout = idle_timeout
        self.rooms: Dict[str, Room] = {}  # code -> Room
        self.session_connections: Dict[str, str] = {}  # session_id -> connection_id
        self._lock = threading.Lock()
        self._deletion_listeners: List[Callable[[Room], None]] = []
        logger.debug("Room registry initialized")

    def add_deletion_listener(self, listener: Callable[[Room], None]) -> None:
        """Register a callback invoked with every room removed from the registry."""
        self._deletion_listeners.append(listener)

    def create_room(self) -> Room:
        """Create a new room with a unique code."""
        with self._lock:
            code = generate_room_code()
            while code in self.rooms:
                code = generate_room_code()

            room = Room(code=code, last_activity=self.clock())
            self.rooms[code] = room

        logger.info(f"Created room: {code}")
        return room

    def get_room(self, code: Optional[str]) -> Optional[Room]:
        """Get a room by code."""
        if not code:
            return None
        with self._lock:
            return self.rooms.get(code)

    @contextmanager
    def locked(self, code: Optional[str]) -> Iterator[Optional[Room]]:
        """
        Hold a room's lock for the duration of the block.

        Yields None if the room does not exist or was deleted while waiting
        for the lock.
        """
        room = self.get_room(code)
        if room is None:
            yield None
            return

        with room.lock:
            if self.get_room(code) is not room:
                yield None
            else:
                yield room

    def delete_room(self, code: str) -> bool:
        """
        Delete a room, cancelling its phase timer and any grace timers.

        Args:
            code: Code of the room to delete

        Returns:
            True if a room was removed
        """
        with self._lock:
            room = self.rooms.pop(code, None)
        if room is None:
            return False

        with room.lock:
            room.cancel_timer()
            for player in room.players.values():
                player.cancel_grace_timer()
                self.remove_session(player.session_id)

        for listener in self._deletion_listeners:
            try:
                listener(room)
            except Exception as e:
                logger.error(f"Error in room deletion listener for {code}: {e}")

        logger.info(f"Deleted room {code}")
        return True

    def touch(self, room: Room) -> None:
        """Update the last-activity timestamp for a room."""
        room.last_activity = self.clock()

    # ------------------------------------------------------------------
    # Session / reconnect lookup
    # ------------------------------------------------------------------

    def register_session(self, session_id: str, connection_id: str) -> None:
        with self._lock:
            self.session_connections[session_id] = connection_id

    def connection_for_session(self, session_id: str) -> Optional[str]:
        with self._lock:
            return self.session_connections.get(session_id)

    def remove_session(self, session_id: str) -> None:
        with self._lock:
            self.session_connections.pop(session_id, None)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def evict_idle(self) -> List[str]:
        """
        Remove rooms that have been inactive for longer than the idle timeout.

        Returns:
            Codes of the rooms that were evicted
        """
        with self._lock:
            candidates = list(self.rooms.values())

        evicted = []
        for room in candidates:
            with room.lock:
                if self.clock() - room.last_activity > self.idle_timeout:
                    if self.delete_room(room.code):
                        evicted.append(room.code)

        if evicted:
            logger.info(f"Evicted {len(evicted)} inactive rooms: {', '.join(evicted)}")
        return evicted

    def shutdown(self) -> None:
        """Cancel every timer and drop all rooms."""
        for code in self.active_room_codes():
            self.delete_room(code)
        logger.info("Room registry shut down")

    def active_room_codes(self) -> List[str]:
        with self._lock:
            return list(self.rooms.keys())

    def get_status(self) -> Dict[str, int]:
        """Get registry statistics."""
        with self._lock:
            rooms = list(self.rooms.values())
        return {
            'active_rooms': len(rooms),
            'games_in_progress': sum(1 for r in rooms if r.started),
            'players': sum(r.player_count for r in rooms),
            'sessions': len(self.session_connections)
        }
