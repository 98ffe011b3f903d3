"""
Shared pytest fixtures.

The room core is driven with a fake clock and fake timers, so no test
ever sleeps; timers are fired by hand.
"""

import os
import random
import tempfile

# Point the persistence layer at a throwaway database before it is imported
_DB_DIR = tempfile.mkdtemp(prefix='wlt-tests-')
os.environ['DATABASE_URL'] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.setdefault('RENDER', 'true')  # skip loading a developer .env

import pytest

from game import GameManager, NightResolver, PhaseScheduler
from rooms import Broadcaster, ConnectionManager, PlayerManager, RoomManager, RoomRegistry
from utils.constants import ROLES

class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

class FakeTimer:
    def __init__(self, delay, callback, args):
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        """Run the callback even if cancelled, like a timer that already started."""
        self.fired = True
        self.callback(*self.args)

class FakeTimerFactory:
    """Records every timer created through timer_factory(delay, callback, *args)."""

    def __init__(self):
        self.timers = []

    def __call__(self, delay, callback, *args):
        timer = FakeTimer(delay, callback, args)
        self.timers.append(timer)
        return timer

    def pending(self, callback=None):
        return [
            t for t in self.timers
            if not t.cancelled and not t.fired and (callback is None or t.callback == callback)
        ]

class RecordingBroadcaster(Broadcaster):
    """Broadcaster that keeps every outbound event for inspection."""

    def __init__(self, clock=None):
        super().__init__(clock or FakeClock())
        self.events = []  # (target, event, payload)
        self.memberships = {}  # connection_id -> room_code

    def to_room(self, room_code, event, payload):
        self.events.append((room_code, event, payload))

    def to_connection(self, connection_id, event, payload):
        self.events.append((connection_id, event, payload))

    def join(self, connection_id, room_code):
        self.memberships[connection_id] = room_code

    def leave(self, connection_id, room_code):
        self.memberships.pop(connection_id, None)

    def named(self, event, target=None):
        return [
            payload for t, e, payload in self.events
            if e == event and (target is None or t == target)
        ]

    def last(self, event, target=None):
        matches = self.named(event, target)
        return matches[-1] if matches else None

    def clear(self):
        self.events = []

class GameHarness:
    """Fully wired room/game core with fake time."""

    def __init__(self):
        self.clock = FakeClock()
        self.timers = FakeTimerFactory()
        self.broadcaster = RecordingBroadcaster(self.clock)
        self.results = []

        self.registry = RoomRegistry(clock=self.clock)
        self.player_manager = PlayerManager()
        self.scheduler = PhaseScheduler(
            self.registry,
            self.broadcaster,
            night_resolver=NightResolver(rng=random.Random(7)),
            timer_factory=self.timers,
            clock=self.clock,
            result_recorder=self.results.append
        )
        self.connections = ConnectionManager(
            self.registry, self.player_manager, self.scheduler, self.broadcaster,
            timer_factory=self.timers, clock=self.clock
        )
        self.rooms = RoomManager(self.registry, self.player_manager, self.connections, self.broadcaster)
        self.game = GameManager(
            self.registry, self.player_manager, self.connections, self.scheduler, self.broadcaster,
            clock=self.clock, rng=random.Random(11)
        )

    # -- setup helpers -------------------------------------------------

    def create_room(self, names):
        """Create a room hosted by names[0] and join the rest; returns (room, {name: player})."""
        ok, message, data = self.rooms.create_room(f"conn-{names[0]}", names[0])
        assert ok, message
        code = data['code']
        for name in names[1:]:
            ok, message, _ = self.rooms.join_room(f"conn-{name}", code, name)
            assert ok, message
        room = self.registry.get_room(code)
        return room, {p.name: p for p in room.players.values()}

    def start(self, room, roles=None):
        """Start the game, optionally overriding roles by name, and run the countdown."""
        host = room.get_player(room.host_id)
        ok, message, _ = self.game.start_game(host.connection_id, room.code)
        assert ok, message
        if roles:
            for player in room.players.values():
                player.role = roles.get(player.name, ROLES['CITIZEN'])
        self.fire_phase_timer()

    def phase_timers(self):
        return self.timers.pending(self.scheduler._on_timer)

    def fire_phase_timer(self):
        pending = self.phase_timers()
        assert len(pending) == 1, f"expected one active phase timer, found {len(pending)}"
        pending[0].fire()

    def grace_timers(self):
        return self.timers.pending(self.connections._on_grace_expired)

@pytest.fixture
def harness():
    return GameHarness()

@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def timers():
    return FakeTimerFactory()

@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()

@pytest.fixture
def registry(clock):
    return RoomRegistry(clock=clock)
