import pytest
from flask import Flask
from flask_socketio import SocketIO

from database import init_database
from game import GameManager, PhaseScheduler
from handlers import SocketIOBroadcaster, register_api_handlers, register_socket_handlers
from rooms import ConnectionManager, PlayerManager, RoomManager, RoomRegistry

from conftest import FakeClock, FakeTimerFactory

@pytest.fixture
def server():
    app = Flask(__name__)
    app.config['TESTING'] = True
    socketio = SocketIO(app, async_mode='threading')

    clock = FakeClock()
    timers = FakeTimerFactory()
    broadcaster = SocketIOBroadcaster(socketio, clock=clock)
    registry = RoomRegistry(clock=clock)
    player_manager = PlayerManager()
    scheduler = PhaseScheduler(registry, broadcaster, timer_factory=timers, clock=clock)
    connections = ConnectionManager(registry, player_manager, scheduler, broadcaster,
                                    timer_factory=timers, clock=clock)
    room_manager = RoomManager(registry, player_manager, connections, broadcaster)
    game_manager = GameManager(registry, player_manager, connections, scheduler, broadcaster, clock=clock)

    register_socket_handlers(socketio, room_manager, connections, game_manager)
    register_api_handlers(app, room_manager, registry)
    init_database()
    return app, socketio, registry

def received(client, name):
    return [event['args'][0] for event in client.get_received() if event['name'] == name]

def test_create_and_join_over_socketio(server):
    app, socketio, registry = server
    host = socketio.test_client(app)
    guest = socketio.test_client(app)

    host.emit('create_room', {'username': 'Host'})
    created = received(host, 'room_created')
    assert len(created) == 1
    code = created[0]['code']

    guest.emit('join_room', {'code': code, 'username': 'Guest'})
    joined = received(guest, 'room_joined')
    assert joined[0]['code'] == code
    assert joined[0]['isHost'] is False

    updates = received(host, 'room_updated')
    assert [p['name'] for p in updates[-1]['players']] == ['Host', 'Guest']

    host.emit('start_game', {'code': code})
    errors = received(host, 'error')
    assert errors == [{'message': 'Need at least 4 players to start.'}]
    assert received(guest, 'error') == []

def test_disconnect_starts_grace_period(server):
    app, socketio, registry = server
    host = socketio.test_client(app)
    host.emit('create_room', {'username': 'Host'})
    code = received(host, 'room_created')[0]['code']

    host.disconnect()

    room = registry.get_room(code)
    assert room is not None
    assert not next(iter(room.players.values())).connected

def test_join_missing_fields(server):
    app, socketio, _ = server
    client = socketio.test_client(app)
    client.emit('join_room', {'code': ''})
    assert received(client, 'error') == [{'message': 'Missing room code or username'}]

def test_rest_endpoints(server):
    app, socketio, _ = server
    host = socketio.test_client(app)
    host.emit('create_room', {'username': 'Host'})
    code = received(host, 'room_created')[0]['code']

    http = app.test_client()
    assert http.get('/api/health').get_json()['status'] == 'ok'

    rooms = http.get('/api/rooms/active').get_json()['rooms']
    assert [r['code'] for r in rooms] == [code]

    assert isinstance(http.get('/api/leaderboard?room=' + code).get_json(), list)
    assert 'total_games' in http.get('/api/stats').get_json()
    assert http.get('/api/nope').status_code == 404
