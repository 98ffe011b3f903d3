from utils.constants import PHASES, ROLES

def conn(name):
    return f"conn-{name}"

def test_join_errors(harness):
    room, _ = harness.create_room(['Host', 'Guest'])

    ok, message, _ = harness.rooms.join_room('conn-x', room.code, 'guest')
    assert not ok and message == "Username already taken in this room."

    ok, message, _ = harness.rooms.join_room('conn-y', 'ZZZZZZ', 'Newbie')
    assert not ok and message == "Room not found."

    ok, message, _ = harness.rooms.join_room('conn-z', room.code, 'ab')
    assert not ok and message.startswith("Invalid username")

def test_join_after_start_rejected(harness):
    room, _ = harness.create_room(['Host', 'Two', 'Three', 'Four'])
    harness.start(room)

    ok, message, _ = harness.rooms.join_room('conn-late', room.code.lower(), 'Late')
    assert not ok and message == "Game already in progress."

def test_create_room_sends_secret_session_only_to_creator(harness):
    ok, _, data = harness.rooms.create_room('conn-Host', 'Host')
    assert ok
    assert harness.broadcaster.last('room_created', 'conn-Host') == data
    assert data['isHost'] is True
    assert 'sessionId' not in harness.broadcaster.last('room_updated', data['code'])['players'][0]

def test_lobby_grace_expiry_removes_player_and_promotes_host(harness):
    room, p = harness.create_room(['Host', 'Guest'])

    ok, _, code = harness.connections.handle_disconnect(conn('Host'))
    assert ok and code == room.code
    assert not p['Host'].connected

    timer = harness.grace_timers()[0]
    assert timer.delay == 15
    timer.fire()

    assert p['Host'].player_id not in room.players
    assert room.host_id == p['Guest'].player_id
    assert harness.broadcaster.last('room_updated', room.code)['hostId'] == p['Guest'].player_id

def test_last_player_expiring_deletes_room(harness):
    room, _ = harness.create_room(['Solo'])
    harness.connections.handle_disconnect(conn('Solo'))
    harness.grace_timers()[0].fire()
    assert harness.registry.get_room(room.code) is None

def test_reconnect_within_window_restores_player(harness):
    room, p = harness.create_room(['Host', 'Mobster', 'Doc', 'Anna'])
    harness.start(room, {'Mobster': ROLES['MAFIA'], 'Doc': ROLES['DOCTOR']})
    mobster = p['Mobster']

    harness.connections.handle_disconnect(conn('Mobster'))
    grace = harness.grace_timers()[0]
    assert grace.delay == 30

    harness.clock.advance(20)
    ok, message, payload = harness.connections.reconnect('conn-new', mobster.session_id, room.code)

    assert ok, message
    assert room.players[mobster.player_id] is mobster
    assert mobster.connection_id == 'conn-new'
    assert mobster.connected
    assert grace.cancelled
    assert payload['role'] == ROLES['MAFIA']
    assert payload['phase'] == PHASES['NIGHT']
    assert payload['playerId'] == mobster.player_id
    assert [m['id'] for m in payload['mafiaTeam']] == [mobster.player_id]
    assert harness.broadcaster.last('reconnected', 'conn-new') == payload
    assert harness.connections.resolve('conn-new') == (room.code, mobster.player_id)

    # The new connection can act straight away
    assert harness.game.night_action('conn-new', room.code, 'kill', p['Anna'].player_id)[0]

def test_host_keeps_host_role_after_reconnect(harness):
    room, p = harness.create_room(['Host', 'Guest'])
    harness.connections.handle_disconnect(conn('Host'))
    ok, _, payload = harness.connections.reconnect('conn-back', p['Host'].session_id, room.code)
    assert ok
    assert payload['isHost'] is True
    assert room.host_id == p['Host'].player_id

def test_reconnect_after_window_rejected(harness):
    room, p = harness.create_room(['Host', 'Mobster', 'Doc', 'Anna'])
    harness.start(room, {'Mobster': ROLES['MAFIA'], 'Doc': ROLES['DOCTOR']})

    harness.connections.handle_disconnect(conn('Anna'))
    harness.clock.advance(31)

    ok, message, _ = harness.connections.reconnect('conn-new', p['Anna'].session_id, room.code)
    assert not ok and message == "Reconnect window expired."
    assert p['Anna'].connection_id == conn('Anna')

def test_reconnect_unknown_session(harness):
    room, _ = harness.create_room(['Host'])
    ok, message, _ = harness.connections.reconnect('conn-new', 'not-a-session', room.code)
    assert not ok and message == "Session not found."

def test_mid_game_grace_expiry_eliminates_and_resolves_night(harness):
    room, p = harness.create_room(['Host', 'Mobster', 'Doc', 'Sleuth', 'Anna'])
    harness.start(room, {
        'Mobster': ROLES['MAFIA'], 'Doc': ROLES['DOCTOR'], 'Sleuth': ROLES['DETECTIVE']
    })
    harness.game.night_action(conn('Mobster'), room.code, 'kill', p['Anna'].player_id)
    harness.game.night_action(conn('Doc'), room.code, 'save', p['Host'].player_id)

    harness.connections.handle_disconnect(conn('Sleuth'))
    harness.grace_timers()[0].fire()

    assert not p['Sleuth'].alive
    assert p['Sleuth'].player_id in room.players
    causes = [e['cause'] for e in harness.broadcaster.named('player_eliminated')]
    assert causes[0] == 'disconnect'
    # Only the detective was missing, so the night resolved at once
    assert harness.broadcaster.last('night_result')['outcome'] == 'killed'

def test_mafia_expiry_ends_game(harness):
    room, p = harness.create_room(['Host', 'Mobster', 'Doc', 'Anna'])
    harness.start(room, {'Mobster': ROLES['MAFIA'], 'Doc': ROLES['DOCTOR']})

    harness.connections.handle_disconnect(conn('Mobster'))
    harness.grace_timers()[0].fire()

    assert room.phase == PHASES['ENDED']
    assert harness.broadcaster.last('game_ended')['winner'] == 'town'
    assert harness.phase_timers() == []

def test_leave_room_promotes_and_deletes(harness):
    room, p = harness.create_room(['Host', 'Guest'])

    ok, _, code = harness.connections.leave_room(conn('Host'), room.code)
    assert ok and code == room.code
    assert room.host_id == p['Guest'].player_id
    assert harness.broadcaster.last('left_room', conn('Host')) == {'code': room.code}
    assert harness.connections.resolve(conn('Host')) is None

    harness.connections.leave_room(conn('Guest'), room.code)
    assert harness.registry.get_room(room.code) is None

def test_leave_unknown_room(harness):
    ok, message, _ = harness.connections.leave_room('conn-ghost', 'ABCDEF')
    assert not ok and message == "You are not in this room."

def test_leaving_mid_vote_drops_votes(harness):
    room, p = harness.create_room(['Host', 'Mobster', 'Doc', 'Sleuth', 'Anna'])
    harness.start(room, {
        'Mobster': ROLES['MAFIA'], 'Doc': ROLES['DOCTOR'], 'Sleuth': ROLES['DETECTIVE']
    })
    for _ in range(3):
        harness.fire_phase_timer()
    assert room.phase == PHASES['VOTE']

    harness.game.day_vote(conn('Host'), room.code, p['Anna'].player_id)
    harness.game.day_vote(conn('Anna'), room.code, p['Host'].player_id)
    harness.connections.leave_room(conn('Anna'), room.code)

    assert room.day_votes == {}

def test_leaving_target_lets_night_actors_act_again(harness):
    room, p = harness.create_room(['Host', 'Mobster', 'Doc', 'Sleuth', 'Anna'])
    harness.start(room, {
        'Mobster': ROLES['MAFIA'], 'Doc': ROLES['DOCTOR'], 'Sleuth': ROLES['DETECTIVE']
    })

    assert harness.game.night_action(conn('Mobster'), room.code, 'kill', p['Anna'].player_id)[0]
    assert harness.game.night_action(conn('Doc'), room.code, 'save', p['Anna'].player_id)[0]
    harness.connections.leave_room(conn('Anna'), room.code)

    assert room.mafia_votes == []
    assert room.doctor_save is None
    assert room.night_submitted == set()

    ok, message, _ = harness.game.night_action(conn('Mobster'), room.code, 'kill', p['Host'].player_id)
    assert ok, message
    ok, message, _ = harness.game.night_action(conn('Doc'), room.code, 'save', p['Doc'].player_id)
    assert ok, message
    assert not room.ticket.resolved

    assert harness.game.night_action(conn('Sleuth'), room.code, 'investigate', p['Mobster'].player_id)[0]
    assert room.ticket.resolved
    assert harness.broadcaster.last('night_result')['victimId'] == p['Host'].player_id
    assert not p['Host'].alive

def test_stale_disconnect_after_reconnect_is_ignored(harness):
    room, p = harness.create_room(['Host', 'Guest'])
    harness.connections.reconnect('conn-tab2', p['Guest'].session_id, room.code)

    ok, message, _ = harness.connections.handle_disconnect(conn('Guest'))
    assert not ok
    assert p['Guest'].connected
    assert harness.grace_timers() == []

def test_idle_rooms_are_evicted(harness):
    room, _ = harness.create_room(['Host', 'Guest'])
    harness.clock.advance(601)

    assert harness.rooms.cleanup_idle() == [room.code]
    assert harness.registry.get_room(room.code) is None
    assert harness.connections.connection_count() == 0

def test_active_rooms_summary(harness):
    room, _ = harness.create_room(['Host', 'Guest'])
    summaries = harness.rooms.get_active_rooms()
    assert summaries == [{
        'code': room.code,
        'phase': 'lobby',
        'round': 0,
        'players': 2,
        'started': False,
        'host': 'Host'
    }]
