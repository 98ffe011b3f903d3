from datetime import datetime, timedelta, timezone

import pytest

from database import clear_results, get_game_statistics, get_leaderboard, init_database, record_game_result
from game.models import GameResult, PlayerResult

@pytest.fixture(autouse=True)
def clean_db():
    init_database()
    clear_results()
    yield
    clear_results()

def make_result(room_code, winner, players, minutes=12):
    started = datetime(2026, 1, 1, 20, 0, tzinfo=timezone.utc)
    return GameResult(
        room_code=room_code,
        winner=winner,
        rounds=3,
        player_count=len(players),
        started_at=started,
        ended_at=started + timedelta(minutes=minutes),
        players=[PlayerResult(session_id=s, name=n, role=r, won=w) for s, n, r, w in players]
    )

def test_town_win_scores():
    record_game_result(make_result('ROOM22', 'town', [
        ('s-mob', 'Mobster', 'mafia', False),
        ('s-doc', 'Doc', 'doctor', True),
        ('s-ann', 'Anna', 'citizen', True),
    ]))

    board = get_leaderboard()
    assert board[0]['total_score'] == 5
    assert {row['player_name']: row['total_score'] for row in board} == {
        'Mobster': 0, 'Doc': 5, 'Anna': 5
    }
    assert all(row['games_played'] == 1 for row in board)

def test_scores_accumulate_per_session():
    for _ in range(2):
        record_game_result(make_result('ROOM22', 'mafia', [
            ('s-mob', 'Mobster', 'mafia', True),
            ('s-ann', 'Anna', 'citizen', False),
        ]))

    board = get_leaderboard()
    assert board[0] == {'player_name': 'Mobster', 'total_score': 20, 'games_won': 2, 'games_played': 2}
    assert board[1]['games_won'] == 0

def test_leaderboard_filters_by_room():
    record_game_result(make_result('AAAAAA', 'town', [('s1', 'Alpha', 'citizen', True)]))
    record_game_result(make_result('BBBBBB', 'town', [('s2', 'Bravo', 'citizen', True)]))

    assert [row['player_name'] for row in get_leaderboard(room_code='aaaaaa')] == ['Alpha']
    assert len(get_leaderboard()) == 2

def test_statistics():
    record_game_result(make_result('AAAAAA', 'town', [('s1', 'Alpha', 'citizen', True)], minutes=10))
    record_game_result(make_result('AAAAAA', 'mafia', [('s2', 'Bravo', 'mafia', True)], minutes=20))

    stats = get_game_statistics()
    assert stats['total_games'] == 2
    assert stats['town_wins'] == 1
    assert stats['mafia_wins'] == 1
    assert stats['mafia_win_rate'] == 50.0
    assert stats['avg_game_duration'] == 900.0

def test_finished_game_is_recorded_end_to_end(harness):
    harness.scheduler.result_recorder = record_game_result
    room, p = harness.create_room(['Host', 'Mobster', 'Doc', 'Anna'])
    harness.start(room, {'Mobster': 'mafia', 'Doc': 'doctor'})

    harness.connections.handle_disconnect('conn-Mobster')
    harness.grace_timers()[0].fire()

    board = get_leaderboard(room_code=room.code)
    assert sorted(row['player_name'] for row in board if row['games_won']) == ['Anna', 'Doc', 'Host']
