import random
from collections import Counter

import pytest

from game.roles import assign_roles, mafia_count_for
from utils.constants import ROLES

@pytest.mark.parametrize("count", range(4, 21))
def test_role_counts_are_exact(count):
    ids = [f"p{i}" for i in range(count)]
    roles = assign_roles(ids, random.Random(count))

    assert sorted(roles.keys()) == sorted(ids)
    tally = Counter(roles.values())
    assert tally[ROLES['MAFIA']] == max(1, int(count * 0.33))
    assert tally[ROLES['DOCTOR']] == 1
    assert tally[ROLES['DETECTIVE']] == (1 if count > 4 else 0)
    assert sum(tally.values()) == count

def test_small_tables():
    assert mafia_count_for(4) == 1
    assert mafia_count_for(5) == 1
    assert mafia_count_for(6) == 1
    assert mafia_count_for(7) == 2
    assert mafia_count_for(12) == 3

def test_four_players_have_no_detective():
    roles = assign_roles(['a', 'b', 'c', 'd'], random.Random(1))
    assert ROLES['DETECTIVE'] not in roles.values()
    assert Counter(roles.values())[ROLES['CITIZEN']] == 2

def test_assignment_does_not_mutate_input():
    ids = ['a', 'b', 'c', 'd', 'e']
    assign_roles(ids, random.Random(3))
    assert ids == ['a', 'b', 'c', 'd', 'e']

def test_every_player_can_be_mafia():
    ids = ['a', 'b', 'c', 'd', 'e']
    rng = random.Random(42)
    seen = set()
    for _ in range(200):
        roles = assign_roles(ids, rng)
        seen.update(pid for pid, role in roles.items() if role == ROLES['MAFIA'])
    assert seen == set(ids)
