"""
Game constants for Who Lies Tonight.

This module contains all constant values used throughout the game,
including roles, phases, timings and room limits.
"""

# Player roles
ROLES = {
    'MAFIA': 'mafia',
    'DOCTOR': 'doctor',
    'DETECTIVE': 'detective',
    'CITIZEN': 'citizen'
}

# Placeholder role held by every player until the game starts
DEFAULT_ROLE = ROLES['CITIZEN']

# Game phases
PHASES = {
    'LOBBY': 'lobby',
    'NIGHT': 'night',
    'DAY': 'day',
    'VOTE': 'vote',
    'ENDED': 'ended'
}

# Night actions and the role allowed to perform each one
NIGHT_ACTIONS = {
    'kill': ROLES['MAFIA'],
    'save': ROLES['DOCTOR'],
    'investigate': ROLES['DETECTIVE']
}

# Chat channels
CHAT_CHANNELS = {
    'GLOBAL': 'global',
    'MAFIA': 'mafia'
}

# Winner types
WINNER_TYPES = {
    'MAFIA': 'mafia',
    'TOWN': 'town'
}

# Night outcomes
NIGHT_OUTCOMES = {
    'KILLED': 'killed',
    'SAVED': 'saved',
    'NO_KILL': 'no_kill'
}

# Elimination causes
ELIMINATION_CAUSES = {
    'NIGHT_KILL': 'night_kill',
    'LYNCH': 'lynch',
    'DISCONNECT': 'disconnect'
}

# Cutscene variants played after a kill or a save
CUTSCENE_VARIANTS = ['back_alley', 'rooftop', 'car_ambush', 'neon_club']

# Unambiguous room code alphabet (no 0/O, 1/I/L)
ROOM_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
ROOM_CODE_LENGTH = 6

# Score awarded to each player on the winning side
WIN_SCORES = {
    WINNER_TYPES['MAFIA']: 10,
    WINNER_TYPES['TOWN']: 5
}

# Game configuration (all durations in seconds)
GAME_CONFIG = {
    'MIN_PLAYERS': 4,
    'MAX_PLAYERS': 12,
    'MAFIA_RATIO': 0.33,
    'NIGHT_DURATION': 60,
    'DAY_DURATION': 90,
    'VOTE_DURATION': 30,
    'START_COUNTDOWN': 3,
    'CUTSCENE_DELAY': 12,
    'NIGHT_REVEAL_DELAY': 2,
    'VOTE_REVEAL_DELAY': 3,
    'LOBBY_GRACE_PERIOD': 15,
    'GAME_GRACE_PERIOD': 30,
    'ROOM_IDLE_TIMEOUT': 10 * 60,
    'ROOM_CLEANUP_INTERVAL': 60,
    'CHAT_RATE_LIMIT': 10,
    'CHAT_RATE_WINDOW': 5,
    'CHAT_MAX_LENGTH': 300,
    'USERNAME_MIN_LENGTH': 3,
    'USERNAME_MAX_LENGTH': 16
}
