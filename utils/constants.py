"""
Game constants for Blend In.

This module contains constant values used throughout the game,
including the built-in topic list, lobby code alphabet, phases and
wire event names.
"""

# Built-in topics used when the host does not supply one
TOPICS = [
    "Airport", "Bank", "Beach", "Casino", "Cathedral", "Circus Tent",
    "Corporate Party", "Day Spa", "Embassy", "Hospital", "Hotel",
    "Military Base", "Movie Studio", "Museum", "Ocean Liner",
    "Passenger Train", "Pirate Ship", "Polar Station", "Police Station",
    "Restaurant", "School", "Service Station", "Space Station", "Submarine",
    "Supermarket", "Theater", "University", "Zoo", "Pizza", "Volcano",
    "Wedding", "Library", "Camping Trip", "Haunted House", "Farm"
]

# Ambiguous characters (0/O, 1/I) are left out
LOBBY_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

# Player roles for a round
ROLES = {
    'FAKER': 'faker',
    'TRUTH': 'truth'
}

# Reasons attached to lobby_closed / round_aborted
CLOSE_REASONS = {
    'HOST_LEFT': 'host_left',
    'IDLE': 'idle',
    'SHUTDOWN': 'shutdown'
}

ABORT_REASONS = {
    'FAKER_LEFT': 'faker_left',
    'EMPTY': 'no_players_left'
}

# Outbound Socket.IO events
EVENTS = {
    'LOBBY_CREATED': 'lobby_created',
    'JOINED_LOBBY': 'joined_lobby',
    'LEFT_LOBBY': 'left_lobby',
    'LOBBY_UPDATE': 'lobby_update',
    'ROLE_ASSIGNMENT': 'role_assignment',
    'ROUND_STARTED': 'round_started',
    'WORD_SUBMITTED': 'word_submitted',
    'NEXT_TURN': 'next_turn',
    'DISCUSSION_START': 'discussion_start',
    'DISCUSSION_TICK': 'discussion_tick',
    'START_VOTING': 'start_voting',
    'VOTE_CAST': 'vote_cast',
    'ROUND_RESULTS': 'round_results',
    'ROUND_ABORTED': 'round_aborted',
    'LOBBY_CLOSED': 'lobby_closed',
    'ERROR': 'error'
}

# Game configuration defaults
GAME_CONFIG = {
    'DISCUSSION_SECONDS': 30,
    'FAKER_ESCAPE_POINTS': 3,
    'CATCH_POINTS': 2,
    'MIN_PLAYERS': 1,
    'DECOY_COUNT': 3,
    'LOBBY_CODE_LENGTH': 4,
    'MAX_CODE_ATTEMPTS': 100,
    'LOBBY_IDLE_MINUTES': 60,
    'MAX_NAME_LENGTH': 20,
    'MAX_WORD_LENGTH': 40,
    'MAX_TOPIC_LENGTH': 60
}
