"""
Session protocol vocabulary shared by the relay server and the game client.

Event names are the wire contract; both sides must use these exact strings.
"""

import math


class Event:
    """Event name identifiers."""
    CREATE_ROOM = 'create-room'
    ROOM_CREATED = 'room-created'
    JOIN_ROOM = 'join-room'
    ROOM_JOINED = 'room-joined'
    ROOM_NOT_FOUND = 'room-not-found'
    ROOM_FULL = 'room-full'
    SELECT_CHARACTER = 'select-character'
    PLAYER_LIST_UPDATED = 'player-list-updated'
    START_GAME = 'start-game'
    GAME_STARTED = 'game-started'
    NOT_CREATOR = 'not-creator'
    NOT_ENOUGH_PLAYERS = 'not-enough-players'
    CHARACTERS_NOT_SELECTED = 'characters-not-selected'
    PLAYER_MOVE = 'player-move'
    PLAYER_MOVED = 'player-moved'
    GAME_RESTART = 'game-restart'
    PLAYER_DISCONNECTED = 'player-disconnected'

    REJECTIONS = (
        ROOM_NOT_FOUND, ROOM_FULL,
        NOT_CREATOR, NOT_ENOUGH_PLAYERS, CHARACTERS_NOT_SELECTED,
    )


# Fields of a player-move / player-moved payload
MOVE_FIELDS = ('x', 'y', 'vx', 'vy')


def move_payload(player) -> dict:
    """Build the client->server player-move payload from a PlayerState."""
    return {
        'x': player.x,
        'y': player.y,
        'vx': player.vx,
        'vy': player.vy,
    }


def roster_payload(players: list, creator_id: str) -> dict:
    return {'players': players, 'creatorId': creator_id}


def extract_move(data) -> dict:
    """
    Pick the relayable fields out of an inbound player-move payload.

    Returns None when the payload is not usable: not a mapping, missing a
    coordinate, or carrying a field that is not a number. Velocities are
    optional.
    """
    if not isinstance(data, dict):
        return None
    if 'x' not in data or 'y' not in data:
        return None

    move = {field: data.get(field, 0) for field in MOVE_FIELDS}
    for value in move.values():
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if not math.isfinite(value):
            return None
    return move
