"""
Room management on the server side.
Tracks two-player rooms, their members, the host, and game start gating.
"""

import random

from common.config import (
    MAX_PLAYERS_PER_ROOM, ROOM_CODE_LENGTH, CHARACTERS, WORLD_SEED,
    SPAWN_X, SPAWN_SPACING, SPAWN_Y, JOINER_SPAWN_X
)
from common.events import Event
from common.player import PlayerState

BASE36_DIGITS = '0123456789abcdefghijklmnopqrstuvwxyz'


class RoomError(Exception):
    """A rejected room request; ``event`` is the rejection sent back."""
    event = None


class RoomNotFound(RoomError):
    event = Event.ROOM_NOT_FOUND


class RoomFull(RoomError):
    event = Event.ROOM_FULL


class NotCreator(RoomError):
    event = Event.NOT_CREATOR


class NotEnoughPlayers(RoomError):
    event = Event.NOT_ENOUGH_PLAYERS


class CharactersNotSelected(RoomError):
    event = Event.CHARACTERS_NOT_SELECTED


def to_base36(value: int) -> str:
    if value == 0:
        return '0'
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36_DIGITS[rem])
    return ''.join(reversed(digits))


def generate_room_code(rng: random.Random = None) -> str:
    """6-character uppercase alphanumeric code from a random base-36 string."""
    rng = rng or random
    value = rng.randrange(36 ** ROOM_CODE_LENGTH)
    return to_base36(value).rjust(ROOM_CODE_LENGTH, '0').upper()


def normalize_code(code) -> str:
    return str(code or '').strip().upper()


class Room:
    """A paired session: at most two members, in join order."""

    def __init__(self, room_id: str, world_seed: int = WORLD_SEED):
        self.room_id = room_id
        self.players = {}        # sid -> PlayerState, insertion order = join order
        self.creator_id = None
        self.started = False
        self.world_seed = world_seed

    def add_player(self, sid: str, x: float, y: float = SPAWN_Y) -> PlayerState:
        if not self.players:
            self.creator_id = sid
        player = PlayerState(sid, x=x, y=y, vx=0.0, vy=0.0,
                             is_creator=(sid == self.creator_id))
        self.players[sid] = player
        return player

    def remove_player(self, sid: str) -> bool:
        """Remove a member. Returns True when the room is now empty."""
        self.players.pop(sid, None)
        if not self.players:
            self.creator_id = None
            return True

        if sid == self.creator_id:
            # Earliest remaining member takes over as host
            self.creator_id = next(iter(self.players))
            self.players[self.creator_id].is_creator = True
        return False

    def get_players(self) -> list:
        return [p.to_dict() for p in self.players.values()]

    def can_join(self) -> bool:
        return len(self.players) < MAX_PLAYERS_PER_ROOM

    def all_characters_selected(self) -> bool:
        return all(p.character for p in self.players.values())

    def reset_positions(self):
        for index, player in enumerate(self.players.values()):
            player.x = SPAWN_X + index * SPAWN_SPACING
            player.y = SPAWN_Y
            player.vx = 0.0
            player.vy = 0.0

    @property
    def count(self) -> int:
        return len(self.players)

    def __repr__(self):
        return (f"Room(id={self.room_id}, players={list(self.players)}, "
                f"creator={self.creator_id}, started={self.started})")


class RoomRegistry:
    """
    Owns every live room and the connection -> room index.

    Rooms are created on first join and destroyed when their last member
    leaves. Rejections raise RoomError subclasses and leave state untouched.
    """

    def __init__(self, world_seed: int = WORLD_SEED, rng: random.Random = None):
        self.rooms = {}           # room_id -> Room
        self.player_rooms = {}    # sid -> room_id
        self.world_seed = world_seed
        self.rng = rng or random.Random()

    def _new_code(self) -> str:
        code = generate_room_code(self.rng)
        while code in self.rooms:
            code = generate_room_code(self.rng)
        return code

    def create_room(self, sid: str) -> Room:
        """Allocate a room with ``sid`` as host."""
        room = Room(self._new_code(), self.world_seed)
        room.add_player(sid, SPAWN_X)
        self.rooms[room.room_id] = room
        self.player_rooms[sid] = room.room_id
        return room

    def find_joinable(self, sid: str, code) -> Room:
        """Validate a join without changing anything."""
        room = self.rooms.get(normalize_code(code))
        if room is None:
            raise RoomNotFound(code)
        if sid not in room.players and not room.can_join():
            raise RoomFull(room.room_id)
        return room

    def join_room(self, sid: str, code) -> Room:
        room = self.find_joinable(sid, code)
        if sid in room.players:
            return room

        room.add_player(sid, JOINER_SPAWN_X)
        self.player_rooms[sid] = room.room_id
        return room

    def get_room_for(self, sid: str) -> Room:
        room_id = self.player_rooms.get(sid)
        if room_id is None:
            return None
        return self.rooms.get(room_id)

    def select_character(self, sid: str, character) -> Room:
        """Set a member's character. Returns the room, or None if ignored."""
        room = self.get_room_for(sid)
        if room is None or character not in CHARACTERS:
            return None
        room.players[sid].character = character
        return room

    def start_game(self, sid: str) -> Room:
        """Host-only start; needs two members that have both picked a character."""
        room = self.get_room_for(sid)
        if room is None:
            return None
        if sid != room.creator_id:
            raise NotCreator(room.room_id)
        if room.count < MAX_PLAYERS_PER_ROOM:
            raise NotEnoughPlayers(room.room_id)
        if not room.all_characters_selected():
            raise CharactersNotSelected(room.room_id)

        room.started = True
        return room

    def record_move(self, sid: str, move: dict) -> Room:
        """Store a member's last reported state. Returns its room."""
        room = self.get_room_for(sid)
        if room is None:
            return None
        player = room.players[sid]
        player.x = move['x']
        player.y = move['y']
        player.vx = move['vx']
        player.vy = move['vy']
        return room

    def restart(self, sid: str) -> Room:
        """Reset a running game. Returns None unless both members are still in it."""
        room = self.get_room_for(sid)
        if room is None or not room.started or room.count < MAX_PLAYERS_PER_ROOM:
            return None
        room.reset_positions()
        return room

    def leave(self, sid: str) -> tuple:
        """
        Remove a connection from its room.

        Returns:
            (room, was_started, destroyed); (None, False, False) if the
            connection was not in a room.
        """
        room_id = self.player_rooms.pop(sid, None)
        room = self.rooms.get(room_id) if room_id is not None else None
        if room is None:
            return None, False, False

        was_started = room.started
        empty = room.remove_player(sid)
        if was_started:
            room.started = False
        if empty:
            self.rooms.pop(room.room_id, None)
        return room, was_started, empty

    @property
    def count(self) -> int:
        return len(self.rooms)
