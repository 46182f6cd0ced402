"""
Client-side game session: roster, local simulation and round lifecycle.

Network events are applied here between frames; ``update()`` runs one
simulation tick for the locally owned player and says when to push a
position update back out.
"""

import math
import time

from common.config import (
    GROUND_Y, PLAYER_HEIGHT, WORLD_SEED, VISIBLE_MARGIN,
    MOVE_SEND_RATE, SPAWN_X, SPAWN_SPACING, MAX_PLAYERS_PER_ROOM
)
from common.events import move_payload
from common.player import PlayerState
from common.world import WorldGenerator
from client.camera import Camera
from client.chain import apply_chain
from client.physics import PhysicsEngine, Termination


class SendThrottle:
    """Lets through ``rate`` of the ticks it is asked about, evenly spaced."""

    def __init__(self, rate: float = MOVE_SEND_RATE):
        self.rate = rate
        self._credit = 0.0

    def ready(self) -> bool:
        self._credit += self.rate
        if self._credit >= 1.0:
            self._credit -= 1.0
            return True
        return False

    def reset(self):
        self._credit = 0.0


def spawn_player(data: dict) -> PlayerState:
    """Roster entry -> local player, standing just above the ground."""
    player = PlayerState.from_dict(data)
    player.y = GROUND_Y - 50 - PLAYER_HEIGHT
    player.vx = 0.0
    player.vy = 0.0
    player.on_ground = True
    return player


class GameSession:
    """
    Everything one client knows about its room and the running game.
    """

    def __init__(self, world: WorldGenerator = None, physics: PhysicsEngine = None,
                 camera: Camera = None, send_rate: float = MOVE_SEND_RATE,
                 metrics=None):
        # Room
        self.player_id = None
        self.room_id = None
        self.creator_id = None
        self.players = {}          # player_id -> PlayerState, join order
        self.local_player = None

        # Simulation
        self.world = world or WorldGenerator(WORLD_SEED)
        self.physics = physics or PhysicsEngine()
        self.camera = camera or Camera()
        self.throttle = SendThrottle(send_rate)
        self.metrics = metrics

        # Round
        self.started = False
        self.game_over = False
        self.message = None
        self.score = 0
        self.high_score = 0
        self.tick = 0

    @property
    def is_creator(self) -> bool:
        return self.player_id is not None and self.player_id == self.creator_id

    @property
    def can_start(self) -> bool:
        """Mirror of the server's start gating, for enabling the start control."""
        return (self.is_creator and
                len(self.players) == MAX_PLAYERS_PER_ROOM and
                all(p.character for p in self.players.values()))

    @property
    def partner(self) -> PlayerState:
        for player in self.players.values():
            if player.player_id != self.player_id:
                return player
        return None

    # -- roster events -----------------------------------------------------

    def _enter_room(self, data: dict):
        self.player_id = data['playerId']
        self.room_id = data['roomId']
        self.creator_id = data.get('creatorId', self.player_id)
        self.players = {}
        for entry in data.get('players', []):
            self.players[entry['id']] = spawn_player(entry)
        self.local_player = self.players.get(self.player_id)

    def on_room_created(self, data: dict):
        self._enter_room(data)

    def on_room_joined(self, data: dict):
        self._enter_room(data)

    def on_player_list_updated(self, data: dict):
        entries = data.get('players', [])
        listed = set()
        for entry in entries:
            listed.add(entry['id'])
            player = self.players.get(entry['id'])
            if player is not None:
                player.character = entry.get('character')
                player.is_creator = bool(entry.get('isCreator', False))
            else:
                self.players[entry['id']] = spawn_player(entry)

        for player_id in [pid for pid in self.players if pid not in listed]:
            del self.players[player_id]

        self.creator_id = data.get('creatorId', self.creator_id)
        self.local_player = self.players.get(self.player_id)

    def on_player_moved(self, data: dict):
        """Apply a relayed remote state; our own player is never overwritten."""
        player = self.players.get(data.get('playerId'))
        if player is None or player.player_id == self.player_id:
            return
        player.x = data['x']
        player.y = data['y']
        player.vx = data.get('vx') or 0.0
        player.vy = data.get('vy') or 0.0

    def on_player_disconnected(self, data):
        """Partner loss ends the game for good; only a new start resumes play."""
        player_id = data.get('playerId') if isinstance(data, dict) else data
        self.players.pop(player_id, None)
        if self.started:
            self.trigger_game_over(Termination.PARTNER_LOST)
            self.started = False

    def select_character(self, character: str):
        if self.local_player is not None:
            self.local_player.character = character

    # -- round lifecycle ---------------------------------------------------

    def on_game_started(self, data: dict = None):
        seed = (data or {}).get('worldSeed', WORLD_SEED)
        if seed != self.world.seed:
            self.world.reseed(seed)
        self._reset_round()
        self.started = True

    def on_game_restart(self, data: dict = None):
        """Reset the round; the world regenerates from the same seed."""
        self._reset_round()

    def _reset_round(self):
        self.game_over = False
        self.message = None
        self.score = 0
        self.camera.reset()
        self.world.clear()
        self.throttle.reset()

        for index, player in enumerate(self.players.values()):
            player.x = SPAWN_X + index * SPAWN_SPACING
            player.y = GROUND_Y - 50 - player.height / 2
            player.vx = 0.0
            player.vy = 0.0
            player.on_ground = True

    def trigger_game_over(self, reason: str):
        if self.game_over:
            return
        self.game_over = True
        self.message = reason
        self.score = math.floor(self.camera.x / 10)
        self.high_score = max(self.high_score, self.score)
        if self.metrics:
            self.metrics.log_outcome(reason, self.score)

    # -- simulation --------------------------------------------------------

    def update(self, inp: dict) -> dict:
        """
        Run one tick for the local player.

        Args:
            inp: dict with keys move_x and actions

        Returns:
            A player-move payload when this tick should be sent, else None.
        """
        if not self.started or self.game_over or self.local_player is None:
            return None

        tick_start = time.perf_counter()
        player = self.local_player
        start_x, end_x = self.camera.visible_range(VISIBLE_MARGIN)
        platforms = self.world.platforms_in_range(start_x, end_x)
        spikes, valleys = self.world.hazards_in_range(start_x, end_x)

        outcome = self.physics.step(
            player, inp, platforms, spikes, valleys,
            players=list(self.players.values()),
            left_boundary=self.camera.left_boundary(player.width)
        )
        if outcome is not None:
            self.trigger_game_over(outcome)
            return None

        self.camera.update(self.players.values())
        apply_chain(self.players.values(), self.player_id)
        self.tick += 1

        if self.metrics:
            duration = (time.perf_counter() - tick_start) * 1000.0
            self.metrics.log_tick_time(self.tick, duration)

        if self.throttle.ready():
            return move_payload(player)
        return None
