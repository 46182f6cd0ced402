"""
Per-tick physics and collision for the locally owned player.

Remote players are never integrated here; their state comes from the
network. Death conditions are decided locally and reported to the caller.
"""

from common.config import (
    PLAYER_SPEED, JUMP_FORCE, GRAVITY, GROUND_Y,
    SPIKE_TOLERANCE, FALL_DEATH_DEPTH, RESCUE_BAND
)

ACTION_JUMP = 0x01


class Termination:
    """Reasons a local session ends."""
    SPIKES = 'Player hit spikes!'
    ABYSS = 'Both players fell into the abyss!'
    PARTNER_LOST = 'Partner disconnected!'


def check_platform_collision(player, platform) -> bool:
    """
    Resolve ``player`` against one platform along the axis of least overlap.

    Returns True only when the player landed on top of the platform.
    """
    if not (player.right > platform.x and
            player.left < platform.right and
            player.bottom > platform.y and
            player.top < platform.bottom):
        return False

    overlap_left = player.right - platform.x
    overlap_right = platform.right - player.left
    overlap_top = player.bottom - platform.y
    overlap_bottom = platform.bottom - player.top
    min_overlap = min(overlap_left, overlap_right, overlap_top, overlap_bottom)

    if min_overlap == overlap_top and player.vy > 0:
        player.y = platform.y - player.height / 2
        player.vy = 0.0
        return True
    elif min_overlap == overlap_bottom and player.vy < 0:
        player.y = platform.bottom + player.height / 2
        player.vy = 0.0
    elif min_overlap == overlap_left:
        player.x = platform.x - player.width / 2
        player.vx = 0.0
    elif min_overlap == overlap_right:
        player.x = platform.right + player.width / 2
        player.vx = 0.0
    return False


def check_spike_collision(player, spike) -> bool:
    """Feet inside the spike strip, from the tips down to just below the base."""
    spike_top = spike.y - spike.height
    return (player.right > spike.x and
            player.left < spike.x + spike.width and
            player.bottom > spike_top and
            player.bottom <= spike.y + SPIKE_TOLERANCE)


def in_valley(x: float, valleys) -> bool:
    return any(valley.contains(x) for valley in valleys)


def has_fallen(player) -> bool:
    return player.y > GROUND_Y + FALL_DEATH_DEPTH


def is_supported(player, players) -> bool:
    """A faller survives while any teammate is still near ground level."""
    for other in players:
        if other.player_id != player.player_id and other.y < GROUND_Y + RESCUE_BAND:
            return True
    return False


class PhysicsEngine:
    """
    Integrates the local player one tick at a time.
    Must behave identically on both clients.
    """

    def __init__(self, speed: float = PLAYER_SPEED, jump_force: float = JUMP_FORCE,
                 gravity: float = GRAVITY, ground_y: float = GROUND_Y):
        self.speed = speed
        self.jump_force = jump_force
        self.gravity = gravity
        self.ground_y = ground_y

    def integrate(self, player, inp: dict):
        """
        Apply input and gravity, then move.

        Args:
            player: PlayerState to mutate
            inp: dict with keys move_x (-1, 0 or 1) and actions (bitfield)
        """
        if inp.get('actions', 0) & ACTION_JUMP and player.on_ground:
            player.vy = -self.jump_force
            player.on_ground = False

        player.vx = inp.get('move_x', 0.0) * self.speed
        player.x += player.vx

        # No terminal velocity
        player.vy += self.gravity
        player.y += player.vy

    def resolve(self, player, platforms, valleys):
        """Collide with platforms, then the ground unless over a valley."""
        player.on_ground = False
        for platform in platforms:
            if check_platform_collision(player, platform):
                player.on_ground = True
                break

        if not in_valley(player.x, valleys) and player.bottom >= self.ground_y:
            player.y = self.ground_y - player.height / 2
            player.vy = 0.0
            player.on_ground = True

    def step(self, player, inp: dict, platforms, spikes, valleys,
             players=(), left_boundary: float = None) -> str:
        """
        Advance the local player by one tick.

        Args:
            player: the locally owned PlayerState
            inp: input dict for this tick
            platforms, spikes, valleys: terrain in the visible window
            players: every known player, used for the rescue check
            left_boundary: smallest allowed centre x (camera edge)

        Returns:
            A Termination reason if the session must end, else None.
        """
        self.integrate(player, inp)
        self.resolve(player, platforms, valleys)

        for spike in spikes:
            if check_spike_collision(player, spike):
                return Termination.SPIKES

        if has_fallen(player) and not is_supported(player, players):
            return Termination.ABYSS

        if left_boundary is not None and player.x < left_boundary:
            player.x = left_boundary
            player.vx = 0.0

        return None
