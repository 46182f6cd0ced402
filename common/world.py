"""
Deterministic, infinite procedural world.

The world is cut into fixed-width chunks. Chunk ``i`` is a pure function of
the world seed, ``i`` and the trailing platform of chunk ``i - 1``, so two
peers that share a seed build identical terrain without ever exchanging it.
"""

import math
from dataclasses import dataclass

from common.config import (
    WORLD_SEED, CHUNK_SIZE, GROUND_Y,
    MAX_JUMP_DISTANCE, MAX_JUMP_HEIGHT,
    PLATFORM_HEIGHT, PLATFORM_MIN_Y, PLATFORM_MAX_Y, SPIKE_HEIGHT
)

# Seed offsets; each decision inside a slot reads its own offset.
CHUNK_SEED_STRIDE = 1000
SLOT_SEED_STRIDE = 100
OFFSET_PLATFORM_WIDTH = 1
OFFSET_PLATFORM_Y = 2
OFFSET_ADJUST_DIRECTION = 3
OFFSET_GROUND_PATH = 50
OFFSET_HAZARD_KIND = 51
OFFSET_VALLEY_WIDTH = 52
OFFSET_SPIKE_WIDTH = 53
OFFSET_GROUND_GAP = 54

GROUND_PATH_CHANCE = 0.2
VALLEY_CHANCE = 0.5
HAZARD_MARGIN = 10
MAX_HEIGHT_DIFF = 80
ADJUSTED_HEIGHT_STEP = 50


def seeded_random(seed: float) -> float:
    """
    Map a real-valued seed to [0, 1).

    The sine hash is part of the world format: every peer has to use this
    exact formula or the terrain diverges.
    """
    x = math.sin(seed) * 10000
    return x - math.floor(x)


@dataclass(frozen=True)
class Platform:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class Spike:
    """Spike trap standing on the ground; ``y`` is its base, the tip is ``y - height``."""
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class Valley:
    """A stretch of missing ground."""
    x: float
    width: float

    def contains(self, x: float) -> bool:
        return self.x < x < self.x + self.width


@dataclass(frozen=True)
class Chunk:
    index: int
    platforms: tuple = ()
    spikes: tuple = ()
    valleys: tuple = ()

    @property
    def start_x(self) -> int:
        return self.index * CHUNK_SIZE

    @property
    def end_x(self) -> int:
        return self.start_x + CHUNK_SIZE


def is_jump_possible(horizontal_distance: float, vertical_distance: float) -> bool:
    """
    Whether a jump covering the given distances is achievable.

    Horizontal reach is derated linearly as the height difference grows.
    """
    if horizontal_distance > MAX_JUMP_DISTANCE:
        return False
    if vertical_distance > MAX_JUMP_HEIGHT:
        return False

    if vertical_distance > 0:
        max_horizontal = MAX_JUMP_DISTANCE * (1 - vertical_distance / MAX_JUMP_HEIGHT)
        return horizontal_distance <= max_horizontal

    return True


def clamp_platform_y(y: float) -> float:
    return max(PLATFORM_MIN_Y, min(PLATFORM_MAX_Y, y))


def starting_chunk() -> Chunk:
    """Chunk 0: two fixed platforms so both players spawn safely."""
    return Chunk(0, platforms=(
        Platform(50, GROUND_Y - 30, 300, PLATFORM_HEIGHT),
        Platform(380, GROUND_Y - 80, 150, PLATFORM_HEIGHT),
    ))


def generate_chunk(index: int, world_seed: float = WORLD_SEED,
                   previous: Chunk = None) -> Chunk:
    """
    Build chunk ``index`` from the seed and the previous chunk.

    Args:
        index: chunk number, 0 or greater
        world_seed: shared world seed
        previous: chunk ``index - 1``; its last platform anchors this one.
            When missing or platform-less the anchor falls back to the chunk
            start at ground level.

    Returns:
        The immutable Chunk.
    """
    if index < 0:
        raise ValueError(f"Chunk index must be non-negative: {index}")
    if index == 0:
        return starting_chunk()

    platforms = []
    spikes = []
    valleys = []
    chunk_start_x = index * CHUNK_SIZE
    chunk_end_x = chunk_start_x + CHUNK_SIZE
    seed = world_seed + index * CHUNK_SEED_STRIDE

    last_platform_end = chunk_start_x
    last_platform_y = GROUND_Y
    if previous is not None and previous.platforms:
        anchor = previous.platforms[-1]
        last_platform_end = anchor.right
        last_platform_y = anchor.y

    current_x = max(chunk_start_x, last_platform_end)
    num_platforms = 2 + math.floor(seeded_random(seed) * 2)
    slot = 0

    while slot < num_platforms and current_x < chunk_end_x:
        slot_seed = seed + slot * SLOT_SEED_STRIDE

        if seeded_random(slot_seed + OFFSET_GROUND_PATH) < GROUND_PATH_CHANCE:
            current_x += 60 + seeded_random(slot_seed + OFFSET_GROUND_GAP) * 40
        elif seeded_random(slot_seed + OFFSET_HAZARD_KIND) < VALLEY_CHANCE:
            valley_width = 100 + seeded_random(slot_seed + OFFSET_VALLEY_WIDTH) * 120
            valleys.append(Valley(current_x + HAZARD_MARGIN, valley_width))
            current_x += valley_width + HAZARD_MARGIN
        else:
            spike_width = 50 + seeded_random(slot_seed + OFFSET_SPIKE_WIDTH) * 50
            spikes.append(Spike(current_x + HAZARD_MARGIN, GROUND_Y,
                                spike_width, SPIKE_HEIGHT))
            current_x += spike_width + HAZARD_MARGIN

        platform_width = 100 + seeded_random(slot_seed + OFFSET_PLATFORM_WIDTH) * 80
        min_y = max(PLATFORM_MIN_Y, last_platform_y - MAX_HEIGHT_DIFF)
        max_y = min(PLATFORM_MAX_Y, last_platform_y + MAX_HEIGHT_DIFF)
        platform_y = min_y + seeded_random(slot_seed + OFFSET_PLATFORM_Y) * (max_y - min_y)

        horizontal_distance = current_x - last_platform_end
        vertical_distance = abs(platform_y - last_platform_y)

        if not is_jump_possible(horizontal_distance, vertical_distance):
            # Never drop the platform; pull it to an easy height instead.
            if seeded_random(slot_seed + OFFSET_ADJUST_DIRECTION) < 0.5:
                step = -ADJUSTED_HEIGHT_STEP
            else:
                step = ADJUSTED_HEIGHT_STEP
            platform_y = clamp_platform_y(last_platform_y + step)

        platforms.append(Platform(current_x, platform_y, platform_width, PLATFORM_HEIGHT))

        last_platform_end = current_x + platform_width
        last_platform_y = platform_y
        current_x = last_platform_end
        slot += 1

    return Chunk(index, tuple(platforms), tuple(spikes), tuple(valleys))


class WorldGenerator:
    """
    Lazily generates and caches chunks for one world seed.

    One instance per client process; ``clear()`` on restart. Missing
    predecessors are generated first so every chunk sees its real anchor.
    """

    def __init__(self, seed: float = WORLD_SEED):
        self.seed = seed
        self.chunks = {}    # index -> Chunk

    def chunk(self, index: int) -> Chunk:
        """Return chunk ``index``, generating it (and its predecessors) if needed."""
        if index < 0:
            raise ValueError(f"Chunk index must be non-negative: {index}")
        cached = self.chunks.get(index)
        if cached is not None:
            return cached

        first_missing = index
        while first_missing > 0 and (first_missing - 1) not in self.chunks:
            first_missing -= 1

        for i in range(first_missing, index + 1):
            self.chunks[i] = generate_chunk(i, self.seed, self.chunks.get(i - 1))
        return self.chunks[index]

    def chunks_in_range(self, start_x: float, end_x: float) -> list:
        """Chunks overlapping [start_x, end_x]; the world starts at x = 0."""
        first = max(0, math.floor(start_x / CHUNK_SIZE))
        last = math.ceil(end_x / CHUNK_SIZE)
        return [self.chunk(i) for i in range(first, last + 1)]

    def platforms_in_range(self, start_x: float, end_x: float) -> list:
        platforms = []
        for chunk in self.chunks_in_range(start_x, end_x):
            platforms.extend(chunk.platforms)
        return platforms

    def hazards_in_range(self, start_x: float, end_x: float) -> tuple:
        """Return (spikes, valleys) for the chunks overlapping the range."""
        spikes = []
        valleys = []
        for chunk in self.chunks_in_range(start_x, end_x):
            spikes.extend(chunk.spikes)
            valleys.extend(chunk.valleys)
        return spikes, valleys

    def reseed(self, seed: float):
        """Switch worlds; cached chunks belong to the old seed."""
        self.seed = seed
        self.clear()

    def clear(self):
        self.chunks.clear()

    @property
    def count(self) -> int:
        return len(self.chunks)
