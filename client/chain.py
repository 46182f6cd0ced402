"""
Soft tether between the two players.

Each client only corrects its own player, so the constraint is relaxed from
both ends independently rather than solved jointly.
"""

import math

from common.config import MAX_CHAIN_LENGTH, CHAIN_STIFFNESS


def ordered_pairs(players) -> list:
    """Adjacent pairs after sorting by id, so both clients agree on orientation."""
    ordered = sorted(players, key=lambda p: p.player_id)
    return list(zip(ordered, ordered[1:]))


def chain_correction(p1, p2, max_length: float = MAX_CHAIN_LENGTH,
                     stiffness: float = CHAIN_STIFFNESS) -> tuple:
    """
    Offset that moves ``p1`` toward ``p2`` (negate it to move ``p2``).

    Returns (0.0, 0.0) while the chain is slack.
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    distance = math.sqrt(dx * dx + dy * dy)
    if distance <= max_length:
        return 0.0, 0.0

    percent = (distance - max_length) / distance * stiffness
    return dx * percent, dy * percent


def apply_chain(players, local_id: str, max_length: float = MAX_CHAIN_LENGTH,
                stiffness: float = CHAIN_STIFFNESS) -> bool:
    """
    Pull the locally owned player toward its partner when overstretched.

    Returns True if a correction was applied.
    """
    corrected = False
    for p1, p2 in ordered_pairs(players):
        offset_x, offset_y = chain_correction(p1, p2, max_length, stiffness)
        if offset_x == 0.0 and offset_y == 0.0:
            continue

        if p1.player_id == local_id:
            p1.x += offset_x
            p1.y += offset_y
            corrected = True
        if p2.player_id == local_id:
            p2.x -= offset_x
            p2.y -= offset_y
            corrected = True
    return corrected
