"""
Unit tests for the chain tether between the two players.
"""

import math
import unittest

from common.config import MAX_CHAIN_LENGTH
from common.player import PlayerState
from client.chain import apply_chain, chain_correction, ordered_pairs


def distance(p1, p2):
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


class TestChainCorrection(unittest.TestCase):

    def test_slack_chain_untouched(self):
        p1 = PlayerState('a', x=0.0, y=0.0)
        p2 = PlayerState('b', x=MAX_CHAIN_LENGTH, y=0.0)
        self.assertEqual(chain_correction(p1, p2), (0.0, 0.0))

    def test_overstretched_offset(self):
        """d=300, L=150, stiffness 0.3 -> 15% of the separation."""
        p1 = PlayerState('a', x=0.0, y=0.0)
        p2 = PlayerState('b', x=300.0, y=0.0)
        dx, dy = chain_correction(p1, p2, 150, 0.3)
        self.assertAlmostEqual(dx, 45.0)
        self.assertAlmostEqual(dy, 0.0)

    def test_diagonal_offset_points_at_partner(self):
        p1 = PlayerState('a', x=0.0, y=0.0)
        p2 = PlayerState('b', x=300.0, y=400.0)
        dx, dy = chain_correction(p1, p2, 150, 0.3)
        self.assertAlmostEqual(dy / dx, 400.0 / 300.0)


class TestApplyChain(unittest.TestCase):

    def test_only_local_player_moves(self):
        p1 = PlayerState('a', x=0.0, y=0.0)
        p2 = PlayerState('b', x=300.0, y=0.0)
        corrected = apply_chain([p1, p2], 'a')
        self.assertTrue(corrected)
        self.assertAlmostEqual(p1.x, 45.0)
        self.assertEqual(p2.x, 300.0)

    def test_second_player_pulled_back(self):
        p1 = PlayerState('a', x=0.0, y=0.0)
        p2 = PlayerState('b', x=300.0, y=0.0)
        apply_chain([p1, p2], 'b')
        self.assertEqual(p1.x, 0.0)
        self.assertAlmostEqual(p2.x, 255.0)

    def test_moves_toward_length_without_overshoot(self):
        p1 = PlayerState('a', x=100.0, y=500.0)
        p2 = PlayerState('b', x=420.0, y=260.0)
        before = distance(p1, p2)
        apply_chain([p1, p2], 'a')
        after = distance(p1, p2)
        self.assertLess(after, before)
        self.assertGreater(after, MAX_CHAIN_LENGTH)

    def test_no_correction_when_slack(self):
        p1 = PlayerState('a', x=0.0, y=0.0)
        p2 = PlayerState('b', x=100.0, y=0.0)
        self.assertFalse(apply_chain([p1, p2], 'a'))
        self.assertEqual((p1.x, p2.x), (0.0, 100.0))

    def test_single_player(self):
        self.assertFalse(apply_chain([PlayerState('a', x=0.0)], 'a'))

    def test_order_independent_of_arrival(self):
        """Both clients orient the pair the same way regardless of insertion order."""
        a = PlayerState('a', x=0.0)
        b = PlayerState('b', x=300.0)
        self.assertEqual(ordered_pairs([b, a]), [(a, b)])

        a2 = PlayerState('a', x=0.0)
        b2 = PlayerState('b', x=300.0)
        apply_chain([b, a], 'a')
        apply_chain([a2, b2], 'a')
        self.assertEqual(a.x, a2.x)


if __name__ == '__main__':
    unittest.main()
