"""
Unit tests for the local physics step, hazards and the camera.
"""

import unittest

from common.config import GROUND_Y, PLAYER_HEIGHT, PLAYER_WIDTH, JUMP_FORCE, GRAVITY
from common.player import PlayerState
from common.world import Platform, Spike, Valley
from client.camera import Camera
from client.physics import (
    ACTION_JUMP, PhysicsEngine, Termination,
    check_platform_collision, check_spike_collision, is_supported
)

IDLE = {'move_x': 0.0, 'actions': 0}
JUMP = {'move_x': 0.0, 'actions': ACTION_JUMP}
RIGHT = {'move_x': 1.0, 'actions': 0}

STANDING_Y = GROUND_Y - PLAYER_HEIGHT / 2


def make_player(pid='a', x=100.0, y=STANDING_Y, vx=0.0, vy=0.0, on_ground=True):
    return PlayerState(pid, x=x, y=y, vx=vx, vy=vy, on_ground=on_ground)


class TestPhysicsEngine(unittest.TestCase):
    """Integration and collision resolution for one tick."""

    def setUp(self):
        self.physics = PhysicsEngine()

    def test_rest_on_ground(self):
        player = make_player()
        result = self.physics.step(player, IDLE, [], [], [])
        self.assertIsNone(result)
        self.assertEqual(player.y, STANDING_Y)
        self.assertEqual(player.vy, 0.0)
        self.assertTrue(player.on_ground)

    def test_horizontal_speed(self):
        player = make_player()
        self.physics.step(player, RIGHT, [], [], [])
        self.assertEqual(player.x, 105.0)
        self.assertEqual(player.vx, 5.0)

    def test_jump_from_ground(self):
        player = make_player()
        self.physics.step(player, JUMP, [], [], [])
        self.assertAlmostEqual(player.vy, -JUMP_FORCE + GRAVITY)
        self.assertLess(player.y, STANDING_Y)
        self.assertFalse(player.on_ground)

    def test_no_double_jump(self):
        """Holding jump in the air only lets gravity act."""
        player = make_player()
        self.physics.step(player, JUMP, [], [], [])
        vy_after_first = player.vy
        self.physics.step(player, JUMP, [], [], [])
        self.assertAlmostEqual(player.vy, vy_after_first + GRAVITY)

    def test_land_on_platform(self):
        platform = Platform(0, 400, 200, 20)
        player = make_player(y=400 - PLAYER_HEIGHT / 2 - 2, vy=3.0, on_ground=False)
        self.physics.step(player, IDLE, [platform], [], [])
        self.assertEqual(player.y, 400 - PLAYER_HEIGHT / 2)
        self.assertEqual(player.vy, 0.0)
        self.assertTrue(player.on_ground)

    def test_head_bump(self):
        platform = Platform(0, 300, 200, 20)
        player = make_player(y=320 + PLAYER_HEIGHT / 2 + 1, vy=-5.0, on_ground=False)
        self.physics.step(player, IDLE, [platform], [], [])
        self.assertEqual(player.y, 320 + PLAYER_HEIGHT / 2)
        self.assertEqual(player.vy, 0.0)
        self.assertFalse(player.on_ground)

    def test_side_push(self):
        platform = Platform(200, 450, 100, 20)
        player = make_player(x=168.0, y=460.0, on_ground=False)
        self.physics.step(player, RIGHT, [platform], [], [])
        self.assertEqual(player.x, 200 - PLAYER_WIDTH / 2)
        self.assertEqual(player.vx, 0.0)
        self.assertFalse(player.on_ground)

    def test_valley_has_no_ground(self):
        player = make_player()
        valley = Valley(50, 200)
        self.physics.step(player, IDLE, [], [], [valley])
        self.assertFalse(player.on_ground)
        self.assertGreater(player.y, STANDING_Y)

    def test_ground_next_to_valley(self):
        player = make_player(x=100.0)
        valley = Valley(200, 150)
        self.physics.step(player, IDLE, [], [], [valley])
        self.assertTrue(player.on_ground)
        self.assertEqual(player.y, STANDING_Y)

    def test_spikes_end_session(self):
        player = make_player()
        spike = Spike(80, GROUND_Y, 60, 25)
        result = self.physics.step(player, IDLE, [], [spike], [])
        self.assertEqual(result, Termination.SPIKES)

    def test_spikes_ignored_when_above(self):
        player = make_player(y=300.0, on_ground=False)
        spike = Spike(80, GROUND_Y, 60, 25)
        self.assertIsNone(self.physics.step(player, IDLE, [], [spike], []))

    def test_left_boundary_clamp(self):
        player = make_player(x=10.0)
        self.physics.step(player, {'move_x': -1.0, 'actions': 0}, [], [], [],
                          left_boundary=30.0)
        self.assertEqual(player.x, 30.0)
        self.assertEqual(player.vx, 0.0)


class TestFalling(unittest.TestCase):
    """Abyss deaths are joint: a teammate near ground level saves the faller."""

    def setUp(self):
        self.physics = PhysicsEngine()
        self.valley = Valley(0, 1000)

    def test_rescued_by_teammate(self):
        faller = make_player('a', x=500.0, y=GROUND_Y + 151, on_ground=False)
        partner = make_player('b', x=560.0, y=GROUND_Y + 10)
        result = self.physics.step(faller, IDLE, [], [], [self.valley],
                                   players=[faller, partner])
        self.assertIsNone(result)

    def test_both_fell(self):
        faller = make_player('a', x=500.0, y=GROUND_Y + 151, on_ground=False)
        partner = make_player('b', x=560.0, y=GROUND_Y + 60)
        result = self.physics.step(faller, IDLE, [], [], [self.valley],
                                   players=[faller, partner])
        self.assertEqual(result, Termination.ABYSS)

    def test_alone_in_the_abyss(self):
        faller = make_player('a', x=500.0, y=GROUND_Y + 151, on_ground=False)
        result = self.physics.step(faller, IDLE, [], [], [self.valley],
                                   players=[faller])
        self.assertEqual(result, Termination.ABYSS)

    def test_rescue_band_edge(self):
        faller = make_player('a')
        self.assertTrue(is_supported(faller, [faller, make_player('b', y=GROUND_Y + 49)]))
        self.assertFalse(is_supported(faller, [faller, make_player('b', y=GROUND_Y + 50)]))


class TestCollisionHelpers(unittest.TestCase):

    def test_no_overlap(self):
        player = make_player(x=500.0)
        platform = Platform(0, 400, 100, 20)
        self.assertFalse(check_platform_collision(player, platform))
        self.assertEqual(player.x, 500.0)

    def test_spike_tolerance_below_base(self):
        spike = Spike(80, GROUND_Y, 60, 25)
        self.assertTrue(check_spike_collision(make_player(y=STANDING_Y + 5), spike))
        self.assertFalse(check_spike_collision(make_player(y=STANDING_Y + 6), spike))

    def test_spike_needs_horizontal_overlap(self):
        spike = Spike(200, GROUND_Y, 60, 25)
        self.assertFalse(check_spike_collision(make_player(x=100.0), spike))


class TestCamera(unittest.TestCase):

    def test_follows_average_with_smoothing(self):
        camera = Camera(view_width=1200, smoothing=0.1)
        camera.update([make_player('a', x=1000.0), make_player('b', x=1200.0)])
        self.assertEqual(camera.target_x, 500.0)
        self.assertAlmostEqual(camera.x, 50.0)

    def test_never_scrolls_back(self):
        camera = Camera(view_width=1200, smoothing=0.1)
        camera.update([make_player('a', x=1000.0), make_player('b', x=1200.0)])
        camera.update([make_player('a', x=0.0), make_player('b', x=0.0)])
        self.assertEqual(camera.target_x, 500.0)
        self.assertAlmostEqual(camera.x, 95.0)

    def test_clamped_at_world_start(self):
        camera = Camera(view_width=1200, smoothing=0.1)
        camera.update([make_player('a', x=100.0), make_player('b', x=160.0)])
        self.assertEqual(camera.x, 0.0)

    def test_left_boundary_and_visible_range(self):
        camera = Camera(view_width=1200)
        camera.x = 300.0
        self.assertEqual(camera.left_boundary(60), 330.0)
        self.assertEqual(camera.visible_range(500), (-200.0, 2000.0))

    def test_reset(self):
        camera = Camera()
        camera.x = camera.target_x = 800.0
        camera.reset()
        self.assertEqual((camera.x, camera.target_x), (0.0, 0.0))


if __name__ == '__main__':
    unittest.main()
