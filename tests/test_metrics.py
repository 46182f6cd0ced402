"""
Unit tests for metrics collection and persistence.
"""

import json
import os
import tempfile
import unittest

from common.metrics_logger import MetricsLogger


class TestMetricsLogger(unittest.TestCase):

    def test_summary(self):
        metrics = MetricsLogger()
        for tick in range(1, 21):
            metrics.log_tick_time(tick, float(tick))
        metrics.log_room_event('created', 'ABC123', 1)
        metrics.log_room_event('joined', 'ABC123', 2)
        metrics.log_outcome('Player hit spikes!', 12)
        metrics.log_outcome('Both players fell into the abyss!', 40)

        summary = metrics.get_summary()
        self.assertAlmostEqual(summary['tick_time_mean'], 10.5)
        self.assertEqual(summary['tick_time_max'], 20.0)
        self.assertEqual(summary['tick_time_p95'], 20.0)
        self.assertEqual(summary['room_events'], 2)
        self.assertEqual(summary['rooms_created'], 1)
        self.assertEqual(summary['games'], 2)
        self.assertEqual(summary['best_score'], 40)

    def test_empty_summary(self):
        self.assertEqual(MetricsLogger().get_summary(), {})

    def test_relay_rate_window(self):
        metrics = MetricsLogger()
        metrics._relay_window_start -= 2.0
        metrics.log_relay()
        self.assertEqual(len(metrics.data['relayed_moves']), 1)
        self.assertEqual(metrics._relay_window_count, 0)

    def test_save(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_dir = os.path.join(tmp, 'logs')
            metrics = MetricsLogger(log_dir)
            metrics.log_room_event('created', 'ABC123', 1)
            path = metrics.save('server_metrics.json')

            with open(path) as f:
                data = json.load(f)
            self.assertEqual(data['room_events'][0]['room'], 'ABC123')
            self.assertEqual(os.path.dirname(path), log_dir)


if __name__ == '__main__':
    unittest.main()
