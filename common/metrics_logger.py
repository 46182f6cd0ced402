"""
Metrics logging for performance and session analysis.
Logs tick times, room lifecycle events, relayed traffic and game outcomes.
"""

import json
import os
import time


class MetricsLogger:
    """Collects and persists game/session metrics."""

    def __init__(self, log_dir: str = 'analysis/logs'):
        self.log_dir = log_dir
        self.start_time = time.time()
        self.data = {
            'tick_times': [],
            'room_events': [],
            'relayed_moves': [],
            'outcomes': [],
        }
        self._relay_window_start = self.start_time
        self._relay_window_count = 0

    def _elapsed(self) -> float:
        return round(time.time() - self.start_time, 4)

    def log_tick_time(self, tick: int, duration_ms: float):
        self.data['tick_times'].append({
            'tick': tick, 'duration_ms': round(duration_ms, 4)
        })

    def log_room_event(self, event: str, room_id: str, players: int):
        """Log a room lifecycle step (created, joined, started, left...)."""
        self.data['room_events'].append({
            't': self._elapsed(), 'event': event,
            'room': room_id, 'players': players
        })

    def log_relay(self):
        """Count one relayed player-move; flushed as a per-second rate."""
        now = time.time()
        self._relay_window_count += 1
        if now - self._relay_window_start >= 1.0:
            self.data['relayed_moves'].append({
                't': self._elapsed(),
                'per_second': round(self._relay_window_count /
                                    (now - self._relay_window_start), 2)
            })
            self._relay_window_start = now
            self._relay_window_count = 0

    def log_outcome(self, reason: str, score: int):
        self.data['outcomes'].append({
            't': self._elapsed(), 'reason': reason, 'score': score
        })

    def save(self, filename: str = 'metrics.json'):
        os.makedirs(self.log_dir, exist_ok=True)
        path = os.path.join(self.log_dir, filename)
        with open(path, 'w') as f:
            json.dump(self.data, f, indent=2)
        print(f"[METRICS] Saved to {path}", flush=True)
        return path

    def get_summary(self) -> dict:
        """Compute summary statistics."""
        summary = {}

        ticks = [t['duration_ms'] for t in self.data['tick_times']]
        if ticks:
            ticks_sorted = sorted(ticks)
            summary['tick_time_mean'] = sum(ticks) / len(ticks)
            summary['tick_time_max'] = max(ticks)
            summary['tick_time_p95'] = ticks_sorted[int(len(ticks_sorted) * 0.95)]

        events = self.data['room_events']
        if events:
            summary['room_events'] = len(events)
            summary['rooms_created'] = sum(1 for e in events if e['event'] == 'created')

        rates = [r['per_second'] for r in self.data['relayed_moves']]
        if rates:
            summary['relay_rate_mean'] = sum(rates) / len(rates)

        scores = [o['score'] for o in self.data['outcomes']]
        if scores:
            summary['games'] = len(scores)
            summary['best_score'] = max(scores)

        return summary
