"""
Side-scrolling camera that follows the pair and never scrolls back.
"""

from common.config import CANVAS_WIDTH, CAMERA_SMOOTHING


class Camera:

    def __init__(self, view_width: float = CANVAS_WIDTH,
                 smoothing: float = CAMERA_SMOOTHING):
        self.view_width = view_width
        self.smoothing = smoothing
        self.x = 0.0
        self.target_x = 0.0

    def update(self, players):
        """Centre the target on the players' average x, then ease toward it."""
        xs = [p.x for p in players]
        if xs:
            avg_x = sum(xs) / len(xs)
            self.target_x = max(self.target_x, avg_x - self.view_width / 2)

        self.x += (self.target_x - self.x) * self.smoothing
        self.x = max(0.0, self.x)

    def left_boundary(self, player_width: float) -> float:
        return self.x + player_width / 2

    def visible_range(self, margin: float) -> tuple:
        return self.x - margin, self.x + self.view_width + margin

    def reset(self):
        self.x = 0.0
        self.target_x = 0.0
