"""
Player state shared by the server roster and the client simulation.
"""

from common.config import PLAYER_WIDTH, PLAYER_HEIGHT


class PlayerState:
    """One participant: identity, chosen character and kinematic state."""

    __slots__ = ('player_id', 'character', 'x', 'y', 'vx', 'vy',
                 'on_ground', 'width', 'height', 'is_creator')

    def __init__(self, player_id: str, x: float = 0.0, y: float = 0.0,
                 vx: float = 0.0, vy: float = 0.0, character: str = None,
                 on_ground: bool = True, is_creator: bool = False,
                 width: float = PLAYER_WIDTH, height: float = PLAYER_HEIGHT):
        self.player_id = player_id
        self.character = character
        self.x = x
        self.y = y
        self.vx = vx
        self.vy = vy
        self.on_ground = on_ground
        self.is_creator = is_creator
        self.width = width
        self.height = height

    # Edges (x, y are the centre of the box)
    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def right(self) -> float:
        return self.x + self.width / 2

    @property
    def top(self) -> float:
        return self.y - self.height / 2

    @property
    def bottom(self) -> float:
        return self.y + self.height / 2

    def to_dict(self) -> dict:
        """Roster entry as sent on the wire."""
        return {
            'id': self.player_id,
            'x': self.x, 'y': self.y,
            'vx': self.vx, 'vy': self.vy,
            'character': self.character,
            'isCreator': self.is_creator,
        }

    @staticmethod
    def from_dict(data: dict) -> 'PlayerState':
        return PlayerState(
            data['id'],
            x=data.get('x', 0.0),
            y=data.get('y', 0.0),
            vx=data.get('vx') or 0.0,
            vy=data.get('vy') or 0.0,
            character=data.get('character'),
            is_creator=bool(data.get('isCreator', False)),
        )

    def __repr__(self):
        return (f"PlayerState(id={self.player_id!r}, x={self.x:.1f}, "
                f"y={self.y:.1f}, character={self.character!r})")
