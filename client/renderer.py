"""
Minimal game renderer using pygame.
Draws terrain, hazards, the chained players and a HUD from session state.
"""

import pygame

from common.config import CANVAS_WIDTH, CANVAS_HEIGHT, GROUND_Y, VISIBLE_MARGIN
from client.physics import ACTION_JUMP


SKY_COLOR = (34, 70, 52)
GROUND_COLOR = (78, 120, 73)
PLATFORM_COLOR = (139, 94, 52)
SPIKE_COLOR = (200, 60, 60)
CHAIN_COLOR = (170, 170, 180)
CHARACTER_COLORS = {
    'duck': (255, 215, 80),
    'dog': (170, 120, 80),
    None: (200, 200, 200),
}

# Key -> command for menu-style actions
COMMAND_KEYS = {
    pygame.K_1: 'duck',
    pygame.K_2: 'dog',
    pygame.K_RETURN: 'start',
    pygame.K_r: 'restart',
}


class GameRenderer:
    """Pygame-based renderer for the game client."""

    def __init__(self, width: int = CANVAS_WIDTH, height: int = CANVAS_HEIGHT,
                 fps: int = 60):
        pygame.init()
        self.width = width
        self.height = height
        self.fps = fps
        self.screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption("Chainbound")
        self.font = pygame.font.SysFont('monospace', 16)
        self.big_font = pygame.font.SysFont('monospace', 32, bold=True)
        self.clock = pygame.time.Clock()

    def render(self, session):
        """Render one frame."""
        self.screen.fill(SKY_COLOR)
        cam_x = session.camera.x

        if session.started:
            start_x, end_x = session.camera.visible_range(VISIBLE_MARGIN)
            spikes, valleys = session.world.hazards_in_range(start_x, end_x)
            self._draw_ground(cam_x, valleys)
            for platform in session.world.platforms_in_range(start_x, end_x):
                pygame.draw.rect(self.screen, PLATFORM_COLOR,
                                 (platform.x - cam_x, platform.y,
                                  platform.width, platform.height))
            for spike in spikes:
                self._draw_spike(spike, cam_x)
            self._draw_chain(session, cam_x)
            for player in session.players.values():
                self._draw_player(player, cam_x, player.player_id == session.player_id)

        self._draw_hud(session)
        pygame.display.flip()
        self.clock.tick(self.fps)

    def _draw_ground(self, cam_x: float, valleys):
        pygame.draw.rect(self.screen, GROUND_COLOR,
                         (0, GROUND_Y, self.width, self.height - GROUND_Y))
        for valley in valleys:
            pygame.draw.rect(self.screen, SKY_COLOR,
                             (valley.x - cam_x, GROUND_Y,
                              valley.width, self.height - GROUND_Y))

    def _draw_spike(self, spike, cam_x: float):
        teeth = max(1, int(spike.width // 12))
        tooth_w = spike.width / teeth
        for i in range(teeth):
            left = spike.x - cam_x + i * tooth_w
            pygame.draw.polygon(self.screen, SPIKE_COLOR, [
                (left, spike.y),
                (left + tooth_w / 2, spike.y - spike.height),
                (left + tooth_w, spike.y),
            ])

    def _draw_chain(self, session, cam_x: float):
        players = sorted(session.players.values(), key=lambda p: p.player_id)
        for p1, p2 in zip(players, players[1:]):
            pygame.draw.line(self.screen, CHAIN_COLOR,
                             (p1.x - cam_x, p1.y), (p2.x - cam_x, p2.y), 3)

    def _draw_player(self, player, cam_x: float, is_local: bool):
        color = CHARACTER_COLORS.get(player.character, CHARACTER_COLORS[None])
        rect = pygame.Rect(int(player.left - cam_x), int(player.top),
                           int(player.width), int(player.height))
        if is_local:
            pygame.draw.rect(self.screen, (255, 255, 255), rect.inflate(4, 4))
        pygame.draw.rect(self.screen, color, rect)
        label = self.font.render(player.character or '?', True, (20, 20, 20))
        self.screen.blit(label, (rect.x + 4, rect.y + 4))

    def _draw_hud(self, session):
        lines = [f"Room: {session.room_id or '-'}"]
        if not session.started:
            for player in session.players.values():
                host = ' (host)' if player.player_id == session.creator_id else ''
                lines.append(f"{player.player_id[:6]}: {player.character or 'choosing'}{host}")
            lines.append("1 = duck, 2 = dog" +
                         (", ENTER = start" if session.can_start else ""))
        else:
            lines.append(f"Distance: {int(session.camera.x / 10)}")
            lines.append(f"Best: {session.high_score}")

        y = 10
        for line in lines:
            self.screen.blit(self.font.render(line, True, (230, 230, 230)), (10, y))
            y += 20

        if session.game_over:
            text = self.big_font.render(session.message or 'Game over', True, (255, 255, 255))
            self.screen.blit(text, text.get_rect(center=(self.width // 2, self.height // 2 - 20)))
            action = 'R to restart' if session.started else 'waiting for a partner'
            hint = self.font.render(f"Score {session.score} - {action}", True, (230, 230, 230))
            self.screen.blit(hint, hint.get_rect(center=(self.width // 2, self.height // 2 + 20)))

    def get_input(self) -> dict:
        """Read keyboard state as a horizontal direction plus action bits."""
        keys = pygame.key.get_pressed()
        mx = (1.0 if keys[pygame.K_d] or keys[pygame.K_RIGHT] else 0.0) - \
             (1.0 if keys[pygame.K_a] or keys[pygame.K_LEFT] else 0.0)

        actions = 0
        if keys[pygame.K_SPACE] or keys[pygame.K_w] or keys[pygame.K_UP]:
            actions |= ACTION_JUMP

        return {'move_x': mx, 'actions': actions}

    def poll_commands(self) -> list:
        """Drain window events into commands; 'quit' ends the client."""
        commands = []
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                commands.append('quit')
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    commands.append('quit')
                elif event.key in COMMAND_KEYS:
                    commands.append(COMMAND_KEYS[event.key])
        return commands

    def close(self):
        pygame.quit()
