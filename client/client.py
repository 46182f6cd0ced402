"""
Main game client. Connects to the relay server, joins a room, runs the
local simulation every frame and pushes throttled position updates.
"""

import queue
import time
from urllib.parse import parse_qs, urlsplit, urlunsplit

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError

from common.config import DEFAULT_URL, DEFAULT_FPS, CHARACTERS
from common.events import Event
from common.metrics_logger import MetricsLogger
from client.game_session import GameSession


def parse_server_url(url: str) -> tuple:
    """
    Split an invite link into (server_url, room_code).

    ``http://host:5000/?room=abc123`` -> ('http://host:5000', 'ABC123').
    The room code is None when the link carries none.
    """
    parts = urlsplit(url)
    room = parse_qs(parts.query).get('room', [None])[0]
    if room is not None:
        room = room.strip().upper() or None
    base = urlunsplit((parts.scheme, parts.netloc, '', '', ''))
    return base, room


def invite_link(server_url: str, room_code: str) -> str:
    return f"{server_url.rstrip('/')}/?room={room_code}"


class GameClient:
    """
    Socket.IO game client.

    Inbound events arrive on the socket thread and are queued; the frame
    loop applies them between ticks so a tick never sees half an update.
    """

    FORWARDED_EVENTS = (
        Event.ROOM_CREATED, Event.ROOM_JOINED, Event.ROOM_NOT_FOUND,
        Event.ROOM_FULL, Event.PLAYER_LIST_UPDATED, Event.GAME_STARTED,
        Event.NOT_CREATOR, Event.NOT_ENOUGH_PLAYERS,
        Event.CHARACTERS_NOT_SELECTED, Event.PLAYER_MOVED,
        Event.GAME_RESTART, Event.PLAYER_DISCONNECTED,
    )

    def __init__(self, url: str = DEFAULT_URL, room: str = None,
                 character: str = None,
                 auto_start: bool = False, headless: bool = False,
                 fps: int = DEFAULT_FPS, verbose: bool = True):
        self.server_url, link_room = parse_server_url(url)
        self.room_code = (room or link_room or '').strip().upper() or None
        self.character = character
        self.auto_start = auto_start
        self.headless = headless
        self.fps = fps
        self.verbose = verbose
        self.running = False

        self.sio = socketio.Client(reconnection=False)
        self.inbox = queue.Queue()
        self.metrics = MetricsLogger()
        self.session = GameSession(metrics=self.metrics)

        self._handlers = {
            'connect': self._on_connect,
            'disconnect': self._on_disconnect,
            Event.ROOM_CREATED: self._on_room_created,
            Event.ROOM_JOINED: self._on_room_joined,
            Event.PLAYER_LIST_UPDATED: self._on_roster,
            Event.GAME_STARTED: self._on_game_started,
            Event.PLAYER_MOVED: self.session.on_player_moved,
            Event.GAME_RESTART: self.session.on_game_restart,
            Event.PLAYER_DISCONNECTED: self.session.on_player_disconnected,
        }
        self._register_socket_handlers()

    def _log(self, msg: str):
        if self.verbose:
            print(msg, flush=True)

    def _register_socket_handlers(self):
        for name in ('connect', 'disconnect') + self.FORWARDED_EVENTS:
            self.sio.on(name, self._enqueue(name))

    def _enqueue(self, name: str):
        def handler(*args):
            self.inbox.put((name, args[0] if args else None))
        return handler

    # -- inbound -----------------------------------------------------------

    def process_events(self):
        """Apply every queued network event; called between frames."""
        while True:
            try:
                name, data = self.inbox.get_nowait()
            except queue.Empty:
                break
            self.dispatch(name, data)

    def dispatch(self, name: str, data):
        if name in Event.REJECTIONS:
            self._log(f"[CLIENT] Request rejected: {name}")
            if name in (Event.ROOM_NOT_FOUND, Event.ROOM_FULL):
                self.running = False
            return

        handler = self._handlers.get(name)
        if handler is None:
            return
        if name in ('connect', 'disconnect'):
            handler()
        else:
            handler(data)

    def _on_connect(self):
        self._log(f"[CLIENT] Connected to {self.server_url}")
        if self.room_code:
            self.join_room(self.room_code)
        else:
            self.create_room()

    def _on_disconnect(self):
        self._log("[CLIENT] Disconnected from server")
        self.running = False

    def _on_room_created(self, data: dict):
        self.session.on_room_created(data)
        self._announce_room()

    def _on_room_joined(self, data: dict):
        self.session.on_room_joined(data)
        self._announce_room()

    def _announce_room(self):
        self._log(f"[CLIENT] In room {self.session.room_id} as "
                  f"{'host' if self.session.is_creator else 'guest'} | "
                  f"invite: {invite_link(self.server_url, self.session.room_id)}")
        if self.character:
            self.select_character(self.character)

    def _on_roster(self, data: dict):
        self.session.on_player_list_updated(data)
        if self.auto_start and self.session.can_start and not self.session.started:
            self.start_game()

    def _on_game_started(self, data: dict):
        self.session.on_game_started(data)
        self._log(f"[CLIENT] Game started (world seed {self.session.world.seed})")

    # -- outbound ----------------------------------------------------------

    def create_room(self):
        self.sio.emit(Event.CREATE_ROOM)

    def join_room(self, code: str):
        self.sio.emit(Event.JOIN_ROOM, {'roomId': code.strip().upper()})

    def select_character(self, character: str):
        if character not in CHARACTERS:
            self._log(f"[CLIENT] Unknown character {character!r}")
            return
        self.session.select_character(character)
        self.sio.emit(Event.SELECT_CHARACTER, {'character': character})

    def start_game(self):
        self.sio.emit(Event.START_GAME)

    def restart(self):
        self.session.on_game_restart()
        self.sio.emit(Event.GAME_RESTART)

    def handle_command(self, command: str):
        if command == 'quit':
            self.running = False
        elif command in CHARACTERS:
            self.select_character(command)
        elif command == 'start':
            self.start_game()
        elif command == 'restart' and self.session.started:
            self.restart()

    # -- loop --------------------------------------------------------------

    def run(self):
        """Main client loop."""
        renderer = None
        if not self.headless:
            from client.renderer import GameRenderer
            renderer = GameRenderer(fps=self.fps)

        try:
            self.sio.connect(self.server_url)
        except SocketConnectionError as e:
            self._log(f"[CLIENT] Could not connect to {self.server_url}: {e}")
            if renderer:
                renderer.close()
            return

        self.running = True
        frame_time = 1.0 / self.fps
        idle_input = {'move_x': 0.0, 'actions': 0}

        try:
            while self.running:
                frame_start = time.perf_counter()

                if renderer:
                    for command in renderer.poll_commands():
                        self.handle_command(command)

                self.process_events()

                inp = renderer.get_input() if renderer else idle_input
                move = self.session.update(inp)
                if move is not None and self.sio.connected:
                    self.sio.emit(Event.PLAYER_MOVE, move)

                if renderer:
                    renderer.render(self.session)
                else:
                    remaining = frame_time - (time.perf_counter() - frame_start)
                    if remaining > 0:
                        time.sleep(remaining)

        except KeyboardInterrupt:
            print("\n[CLIENT] Interrupted")
        finally:
            self.running = False
            if self.sio.connected:
                self.sio.disconnect()
            if renderer:
                renderer.close()

            self.metrics.save(f'client_{self.session.player_id or "offline"}_metrics.json')
            summary = self.metrics.get_summary()
            if summary:
                print(f"[CLIENT] Metrics summary: {summary}")


def main():
    """Entry point for running the client standalone."""
    import argparse
    parser = argparse.ArgumentParser(description='Chainbound game client')
    parser.add_argument('--url', default=DEFAULT_URL,
                        help='Server URL; an invite link with ?room=CODE auto-joins')
    parser.add_argument('--room', help="Room code to join; a new room is created when omitted")
    parser.add_argument('--character', choices=CHARACTERS,
                        help='Character to select on entering the room')
    parser.add_argument('--auto-start', action='store_true',
                        help='As host, start as soon as both players are ready')
    parser.add_argument('--headless', action='store_true',
                        help='Run without pygame (for bots/testing)')
    parser.add_argument('--fps', type=int, default=DEFAULT_FPS, help='Frame rate')
    args = parser.parse_args()

    client = GameClient(
        url=args.url, room=args.room,
        character=args.character, auto_start=args.auto_start,
        headless=args.headless, fps=args.fps
    )
    client.run()


if __name__ == '__main__':
    main()
