"""
Room relay server: Flask-SocketIO, event driven.

Handles:
- Room creation/joining (two players per room)
- Character selection and roster broadcasts
- Host-only game start gating
- Throttled position relay between the two peers
- Restart and disconnect cleanup

The server runs no game logic: terrain, physics and death conditions are
decided by the clients.
"""

import time

from flask import Flask, jsonify, request
from flask_socketio import SocketIO, emit, join_room, leave_room

from common.config import DEFAULT_HOST, DEFAULT_PORT, WORLD_SEED
from common.events import Event, extract_move, roster_payload
from common.metrics_logger import MetricsLogger
from server.rooms import RoomError, RoomRegistry, normalize_code


class GameServer:
    """
    Relay server for two-player rooms.
    Each handler runs to completion before the next event is processed.
    """

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT,
                 world_seed: int = WORLD_SEED, verbose: bool = True,
                 debug: bool = False, registry: RoomRegistry = None):
        self.host = host
        self.port = port
        self.verbose = verbose

        self.app = Flask(__name__)
        self.app.config['SECRET_KEY'] = 'chainbound-relay'
        self.socketio = SocketIO(self.app, cors_allowed_origins='*',
                                 logger=debug, engineio_logger=debug)

        # Core systems
        self.registry = registry or RoomRegistry(world_seed)
        self.metrics = MetricsLogger()

        # Statistics
        self.events_handled = 0
        self.moves_relayed = 0

        self._register_handlers()

    def _log(self, msg: str):
        """Print a message if verbose mode is enabled."""
        if self.verbose:
            print(msg, flush=True)

    def _register_handlers(self):
        on = self.socketio.on_event
        on('connect', self._handle_connect)
        on('disconnect', self._handle_disconnect)
        on(Event.CREATE_ROOM, self._handle_create_room)
        on(Event.JOIN_ROOM, self._handle_join_room)
        on(Event.SELECT_CHARACTER, self._handle_select_character)
        on(Event.START_GAME, self._handle_start_game)
        on(Event.PLAYER_MOVE, self._handle_player_move)
        on(Event.GAME_RESTART, self._handle_game_restart)

        @self.app.route('/')
        def status():
            return jsonify({
                'rooms': self.registry.count,
                'players': len(self.registry.player_rooms),
            })

    def _broadcast_roster(self, room):
        emit(Event.PLAYER_LIST_UPDATED,
             roster_payload(room.get_players(), room.creator_id),
             to=room.room_id)

    def _reject(self, err: RoomError):
        """Send a rejection to the requesting connection only."""
        self._log(f"[SERVER] {request.sid} rejected: {err.event}")
        emit(err.event)

    def _remove_from_room(self, sid: str):
        room, was_started, destroyed = self.registry.leave(sid)
        if room is None:
            return

        leave_room(room.room_id)
        if destroyed:
            self.metrics.log_room_event('destroyed', room.room_id, 0)
            self._log(f"[SERVER] Room {room.room_id} deleted")
            return

        self.metrics.log_room_event('left', room.room_id, room.count)
        if was_started:
            self._log(f"[SERVER] Room {room.room_id} game ended: partner lost")
        emit(Event.PLAYER_DISCONNECTED, {'playerId': sid}, to=room.room_id)
        self._broadcast_roster(room)

    # -- connection --------------------------------------------------------

    def _handle_connect(self, auth=None):
        self._log(f"[SERVER] Client connected: {request.sid}")

    def _handle_disconnect(self, reason=None):
        self._log(f"[SERVER] Client disconnected: {request.sid}")
        self._remove_from_room(request.sid)

    # -- rooms -------------------------------------------------------------

    def _handle_create_room(self, data=None):
        sid = request.sid
        self.events_handled += 1
        self._remove_from_room(sid)

        room = self.registry.create_room(sid)
        join_room(room.room_id)
        emit(Event.ROOM_CREATED, {
            'roomId': room.room_id,
            'playerId': sid,
            'players': room.get_players(),
            'creatorId': room.creator_id,
            'isCreator': True,
        })
        self.metrics.log_room_event('created', room.room_id, room.count)
        self._log(f"[SERVER] Room {room.room_id} created by {sid}")

    def _handle_join_room(self, data=None):
        sid = request.sid
        self.events_handled += 1
        code = data.get('roomId') if isinstance(data, dict) else data

        try:
            room = self.registry.find_joinable(sid, code)
        except RoomError as err:
            self._reject(err)
            return

        current = self.registry.get_room_for(sid)
        if current is not None and current is not room:
            self._remove_from_room(sid)

        room = self.registry.join_room(sid, normalize_code(code))
        join_room(room.room_id)
        emit(Event.ROOM_JOINED, {
            'roomId': room.room_id,
            'playerId': sid,
            'players': room.get_players(),
            'creatorId': room.creator_id,
            'isCreator': sid == room.creator_id,
        })
        self._broadcast_roster(room)
        self.metrics.log_room_event('joined', room.room_id, room.count)
        self._log(f"[SERVER] Player {sid} joined room {room.room_id}. "
                  f"Players: {room.count}")

    def _handle_select_character(self, data=None):
        sid = request.sid
        self.events_handled += 1
        character = data.get('character') if isinstance(data, dict) else None

        room = self.registry.select_character(sid, character)
        if room is None:
            self._log(f"[SERVER] Ignored character {character!r} from {sid}")
            return
        self._broadcast_roster(room)

    # -- game --------------------------------------------------------------

    def _handle_start_game(self, data=None):
        sid = request.sid
        self.events_handled += 1
        try:
            room = self.registry.start_game(sid)
        except RoomError as err:
            self._reject(err)
            return
        if room is None:
            return

        emit(Event.GAME_STARTED, {'worldSeed': room.world_seed}, to=room.room_id)
        self.metrics.log_room_event('started', room.room_id, room.count)
        self._log(f"[SERVER] Game started in room {room.room_id}")

    def _handle_player_move(self, data=None):
        sid = request.sid
        move = extract_move(data)
        if move is None:
            self._log(f"[SERVER] Malformed {Event.PLAYER_MOVE} from {sid}")
            return

        room = self.registry.record_move(sid, move)
        if room is None:
            return

        payload = {'playerId': sid}
        payload.update(move)
        emit(Event.PLAYER_MOVED, payload, to=room.room_id, include_self=False)
        self.moves_relayed += 1
        self.metrics.log_relay()

    def _handle_game_restart(self, data=None):
        sid = request.sid
        self.events_handled += 1
        room = self.registry.restart(sid)
        if room is None:
            self._log(f"[SERVER] Ignored restart from {sid}: no running game")
            return

        emit(Event.GAME_RESTART, to=room.room_id)
        self.metrics.log_room_event('restarted', room.room_id, room.count)
        self._log(f"[SERVER] Game restarted in room {room.room_id}")

    def run(self):
        """Serve until interrupted."""
        self._log(f"[SERVER] Started on http://{self.host}:{self.port} "
                  f"(world seed {self.registry.world_seed})")
        started = time.time()
        try:
            self.socketio.run(self.app, host=self.host, port=self.port,
                              allow_unsafe_werkzeug=True)
        except KeyboardInterrupt:
            self._log("\n[SERVER] Shutting down...")
        finally:
            self._log(f"[SERVER] Uptime {time.time() - started:.0f}s | "
                      f"Rooms: {self.registry.count} | "
                      f"Events: {self.events_handled} | "
                      f"Moves relayed: {self.moves_relayed}")
            self.metrics.save('server_metrics.json')
            summary = self.metrics.get_summary()
            if summary:
                self._log(f"[SERVER] Metrics summary: {summary}")


def main():
    """Entry point for running the server standalone."""
    import argparse
    parser = argparse.ArgumentParser(description='Chainbound room relay server')
    parser.add_argument('--host', default=DEFAULT_HOST, help='Bind address')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT, help='Bind port')
    parser.add_argument('--seed', type=int, default=WORLD_SEED,
                        help='World seed handed to every room')
    parser.add_argument('--quiet', action='store_true',
                        help='Suppress per-event log lines')
    parser.add_argument('--debug', action='store_true',
                        help='Enable Socket.IO/Engine.IO library logging')
    args = parser.parse_args()

    server = GameServer(
        host=args.host, port=args.port, world_seed=args.seed,
        verbose=not args.quiet, debug=args.debug
    )
    server.run()


if __name__ == '__main__':
    main()
