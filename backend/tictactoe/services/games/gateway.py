"""Applies client requests to stored games and fans out the results.

Socket handlers and HTTP routes both go through ``SessionGateway`` so that
every mutation of a game code happens under that code's lock, and every
committed state is broadcast to the code's room before the lock is released.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Dict, List

from . import engine, protocol
from .engine import MoveRejected
from .errors import GameConflict, GameNotFound, StoreError
from .records import GameRecord
from .rooms import RoomRegistry
from .store import GameStore

logger = logging.getLogger(__name__)


class KeyedLocks:
    """One lock per key, dropped once nobody holds or waits for it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, List] = {}

    @contextmanager
    def hold(self, key: str):
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


def normalize_code(code) -> str:
    return (code or '').strip().upper()


class SessionGateway:

    def __init__(self, store: GameStore, rooms: RoomRegistry, code_length: int = 6, code_factory=None):
        self.store = store
        self.rooms = rooms
        self.code_length = code_length
        self.locks = KeyedLocks()
        if code_factory is None:
            from tictactoe.models import generate_game_code as code_factory
        self._code_factory = code_factory

    # ---- socket messages ----

    def handle_message(self, connection, raw) -> None:
        try:
            request = protocol.parse_message(raw)
        except protocol.InvalidMessage as exc:
            logger.info(f"[invalid-message] connection={connection!r} reason={exc}")
            connection.send(protocol.error(protocol.INVALID_FORMAT))
            return

        if isinstance(request, protocol.MoveRequest):
            self.handle_move(connection, request)
        elif request.type == protocol.LEAVE:
            self.rooms.unsubscribe(request.game_code, connection)
        else:
            self.handle_join(connection, request.game_code)

    def handle_join(self, connection, code: str) -> None:
        """Subscribe to a game's room and send the sender its current state."""
        code = normalize_code(code)
        self.rooms.subscribe(code, connection)
        try:
            game = self.store.get_by_code(code)
        except StoreError as exc:
            logger.error(f"[join-room] code={code} store error: {exc}")
            return
        if game is not None:
            connection.send(protocol.game_state(game))

    def handle_move(self, connection, request: protocol.MoveRequest) -> None:
        code = normalize_code(request.game_code)
        with self.locks.hold(code):
            try:
                game = self.store.get_by_code(code)
            except StoreError as exc:
                logger.error(f"[move] game={code} load failed: {exc}")
                connection.send(protocol.error('Failed to apply move'))
                return
            if game is None:
                connection.send(protocol.error('Game not found'))
                return

            try:
                state = engine.apply_move(game.board_state(), request.player, request.position)
            except MoveRejected as exc:
                logger.info(
                    f"[move-rejected] game={code} player={request.player} position={request.position} reason={exc.message}"
                )
                connection.send(protocol.error(exc.message))
                return

            try:
                updated = self.store.update(code, state.to_fields())
            except StoreError as exc:
                logger.error(f"[move] game={code} commit failed: {exc}")
                connection.send(protocol.error('Failed to apply move'))
                return
            if updated is None:
                connection.send(protocol.error('Game not found'))
                return

            logger.info(
                f"[move] game={code} player={request.player} position={request.position} "
                f"status={updated.status} winner={updated.winner}"
            )
            self.rooms.broadcast(code, protocol.game_state(updated))

    def handle_disconnect(self, connection) -> List[str]:
        codes = self.rooms.unsubscribe_all(connection)
        if codes:
            logger.info(f"[disconnect] connection={connection!r} left={','.join(codes)}")
        return codes

    # ---- request/response operations ----

    def create_game(self) -> GameRecord:
        code = self._code_factory(self.code_length, exists=self.store.exists)
        game = self.store.create(GameRecord.new(code))
        logger.info(f"[create] game={game.code}")
        return game

    def get_game(self, code: str) -> GameRecord:
        game = self.store.get_by_code(normalize_code(code))
        if game is None:
            raise GameNotFound()
        return game

    def join_game(self, code: str, player_id: str) -> GameRecord:
        code = normalize_code(code)
        with self.locks.hold(code):
            game = self.get_game(code)
            if game.status != engine.WAITING:
                raise GameConflict('Game is not available to join')
            if not game.player1:
                fields = {'player1': player_id}
            elif not game.player2:
                fields = {'player2': player_id, 'status': engine.PLAYING}
            else:
                raise GameConflict('Game is full')
            updated = self._commit(code, fields)
            logger.info(f"[join] game={code} player={player_id} status={updated.status}")
            self.rooms.broadcast(code, protocol.game_state(updated))
            return updated

    def reset_game(self, code: str) -> GameRecord:
        """Clear the board for a rematch; both players stay seated."""
        code = normalize_code(code)
        with self.locks.hold(code):
            game = self.get_game(code)
            fields = engine.reset_state().to_fields()
            if not game.player2:
                # nobody to play against yet
                fields['status'] = engine.WAITING
            updated = self._commit(code, fields)
            logger.info(f"[reset] game={code}")
            self.rooms.broadcast(code, protocol.game_state(updated))
            return updated

    def _commit(self, code: str, fields: dict) -> GameRecord:
        updated = self.store.update(code, fields)
        if updated is None:
            raise GameNotFound()
        return updated
