"""Socket message vocabulary.

Every payload is a JSON object tagged by ``type``. Inbound payloads may arrive
as a dict (Socket.IO decodes JSON for us) or as a raw JSON string.
"""
import json
from dataclasses import dataclass
from typing import Union

from .engine import X, O

MOVE = 'move'
JOIN = 'join'
CONNECT = 'connect'
LEAVE = 'leave'
GAME_STATE = 'gameState'
PLAYER_JOINED = 'playerJoined'  # reserved, not emitted yet
ERROR = 'error'

INVALID_FORMAT = 'Invalid message format'


class InvalidMessage(ValueError):
    pass


@dataclass(frozen=True)
class MoveRequest:
    position: int
    player: str
    game_code: str


@dataclass(frozen=True)
class RoomRequest:
    type: str
    game_code: str


def _require_code(data: dict) -> str:
    code = data.get('gameCode')
    if not isinstance(code, str) or not code.strip():
        raise InvalidMessage('gameCode is required')
    return code.strip().upper()


def parse_message(raw) -> Union[MoveRequest, RoomRequest]:
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise InvalidMessage('not JSON') from exc
    if not isinstance(raw, dict):
        raise InvalidMessage('expected a JSON object')

    kind = raw.get('type')
    if kind == MOVE:
        position = raw.get('position')
        if isinstance(position, bool) or not isinstance(position, int):
            raise InvalidMessage('position must be an integer')
        player = raw.get('player')
        if player not in (X, O):
            raise InvalidMessage('player must be X or O')
        return MoveRequest(position=position, player=player, game_code=_require_code(raw))
    if kind in (JOIN, CONNECT, LEAVE):
        return RoomRequest(type=kind, game_code=_require_code(raw))
    raise InvalidMessage(f'unknown message type {kind!r}')


def game_state(game) -> dict:
    return {'type': GAME_STATE, 'game': game.to_dict()}


def error(message: str) -> dict:
    return {'type': ERROR, 'message': message}
