from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List, Optional
import json

from .engine import BoardState, EMPTY, BOARD_SIZE, X, WAITING, empty_state


def _blank_board() -> List[str]:
    return [EMPTY] * BOARD_SIZE


def decode_list(raw, default=None) -> list:
    """Decode a JSON-encoded array column or wire field into a list."""
    if raw is None or raw == '':
        return list(default or [])
    if isinstance(raw, (list, tuple)):
        return list(raw)
    value = json.loads(raw)
    if not isinstance(value, list):
        raise ValueError(f'expected a JSON array, got {type(value).__name__}')
    return value


def encode_list(values) -> str:
    return json.dumps(list(values), separators=(',', ':'))


@dataclass
class GameRecord:
    """One match as the rest of the server sees it: plain lists, no JSON text."""
    code: str
    board: List[str] = field(default_factory=_blank_board)
    current_player: str = X
    player1: Optional[str] = None
    player2: Optional[str] = None
    winner: Optional[str] = None
    status: str = WAITING
    moves_x: List[int] = field(default_factory=list)
    moves_o: List[int] = field(default_factory=list)
    created_at: Optional[datetime] = None
    id: Optional[int] = None

    @classmethod
    def new(cls, code: str, **kwargs) -> 'GameRecord':
        fields = empty_state().to_fields()
        fields.update(kwargs)
        fields.setdefault('created_at', datetime.now(timezone.utc))
        return cls(code=code, **fields)

    def board_state(self) -> BoardState:
        return BoardState(
            board=tuple(self.board),
            moves_x=tuple(self.moves_x),
            moves_o=tuple(self.moves_o),
            current_player=self.current_player,
            status=self.status,
            winner=self.winner,
        )

    def with_fields(self, fields: dict) -> 'GameRecord':
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise KeyError(f"not updatable: {', '.join(sorted(unknown))}")
        return replace(self, **fields)

    def copy(self) -> 'GameRecord':
        return replace(self, board=list(self.board), moves_x=list(self.moves_x), moves_o=list(self.moves_o))

    def to_dict(self) -> dict:
        """Wire shape of a Game; board and move lists travel as JSON text."""
        return {
            'id': self.id,
            'code': self.code,
            'board': encode_list(self.board),
            'currentPlayer': self.current_player,
            'player1': self.player1,
            'player2': self.player2,
            'winner': self.winner,
            'status': self.status,
            'playerXMoves': encode_list(self.moves_x),
            'playerOMoves': encode_list(self.moves_o),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }


UPDATABLE_FIELDS = frozenset({
    'board', 'current_player', 'player1', 'player2', 'winner', 'status', 'moves_x', 'moves_o',
})
