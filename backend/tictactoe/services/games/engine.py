"""Board rules for vanishing tic-tac-toe.

Each player keeps at most ``MAX_MARKS`` marks on the board; placing one more
removes that player's oldest mark first. Everything here is pure: functions
take a ``BoardState`` and return a new one, or raise ``MoveRejected``.
"""
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

X = 'X'
O = 'O'
EMPTY = ''
# Wire vocabulary only; never produced by apply_move.
DRAW = 'draw'

WAITING = 'waiting'
PLAYING = 'playing'
FINISHED = 'finished'

BOARD_SIZE = 9
MAX_MARKS = 3
CENTER = 4
CORNERS = (0, 2, 6, 8)

LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
)


class MoveRejected(Exception):
    """Base class for illegal moves; ``message`` is sent back to the mover."""
    message = 'Invalid move'

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class OutOfRange(MoveRejected):
    message = 'Invalid position'


class WrongTurn(MoveRejected):
    message = 'Not your turn'


class GameNotActive(MoveRejected):
    message = 'Game is not active'


class CellOccupied(MoveRejected):
    message = 'Position already taken'


@dataclass(frozen=True)
class BoardState:
    board: Tuple[str, ...] = field(default=(EMPTY,) * BOARD_SIZE)
    moves_x: Tuple[int, ...] = ()
    moves_o: Tuple[int, ...] = ()
    current_player: str = X
    status: str = WAITING
    winner: Optional[str] = None

    def moves_for(self, player: str) -> Tuple[int, ...]:
        return self.moves_x if player == X else self.moves_o

    def to_fields(self) -> dict:
        """Field dict in the shape ``GameStore.update`` expects."""
        return {
            'board': list(self.board),
            'moves_x': list(self.moves_x),
            'moves_o': list(self.moves_o),
            'current_player': self.current_player,
            'status': self.status,
            'winner': self.winner,
        }


def other(player: str) -> str:
    return O if player == X else X


def winning_line(board) -> Optional[Tuple[int, int, int]]:
    for a, b, c in LINES:
        if board[a] != EMPTY and board[a] == board[b] == board[c]:
            return (a, b, c)
    return None


def check_winner(board) -> Optional[str]:
    """Return the symbol owning a complete line, if any.

    There is no draw: marks keep vanishing, so the board never fills up.
    """
    line = winning_line(board)
    return board[line[0]] if line else None


def open_cells(board) -> list:
    return [i for i, cell in enumerate(board) if cell == EMPTY]


def empty_state() -> BoardState:
    return BoardState()


def reset_state() -> BoardState:
    """Fresh board ready to play. Player identities live outside the board."""
    return BoardState(status=PLAYING)


def validate_move(state: BoardState, player: str, position) -> None:
    if isinstance(position, bool) or not isinstance(position, int) or not 0 <= position < BOARD_SIZE:
        raise OutOfRange()
    if player != state.current_player:
        raise WrongTurn()
    if state.status != PLAYING:
        raise GameNotActive()
    if state.board[position] != EMPTY:
        raise CellOccupied()


def apply_move(state: BoardState, player: str, position: int) -> BoardState:
    """Place ``player``'s mark at ``position`` and return the next state.

    The oldest mark is evicted before the new one is placed and before the
    win check, so a line that relied on the evicted mark no longer counts.
    """
    validate_move(state, player, position)

    moves = list(state.moves_for(player)) + [position]
    board = list(state.board)
    if len(moves) > MAX_MARKS:
        evicted = moves.pop(0)
        board[evicted] = EMPTY
    board[position] = player

    changes = {'board': tuple(board)}
    if player == X:
        changes['moves_x'] = tuple(moves)
    else:
        changes['moves_o'] = tuple(moves)

    if check_winner(board) == player:
        changes.update(status=FINISHED, winner=player)
    else:
        changes['current_player'] = other(player)
    return replace(state, **changes)
