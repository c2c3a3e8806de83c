"""Local game against a heuristic computer opponent.

Uses the same ``apply_move`` as networked games, so eviction and win rules
are identical; nothing here touches the store or the rooms.
"""
import random
from dataclasses import replace
from typing import Optional

from .engine import (
    CENTER, CORNERS, EMPTY, O, PLAYING, X, BoardState, MoveRejected,
    apply_move, open_cells, other, reset_state,
)
from .records import GameRecord

COMPUTER = 'COMPUTER'
LOCAL_CODE = 'SINGLE'


def _winning_cells(state: BoardState, player: str) -> list:
    """Open cells where ``player`` would win right now, eviction included."""
    probe = replace(state, current_player=player)
    cells = []
    for position in open_cells(state.board):
        try:
            result = apply_move(probe, player, position)
        except MoveRejected:
            continue
        if result.winner == player:
            cells.append(position)
    return cells


def choose_move(state: BoardState, me: str = O, rng: Optional[random.Random] = None) -> Optional[int]:
    """Pick the computer's cell: win, block, centre, corner, anything."""
    rng = rng or random
    available = open_cells(state.board)
    if not available:
        return None

    wins = _winning_cells(state, me)
    if wins:
        return wins[0]
    threats = _winning_cells(state, other(me))
    if threats:
        return threats[0]
    if state.board[CENTER] == EMPTY:
        return CENTER
    corners = [c for c in CORNERS if state.board[c] == EMPTY]
    if corners:
        return rng.choice(corners)
    return rng.choice(available)


class SinglePlayerGame:
    """Human plays X, the computer answers as O straight after each move."""

    def __init__(self, player_id: str, rng: Optional[random.Random] = None):
        self.player_id = player_id
        self.rng = rng or random.Random()
        self.human = X
        self.computer = O
        self.game = self._fresh()

    def _fresh(self) -> GameRecord:
        return GameRecord.new(
            LOCAL_CODE,
            player1=self.player_id,
            player2=COMPUTER,
            **reset_state().to_fields(),
        )

    @property
    def state(self) -> BoardState:
        return self.game.board_state()

    @property
    def finished(self) -> bool:
        return self.game.status != PLAYING

    def play(self, position: int) -> GameRecord:
        """Apply the human's move, then the computer's reply if the game goes on.

        Raises ``MoveRejected`` for an illegal human move; the game is unchanged.
        """
        state = apply_move(self.state, self.human, position)
        if state.status == PLAYING:
            reply = choose_move(state, self.computer, self.rng)
            if reply is not None:
                state = apply_move(state, self.computer, reply)
        self.game = self.game.with_fields(state.to_fields())
        return self.game

    def reset(self) -> GameRecord:
        self.game = self._fresh()
        return self.game

    def to_dict(self) -> dict:
        return self.game.to_dict()
