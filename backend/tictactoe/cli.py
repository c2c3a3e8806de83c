import random

import click

from tictactoe.services.games.engine import EMPTY, MoveRejected, winning_line
from tictactoe.services.games.single_player import SinglePlayerGame


def render_board(board, highlight=()) -> str:
    """Text board; empty cells show their index, winning cells are bracketed."""
    rows = []
    for start in (0, 3, 6):
        cells = []
        for i in range(start, start + 3):
            mark = board[i] if board[i] != EMPTY else str(i)
            cells.append(f'[{mark}]' if i in highlight else f' {mark} ')
        rows.append('|'.join(cells))
    return '\n---+---+---\n'.join(rows)


def play_solo(player_id: str, seed=None, prompt=click.prompt, echo=click.echo) -> dict:
    """Terminal loop for a single-player game. Returns the final game dict."""
    game = SinglePlayerGame(player_id, rng=random.Random(seed))
    echo(f'{player_id} plays X. Only your 3 newest marks stay on the board.')
    while not game.finished:
        echo(render_board(game.game.board))
        position = prompt('Your move (0-8)', type=int)
        try:
            game.play(position)
        except MoveRejected as exc:
            echo(exc.message)
    board = game.game.board
    echo(render_board(board, highlight=winning_line(board) or ()))
    if game.game.winner == game.human:
        echo('You win!')
    else:
        echo('The computer wins.')
    return game.to_dict()
