from datetime import datetime, timezone
import random
import string

from tictactoe import db
from tictactoe.services.games.records import GameRecord, decode_list, encode_list

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_game_code(length=6, exists=None):
    """Generate a short game code that ``exists`` does not already know about."""
    while True:
        code = ''.join(random.choices(CODE_ALPHABET, k=length))
        if exists is None or not exists(code):
            return code


def _utcnow():
    return datetime.now(timezone.utc)


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(16), unique=True, nullable=False, index=True)
    # JSON-encoded list of 9 cells: "", "X" or "O"
    board = db.Column(db.Text, nullable=False, default='["","","","","","","","",""]')
    current_player = db.Column(db.String(1), nullable=False, default='X')
    player1 = db.Column(db.String(128), nullable=True)
    player2 = db.Column(db.String(128), nullable=True)
    winner = db.Column(db.String(8), nullable=True)
    status = db.Column(db.String(16), nullable=False, default='waiting')  # waiting, playing, finished
    # JSON-encoded lists of positions, oldest first
    player_x_moves = db.Column(db.Text, nullable=False, default='[]')
    player_o_moves = db.Column(db.Text, nullable=False, default='[]')
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    @classmethod
    def from_record(cls, record: GameRecord) -> 'Game':
        row = cls(code=record.code, created_at=record.created_at or _utcnow())
        row.apply_fields({
            'board': record.board,
            'current_player': record.current_player,
            'player1': record.player1,
            'player2': record.player2,
            'winner': record.winner,
            'status': record.status,
            'moves_x': record.moves_x,
            'moves_o': record.moves_o,
        })
        return row

    def apply_fields(self, fields: dict) -> None:
        for key, value in fields.items():
            if key == 'board':
                self.board = encode_list(value)
            elif key == 'moves_x':
                self.player_x_moves = encode_list(value)
            elif key == 'moves_o':
                self.player_o_moves = encode_list(value)
            elif key in ('current_player', 'player1', 'player2', 'winner', 'status'):
                setattr(self, key, value)
            else:
                raise KeyError(f'not updatable: {key}')

    def to_record(self) -> GameRecord:
        return GameRecord(
            id=self.id,
            code=self.code,
            board=decode_list(self.board),
            current_player=self.current_player,
            player1=self.player1,
            player2=self.player2,
            winner=self.winner,
            status=self.status,
            moves_x=decode_list(self.player_x_moves),
            moves_o=decode_list(self.player_o_moves),
            created_at=self.created_at,
        )
