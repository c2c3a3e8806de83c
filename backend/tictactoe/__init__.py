from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

EXTENSION_KEY = 'tictactoe'


def get_gateway():
    """The SessionGateway bound to the current app."""
    return current_app.extensions[EXTENSION_KEY]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Models must be imported before the store or db.create_all() can see them
    from tictactoe import models  # noqa: F401
    from tictactoe.services.games.gateway import SessionGateway
    from tictactoe.services.games.rooms import RoomRegistry
    from tictactoe.services.games.store import MemoryGameStore, SqlGameStore

    if flask_app.config.get('GAME_STORE') == 'memory':
        store = MemoryGameStore()
    else:
        store = SqlGameStore(db)
    flask_app.extensions[EXTENSION_KEY] = SessionGateway(
        store,
        RoomRegistry(),
        code_length=int(flask_app.config.get('GAME_CODE_LENGTH', 6)),
    )

    from tictactoe.routes import main
    flask_app.register_blueprint(main)

    from tictactoe.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from tictactoe.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the game table."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            click.echo('Database has been reset!')

    @click.command('play-solo')
    @click.option('--player', default='you', help='Name shown for the human player.')
    @click.option('--seed', type=int, default=None, help='Seed for the computer opponent.')
    def play_solo_command(player, seed):
        """Play vanishing tic-tac-toe against the computer in the terminal."""
        from tictactoe.cli import play_solo
        play_solo(player, seed)

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(play_solo_command)

    return flask_app
