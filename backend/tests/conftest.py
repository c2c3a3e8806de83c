import os
import sys
import pytest

# Ensure the backend root (containing the `tictactoe` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from tictactoe import create_app, db, socketio
from tictactoe.services.games.gateway import SessionGateway
from tictactoe.services.games.rooms import RoomRegistry
from tictactoe.services.games.store import MemoryGameStore


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    GAME_CODE_LENGTH = 6
    GAME_STORE = 'sql'
    CORS_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'


class FakeConnection:
    """Records everything sent to it; hashes by identity like a socket would."""

    def __init__(self, name='conn'):
        self.name = name
        self.sent = []

    def send(self, message):
        self.sent.append(message)

    def of_type(self, kind):
        return [m for m in self.sent if m.get('type') == kind]

    def __repr__(self):
        return f'<FakeConnection {self.name}>'


class BrokenConnection(FakeConnection):

    def send(self, message):
        raise ConnectionError('socket closed')


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def store():
    return MemoryGameStore()


@pytest.fixture()
def rooms():
    return RoomRegistry()


@pytest.fixture()
def gateway(store, rooms):
    return SessionGateway(store, rooms)


@pytest.fixture()
def playing_game(gateway):
    """A memory-store game with both seats taken, X to move."""
    game = gateway.create_game()
    gateway.join_game(game.code, 'alice')
    return gateway.join_game(game.code, 'bob')
