from flask import request
from flask_socketio import emit

from tictactoe import socketio, get_gateway

NAMESPACE = '/ws'
MESSAGE_EVENT = 'game_message'


class SocketConnection:
    """A Socket.IO client as seen by the room registry."""

    __slots__ = ('sid', 'namespace')

    def __init__(self, sid: str, namespace: str = NAMESPACE):
        self.sid = sid
        self.namespace = namespace

    def send(self, message: dict) -> None:
        socketio.emit(MESSAGE_EVENT, message, to=self.sid, namespace=self.namespace)

    def __eq__(self, other):
        return isinstance(other, SocketConnection) and (self.sid, self.namespace) == (other.sid, other.namespace)

    def __hash__(self):
        return hash((self.sid, self.namespace))

    def __repr__(self):
        return f'<SocketConnection {self.namespace}:{self.sid}>'


def _current_connection() -> SocketConnection:
    # request.sid and request.namespace exist in Socket.IO context
    return SocketConnection(request.sid, request.namespace)  # type: ignore


def handle_connect():
    emit('connected', {'message': f'Connected to {NAMESPACE}'})


def handle_disconnect(*args):
    get_gateway().handle_disconnect(_current_connection())


def handle_message(data):
    get_gateway().handle_message(_current_connection(), data)


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = [NAMESPACE, '/'] if testing else [NAMESPACE]
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
        socketio.on_event(MESSAGE_EVENT, handle_message, namespace=namespace)
