"""Game-code rooms and fan-out of state updates to live connections."""
import logging
import threading
from typing import Dict, Hashable, List, Set

logger = logging.getLogger(__name__)


class _Room:
    __slots__ = ('members', 'delivery_lock')

    def __init__(self) -> None:
        self.members: Set[Hashable] = set()
        self.delivery_lock = threading.Lock()


class RoomRegistry:
    """Tracks which connections follow which game code.

    A connection is any hashable object with ``send(message: dict)``.
    Rooms are created on first subscribe and dropped when they empty out.
    Broadcasts for one code are delivered one at a time; callers that need
    call order hold their own per-code lock (the gateway does). Delivery
    never holds the registry lock, so codes do not wait on each other.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rooms: Dict[str, _Room] = {}

    def subscribe(self, code: str, connection) -> None:
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                room = self._rooms[code] = _Room()
                logger.debug(f"[room-open] code={code}")
            room.members.add(connection)

    def unsubscribe(self, code: str, connection) -> bool:
        with self._lock:
            return self._discard(code, connection)

    def unsubscribe_all(self, connection) -> List[str]:
        """Remove ``connection`` from every room; returns the codes it left."""
        with self._lock:
            codes = [code for code, room in self._rooms.items() if connection in room.members]
            for code in codes:
                self._discard(code, connection)
        return codes

    def _discard(self, code: str, connection) -> bool:
        room = self._rooms.get(code)
        if room is None or connection not in room.members:
            return False
        room.members.discard(connection)
        if not room.members:
            del self._rooms[code]
            logger.debug(f"[room-close] code={code}")
        return True

    def broadcast(self, code: str, message: dict) -> int:
        """Send ``message`` to every member of ``code``.

        Failed sends are logged and skipped. Returns how many sends succeeded.
        """
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                return 0
            recipients = list(room.members)
            delivery_lock = room.delivery_lock
        # a slow peer in this room must not hold up other codes
        delivered = 0
        with delivery_lock:
            for connection in recipients:
                try:
                    connection.send(message)
                    delivered += 1
                except Exception as exc:
                    logger.warning(f"[broadcast-fail] code={code} connection={connection!r} error={exc}")
        return delivered

    def members(self, code: str) -> Set[Hashable]:
        with self._lock:
            room = self._rooms.get(code)
            return set(room.members) if room else set()

    def rooms_of(self, connection) -> List[str]:
        with self._lock:
            return [code for code, room in self._rooms.items() if connection in room.members]

    def __contains__(self, code: str) -> bool:
        with self._lock:
            return code in self._rooms

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)
