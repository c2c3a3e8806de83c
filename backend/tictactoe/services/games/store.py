"""Keyed game storage.

Stores map a game code to a ``GameRecord`` and expose create, get and update.
Each call is atomic for its code and a committed update is visible to the
next read of that code. Serialising a read-validate-write sequence across
calls is the gateway's job (see ``KeyedLocks``).
"""
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .errors import StoreError
from .records import GameRecord


class GameStore(ABC):

    @abstractmethod
    def create(self, record: GameRecord) -> GameRecord:
        ...

    @abstractmethod
    def get_by_code(self, code: str) -> Optional[GameRecord]:
        ...

    @abstractmethod
    def update(self, code: str, fields: dict) -> Optional[GameRecord]:
        ...

    @abstractmethod
    def delete(self, code: str) -> bool:
        ...

    def exists(self, code: str) -> bool:
        return self.get_by_code(code) is not None


class MemoryGameStore(GameStore):
    """Process-local store; hands out copies so callers never share records."""

    def __init__(self) -> None:
        self._games: Dict[str, GameRecord] = {}
        self._lock = threading.Lock()
        self._next_id = 1

    def create(self, record: GameRecord) -> GameRecord:
        with self._lock:
            if record.code in self._games:
                raise StoreError(f'Game code {record.code} already exists')
            stored = record.copy()
            stored.id = self._next_id
            self._next_id += 1
            self._games[stored.code] = stored
            return stored.copy()

    def get_by_code(self, code: str) -> Optional[GameRecord]:
        with self._lock:
            record = self._games.get(code)
            return record.copy() if record else None

    def update(self, code: str, fields: dict) -> Optional[GameRecord]:
        with self._lock:
            record = self._games.get(code)
            if record is None:
                return None
            updated = record.with_fields(fields).copy()
            self._games[code] = updated
            return updated.copy()

    def delete(self, code: str) -> bool:
        with self._lock:
            return self._games.pop(code, None) is not None


class SqlGameStore(GameStore):
    """Store backed by the ``game`` table through Flask-SQLAlchemy.

    Must be used inside an application context.
    """

    def __init__(self, db, model=None):
        if model is None:
            from tictactoe.models import Game as model
        self.db = db
        self.model = model

    def _query(self, code: str):
        return self.model.query.filter_by(code=code).populate_existing()

    def create(self, record: GameRecord) -> GameRecord:
        row = self.model.from_record(record)
        try:
            self.db.session.add(row)
            self.db.session.commit()
        except IntegrityError as exc:
            self.db.session.rollback()
            raise StoreError(f'Game code {record.code} already exists') from exc
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            raise StoreError('Failed to create game') from exc
        return row.to_record()

    def get_by_code(self, code: str) -> Optional[GameRecord]:
        try:
            row = self._query(code).first()
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            raise StoreError('Failed to load game') from exc
        return row.to_record() if row else None

    def update(self, code: str, fields: dict) -> Optional[GameRecord]:
        try:
            row = self._query(code).with_for_update().first()
            if row is None:
                self.db.session.rollback()
                return None
            row.apply_fields(fields)
            self.db.session.add(row)
            self.db.session.commit()
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            raise StoreError('Failed to save game') from exc
        return row.to_record()

    def delete(self, code: str) -> bool:
        try:
            deleted = self.model.query.filter_by(code=code).delete()
            self.db.session.commit()
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            raise StoreError('Failed to delete game') from exc
        return bool(deleted)
