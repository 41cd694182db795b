# impostor/services/room_lock.py
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from sqlalchemy.orm import Session

from impostor.core.exceptions import NotFound
from impostor.crud import crud_room
from impostor.schemas.room import Room

logger = logging.getLogger("impostor.services.room_lock")  # Logger for this module

_guard = threading.Lock()
_room_locks: Dict[int, threading.RLock] = {}


def _lock_for(room_id: int) -> threading.RLock:
    with _guard:
        lock = _room_locks.get(room_id)
        if lock is None:
            lock = threading.RLock()
            _room_locks[room_id] = lock
        return lock


def forget_room(room_id: int) -> None:
    with _guard:
        _room_locks.pop(room_id, None)


@contextmanager
def room_transaction(db: Session, room_id: int) -> Iterator[Room]:
    """
    Runs one mutation against a room as a single transaction.

    Holds the room's in-process lock and its row lock (FOR UPDATE) while the body runs,
    commits when the body returns and rolls back on any exception.
    """
    with _lock_for(room_id):
        try:
            room = crud_room.get_room_for_update(db, room_id)
            if room is None:
                raise NotFound("Room not found.")
            yield room
            db.commit()
        except Exception:
            db.rollback()
            raise
