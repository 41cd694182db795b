# impostor/crud/crud_room.py
import logging
from typing import List
from sqlalchemy.orm import Session

from impostor.schemas.room import Room

logger = logging.getLogger("impostor.crud.room")  # Logger for this module

def get_room(db: Session, room_id: int) -> Room | None:
    return db.query(Room).filter(Room.id == room_id).first()

def get_room_for_update(db: Session, room_id: int) -> Room | None:
    """Row-locks the room for the rest of the transaction (no-op on SQLite) and reloads its columns."""
    return db.query(Room).filter(Room.id == room_id).with_for_update().populate_existing().first()

def get_room_by_code(db: Session, code: str) -> Room | None:
    return db.query(Room).filter(Room.code == code.strip().upper()).first()

def code_exists(db: Session, code: str) -> bool:
    return db.query(Room.id).filter(Room.code == code).first() is not None

def create_room(db: Session, code: str, host_id: str, now: int, turn_duration_seconds: int, rounds_per_voting: int, commit_db: bool = True) -> Room:
    db_room = Room(
        code=code,
        host_id=host_id,
        status="waiting",
        game_mode="clasico",
        used_words=[],
        call_to_vote_by=[],
        turn_duration_seconds=turn_duration_seconds,
        total_rounds_per_voting=rounds_per_voting,
        last_activity_at=now,
    )
    db.add(db_room)
    if commit_db:
        db.commit()
        db.refresh(db_room)
    else:
        db.flush()
    return db_room

def get_inactive_rooms(db: Session, cutoff_ms: int) -> List[Room]:
    return db.query(Room).filter(Room.last_activity_at <= cutoff_ms).all()

def get_playing_room_ids(db: Session) -> List[int]:
    return [row.id for row in db.query(Room.id).filter(Room.status == "playing").all()]

def delete_room(db: Session, room: Room, commit_db: bool = True) -> None:
    """Deletes players and messages first so no orphans survive on backends without FK cascades."""
    room_id = room.id
    for message in list(room.messages):
        db.delete(message)
    for player in list(room.players):
        db.delete(player)
    db.delete(room)
    if commit_db:
        db.commit()
    else:
        db.flush()
    logger.info(f"Deleted room {room_id} with its players and messages.")
