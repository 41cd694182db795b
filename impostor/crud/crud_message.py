# impostor/crud/crud_message.py
from typing import List
from sqlalchemy.orm import Session

from impostor.schemas.message import Message

def create_message(
    db: Session,
    room_id: int,
    sender_session_id: str,
    sender_name: str,
    content: str,
    now: int,
    is_spectator_chat: bool = False,
    is_emoji: bool = False,
    commit_db: bool = True,
) -> Message:
    db_message = Message(
        room_id=room_id,
        sender_session_id=sender_session_id,
        sender_name=sender_name,
        content=content,
        timestamp=now,
        is_spectator_chat=is_spectator_chat,
        is_emoji=is_emoji,
    )
    db.add(db_message)
    if commit_db:
        db.commit()
        db.refresh(db_message)
    else:
        db.flush()
    return db_message

def get_messages_by_room(db: Session, room_id: int) -> List[Message]:
    return db.query(Message).filter(Message.room_id == room_id).order_by(Message.timestamp, Message.id).all()

def get_spectator_messages(db: Session, room_id: int) -> List[Message]:
    return (
        db.query(Message)
        .filter(Message.room_id == room_id, Message.is_spectator_chat == True)  # noqa: E712
        .order_by(Message.timestamp, Message.id)
        .all()
    )

def get_recent_emojis(db: Session, room_id: int, limit: int = 50) -> List[Message]:
    """Newest first."""
    return (
        db.query(Message)
        .filter(Message.room_id == room_id, Message.is_emoji == True)  # noqa: E712
        .order_by(Message.timestamp.desc(), Message.id.desc())
        .limit(limit)
        .all()
    )

def delete_messages_by_room(db: Session, room_id: int, commit_db: bool = True) -> int:
    deleted = db.query(Message).filter(Message.room_id == room_id).delete(synchronize_session=False)
    if commit_db:
        db.commit()
    else:
        db.flush()
    return deleted
