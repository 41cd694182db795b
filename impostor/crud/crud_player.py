# impostor/crud/crud_player.py
from typing import List
from sqlalchemy.orm import Session

from impostor.schemas.room import Player

def get_player(db: Session, player_id: int) -> Player | None:
    return db.query(Player).filter(Player.id == player_id).first()

def get_players_by_room(db: Session, room_id: int) -> List[Player]:
    return (
        db.query(Player)
        .filter(Player.room_id == room_id)
        .order_by(Player.joined_at, Player.id)
        .all()
    )

def get_active_players(db: Session, room_id: int) -> List[Player]:
    """Non-eliminated players in join order."""
    return [p for p in get_players_by_room(db, room_id) if not p.is_eliminated]

def get_player_by_session(db: Session, room_id: int, session_id: str) -> Player | None:
    return db.query(Player).filter(Player.room_id == room_id, Player.session_id == session_id).first()

def create_player(db: Session, room_id: int, session_id: str, name: str, now: int, is_host: bool = False, commit_db: bool = True) -> Player:
    db_player = Player(
        room_id=room_id,
        session_id=session_id,
        name=name,
        is_host=is_host,
        is_ready=False,
        is_eliminated=False,
        joined_at=now,
        points=0,
        correct_votes=0,
        times_as_impostor=0,
        impostor_wins=0,
        survived_rounds=0,
        has_used_ability=False,
    )
    db.add(db_player)
    if commit_db:
        db.commit()
        db.refresh(db_player)
    else:
        db.flush()
    return db_player

def delete_player(db: Session, player: Player, commit_db: bool = True) -> None:
    db.delete(player)
    if commit_db:
        db.commit()
    else:
        db.flush()
