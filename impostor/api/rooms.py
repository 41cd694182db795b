# impostor/api/rooms.py
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from impostor.api import deps
from impostor.crud import crud_player
from impostor.models.game import (
    CreateRoomRequest, CreateRoomResponse, JoinRoomRequest, JoinRoomResponse, LeaderboardResponse,
    PlayerPublic, ResetRoomRequest, RoomPublic,
)
from impostor.services import room_service

logger = logging.getLogger("impostor.api.rooms")  # Logger for this module
router = APIRouter()


@router.post("", response_model=CreateRoomResponse, status_code=201)
def create_room_api(payload: CreateRoomRequest, db: Session = Depends(deps.get_db)):
    """Creates a room and seats the caller as its host."""
    return room_service.create_room(db, host_name=payload.host_name, session_id=payload.session_id)


@router.post("/join", response_model=JoinRoomResponse)
def join_room_api(payload: JoinRoomRequest, db: Session = Depends(deps.get_db)):
    return room_service.join_room(db, code=payload.code, player_name=payload.player_name, session_id=payload.session_id)


@router.get("/code/{code}", response_model=RoomPublic)
def get_room_by_code_api(code: str, db: Session = Depends(deps.get_db)):
    return room_service.room_to_public(room_service.get_room_by_code(db, code))


@router.get("/{room_id}", response_model=RoomPublic)
def get_room_api(room_id: int, db: Session = Depends(deps.get_db)):
    return room_service.room_to_public(room_service.get_room(db, room_id))


@router.get("/{room_id}/players", response_model=List[PlayerPublic])
def get_players_api(room_id: int, db: Session = Depends(deps.get_db)):
    room_service.get_room(db, room_id)
    return [PlayerPublic.model_validate(p) for p in crud_player.get_players_by_room(db, room_id)]


@router.get("/{room_id}/players/by-session/{session_id}", response_model=PlayerPublic | None)
def get_player_by_session_api(room_id: int, session_id: str, db: Session = Depends(deps.get_db)):
    # null rather than 404: clients poll this before they have joined
    player = crud_player.get_player_by_session(db, room_id, session_id)
    return PlayerPublic.model_validate(player) if player else None


@router.post("/{room_id}/reset", response_model=RoomPublic)
def reset_room_api(room_id: int, payload: ResetRoomRequest, db: Session = Depends(deps.get_db)):
    room_service.reset_room(db, room_id, session_id=payload.session_id, reset_stats=payload.reset_stats)
    return room_service.room_to_public(room_service.get_room(db, room_id))


@router.post("/{room_id}/results", response_model=RoomPublic)
def show_results_api(room_id: int, db: Session = Depends(deps.get_db)):
    room_service.show_results(db, room_id)
    return room_service.room_to_public(room_service.get_room(db, room_id))


@router.get("/{room_id}/leaderboard", response_model=LeaderboardResponse)
def get_leaderboard_api(room_id: int, db: Session = Depends(deps.get_db)):
    return room_service.get_leaderboard(db, room_id)
