# impostor/api/players.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from impostor.api import deps
from impostor.models.game import KickPlayerRequest, PlayerPublic, VoteRequest
from impostor.services import room_service, voting_service

logger = logging.getLogger("impostor.api.players")  # Logger for this module
router = APIRouter()


@router.post("/{player_id}/ready", response_model=PlayerPublic)
def toggle_ready_api(player_id: int, db: Session = Depends(deps.get_db)):
    return room_service.toggle_ready(db, player_id)


@router.post("/{player_id}/kick", status_code=204)
def kick_player_api(player_id: int, payload: KickPlayerRequest, db: Session = Depends(deps.get_db)):
    room_service.kick_player(db, player_id, kicker_session_id=payload.kicker_session_id)


@router.post("/{player_id}/leave", status_code=204)
def leave_player_api(player_id: int, db: Session = Depends(deps.get_db)):
    room_service.leave_player(db, player_id)


@router.post("/{player_id}/vote", status_code=204)
def vote_api(player_id: int, payload: VoteRequest, db: Session = Depends(deps.get_db)):
    voting_service.vote(
        db, player_id,
        target_session_id=payload.target_session_id,
        second_target_session_id=payload.second_target_session_id,
    )
