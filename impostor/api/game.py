# impostor/api/game.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from impostor.api import deps
from impostor.models.game import (
    CallToVoteResult, RoomPublic, SessionRequest, StartGameRequest, StartGameResponse, TurnResult, VotingResult,
)
from impostor.services import assignment_service, room_service, turn_service, voting_service

logger = logging.getLogger("impostor.api.game")  # Logger for this module
router = APIRouter()


@router.post("/{room_id}/start", response_model=StartGameResponse)
def start_game_api(room_id: int, payload: StartGameRequest, db: Session = Depends(deps.get_db)):
    """
    Host-only. Deals the word and roles for the selected mode.
    The response carries the word and impostor ids so the host client can render right away.
    """
    return assignment_service.start_game(
        db, room_id,
        session_id=payload.session_id,
        category=payload.category,
        discussion_minutes=payload.discussion_minutes,
        game_mode=payload.game_mode.value if payload.game_mode else None,
    )


@router.post("/{room_id}/voting/start", response_model=RoomPublic)
def start_voting_api(room_id: int, payload: SessionRequest, db: Session = Depends(deps.get_db)):
    turn_service.start_voting(db, room_id, session_id=payload.session_id)
    return room_service.room_to_public(room_service.get_room(db, room_id))


@router.post("/{room_id}/turn/pass", response_model=TurnResult)
def pass_turn_api(room_id: int, payload: SessionRequest, db: Session = Depends(deps.get_db)):
    return turn_service.pass_turn(db, room_id, session_id=payload.session_id)


@router.post("/{room_id}/turn/auto-pass", response_model=TurnResult)
def auto_pass_turn_api(room_id: int, db: Session = Depends(deps.get_db)):
    return turn_service.auto_pass_turn(db, room_id)


@router.post("/{room_id}/call-to-vote", response_model=CallToVoteResult)
def call_to_vote_api(room_id: int, payload: SessionRequest, db: Session = Depends(deps.get_db)):
    return turn_service.call_to_vote(db, room_id, session_id=payload.session_id)


@router.post("/{room_id}/voting/results", response_model=VotingResult)
def process_voting_results_api(room_id: int, payload: SessionRequest, db: Session = Depends(deps.get_db)):
    return voting_service.process_voting_results(db, room_id, session_id=payload.session_id)
