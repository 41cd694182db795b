# impostor/api/abilities.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from impostor.api import deps
from impostor.models.game import GhostClueRequest, InvestigateRequest, InvestigateResponse, SessionRequest
from impostor.services import ability_service

router = APIRouter()


@router.post("/{room_id}/abilities/investigate", response_model=InvestigateResponse)
def detective_investigate_api(room_id: int, payload: InvestigateRequest, db: Session = Depends(deps.get_db)):
    return ability_service.detective_investigate(
        db, room_id, session_id=payload.session_id, target_session_id=payload.target_session_id
    )


@router.post("/{room_id}/abilities/fiscal-vote", status_code=204)
def fiscal_call_vote_api(room_id: int, payload: SessionRequest, db: Session = Depends(deps.get_db)):
    ability_service.fiscal_call_vote(db, room_id, session_id=payload.session_id)


@router.post("/{room_id}/abilities/ghost-clue", status_code=204)
def set_ghost_clue_api(room_id: int, payload: GhostClueRequest, db: Session = Depends(deps.get_db)):
    ability_service.set_ghost_clue(db, room_id, session_id=payload.session_id, clue=payload.clue)
