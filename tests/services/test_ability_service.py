# tests/services/test_ability_service.py
import pytest
from sqlalchemy.orm import Session

from impostor.core.config import settings
from impostor.core.exceptions import Forbidden, InvalidState, ModeMismatch, PreconditionFailed
from impostor.crud import crud_player, crud_room
from impostor.services import ability_service, assignment_service

def _secret_roles_room(db_session, make_room, count=6):
    room = make_room(count)
    assignment_service.start_game(db_session, room.id, "s0", "Animales", 2, game_mode="roles_secretos")
    return crud_room.get_room(db_session, room.id)

def _holder(db_session, room_id, role):
    return next(p for p in crud_player.get_players_by_room(db_session, room_id) if p.secret_role == role)

def test_detective_investigates_once(db_session: Session, make_room):
    room = _secret_roles_room(db_session, make_room)
    detective = _holder(db_session, room.id, "detective").session_id

    result = ability_service.detective_investigate(db_session, room.id, detective, room.impostor_id)
    assert result.is_impostor is True
    assert _holder(db_session, room.id, "detective").has_used_ability is True

    with pytest.raises(PreconditionFailed):
        ability_service.detective_investigate(db_session, room.id, detective, room.impostor_id)

def test_detective_sees_innocents_as_innocent(db_session: Session, make_room):
    room = _secret_roles_room(db_session, make_room)
    detective = _holder(db_session, room.id, "detective").session_id
    fiscal = _holder(db_session, room.id, "fiscal").session_id
    assert ability_service.detective_investigate(db_session, room.id, detective, fiscal).is_impostor is False

def test_only_the_detective_can_investigate(db_session: Session, make_room):
    room = _secret_roles_room(db_session, make_room)
    fiscal = _holder(db_session, room.id, "fiscal").session_id
    with pytest.raises(Forbidden):
        ability_service.detective_investigate(db_session, room.id, fiscal, room.impostor_id)

def test_abilities_require_secret_roles_mode(db_session: Session, make_room):
    room = make_room(3)
    assignment_service.start_game(db_session, room.id, "s0", "Animales", 2)
    with pytest.raises(ModeMismatch):
        ability_service.detective_investigate(db_session, room.id, "s0", "s1")
    with pytest.raises(ModeMismatch):
        ability_service.fiscal_call_vote(db_session, room.id, "s0")
    with pytest.raises(ModeMismatch):
        ability_service.set_ghost_clue(db_session, room.id, "s0", "pista")

def test_fiscal_forces_voting_once(db_session: Session, make_room):
    room = _secret_roles_room(db_session, make_room)
    fiscal = _holder(db_session, room.id, "fiscal").session_id

    ability_service.fiscal_call_vote(db_session, room.id, fiscal)
    room = crud_room.get_room(db_session, room.id)
    assert room.status == "voting"
    assert room.voting_end_time is not None

    room.status = "playing"
    db_session.commit()
    with pytest.raises(PreconditionFailed):
        ability_service.fiscal_call_vote(db_session, room.id, fiscal)

def test_fiscal_needs_discussion_phase(db_session: Session, make_room):
    room = _secret_roles_room(db_session, make_room)
    fiscal = _holder(db_session, room.id, "fiscal")
    room.status = "voting"
    db_session.commit()
    with pytest.raises(InvalidState):
        ability_service.fiscal_call_vote(db_session, room.id, fiscal.session_id)
    assert _holder(db_session, room.id, "fiscal").has_used_ability is False

def test_eliminated_fiscal_cannot_act(db_session: Session, make_room):
    room = _secret_roles_room(db_session, make_room)
    fiscal = _holder(db_session, room.id, "fiscal")
    fiscal.is_eliminated = True
    db_session.commit()
    with pytest.raises(Forbidden):
        ability_service.fiscal_call_vote(db_session, room.id, fiscal.session_id)

def test_ghost_clue_only_after_elimination(db_session: Session, make_room):
    room = _secret_roles_room(db_session, make_room)
    ghost = _holder(db_session, room.id, "fantasma")
    with pytest.raises(PreconditionFailed):
        ability_service.set_ghost_clue(db_session, room.id, ghost.session_id, "Tiene rayas")

    ghost = _holder(db_session, room.id, "fantasma")
    ghost.is_eliminated = True
    db_session.commit()
    ability_service.set_ghost_clue(db_session, room.id, ghost.session_id, "  " + "x" * 150)
    assert _holder(db_session, room.id, "fantasma").ghost_clue == "x" * settings.MAX_GHOST_CLUE_LENGTH

    with pytest.raises(PreconditionFailed):
        ability_service.set_ghost_clue(db_session, room.id, ghost.session_id, "otra pista")

def test_empty_ghost_clue_is_rejected(db_session: Session, make_room):
    room = _secret_roles_room(db_session, make_room)
    ghost = _holder(db_session, room.id, "fantasma")
    with pytest.raises(PreconditionFailed):
        ability_service.set_ghost_clue(db_session, room.id, ghost.session_id, "   ")
