# impostor/services/ability_service.py
import logging

from sqlalchemy.orm import Session

from impostor.core import clock
from impostor.core.config import settings
from impostor.core.exceptions import Forbidden, InvalidState, ModeMismatch, NotFound, PreconditionFailed
from impostor.crud import crud_player
from impostor.models.enums import GameModeId, RoomStatus, SecretRole
from impostor.models.game import InvestigateResponse
from impostor.schemas.room import Room, Player
from impostor.services.game_modes import resolve_mode
from impostor.services.room_lock import room_transaction
from impostor.services.turn_service import open_voting

logger = logging.getLogger("impostor.services.ability_service")  # Logger for this module

IN_GAME_STATUSES = {RoomStatus.PLAYING.value, RoomStatus.VOTING.value}


def _require_secret_roles(room: Room) -> None:
    if resolve_mode(room.game_mode) != GameModeId.ROLES_SECRETOS:
        raise ModeMismatch("This ability only exists in Roles Secretos.")


def _role_holder(db: Session, room: Room, session_id: str, role: SecretRole) -> Player:
    player = crud_player.get_player_by_session(db, room.id, session_id)
    if player is None:
        raise NotFound("Player not found.")
    if player.secret_role != role.value:
        raise Forbidden(f"Only the {role.value} can do that.")
    return player


def detective_investigate(db: Session, room_id: int, session_id: str, target_session_id: str) -> InvestigateResponse:
    """One-shot check of whether a player is an impostor. The answer goes to the detective only."""
    with room_transaction(db, room_id) as room:
        _require_secret_roles(room)
        if room.status not in IN_GAME_STATUSES:
            raise InvalidState("No game in progress.")
        detective = _role_holder(db, room, session_id, SecretRole.DETECTIVE)
        if detective.is_eliminated:
            raise Forbidden("Eliminated players cannot use abilities.")
        if detective.has_used_ability:
            raise PreconditionFailed("You already used your ability.")
        if target_session_id == session_id:
            raise PreconditionFailed("You cannot investigate yourself.")
        target = crud_player.get_player_by_session(db, room.id, target_session_id)
        if target is None:
            raise NotFound("Target player not found.")

        detective.has_used_ability = True
        room.last_activity_at = clock.now_ms()
        result = InvestigateResponse(is_impostor=target.session_id in {room.impostor_id, room.impostor_id2})
    logger.info(f"Detective {session_id} investigated a player in room {room_id}.")
    return result


def fiscal_call_vote(db: Session, room_id: int, session_id: str) -> None:
    with room_transaction(db, room_id) as room:
        _require_secret_roles(room)
        if room.status != RoomStatus.PLAYING.value:
            raise InvalidState("The fiscal can only call a vote during the discussion.")
        fiscal = _role_holder(db, room, session_id, SecretRole.FISCAL)
        if fiscal.is_eliminated:
            raise Forbidden("Eliminated players cannot use abilities.")
        if fiscal.has_used_ability:
            raise PreconditionFailed("You already used your ability.")

        fiscal.has_used_ability = True
        open_voting(room, clock.now_ms())
    logger.info(f"Fiscal {session_id} forced a vote in room {room_id}.")


def set_ghost_clue(db: Session, room_id: int, session_id: str, clue: str) -> None:
    """Lets an eliminated ghost leave a single clue for the living."""
    cleaned = (clue or "").strip()[:settings.MAX_GHOST_CLUE_LENGTH]
    if not cleaned:
        raise PreconditionFailed("The clue cannot be empty.")

    with room_transaction(db, room_id) as room:
        _require_secret_roles(room)
        if room.status == RoomStatus.WAITING.value:
            raise InvalidState("No game in progress.")
        ghost = _role_holder(db, room, session_id, SecretRole.FANTASMA)
        if not ghost.is_eliminated:
            raise PreconditionFailed("Only an eliminated ghost can leave a clue.")
        if ghost.ghost_clue:
            raise PreconditionFailed("You already left your clue.")

        ghost.ghost_clue = cleaned
        ghost.has_used_ability = True
        room.last_activity_at = clock.now_ms()
    logger.info(f"Ghost {session_id} left a clue in room {room_id}.")
