# impostor/services/turn_service.py
import logging

from sqlalchemy.orm import Session

from impostor.core import clock
from impostor.core.config import settings
from impostor.core.exceptions import Forbidden, GameError, InvalidState, NotFound, PreconditionFailed
from impostor.crud import crud_player, crud_room
from impostor.models.enums import RoomStatus, TurnOutcome
from impostor.models.game import CallToVoteResult, TurnResult
from impostor.schemas.room import Room
from impostor.services.room_lock import room_transaction

logger = logging.getLogger("impostor.services.turn_service")  # Logger for this module


def open_voting(room: Room, now: int) -> None:
    room.status = RoomStatus.VOTING.value
    room.voting_end_time = now + settings.VOTING_DURATION_SECONDS * 1000
    room.last_activity_at = now
    logger.info(f"Voting opened in room {room.code} (round {room.round_number}).")


def advance_turn(room: Room, now: int) -> TurnOutcome:
    """
    Moves to the next speaker. Wrapping past the end of the order starts a new round,
    unless the room already played its rounds for this voting cycle, in which case voting opens.
    """
    next_index = (room.current_turn_index or 0) + 1
    if next_index < len(room.turn_order):
        room.current_turn_index = next_index
        room.turn_start_time = now
        room.last_activity_at = now
        return TurnOutcome.NEXT_TURN

    next_round = (room.round_number or 1) + 1
    if next_round > room.total_rounds_per_voting:
        open_voting(room, now)
        return TurnOutcome.VOTING_STARTED

    room.round_number = next_round
    room.current_turn_index = 0
    room.turn_start_time = now
    room.last_activity_at = now
    return TurnOutcome.NEXT_ROUND


def current_turn_session_id(room: Room) -> str | None:
    if not room.turn_order or room.current_turn_index is None:
        return None
    if 0 <= room.current_turn_index < len(room.turn_order):
        return room.turn_order[room.current_turn_index]
    return None


def _turn_result(room: Room, outcome: TurnOutcome) -> TurnResult:
    return TurnResult(
        outcome=outcome,
        status=room.status,
        current_turn_index=room.current_turn_index,
        round_number=room.round_number,
        current_turn_session_id=current_turn_session_id(room),
    )


def start_voting(db: Session, room_id: int, session_id: str) -> None:
    """Host-forced jump from discussion to voting."""
    with room_transaction(db, room_id) as room:
        if room.host_id != session_id:
            raise Forbidden("Only the host can start voting.")
        if room.status != RoomStatus.PLAYING.value:
            raise InvalidState("Voting can only start during the discussion.")
        open_voting(room, clock.now_ms())


def pass_turn(db: Session, room_id: int, session_id: str) -> TurnResult:
    with room_transaction(db, room_id) as room:
        if room.status != RoomStatus.PLAYING.value:
            raise InvalidState("The room is not in the discussion phase.")
        if not room.turn_order:
            raise InvalidState("Turn order has not been set.")
        if current_turn_session_id(room) != session_id:
            logger.warning(f"Session {session_id} tried to pass a turn that is not theirs in room {room.code}.")
            raise Forbidden("It is not your turn.")
        outcome = advance_turn(room, clock.now_ms())
        result = _turn_result(room, outcome)
    return result


def auto_pass_turn(db: Session, room_id: int, now: int | None = None) -> TurnResult:
    """
    Advances an expired turn. Safe to call early, late or concurrently: only the first call
    after the deadline moves the turn, later calls measure against the refreshed anchor and skip.
    """
    with room_transaction(db, room_id) as room:
        now = now if now is not None else clock.now_ms()
        if room.status != RoomStatus.PLAYING.value or not room.turn_order or room.turn_start_time is None:
            return _turn_result(room, TurnOutcome.SKIPPED)

        elapsed_ms = now - room.turn_start_time
        threshold_ms = (room.turn_duration_seconds - settings.TURN_GRACE_SECONDS) * 1000
        if elapsed_ms < threshold_ms:
            return _turn_result(room, TurnOutcome.SKIPPED)

        expired = current_turn_session_id(room)
        outcome = advance_turn(room, now)
        logger.debug(f"Turn of {expired} expired in room {room.code} after {elapsed_ms}ms: {outcome.value}.")
        result = _turn_result(room, outcome)
    return result


def call_to_vote(db: Session, room_id: int, session_id: str) -> CallToVoteResult:
    """Records an early-vote request. The host, or a strict majority of active players, opens voting."""
    with room_transaction(db, room_id) as room:
        if room.status != RoomStatus.PLAYING.value:
            raise InvalidState("You can only call to vote during the discussion.")
        caller = crud_player.get_player_by_session(db, room.id, session_id)
        if caller is None:
            raise NotFound("Player not found.")
        if caller.is_eliminated:
            raise Forbidden("Eliminated players cannot call to vote.")
        callers = list(room.call_to_vote_by or [])
        if session_id in callers:
            raise PreconditionFailed("You already called to vote.")

        callers.append(session_id)
        room.call_to_vote_by = callers
        active_count = len(crud_player.get_active_players(db, room.id))
        votes = len(callers)
        now = clock.now_ms()
        voting_started = room.host_id == session_id or votes * 2 > active_count
        if voting_started:
            open_voting(room, now)
        else:
            room.last_activity_at = now
        result = CallToVoteResult(votes=votes, needed=active_count // 2 + 1, voting_started=voting_started)
    return result


def expire_stale_turns(db: Session, now: int | None = None) -> int:
    """Applies the auto-pass rule to every room in discussion. Returns how many turns moved."""
    advanced = 0
    for room_id in crud_room.get_playing_room_ids(db):
        try:
            result = auto_pass_turn(db, room_id, now=now)
        except GameError as e:  # Room deleted or changed between listing and locking
            logger.debug(f"Skipping turn expiry for room {room_id}: {e}")
            continue
        if result.outcome != TurnOutcome.SKIPPED:
            advanced += 1
    if advanced:
        logger.info(f"Turn sweep advanced {advanced} room(s).")
    return advanced
