# impostor/services/room_service.py
import logging
import random
from typing import List

from sqlalchemy.orm import Session

from impostor.core import clock
from impostor.core.config import settings
from impostor.core.exceptions import Forbidden, InvalidState, NotFound, PreconditionFailed
from impostor.crud import crud_message, crud_player, crud_room
from impostor.models.enums import RoomStatus
from impostor.models.game import (
    CreateRoomResponse, JoinRoomResponse, LeaderboardResponse, PlayerPublic, RoomPublic,
)
from impostor.schemas.room import Room, Player
from impostor.services.game_modes import build_mode_state
from impostor.services.room_lock import forget_room, room_transaction

logger = logging.getLogger("impostor.services.room_service")  # Logger for this module


def generate_room_code() -> str:
    return "".join(random.choice(settings.ROOM_CODE_ALPHABET) for _ in range(settings.ROOM_CODE_LENGTH))


def _unique_room_code(db: Session) -> str:
    code = generate_room_code()
    while crud_room.code_exists(db, code):
        logger.debug(f"Room code {code} already taken, drawing another.")
        code = generate_room_code()
    return code


def clean_player_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise PreconditionFailed("Player name cannot be empty.")
    return cleaned[:settings.MAX_PLAYER_NAME_LENGTH]


def _clean_session_id(session_id: str | None) -> str:
    cleaned = (session_id or "").strip()
    if not cleaned:
        raise PreconditionFailed("Session id cannot be empty.")
    return cleaned


def touch(room: Room, now: int | None = None) -> None:
    room.last_activity_at = now if now is not None else clock.now_ms()


def room_to_public(room: Room) -> RoomPublic:
    public = RoomPublic.model_validate(room)
    public.mode_state = build_mode_state(room)
    return public


def sweep_inactive_rooms(db: Session, now: int | None = None, commit_db: bool = True) -> int:
    """Deletes rooms idle for ROOM_INACTIVITY_MINUTES or longer, players and messages first."""
    now = now if now is not None else clock.now_ms()
    cutoff = now - settings.ROOM_INACTIVITY_MINUTES * 60 * 1000
    stale_rooms = crud_room.get_inactive_rooms(db, cutoff)
    stale_ids = [r.id for r in stale_rooms]
    for room in stale_rooms:
        crud_room.delete_room(db, room, commit_db=False)
    if commit_db:
        db.commit()
    for room_id in stale_ids:
        forget_room(room_id)
    if stale_ids:
        logger.info(f"Swept {len(stale_ids)} inactive room(s): {stale_ids}")
    return len(stale_ids)


def create_room(db: Session, host_name: str, session_id: str) -> CreateRoomResponse:
    name = clean_player_name(host_name)
    session_id = _clean_session_id(session_id)
    now = clock.now_ms()
    try:
        sweep_inactive_rooms(db, now=now, commit_db=False)
        code = _unique_room_code(db)
        room = crud_room.create_room(
            db, code=code, host_id=session_id, now=now,
            turn_duration_seconds=settings.DEFAULT_TURN_DURATION_SECONDS,
            rounds_per_voting=settings.DEFAULT_ROUNDS_PER_VOTING,
            commit_db=False,
        )
        crud_player.create_player(db, room_id=room.id, session_id=session_id, name=name, now=now, is_host=True, commit_db=False)
        result = CreateRoomResponse(code=code, room_id=room.id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"Room {result.code} (ID: {result.room_id}) created by '{name}'.")
    return result


def join_room(db: Session, code: str, player_name: str, session_id: str) -> JoinRoomResponse:
    name = clean_player_name(player_name)
    session_id = _clean_session_id(session_id)
    sweep_inactive_rooms(db)

    room = crud_room.get_room_by_code(db, code)
    if room is None:
        raise NotFound("Room not found.")

    with room_transaction(db, room.id) as room:
        if room.status != RoomStatus.WAITING.value:
            raise InvalidState("The game has already started.")

        existing = crud_player.get_player_by_session(db, room.id, session_id)
        if existing:
            logger.info(f"Session {session_id} rejoined room {room.code}, reusing player {existing.id}.")
            result = JoinRoomResponse(room_id=room.id, player_id=existing.id)
        else:
            now = clock.now_ms()
            player = crud_player.create_player(db, room_id=room.id, session_id=session_id, name=name, now=now, commit_db=False)
            result = JoinRoomResponse(room_id=room.id, player_id=player.id)
            logger.info(f"'{name}' joined room {room.code} as player {player.id}.")
        touch(room)
    return result


def get_room(db: Session, room_id: int) -> Room:
    room = crud_room.get_room(db, room_id)
    if room is None:
        raise NotFound("Room not found.")
    return room


def get_room_by_code(db: Session, code: str) -> Room:
    room = crud_room.get_room_by_code(db, code)
    if room is None:
        raise NotFound("Room not found.")
    return room


def _get_player(db: Session, player_id: int) -> Player:
    player = crud_player.get_player(db, player_id)
    if player is None:
        raise NotFound("Player not found.")
    return player


def toggle_ready(db: Session, player_id: int) -> PlayerPublic:
    player = _get_player(db, player_id)
    with room_transaction(db, player.room_id) as room:
        player.is_ready = not player.is_ready
        touch(room)
        result = PlayerPublic.model_validate(player)
    return result


def kick_player(db: Session, player_id: int, kicker_session_id: str) -> None:
    target = _get_player(db, player_id)
    with room_transaction(db, target.room_id) as room:
        if room.host_id != kicker_session_id:
            raise Forbidden("Only the host can kick players.")
        if target.session_id == kicker_session_id:
            raise Forbidden("You cannot kick yourself.")
        if room.status != RoomStatus.WAITING.value:
            raise InvalidState("Players can only be kicked before the game starts.")
        target_name = target.name
        code = room.code
        crud_player.delete_player(db, target, commit_db=False)
        touch(room)
    logger.info(f"Host {kicker_session_id} kicked '{target_name}' (player {player_id}) from room {code}.")


def leave_player(db: Session, player_id: int) -> None:
    """
    Removes a player. A departing host hands the role to the longest-tenured remaining
    player; the room is deleted when nobody is left.
    """
    player = crud_player.get_player(db, player_id)
    if player is None:
        logger.info(f"Leave requested for unknown player {player_id}. Nothing to do.")
        return

    room_id = player.room_id
    room_deleted = False
    with room_transaction(db, room_id) as room:
        was_host = player.is_host or room.host_id == player.session_id
        others = [p for p in crud_player.get_players_by_room(db, room_id) if p.id != player.id]
        if was_host and not others:
            crud_room.delete_room(db, room, commit_db=False)
            room_deleted = True
        else:
            crud_player.delete_player(db, player, commit_db=False)
            if was_host:
                new_host = others[0]
                new_host.is_host = True
                room.host_id = new_host.session_id
                logger.info(f"Host left room {room.code}. '{new_host.name}' is the new host.")
            touch(room)

    if room_deleted:
        forget_room(room_id)
        logger.info(f"Last player left room {room_id}. Room deleted.")


def reset_room(db: Session, room_id: int, session_id: str, reset_stats: bool = False) -> None:
    """Sends the room back to the lobby. Lifetime stats survive unless reset_stats is set."""
    with room_transaction(db, room_id) as room:
        if room.host_id != session_id:
            raise Forbidden("Only the host can reset the room.")

        for player in crud_player.get_players_by_room(db, room.id):
            player.is_ready = False
            player.voted_for = None
            player.second_vote = None
            player.is_eliminated = False
            player.secret_role = None
            player.has_used_ability = False
            player.ghost_clue = None
            player.team = None
            if reset_stats:
                player.points = 0
                player.correct_votes = 0
                player.times_as_impostor = 0
                player.impostor_wins = 0
                player.survived_rounds = 0

        room.status = RoomStatus.WAITING.value
        room.category = None
        room.current_word = None
        room.impostor_id = None
        room.impostor_id2 = None
        room.team_assignments = None
        room.combatants = None
        room.turn_order = None
        room.current_turn_index = None
        room.round_number = None
        room.turn_start_time = None
        room.discussion_minutes = None
        room.discussion_end_time = None
        room.voting_end_time = None
        room.call_to_vote_by = []
        room.payaso_winner = None
        room.winner = None
        room.last_eliminated_id = None
        # used_words is kept on purpose: it steers future draws away from repeats

        purged = crud_message.delete_messages_by_room(db, room.id, commit_db=False)
        touch(room)
        code = room.code
    logger.info(f"Room {code} reset by host (reset_stats={reset_stats}, purged {purged} message(s)).")


def show_results(db: Session, room_id: int) -> None:
    with room_transaction(db, room_id) as room:
        if room.status == RoomStatus.WAITING.value:
            raise InvalidState("No game in progress.")
        room.status = RoomStatus.RESULTS.value
        touch(room)


def get_leaderboard(db: Session, room_id: int) -> LeaderboardResponse:
    get_room(db, room_id)
    players = crud_player.get_players_by_room(db, room_id)
    ranked: List[PlayerPublic] = [
        PlayerPublic.model_validate(p) for p in sorted(players, key=lambda p: (-p.points, p.joined_at, p.id))
    ]
    if not ranked:
        return LeaderboardResponse(leaderboard=[])

    mvp = ranked[0] if ranked[0].points > 0 else None
    best_detective = max(ranked, key=lambda p: p.correct_votes)
    best_liar = max(ranked, key=lambda p: p.impostor_wins)
    return LeaderboardResponse(
        leaderboard=ranked,
        mvp=mvp,
        best_detective=best_detective if best_detective.correct_votes > 0 else None,
        best_liar=best_liar if best_liar.impostor_wins > 0 else None,
    )
