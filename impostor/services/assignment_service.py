# impostor/services/assignment_service.py
import logging
import random
from typing import List, Tuple

from sqlalchemy.orm import Session

from impostor.core import clock
from impostor.core.exceptions import Forbidden, InvalidState, PreconditionFailed
from impostor.crud import crud_player
from impostor.models.enums import GameModeId, RoomStatus, SecretRole
from impostor.models.game import StartGameResponse
from impostor.schemas.room import Room, Player
from impostor.services import word_bank
from impostor.services.game_modes import GAME_MODES, SECRET_ROLE_SEQUENCE, resolve_mode
from impostor.services.room_lock import room_transaction

logger = logging.getLogger("impostor.services.assignment_service")  # Logger for this module

STARTABLE_STATUSES = {RoomStatus.WAITING.value, RoomStatus.RESULTS.value}


def shuffled(items: List[str]) -> List[str]:
    """Uniform random permutation (random.shuffle is Fisher-Yates) of a copy of items."""
    result = list(items)
    random.shuffle(result)
    return result


def pick_single_impostor(room: Room, active_ids: List[str], continuing: bool) -> str:
    # Sticky within a game so the same person stays impostor across follow-up rounds
    if continuing and room.impostor_id in active_ids:
        return room.impostor_id
    return random.choice(active_ids)


def split_teams(active_ids: List[str]) -> Tuple[List[str], List[str]]:
    order = shuffled(active_ids)
    midpoint = len(order) // 2
    return order[:midpoint], order[midpoint:]


def assign_secret_roles(active_players: List[Player], impostor_ids: set) -> None:
    """Hands out detective, fiscal, payaso, doble_votante, fantasma in join order; impostors get none."""
    roles = iter(SECRET_ROLE_SEQUENCE)
    for player in active_players:
        if player.session_id in impostor_ids:
            player.secret_role = None
            continue
        player.secret_role = next(roles, SecretRole.NONE).value


def _resolve_word(room: Room, category: str, continuing: bool) -> str:
    if continuing and room.current_word:
        return room.current_word
    used_words = list(room.used_words or [])
    word = word_bank.get_random_word_weighted(category, used_words)
    if word not in used_words:
        room.used_words = used_words + [word]  # Reassign so the JSON column is flagged dirty
    return word


def start_game(
    db: Session,
    room_id: int,
    session_id: str,
    category: str,
    discussion_minutes: int,
    game_mode: str | None = None,
) -> StartGameResponse:
    """
    Deals a new game (or continues the current one) for the room.

    A room in `waiting` always gets a freshly drawn word. A room in `results` whose game
    has no winner yet (results were forced by the host) continues with the same word and
    keeps its eliminations; once a winner exists the next start is a fresh game.
    """
    if discussion_minutes is None or discussion_minutes <= 0:
        raise PreconditionFailed("Discussion time must be at least one minute.")
    if category not in word_bank.WORD_CATEGORIES:
        raise PreconditionFailed(f"Unknown category '{category}'.")

    with room_transaction(db, room_id) as room:
        if room.host_id != session_id:
            raise Forbidden("Only the host can start the game.")
        if room.status not in STARTABLE_STATUSES:
            raise InvalidState("A game is already in progress.")

        continuing = room.status == RoomStatus.RESULTS.value and room.winner is None and bool(room.current_word)
        players = crud_player.get_players_by_room(db, room.id)
        if not continuing:
            for player in players:
                player.is_eliminated = False
        active_players = [p for p in players if not p.is_eliminated]
        active_ids = [p.session_id for p in active_players]

        mode = resolve_mode(game_mode if game_mode is not None else room.game_mode)
        config = GAME_MODES[mode]
        if len(active_ids) < config.min_players:
            raise PreconditionFailed(f"{config.name} needs at least {config.min_players} players.")

        now = clock.now_ms()
        word = _resolve_word(room, category, continuing)

        # Mode-specific fields start empty; only the active mode's branch fills them
        impostor_id2 = None
        team_assignments = None
        combatants = None
        if mode == GameModeId.DOBLE_AGENTE:
            impostor_id, impostor_id2 = shuffled(active_ids)[:2]
        elif mode == GameModeId.TEAM_VS_TEAM:
            team_a, team_b = split_teams(active_ids)
            impostor_id = random.choice(team_a)
            impostor_id2 = random.choice(team_b)
            team_assignments = {
                "team_a": team_a,
                "team_b": team_b,
                "team_a_impostor": impostor_id,
                "team_b_impostor": impostor_id2,
            }
        elif mode == GameModeId.COMBATE:
            combatants = shuffled(active_ids)[:2]
            impostor_id = random.choice(active_ids)
        else:
            impostor_id = pick_single_impostor(room, active_ids, continuing)

        impostor_ids = {impostor_id, impostor_id2} - {None}

        for player in players:
            player.voted_for = None
            player.second_vote = None
            player.has_used_ability = False
            player.ghost_clue = None
            player.team = None
            player.secret_role = None
            if player.session_id in impostor_ids:
                player.times_as_impostor = (player.times_as_impostor or 0) + 1

        if mode == GameModeId.ROLES_SECRETOS:
            assign_secret_roles(active_players, impostor_ids)
        if team_assignments:
            team_a_ids = set(team_assignments["team_a"])
            for player in active_players:
                player.team = "A" if player.session_id in team_a_ids else "B"

        room.game_mode = mode.value
        room.category = category
        room.current_word = word
        room.impostor_id = impostor_id
        room.impostor_id2 = impostor_id2
        room.team_assignments = team_assignments
        room.combatants = combatants
        room.turn_order = shuffled(active_ids)
        room.current_turn_index = 0
        room.round_number = 1
        room.turn_start_time = now
        room.discussion_minutes = discussion_minutes
        room.discussion_end_time = now + discussion_minutes * 60 * 1000
        room.voting_end_time = None
        room.call_to_vote_by = []
        room.payaso_winner = None
        room.winner = None
        room.last_eliminated_id = None
        room.status = RoomStatus.PLAYING.value
        room.last_activity_at = now

        result = StartGameResponse(word=word, impostor_id=impostor_id, impostor_id2=impostor_id2)
        code = room.code

    logger.info(
        f"Game started in room {code}: mode={mode.value}, category={category}, "
        f"players={len(active_ids)}, continuing={continuing}."
    )
    return result
