# impostor/services/voting_service.py
import logging
from collections import defaultdict
from typing import Dict, List, Set

from sqlalchemy.orm import Session

from impostor.core import clock
from impostor.core.config import settings
from impostor.core.exceptions import Forbidden, InvalidState, NotFound, PreconditionFailed
from impostor.crud import crud_player
from impostor.models.enums import GameModeId, RoomStatus, SecretRole, Winner
from impostor.models.game import VotingResult
from impostor.schemas.room import Room, Player
from impostor.services.assignment_service import shuffled
from impostor.services.game_modes import TWO_IMPOSTOR_MODES, resolve_mode
from impostor.services.room_lock import room_transaction

logger = logging.getLogger("impostor.services.voting_service")  # Logger for this module


def is_double_voter(room: Room, player: Player) -> bool:
    return (
        resolve_mode(room.game_mode) == GameModeId.ROLES_SECRETOS
        and player.secret_role == SecretRole.DOBLE_VOTANTE.value
    )


def _require_valid_target(db: Session, room: Room, voter: Player, target_session_id: str) -> None:
    target = crud_player.get_player_by_session(db, room.id, target_session_id)
    if target is None or target.is_eliminated:
        raise PreconditionFailed("That player cannot be voted for.")
    if target.session_id == voter.session_id:
        raise PreconditionFailed("You cannot vote for yourself.")


def vote(db: Session, player_id: int, target_session_id: str, second_target_session_id: str | None = None) -> None:
    """Records (or replaces) a player's vote for the current voting phase."""
    voter = crud_player.get_player(db, player_id)
    if voter is None:
        raise NotFound("Player not found.")

    with room_transaction(db, voter.room_id) as room:
        if room.status != RoomStatus.VOTING.value:
            raise InvalidState("Voting is not open.")
        if voter.is_eliminated:
            raise Forbidden("Eliminated players cannot vote.")
        _require_valid_target(db, room, voter, target_session_id)

        if second_target_session_id is not None:
            if not is_double_voter(room, voter):
                raise Forbidden("Only the double voter can cast a second vote.")
            if second_target_session_id == target_session_id:
                raise PreconditionFailed("Your second vote must go to a different player.")
            _require_valid_target(db, room, voter, second_target_session_id)

        voter.voted_for = target_session_id
        voter.second_vote = second_target_session_id
        room.last_activity_at = clock.now_ms()


def tally_votes(room: Room, active_players: List[Player]) -> Dict[str, int]:
    """
    Weighted vote count over active voters and active targets. A double voter's primary
    vote weighs 2 and their second vote 1; in combat only the combatants can receive votes.
    """
    eligible: Set[str] = {p.session_id for p in active_players}
    if resolve_mode(room.game_mode) == GameModeId.COMBATE:
        eligible &= set(room.combatants or [])

    counts: Dict[str, int] = defaultdict(int)
    for player in active_players:
        double = is_double_voter(room, player)
        if player.voted_for in eligible:
            counts[player.voted_for] += 2 if double else 1
        if double and player.second_vote in eligible and player.second_vote != player.voted_for:
            counts[player.second_vote] += 1
    return dict(counts)


def most_voted(counts: Dict[str, int]) -> str | None:
    # Highest count wins; ties go to the lowest session id
    if not counts:
        return None
    return min(counts, key=lambda session_id: (-counts[session_id], session_id))


def _continue_game(room: Room, players: List[Player], now: int) -> None:
    survivors = [p.session_id for p in players if not p.is_eliminated]
    for player in players:
        player.voted_for = None
        player.second_vote = None
    room.turn_order = shuffled(survivors)
    room.current_turn_index = 0
    room.round_number = 1
    room.turn_start_time = now
    room.call_to_vote_by = []
    room.voting_end_time = None
    room.discussion_end_time = now + (room.discussion_minutes or 0) * 60 * 1000
    if resolve_mode(room.game_mode) == GameModeId.COMBATE:
        room.combatants = shuffled(survivors)[:2]
    room.status = RoomStatus.PLAYING.value


def process_voting_results(db: Session, room_id: int, session_id: str) -> VotingResult:
    """
    Closes the voting phase: tallies, awards points, eliminates the most voted player and
    either ends the game or sends the survivors back to discussion.
    """
    with room_transaction(db, room_id) as room:
        if room.host_id != session_id:
            raise Forbidden("Only the host can close the voting.")
        if room.status != RoomStatus.VOTING.value:
            raise InvalidState("Voting is not open.")

        now = clock.now_ms()
        mode = resolve_mode(room.game_mode)
        players = crud_player.get_players_by_room(db, room.id)
        by_session = {p.session_id: p for p in players}
        active = [p for p in players if not p.is_eliminated]

        counts = tally_votes(room, active)
        target_id = most_voted(counts)
        target = by_session.get(target_id) if target_id else None
        room.last_activity_at = now

        # The clown wins outright by being voted out
        if mode == GameModeId.ROLES_SECRETOS and target is not None and target.secret_role == SecretRole.PAYASO.value:
            target.points += settings.POINTS_PAYASO_WIN
            room.payaso_winner = target.session_id
            room.winner = Winner.PAYASO.value
            room.status = RoomStatus.RESULTS.value
            logger.info(f"Payaso {target.name} won room {room.code} by being voted out.")
            return VotingResult(
                most_voted_session_id=target_id, vote_counts=counts, game_over=True,
                winner=Winner.PAYASO, payaso_winner=target.session_id,
            )

        impostor_ids = {room.impostor_id, room.impostor_id2} - {None}
        caught = target_id in impostor_ids

        if caught:
            for player in active:
                if player.voted_for in impostor_ids or player.second_vote in impostor_ids:
                    player.points += settings.POINTS_CORRECT_VOTE
                    player.correct_votes += 1
        else:
            for player in active:
                if player.session_id in impostor_ids:
                    player.points += settings.POINTS_IMPOSTOR_SURVIVED
                elif player.session_id != target_id:
                    player.points += settings.POINTS_SURVIVED_ROUND
                    player.survived_rounds += 1

        if target is not None:
            target.is_eliminated = True
            room.last_eliminated_id = target.session_id

        remaining = [p for p in active if not p.is_eliminated]
        remaining_impostors = [p for p in remaining if p.session_id in impostor_ids]
        winner = None
        if caught:
            if mode not in TWO_IMPOSTOR_MODES or not remaining_impostors:
                winner = Winner.INNOCENTS
        else:
            remaining_innocents = len(remaining) - len(remaining_impostors)
            if remaining_innocents <= len(remaining_impostors):
                winner = Winner.IMPOSTORS
                for impostor in remaining_impostors:
                    impostor.points += settings.POINTS_IMPOSTOR_WIN
                    impostor.impostor_wins += 1

        if winner is not None:
            room.winner = winner.value
            room.status = RoomStatus.RESULTS.value
        else:
            _continue_game(room, players, now)

        result = VotingResult(
            most_voted_session_id=target_id,
            vote_counts=counts,
            impostor_caught=caught,
            eliminated_session_id=target.session_id if target is not None else None,
            game_over=winner is not None,
            winner=winner,
        )
        code = room.code

    logger.info(
        f"Voting closed in room {code}: most voted {target_id} with {counts.get(target_id, 0) if target_id else 0} vote(s), "
        f"caught={caught}, winner={winner.value if winner else None}."
    )
    return result
