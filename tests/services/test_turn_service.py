# tests/services/test_turn_service.py
import pytest
from sqlalchemy.orm import Session

from impostor.core.exceptions import Forbidden, InvalidState, PreconditionFailed
from impostor.crud import crud_player, crud_room
from impostor.models.enums import TurnOutcome
from impostor.services import assignment_service, turn_service

def _started_room(db_session, make_room, count=3, mode=None):
    room = make_room(count)
    assignment_service.start_game(db_session, room.id, "s0", "Animales", 2, game_mode=mode)
    return crud_room.get_room(db_session, room.id)

def test_pass_turn_by_wrong_player_is_forbidden(db_session: Session, make_room):
    room = _started_room(db_session, make_room)
    not_current = next(sid for sid in room.turn_order if sid != room.turn_order[0])
    with pytest.raises(Forbidden):
        turn_service.pass_turn(db_session, room.id, not_current)
    room = crud_room.get_room(db_session, room.id)
    assert room.current_turn_index == 0
    assert room.round_number == 1

def test_turns_rounds_and_forced_voting(db_session: Session, make_room, frozen_clock):
    room = _started_room(db_session, make_room)
    order = list(room.turn_order)

    outcomes = []
    for _ in range(2):
        for speaker in order:
            frozen_clock["now"] += 1000
            outcomes.append(turn_service.pass_turn(db_session, room.id, speaker))

    assert [r.outcome for r in outcomes] == [
        TurnOutcome.NEXT_TURN, TurnOutcome.NEXT_TURN, TurnOutcome.NEXT_ROUND,
        TurnOutcome.NEXT_TURN, TurnOutcome.NEXT_TURN, TurnOutcome.VOTING_STARTED,
    ]
    assert outcomes[2].round_number == 2 and outcomes[2].current_turn_session_id == order[0]
    room = crud_room.get_room(db_session, room.id)
    assert room.status == "voting"
    assert room.round_number == 2
    assert room.voting_end_time == frozen_clock["now"] + 30 * 1000

def test_pass_turn_refreshes_turn_anchor(db_session: Session, make_room, frozen_clock):
    room = _started_room(db_session, make_room)
    frozen_clock["now"] += 5000
    turn_service.pass_turn(db_session, room.id, room.turn_order[0])
    assert crud_room.get_room(db_session, room.id).turn_start_time == frozen_clock["now"]

def test_pass_turn_outside_discussion(db_session: Session, make_room):
    room = make_room(3)
    with pytest.raises(InvalidState):
        turn_service.pass_turn(db_session, room.id, "s0")

def test_auto_pass_respects_deadline_and_is_idempotent(db_session: Session, make_room, frozen_clock):
    room = _started_room(db_session, make_room)
    start = room.turn_start_time

    frozen_clock["now"] = start + 10_000
    assert turn_service.auto_pass_turn(db_session, room.id).outcome == TurnOutcome.SKIPPED

    frozen_clock["now"] = start + 28_999
    assert turn_service.auto_pass_turn(db_session, room.id).outcome == TurnOutcome.SKIPPED

    frozen_clock["now"] = start + 29_000  # Within the 1s grace
    first = turn_service.auto_pass_turn(db_session, room.id)
    second = turn_service.auto_pass_turn(db_session, room.id)
    assert first.outcome == TurnOutcome.NEXT_TURN
    assert second.outcome == TurnOutcome.SKIPPED
    room = crud_room.get_room(db_session, room.id)
    assert room.current_turn_index == 1
    assert room.turn_start_time == start + 29_000

def test_auto_pass_skips_when_not_playing(db_session: Session, make_room):
    room = make_room(3)
    result = turn_service.auto_pass_turn(db_session, room.id)
    assert result.outcome == TurnOutcome.SKIPPED
    assert result.status == "waiting"

def test_call_to_vote_needs_strict_majority(db_session: Session, make_room):
    room = _started_room(db_session, make_room, count=5)
    first = turn_service.call_to_vote(db_session, room.id, "s1")
    assert (first.votes, first.needed, first.voting_started) == (1, 3, False)
    second = turn_service.call_to_vote(db_session, room.id, "s2")
    assert second.voting_started is False
    third = turn_service.call_to_vote(db_session, room.id, "s3")
    assert third.voting_started is True
    assert crud_room.get_room(db_session, room.id).status == "voting"

def test_call_to_vote_half_is_not_enough(db_session: Session, make_room):
    room = _started_room(db_session, make_room, count=4)
    turn_service.call_to_vote(db_session, room.id, "s1")
    result = turn_service.call_to_vote(db_session, room.id, "s2")
    assert (result.votes, result.needed, result.voting_started) == (2, 3, False)
    assert crud_room.get_room(db_session, room.id).status == "playing"

def test_call_to_vote_by_host_opens_voting(db_session: Session, make_room):
    room = _started_room(db_session, make_room, count=5)
    assert turn_service.call_to_vote(db_session, room.id, "s0").voting_started is True

def test_call_to_vote_twice_is_rejected(db_session: Session, make_room):
    room = _started_room(db_session, make_room, count=5)
    turn_service.call_to_vote(db_session, room.id, "s1")
    with pytest.raises(PreconditionFailed):
        turn_service.call_to_vote(db_session, room.id, "s1")
    assert crud_room.get_room(db_session, room.id).call_to_vote_by == ["s1"]

def test_start_voting(db_session: Session, make_room):
    room = _started_room(db_session, make_room)
    with pytest.raises(Forbidden):
        turn_service.start_voting(db_session, room.id, "s1")
    turn_service.start_voting(db_session, room.id, "s0")
    assert crud_room.get_room(db_session, room.id).status == "voting"
    with pytest.raises(InvalidState):
        turn_service.start_voting(db_session, room.id, "s0")

def test_expire_stale_turns_advances_only_expired_rooms(db_session: Session, make_room, frozen_clock):
    first = _started_room(db_session, make_room)
    second = _started_room(db_session, make_room)
    idle = make_room(3)

    assert turn_service.expire_stale_turns(db_session) == 0
    frozen_clock["now"] += 30_000
    assert turn_service.expire_stale_turns(db_session) == 2
    assert turn_service.expire_stale_turns(db_session) == 0

    assert crud_room.get_room(db_session, first.id).current_turn_index == 1
    assert crud_room.get_room(db_session, second.id).current_turn_index == 1
    assert crud_room.get_room(db_session, idle.id).status == "waiting"
