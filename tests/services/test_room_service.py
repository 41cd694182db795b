# tests/services/test_room_service.py
import pytest
from sqlalchemy.orm import Session

from impostor.core import clock
from impostor.core.config import settings
from impostor.core.exceptions import Forbidden, InvalidState, NotFound, PreconditionFailed
from impostor.crud import crud_message, crud_player, crud_room
from impostor.schemas.room import Room, Player
from impostor.services import assignment_service, room_service, voting_service

def test_generated_codes_use_restricted_alphabet():
    for _ in range(200):
        code = room_service.generate_room_code()
        assert len(code) == 6
        assert set(code) <= set(settings.ROOM_CODE_ALPHABET)

def test_create_room_seats_host(db_session: Session):
    created = room_service.create_room(db_session, host_name="  Ana  ", session_id="s0")
    room = crud_room.get_room(db_session, created.room_id)
    assert room.code == created.code
    assert room.status == "waiting"
    assert room.host_id == "s0"
    players = crud_player.get_players_by_room(db_session, room.id)
    assert [(p.name, p.is_host) for p in players] == [("Ana", True)]

def test_create_room_resamples_code_on_collision(db_session: Session, mocker):
    first = room_service.create_room(db_session, host_name="Ana", session_id="s0")
    mocker.patch(
        "impostor.services.room_service.generate_room_code",
        side_effect=[first.code, first.code, "ZZZZZ2"],
    )
    second = room_service.create_room(db_session, host_name="Bea", session_id="s1")
    assert second.code == "ZZZZZ2"

def test_create_room_rejects_blank_name(db_session: Session):
    with pytest.raises(PreconditionFailed):
        room_service.create_room(db_session, host_name="   ", session_id="s0")

def test_player_names_are_truncated(db_session: Session):
    created = room_service.create_room(db_session, host_name="x" * 40, session_id="s0")
    player = crud_player.get_player_by_session(db_session, created.room_id, "s0")
    assert player.name == "x" * settings.MAX_PLAYER_NAME_LENGTH

def test_join_room_is_idempotent_and_case_insensitive(db_session: Session, make_room):
    room = make_room(1)
    first = room_service.join_room(db_session, room.code.lower(), "Bea", "s1")
    again = room_service.join_room(db_session, room.code, "Bea", "s1")
    assert first.player_id == again.player_id
    assert len(crud_player.get_players_by_room(db_session, room.id)) == 2

def test_join_unknown_code(db_session: Session):
    with pytest.raises(NotFound):
        room_service.join_room(db_session, "QQQQQQ", "Bea", "s1")

def test_join_after_start_is_rejected(db_session: Session, make_room):
    room = make_room(3)
    assignment_service.start_game(db_session, room.id, "s0", "Animales", 2)
    with pytest.raises(InvalidState):
        room_service.join_room(db_session, room.code, "Late", "s9")

def test_join_sees_game_started_by_another_request(db_session: Session, other_session: Session, make_room, mocker):
    room = make_room(3)
    room_id, code = room.id, room.code
    lookup = crud_room.get_room_by_code

    def lookup_then_start(db, room_code):
        # The room is now cached as waiting in db_session while another request starts the game
        found = lookup(db, room_code)
        assert found.status == "waiting"
        assignment_service.start_game(other_session, room_id, "s0", "Animales", 2)
        return found

    mocker.patch.object(crud_room, "get_room_by_code", side_effect=lookup_then_start)

    with pytest.raises(InvalidState):
        room_service.join_room(db_session, code, "Late", "s9")

    db_session.expire_all()
    assert crud_player.get_player_by_session(db_session, room_id, "s9") is None
    refreshed = crud_room.get_room(db_session, room_id)
    assert refreshed.status == "playing"
    assert len(refreshed.turn_order) == 3

def test_idle_rooms_are_swept_with_their_players(db_session: Session, make_room, mocker):
    stale = make_room(3)
    stale_id = stale.id
    later = clock.now_ms() + settings.ROOM_INACTIVITY_MINUTES * 60 * 1000 + 1
    mocker.patch("impostor.core.clock.now_ms", return_value=later)

    room_service.create_room(db_session, host_name="Nueva", session_id="fresh")

    assert crud_room.get_room(db_session, stale_id) is None
    assert db_session.query(Player).filter(Player.room_id == stale_id).count() == 0
    assert db_session.query(Room).count() == 1

def test_toggle_ready(db_session: Session, make_room):
    room = make_room(2)
    player = crud_player.get_player_by_session(db_session, room.id, "s1")
    assert room_service.toggle_ready(db_session, player.id).is_ready is True
    assert room_service.toggle_ready(db_session, player.id).is_ready is False

def test_kick_requires_host(db_session: Session, make_room):
    room = make_room(3)
    target = crud_player.get_player_by_session(db_session, room.id, "s2")
    with pytest.raises(Forbidden):
        room_service.kick_player(db_session, target.id, kicker_session_id="s1")
    host = crud_player.get_player_by_session(db_session, room.id, "s0")
    with pytest.raises(Forbidden):
        room_service.kick_player(db_session, host.id, kicker_session_id="s0")

    room_service.kick_player(db_session, target.id, kicker_session_id="s0")
    assert crud_player.get_player_by_session(db_session, room.id, "s2") is None

def test_kick_during_game_is_rejected(db_session: Session, make_room):
    room = make_room(3)
    assignment_service.start_game(db_session, room.id, "s0", "Animales", 2)
    target = crud_player.get_player_by_session(db_session, room.id, "s2")
    with pytest.raises(InvalidState):
        room_service.kick_player(db_session, target.id, kicker_session_id="s0")
    assert crud_player.get_player(db_session, target.id) is not None

def test_host_leaving_promotes_earliest_joined(db_session: Session, make_room):
    room = make_room(3)
    host = crud_player.get_player_by_session(db_session, room.id, "s0")
    room_service.leave_player(db_session, host.id)

    room = crud_room.get_room(db_session, room.id)
    assert room.host_id == "s1"
    assert crud_player.get_player_by_session(db_session, room.id, "s1").is_host is True

def test_last_player_leaving_deletes_room(db_session: Session, make_room):
    room = make_room(1)
    room_id = room.id
    host = crud_player.get_player_by_session(db_session, room_id, "s0")
    room_service.leave_player(db_session, host.id)
    assert crud_room.get_room(db_session, room_id) is None

def test_leave_unknown_player_is_a_no_op(db_session: Session):
    room_service.leave_player(db_session, 9999)

def _play_one_vote(db_session, room):
    """Starts a classic game and has everyone vote for the impostor."""
    started = assignment_service.start_game(db_session, room.id, "s0", "Animales", 2)
    room = crud_room.get_room(db_session, room.id)
    room.status = "voting"
    for player in crud_player.get_players_by_room(db_session, room.id):
        player.voted_for = started.impostor_id if player.session_id != started.impostor_id else next(
            p.session_id for p in room.players if p.session_id != started.impostor_id
        )
    db_session.commit()
    voting_service.process_voting_results(db_session, room.id, "s0")
    return started

def test_reset_keeps_stats_unless_asked(db_session: Session, make_room):
    room = make_room(3)
    _play_one_vote(db_session, room)
    crud_message.create_message(db_session, room.id, "s1", "Player 1", "hola", now=clock.now_ms())
    points_before = {p.session_id: p.points for p in crud_player.get_players_by_room(db_session, room.id)}
    assert any(points_before.values())

    room_service.reset_room(db_session, room.id, "s0", reset_stats=False)
    room = crud_room.get_room(db_session, room.id)
    players = crud_player.get_players_by_room(db_session, room.id)
    assert room.status == "waiting"
    assert room.current_word is None and room.impostor_id is None and room.turn_order is None
    assert room.used_words  # History survives the reset
    assert {p.session_id: p.points for p in players} == points_before
    assert all(p.voted_for is None and not p.is_eliminated and p.secret_role is None for p in players)
    assert crud_message.get_messages_by_room(db_session, room.id) == []

    room_service.reset_room(db_session, room.id, "s0", reset_stats=True)
    players = crud_player.get_players_by_room(db_session, room.id)
    assert all(
        (p.points, p.correct_votes, p.times_as_impostor, p.impostor_wins, p.survived_rounds) == (0, 0, 0, 0, 0)
        for p in players
    )

def test_reset_requires_host(db_session: Session, make_room):
    room = make_room(3)
    with pytest.raises(Forbidden):
        room_service.reset_room(db_session, room.id, "s1")

def test_show_results(db_session: Session, make_room):
    room = make_room(3)
    with pytest.raises(InvalidState):
        room_service.show_results(db_session, room.id)
    assignment_service.start_game(db_session, room.id, "s0", "Animales", 2)
    room_service.show_results(db_session, room.id)
    assert crud_room.get_room(db_session, room.id).status == "results"

def test_leaderboard_awards(db_session: Session, make_room):
    room = make_room(3)
    empty = room_service.get_leaderboard(db_session, room.id)
    assert len(empty.leaderboard) == 3
    assert empty.mvp is None and empty.best_detective is None and empty.best_liar is None

    players = {p.session_id: p for p in crud_player.get_players_by_room(db_session, room.id)}
    players["s1"].points, players["s1"].correct_votes = 300, 3
    players["s2"].points, players["s2"].impostor_wins = 150, 1
    db_session.commit()

    board = room_service.get_leaderboard(db_session, room.id)
    assert [p.session_id for p in board.leaderboard] == ["s1", "s2", "s0"]
    assert board.mvp.session_id == "s1"
    assert board.best_detective.session_id == "s1"
    assert board.best_liar.session_id == "s2"
