# impostor/schemas/room.py
from sqlalchemy import Column, String, Integer, BigInteger, DateTime, Boolean, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from impostor.db.base_class import Base


class Room(Base):
    """One game session. Mode-specific columns are only meaningful for their game_mode."""

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(6), unique=True, index=True, nullable=False)  # Immutable after creation
    host_id = Column(String, nullable=False)  # session_id of the current host
    status = Column(String(16), default="waiting", nullable=False)  # waiting, playing, voting, results
    game_mode = Column(String(32), default="clasico", nullable=False)

    category = Column(String, nullable=True)
    current_word = Column(String, nullable=True)
    used_words = Column(JSON, default=list, nullable=False)  # Never cleared on reset

    impostor_id = Column(String, nullable=True)
    impostor_id2 = Column(String, nullable=True)  # doble_agente / team_vs_team
    team_assignments = Column(JSON, nullable=True)  # {"team_a": [...], "team_b": [...], "team_a_impostor", "team_b_impostor"}
    combatants = Column(JSON, nullable=True)  # Exactly two session ids in combate

    # Turn system
    turn_order = Column(JSON, nullable=True)
    current_turn_index = Column(Integer, nullable=True)
    round_number = Column(Integer, nullable=True)
    total_rounds_per_voting = Column(Integer, default=2, nullable=False)
    turn_start_time = Column(BigInteger, nullable=True)  # epoch ms
    turn_duration_seconds = Column(Integer, default=30, nullable=False)

    discussion_minutes = Column(Integer, nullable=True)
    discussion_end_time = Column(BigInteger, nullable=True)
    voting_end_time = Column(BigInteger, nullable=True)
    call_to_vote_by = Column(JSON, default=list, nullable=False)

    payaso_winner = Column(String, nullable=True)
    winner = Column(String(16), nullable=True)  # innocents, impostors, payaso
    last_eliminated_id = Column(String, nullable=True)

    last_activity_at = Column(BigInteger, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    players = relationship(
        "Player", back_populates="room", cascade="all, delete-orphan",
        order_by="Player.joined_at",
    )
    messages = relationship("Message", back_populates="room", cascade="all, delete-orphan")


class Player(Base):
    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(String, nullable=False, index=True)
    name = Column(String(50), nullable=False)
    is_host = Column(Boolean, default=False, nullable=False)
    is_ready = Column(Boolean, default=False, nullable=False)
    is_eliminated = Column(Boolean, default=False, nullable=False)
    joined_at = Column(BigInteger, nullable=False)  # epoch ms

    # Reset at the start of every discussion/voting cycle
    voted_for = Column(String, nullable=True)
    second_vote = Column(String, nullable=True)  # doble_votante only

    # Lifetime stats, kept across games unless the host resets them
    points = Column(Integer, default=0, nullable=False)
    correct_votes = Column(Integer, default=0, nullable=False)
    times_as_impostor = Column(Integer, default=0, nullable=False)
    impostor_wins = Column(Integer, default=0, nullable=False)
    survived_rounds = Column(Integer, default=0, nullable=False)

    # Mode-specific
    secret_role = Column(String(16), nullable=True)
    has_used_ability = Column(Boolean, default=False, nullable=False)
    ghost_clue = Column(String, nullable=True)
    team = Column(String(1), nullable=True)  # "A" or "B"

    room = relationship("Room", back_populates="players")

    __table_args__ = (UniqueConstraint('room_id', 'session_id', name='_room_session_uc'),)
