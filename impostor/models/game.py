# impostor/models/game.py
from pydantic import BaseModel, Field
from typing import Annotated, Dict, List, Literal, Optional, Union

from impostor.models.enums import GameModeId, RoomStatus, SecretRole, TurnOutcome, Winner

# --- Tagged game-mode state (built from the flat room columns, see services.game_modes) ---

class ClassicState(BaseModel):
    mode: Literal["clasico"] = "clasico"

class SilencioState(BaseModel):
    mode: Literal["silencio"] = "silencio"

class DoubleAgentState(BaseModel):
    mode: Literal["doble_agente"] = "doble_agente"
    impostor_id2: Optional[str] = None

class TeamState(BaseModel):
    mode: Literal["team_vs_team"] = "team_vs_team"
    team_a: List[str] = []
    team_b: List[str] = []
    team_a_impostor: Optional[str] = None
    team_b_impostor: Optional[str] = None

class CombatState(BaseModel):
    mode: Literal["combate"] = "combate"
    combatants: List[str] = []

class SecretRolesState(BaseModel):
    mode: Literal["roles_secretos"] = "roles_secretos"
    roles: Dict[str, SecretRole] = {}  # session_id -> role

GameModeState = Annotated[
    Union[ClassicState, SilencioState, DoubleAgentState, TeamState, CombatState, SecretRolesState],
    Field(discriminator="mode"),
]

# --- Public views ---

class PlayerPublic(BaseModel):
    id: int
    room_id: int
    session_id: str
    name: str
    is_host: bool
    is_ready: bool
    is_eliminated: bool
    joined_at: int
    voted_for: Optional[str] = None
    second_vote: Optional[str] = None
    points: int = 0
    correct_votes: int = 0
    times_as_impostor: int = 0
    impostor_wins: int = 0
    survived_rounds: int = 0
    secret_role: Optional[SecretRole] = None
    has_used_ability: bool = False
    ghost_clue: Optional[str] = None
    team: Optional[str] = None

    class Config:
        from_attributes = True

class RoomPublic(BaseModel):
    id: int
    code: str
    host_id: str
    status: RoomStatus
    game_mode: GameModeId = GameModeId.CLASICO
    category: Optional[str] = None
    current_word: Optional[str] = None
    used_words: List[str] = []
    impostor_id: Optional[str] = None
    impostor_id2: Optional[str] = None
    turn_order: Optional[List[str]] = None
    current_turn_index: Optional[int] = None
    round_number: Optional[int] = None
    total_rounds_per_voting: int = 2
    turn_start_time: Optional[int] = None
    turn_duration_seconds: int = 30
    discussion_end_time: Optional[int] = None
    voting_end_time: Optional[int] = None
    call_to_vote_by: List[str] = []
    payaso_winner: Optional[str] = None
    winner: Optional[Winner] = None
    last_eliminated_id: Optional[str] = None
    last_activity_at: int
    mode_state: Optional[GameModeState] = None

    class Config:
        from_attributes = True

class MessagePublic(BaseModel):
    id: int
    room_id: int
    sender_session_id: str
    sender_name: str
    content: str
    timestamp: int
    is_spectator_chat: bool
    is_emoji: bool

    class Config:
        from_attributes = True

class LeaderboardResponse(BaseModel):
    leaderboard: List[PlayerPublic]
    mvp: Optional[PlayerPublic] = None
    best_detective: Optional[PlayerPublic] = None
    best_liar: Optional[PlayerPublic] = None

# --- Requests ---

class CreateRoomRequest(BaseModel):
    host_name: str
    session_id: str = Field(min_length=1)

class JoinRoomRequest(BaseModel):
    code: str
    player_name: str
    session_id: str = Field(min_length=1)

class SessionRequest(BaseModel):
    session_id: str

class StartGameRequest(BaseModel):
    session_id: str
    category: str
    discussion_minutes: int = 2
    game_mode: GameModeId | None = None

class ResetRoomRequest(BaseModel):
    session_id: str
    reset_stats: bool = False

class KickPlayerRequest(BaseModel):
    kicker_session_id: str

class VoteRequest(BaseModel):
    target_session_id: str
    second_target_session_id: str | None = None

class InvestigateRequest(BaseModel):
    session_id: str
    target_session_id: str

class GhostClueRequest(BaseModel):
    session_id: str
    clue: str

class EmojiRequest(BaseModel):
    session_id: str
    emoji: str

class SpectatorMessageRequest(BaseModel):
    session_id: str
    content: str

# --- Results ---

class CreateRoomResponse(BaseModel):
    code: str
    room_id: int

class JoinRoomResponse(BaseModel):
    room_id: int
    player_id: int

class StartGameResponse(BaseModel):
    word: str
    impostor_id: str
    impostor_id2: Optional[str] = None

class TurnResult(BaseModel):
    outcome: TurnOutcome
    status: RoomStatus
    current_turn_index: Optional[int] = None
    round_number: Optional[int] = None
    current_turn_session_id: Optional[str] = None

class CallToVoteResult(BaseModel):
    votes: int
    needed: int  # Display only, the trigger is "host OR votes > active/2"
    voting_started: bool

class VotingResult(BaseModel):
    most_voted_session_id: Optional[str] = None
    vote_counts: Dict[str, int] = {}
    impostor_caught: bool = False
    eliminated_session_id: Optional[str] = None
    game_over: bool = False
    winner: Optional[Winner] = None
    payaso_winner: Optional[str] = None

class InvestigateResponse(BaseModel):
    is_impostor: bool

class CategoriesResponse(BaseModel):
    categories: List[str]
