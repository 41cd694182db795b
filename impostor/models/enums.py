from enum import Enum

class RoomStatus(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    VOTING = "voting"
    RESULTS = "results"

class GameModeId(str, Enum):
    CLASICO = "clasico"
    DOBLE_AGENTE = "doble_agente"
    SILENCIO = "silencio"
    ROLES_SECRETOS = "roles_secretos"
    TEAM_VS_TEAM = "team_vs_team"
    COMBATE = "combate"

class SecretRole(str, Enum):
    DETECTIVE = "detective"
    FISCAL = "fiscal"
    PAYASO = "payaso"
    DOBLE_VOTANTE = "doble_votante"
    FANTASMA = "fantasma"
    NONE = "none"

class Winner(str, Enum):
    INNOCENTS = "innocents"
    IMPOSTORS = "impostors"
    PAYASO = "payaso"

class TurnOutcome(str, Enum):
    NEXT_TURN = "next_turn"
    NEXT_ROUND = "next_round"
    VOTING_STARTED = "voting_started"
    SKIPPED = "skipped"
