# impostor/services/game_modes.py
from typing import Dict, List

from impostor.models.enums import GameModeId, SecretRole
from impostor.models.game import (
    ClassicState, CombatState, DoubleAgentState, GameModeState, SecretRolesState, SilencioState, TeamState,
)
from impostor.models.game_mode import GameModeConfig, GameModeFeatures, RoleDescription
from impostor.schemas.room import Room

# Order in which roles are handed out to non-impostors in roles_secretos
SECRET_ROLE_SEQUENCE: List[SecretRole] = [
    SecretRole.DETECTIVE, SecretRole.FISCAL, SecretRole.PAYASO, SecretRole.DOBLE_VOTANTE, SecretRole.FANTASMA,
]

# Modes where the game only ends once both impostors are out
TWO_IMPOSTOR_MODES = {GameModeId.DOBLE_AGENTE, GameModeId.TEAM_VS_TEAM}

GAME_MODES: Dict[GameModeId, GameModeConfig] = {
    GameModeId.CLASICO: GameModeConfig(
        id=GameModeId.CLASICO, name="Clasico", emoji="🎮",
        description="1 impostor, 1 palabra secreta, debate normal",
        min_players=3, max_impostors=1,
        features=GameModeFeatures(chat_enabled=True, teams_enabled=False, combat_enabled=False, emoji_only=False),
    ),
    GameModeId.DOBLE_AGENTE: GameModeConfig(
        id=GameModeId.DOBLE_AGENTE, name="Doble Agente", emoji="🔥",
        description="2 impostores que NO se conocen entre si",
        min_players=5, max_impostors=2,
        features=GameModeFeatures(chat_enabled=True, teams_enabled=False, combat_enabled=False, emoji_only=False),
    ),
    GameModeId.SILENCIO: GameModeConfig(
        id=GameModeId.SILENCIO, name="Silencio", emoji="🤐",
        description="Nadie puede hablar, solo emojis y votaciones",
        min_players=3, max_impostors=1,
        features=GameModeFeatures(chat_enabled=False, teams_enabled=False, combat_enabled=False, emoji_only=True),
    ),
    GameModeId.ROLES_SECRETOS: GameModeConfig(
        id=GameModeId.ROLES_SECRETOS, name="Roles Secretos", emoji="🎭",
        description="Detective, Fiscal, Payaso y mas roles especiales",
        min_players=5, max_impostors=1, special_roles=list(SECRET_ROLE_SEQUENCE),
        features=GameModeFeatures(chat_enabled=True, teams_enabled=False, combat_enabled=False, emoji_only=False),
    ),
    GameModeId.TEAM_VS_TEAM: GameModeConfig(
        id=GameModeId.TEAM_VS_TEAM, name="Team vs Team", emoji="🎯",
        description="2 equipos, 1 impostor por equipo",
        min_players=6, max_impostors=2,
        features=GameModeFeatures(chat_enabled=True, teams_enabled=True, combat_enabled=False, emoji_only=False),
    ),
    GameModeId.COMBATE: GameModeConfig(
        id=GameModeId.COMBATE, name="Combate", emoji="⚔️",
        description="2 jugadores defienden su inocencia, los demas votan",
        min_players=4, max_impostors=1,
        features=GameModeFeatures(chat_enabled=True, teams_enabled=False, combat_enabled=True, emoji_only=False),
    ),
}

SILENCIO_EMOJIS: List[str] = ["👍", "👎", "🤔", "😱", "🤥", "👀", "❌", "✅", "🎯", "💀", "😈", "🤫"]

ROLE_DESCRIPTIONS: Dict[SecretRole, RoleDescription] = {
    SecretRole.DETECTIVE: RoleDescription(
        name="Detective", emoji="🔍",
        description="Puedes investigar a un jugador una vez para saber si es impostor"),
    SecretRole.FISCAL: RoleDescription(
        name="Fiscal", emoji="⚖️",
        description="Puedes llamar a votacion temprana una vez por partida"),
    SecretRole.PAYASO: RoleDescription(
        name="Payaso", emoji="🤡",
        description="Ganas si logras que te voten aunque no seas impostor"),
    SecretRole.DOBLE_VOTANTE: RoleDescription(
        name="Votante Doble", emoji="✌️",
        description="Tu voto cuenta doble en las votaciones"),
    SecretRole.FANTASMA: RoleDescription(
        name="Fantasma", emoji="👻",
        description="Si te eliminan, puedes dejar una pista para los demas"),
    SecretRole.NONE: RoleDescription(
        name="Ciudadano", emoji="👤",
        description="Jugador normal sin habilidades especiales"),
}


def resolve_mode(mode_id: str | None) -> GameModeId:
    """Unknown or missing mode ids fall back to clasico."""
    try:
        return GameModeId(mode_id)
    except ValueError:
        return GameModeId.CLASICO


def get_game_mode_config(mode_id: str | None) -> GameModeConfig:
    return GAME_MODES[resolve_mode(mode_id)]


def build_mode_state(room: Room) -> GameModeState:
    mode = resolve_mode(room.game_mode)
    if mode == GameModeId.DOBLE_AGENTE:
        return DoubleAgentState(impostor_id2=room.impostor_id2)
    if mode == GameModeId.TEAM_VS_TEAM:
        teams = room.team_assignments or {}
        return TeamState(
            team_a=teams.get("team_a", []),
            team_b=teams.get("team_b", []),
            team_a_impostor=teams.get("team_a_impostor"),
            team_b_impostor=teams.get("team_b_impostor"),
        )
    if mode == GameModeId.COMBATE:
        return CombatState(combatants=room.combatants or [])
    if mode == GameModeId.ROLES_SECRETOS:
        return SecretRolesState(roles={p.session_id: p.secret_role for p in room.players if p.secret_role})
    if mode == GameModeId.SILENCIO:
        return SilencioState()
    return ClassicState()
