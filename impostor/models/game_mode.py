# impostor/models/game_mode.py
from typing import Dict, List
from pydantic import BaseModel

from impostor.models.enums import GameModeId, SecretRole

class GameModeFeatures(BaseModel):
    chat_enabled: bool
    teams_enabled: bool
    combat_enabled: bool
    emoji_only: bool

class GameModeConfig(BaseModel):
    id: GameModeId
    name: str
    emoji: str
    description: str
    min_players: int
    max_impostors: int
    special_roles: List[SecretRole] = []
    features: GameModeFeatures

    model_config = {"frozen": True}

class RoleDescription(BaseModel):
    name: str
    emoji: str
    description: str

class GameModesResponse(BaseModel):
    modes: List[GameModeConfig]
    roles: Dict[SecretRole, RoleDescription]
    silencio_emojis: List[str]
