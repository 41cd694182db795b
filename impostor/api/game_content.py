# impostor/api/game_content.py
from fastapi import APIRouter

from impostor.models.game import CategoriesResponse
from impostor.models.game_mode import GameModesResponse
from impostor.services import word_bank
from impostor.services.game_modes import GAME_MODES, ROLE_DESCRIPTIONS, SILENCIO_EMOJIS

router = APIRouter()


@router.get("/modes", response_model=GameModesResponse)
def list_game_modes_api():
    """Everything the lobby needs to render the mode picker and role cards."""
    return GameModesResponse(
        modes=list(GAME_MODES.values()),
        roles=ROLE_DESCRIPTIONS,
        silencio_emojis=SILENCIO_EMOJIS,
    )


@router.get("/categories", response_model=CategoriesResponse)
def list_categories_api():
    return CategoriesResponse(categories=word_bank.get_categories())
