# impostor/services/chat_service.py
import logging
from typing import List

from sqlalchemy.orm import Session

from impostor.core import clock
from impostor.core.config import settings
from impostor.core.exceptions import Forbidden, InvalidState, ModeMismatch, NotFound, PreconditionFailed
from impostor.crud import crud_message, crud_player, crud_room
from impostor.models.enums import GameModeId, RoomStatus
from impostor.models.game import MessagePublic
from impostor.services.game_modes import SILENCIO_EMOJIS, resolve_mode
from impostor.services.room_lock import room_transaction

logger = logging.getLogger("impostor.services.chat_service")  # Logger for this module


def _require_room(db: Session, room_id: int) -> None:
    if not crud_room.get_room(db, room_id):
        raise NotFound("Room not found.")


def send_emoji(db: Session, room_id: int, session_id: str, emoji: str) -> MessagePublic:
    """Silent mode's only voice: a reaction from the fixed palette."""
    with room_transaction(db, room_id) as room:
        if resolve_mode(room.game_mode) != GameModeId.SILENCIO:
            raise ModeMismatch("Emoji reactions are only available in Silencio.")
        if room.status not in (RoomStatus.PLAYING.value, RoomStatus.VOTING.value):
            raise InvalidState("No game in progress.")
        player = crud_player.get_player_by_session(db, room.id, session_id)
        if player is None:
            raise NotFound("Player not found.")
        if player.is_eliminated:
            raise Forbidden("Eliminated players cannot send reactions.")
        if emoji not in SILENCIO_EMOJIS:
            raise PreconditionFailed("That emoji is not allowed.")

        now = clock.now_ms()
        message = crud_message.create_message(
            db, room_id=room.id, sender_session_id=session_id, sender_name=player.name,
            content=emoji, now=now, is_emoji=True, commit_db=False,
        )
        room.last_activity_at = now
        result = MessagePublic.model_validate(message)
    return result


def get_emojis(db: Session, room_id: int) -> List[MessagePublic]:
    """The most recent reactions (EMOJI_FEED_LIMIT), oldest first."""
    _require_room(db, room_id)
    recent = crud_message.get_recent_emojis(db, room_id, limit=settings.EMOJI_FEED_LIMIT)
    return [MessagePublic.model_validate(m) for m in reversed(recent)]


def send_spectator_message(db: Session, room_id: int, session_id: str, content: str) -> MessagePublic:
    text = (content or "").strip()
    if not text:
        raise PreconditionFailed("The message cannot be empty.")
    text = text[:settings.MAX_MESSAGE_LENGTH]

    with room_transaction(db, room_id) as room:
        player = crud_player.get_player_by_session(db, room.id, session_id)
        if player is None:
            raise NotFound("Player not found.")
        if not player.is_eliminated:
            raise Forbidden("Only spectators can use this chat.")

        now = clock.now_ms()
        message = crud_message.create_message(
            db, room_id=room.id, sender_session_id=session_id, sender_name=player.name,
            content=text, now=now, is_spectator_chat=True, commit_db=False,
        )
        room.last_activity_at = now
        result = MessagePublic.model_validate(message)
    logger.debug(f"Spectator message from {session_id} in room {room_id}.")
    return result


def get_spectator_messages(db: Session, room_id: int) -> List[MessagePublic]:
    _require_room(db, room_id)
    return [MessagePublic.model_validate(m) for m in crud_message.get_spectator_messages(db, room_id)]


def get_messages(db: Session, room_id: int) -> List[MessagePublic]:
    _require_room(db, room_id)
    return [MessagePublic.model_validate(m) for m in crud_message.get_messages_by_room(db, room_id)]
