# impostor/api/messages.py
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from impostor.api import deps
from impostor.models.game import EmojiRequest, MessagePublic, SpectatorMessageRequest
from impostor.services import chat_service

logger = logging.getLogger("impostor.api.messages")  # Logger for this module
router = APIRouter()


@router.post("/{room_id}/emojis", response_model=MessagePublic, status_code=201)
def send_emoji_api(room_id: int, payload: EmojiRequest, db: Session = Depends(deps.get_db)):
    return chat_service.send_emoji(db, room_id, session_id=payload.session_id, emoji=payload.emoji)


@router.get("/{room_id}/emojis", response_model=List[MessagePublic])
def get_emojis_api(room_id: int, db: Session = Depends(deps.get_db)):
    return chat_service.get_emojis(db, room_id)


@router.post("/{room_id}/spectator-messages", response_model=MessagePublic, status_code=201)
def send_spectator_message_api(room_id: int, payload: SpectatorMessageRequest, db: Session = Depends(deps.get_db)):
    return chat_service.send_spectator_message(db, room_id, session_id=payload.session_id, content=payload.content)


@router.get("/{room_id}/spectator-messages", response_model=List[MessagePublic])
def get_spectator_messages_api(room_id: int, db: Session = Depends(deps.get_db)):
    return chat_service.get_spectator_messages(db, room_id)


@router.get("/{room_id}/messages", response_model=List[MessagePublic])
def get_messages_api(room_id: int, db: Session = Depends(deps.get_db)):
    return chat_service.get_messages(db, room_id)
