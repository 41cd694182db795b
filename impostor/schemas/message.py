# impostor/schemas/message.py
from sqlalchemy import Column, String, Integer, BigInteger, Boolean, ForeignKey, Text
from sqlalchemy.orm import relationship

from impostor.db.base_class import Base


class Message(Base):
    """Append-only chat event: spectator chat line or silent-mode emoji reaction."""

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_session_id = Column(String, nullable=False)
    sender_name = Column(String(50), nullable=False)
    content = Column(Text, nullable=False)
    timestamp = Column(BigInteger, nullable=False, index=True)  # epoch ms
    is_spectator_chat = Column(Boolean, default=False, nullable=False)
    is_emoji = Column(Boolean, default=False, nullable=False)

    room = relationship("Room", back_populates="messages")
