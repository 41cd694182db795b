# impostor/db/base.py
# Import all the tables, so that Base has them before being
# imported by Alembic or create_all
from impostor.db.base_class import Base
from impostor.schemas.room import Room, Player
from impostor.schemas.message import Message
