"""create_rooms_players_messages

Revision ID: 3f2a9c71b4e0
Revises:
Create Date: 2026-10-19 10:12:41.208311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a9c71b4e0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'rooms',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=6), nullable=False),
        sa.Column('host_id', sa.String(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('game_mode', sa.String(length=32), nullable=False),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('current_word', sa.String(), nullable=True),
        sa.Column('used_words', sa.JSON(), nullable=False),
        sa.Column('impostor_id', sa.String(), nullable=True),
        sa.Column('impostor_id2', sa.String(), nullable=True),
        sa.Column('team_assignments', sa.JSON(), nullable=True),
        sa.Column('combatants', sa.JSON(), nullable=True),
        sa.Column('turn_order', sa.JSON(), nullable=True),
        sa.Column('current_turn_index', sa.Integer(), nullable=True),
        sa.Column('round_number', sa.Integer(), nullable=True),
        sa.Column('total_rounds_per_voting', sa.Integer(), nullable=False),
        sa.Column('turn_start_time', sa.BigInteger(), nullable=True),
        sa.Column('turn_duration_seconds', sa.Integer(), nullable=False),
        sa.Column('discussion_minutes', sa.Integer(), nullable=True),
        sa.Column('discussion_end_time', sa.BigInteger(), nullable=True),
        sa.Column('voting_end_time', sa.BigInteger(), nullable=True),
        sa.Column('call_to_vote_by', sa.JSON(), nullable=False),
        sa.Column('payaso_winner', sa.String(), nullable=True),
        sa.Column('winner', sa.String(length=16), nullable=True),
        sa.Column('last_eliminated_id', sa.String(), nullable=True),
        sa.Column('last_activity_at', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_rooms_id'), 'rooms', ['id'], unique=False)
    op.create_index(op.f('ix_rooms_code'), 'rooms', ['code'], unique=True)
    op.create_index(op.f('ix_rooms_last_activity_at'), 'rooms', ['last_activity_at'], unique=False)

    op.create_table(
        'players',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('room_id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('is_host', sa.Boolean(), nullable=False),
        sa.Column('is_ready', sa.Boolean(), nullable=False),
        sa.Column('is_eliminated', sa.Boolean(), nullable=False),
        sa.Column('joined_at', sa.BigInteger(), nullable=False),
        sa.Column('voted_for', sa.String(), nullable=True),
        sa.Column('second_vote', sa.String(), nullable=True),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('correct_votes', sa.Integer(), nullable=False),
        sa.Column('times_as_impostor', sa.Integer(), nullable=False),
        sa.Column('impostor_wins', sa.Integer(), nullable=False),
        sa.Column('survived_rounds', sa.Integer(), nullable=False),
        sa.Column('secret_role', sa.String(length=16), nullable=True),
        sa.Column('has_used_ability', sa.Boolean(), nullable=False),
        sa.Column('ghost_clue', sa.String(), nullable=True),
        sa.Column('team', sa.String(length=1), nullable=True),
        sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('room_id', 'session_id', name='_room_session_uc'),
    )
    op.create_index(op.f('ix_players_id'), 'players', ['id'], unique=False)
    op.create_index(op.f('ix_players_room_id'), 'players', ['room_id'], unique=False)
    op.create_index(op.f('ix_players_session_id'), 'players', ['session_id'], unique=False)

    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('room_id', sa.Integer(), nullable=False),
        sa.Column('sender_session_id', sa.String(), nullable=False),
        sa.Column('sender_name', sa.String(length=50), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('timestamp', sa.BigInteger(), nullable=False),
        sa.Column('is_spectator_chat', sa.Boolean(), nullable=False),
        sa.Column('is_emoji', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_messages_id'), 'messages', ['id'], unique=False)
    op.create_index(op.f('ix_messages_room_id'), 'messages', ['room_id'], unique=False)
    op.create_index(op.f('ix_messages_timestamp'), 'messages', ['timestamp'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_messages_timestamp'), table_name='messages')
    op.drop_index(op.f('ix_messages_room_id'), table_name='messages')
    op.drop_index(op.f('ix_messages_id'), table_name='messages')
    op.drop_table('messages')
    op.drop_index(op.f('ix_players_session_id'), table_name='players')
    op.drop_index(op.f('ix_players_room_id'), table_name='players')
    op.drop_index(op.f('ix_players_id'), table_name='players')
    op.drop_table('players')
    op.drop_index(op.f('ix_rooms_last_activity_at'), table_name='rooms')
    op.drop_index(op.f('ix_rooms_code'), table_name='rooms')
    op.drop_index(op.f('ix_rooms_id'), table_name='rooms')
    op.drop_table('rooms')
