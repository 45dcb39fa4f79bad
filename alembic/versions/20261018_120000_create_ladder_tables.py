"""Create ladder tables: players, rounds, presence, games

Revision ID: 5c1e0a7d9b42
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# Revision identifiers, used by Alembic
revision: str = '5c1e0a7d9b42'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def upgrade() -> None:
    op.create_table(
        'players',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('default_schedule', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('initial_rating', sa.Float(), nullable=False),
        sa.Column('current_rating', sa.Float(), nullable=False),
        sa.Column('extra', JSON_TYPE, nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'rounds',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('extra', JSON_TYPE, nullable=True),
    )
    op.create_index('idx_rounds_date', 'rounds', ['date', 'id'])

    op.create_table(
        'presence',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=False),
        sa.Column('round_id', sa.Integer(), sa.ForeignKey('rounds.id'), nullable=False),
        sa.Column('scheduled', sa.Boolean(), nullable=False),
        sa.UniqueConstraint('player_id', 'round_id', name='uq_presence_player_round'),
    )

    op.create_table(
        'games',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('round_id', sa.Integer(), sa.ForeignKey('rounds.id'), nullable=False),
        sa.Column('white_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=False),
        sa.Column('black_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=False),
        # NULL while the game is pending
        sa.Column('result', sa.String(24), nullable=True),
        sa.Column('handicap', sa.String(8), nullable=False),
        sa.Column('board_size', sa.SmallInteger(), nullable=False),
        sa.Column('extra', JSON_TYPE, nullable=True),
        sa.CheckConstraint('white_id <> black_id', name='ck_games_distinct_players'),
    )
    op.create_index('idx_games_round', 'games', ['round_id'])
    op.create_index('idx_games_white', 'games', ['white_id'])
    op.create_index('idx_games_black', 'games', ['black_id'])


def downgrade() -> None:
    op.drop_index('idx_games_black', table_name='games')
    op.drop_index('idx_games_white', table_name='games')
    op.drop_index('idx_games_round', table_name='games')
    op.drop_table('games')
    op.drop_table('presence')
    op.drop_index('idx_rounds_date', table_name='rounds')
    op.drop_table('rounds')
    op.drop_table('players')
