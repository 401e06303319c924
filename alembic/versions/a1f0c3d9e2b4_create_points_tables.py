"""create_points_tables

Revision ID: a1f0c3d9e2b4
Revises:
Create Date: 2026-10-18 10:12:44.218530

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1f0c3d9e2b4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('external_id', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('total_points', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_external_id'), 'users', ['external_id'], unique=True)
    op.create_index(op.f('ix_users_total_points'), 'users', ['total_points'], unique=False)

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('type', sa.Enum('singles', 'doubles', name='categorytype'), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_categories_id'), 'categories', ['id'], unique=False)
    op.create_index(op.f('ix_categories_name'), 'categories', ['name'], unique=True)

    op.create_table(
        'tournaments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('original_file_name', sa.String(), nullable=True),
        sa.Column('content_digest', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tournaments_id'), 'tournaments', ['id'], unique=False)
    op.create_index(op.f('ix_tournaments_original_file_name'), 'tournaments', ['original_file_name'], unique=True)
    op.create_index(op.f('ix_tournaments_content_digest'), 'tournaments', ['content_digest'], unique=True)

    op.create_table(
        'tournament_categories',
        sa.Column('tournament_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ),
        sa.PrimaryKeyConstraint('tournament_id', 'category_id')
    )

    op.create_table(
        'tournament_results',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tournament_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('category_name', sa.String(), nullable=True),
        sa.Column('category_type', sa.String(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('position2', sa.Integer(), nullable=True),
        sa.Column('player1_id', sa.Integer(), nullable=True),
        sa.Column('player2_id', sa.Integer(), nullable=True),
        sa.Column('external_id1', sa.String(), nullable=True),
        sa.Column('external_id2', sa.String(), nullable=True),
        sa.Column('player1_name', sa.String(), nullable=True),
        sa.Column('player2_name', sa.String(), nullable=True),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ),
        sa.ForeignKeyConstraint(['player1_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['player2_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tournament_results_id'), 'tournament_results', ['id'], unique=False)
    op.create_index(op.f('ix_tournament_results_tournament_id'), 'tournament_results', ['tournament_id'], unique=False)
    op.create_index(op.f('ix_tournament_results_category_id'), 'tournament_results', ['category_id'], unique=False)
    op.create_index(op.f('ix_tournament_results_player1_id'), 'tournament_results', ['player1_id'], unique=False)
    op.create_index(op.f('ix_tournament_results_player2_id'), 'tournament_results', ['player2_id'], unique=False)

    op.create_table(
        'user_category_points',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('category_name', sa.String(), nullable=True),
        sa.Column('category_type', sa.String(), nullable=True),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('tournaments_count', sa.Integer(), nullable=False),
        sa.Column('last_updated', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'category_id', name='uq_user_category_points')
    )
    op.create_index(op.f('ix_user_category_points_id'), 'user_category_points', ['id'], unique=False)
    op.create_index(op.f('ix_user_category_points_user_id'), 'user_category_points', ['user_id'], unique=False)
    op.create_index(op.f('ix_user_category_points_category_id'), 'user_category_points', ['category_id'], unique=False)

    op.create_table(
        'points_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('tournament_id', sa.Integer(), nullable=False),
        sa.Column('tournament_name', sa.String(), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('category_name', sa.String(), nullable=True),
        sa.Column('category_type', sa.String(), nullable=True),
        sa.Column('points_earned', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=True),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id'], ),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_points_history_id'), 'points_history', ['id'], unique=False)
    op.create_index(op.f('ix_points_history_user_id'), 'points_history', ['user_id'], unique=False)
    op.create_index(op.f('ix_points_history_tournament_id'), 'points_history', ['tournament_id'], unique=False)
    op.create_index(op.f('ix_points_history_category_id'), 'points_history', ['category_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_points_history_category_id'), table_name='points_history')
    op.drop_index(op.f('ix_points_history_tournament_id'), table_name='points_history')
    op.drop_index(op.f('ix_points_history_user_id'), table_name='points_history')
    op.drop_index(op.f('ix_points_history_id'), table_name='points_history')
    op.drop_table('points_history')
    op.drop_index(op.f('ix_user_category_points_category_id'), table_name='user_category_points')
    op.drop_index(op.f('ix_user_category_points_user_id'), table_name='user_category_points')
    op.drop_index(op.f('ix_user_category_points_id'), table_name='user_category_points')
    op.drop_table('user_category_points')
    op.drop_index(op.f('ix_tournament_results_player2_id'), table_name='tournament_results')
    op.drop_index(op.f('ix_tournament_results_player1_id'), table_name='tournament_results')
    op.drop_index(op.f('ix_tournament_results_category_id'), table_name='tournament_results')
    op.drop_index(op.f('ix_tournament_results_tournament_id'), table_name='tournament_results')
    op.drop_index(op.f('ix_tournament_results_id'), table_name='tournament_results')
    op.drop_table('tournament_results')
    op.drop_table('tournament_categories')
    op.drop_index(op.f('ix_tournaments_content_digest'), table_name='tournaments')
    op.drop_index(op.f('ix_tournaments_original_file_name'), table_name='tournaments')
    op.drop_index(op.f('ix_tournaments_id'), table_name='tournaments')
    op.drop_table('tournaments')
    op.drop_index(op.f('ix_categories_name'), table_name='categories')
    op.drop_index(op.f('ix_categories_id'), table_name='categories')
    op.drop_table('categories')
    op.drop_index(op.f('ix_users_total_points'), table_name='users')
    op.drop_index(op.f('ix_users_external_id'), table_name='users')
    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')
    sa.Enum(name='categorytype').drop(op.get_bind(), checkfirst=True)
