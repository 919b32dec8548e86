"""create teams, templates, games, participants and round scores

Revision ID: 5c2d9e7a1b40
Revises:
Create Date: 2026-10-17 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2d9e7a1b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    tables = set(insp.get_table_names())

    if 'team' not in tables:
        op.create_table(
            'team',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('logo_path', sa.String(length=512), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_team_name', 'team', ['name'], unique=True)

    if 'game_template' not in tables:
        op.create_table(
            'game_template',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=100), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
        )

    if 'template_round' not in tables:
        op.create_table(
            'template_round',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('template_id', sa.Integer(), sa.ForeignKey('game_template.id', ondelete='CASCADE'), nullable=False),
            sa.Column('round_number', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=100), nullable=False),
            sa.Column('max_score', sa.Numeric(8, 1), nullable=True),
            sa.UniqueConstraint('template_id', 'round_number', name='uq_template_round_number'),
        )
        op.create_index('ix_template_round_template_id', 'template_round', ['template_id'])

    if 'game' not in tables:
        op.create_table(
            'game',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('template_id', sa.Integer(), sa.ForeignKey('game_template.id'), nullable=False),
            sa.Column('status', sa.String(length=16), nullable=False, server_default='created'),
            sa.Column('current_round', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('event_date', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_game_template_id', 'game', ['template_id'])

    if 'game_participant' not in tables:
        op.create_table(
            'game_participant',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id', ondelete='CASCADE'), nullable=False),
            sa.Column('team_id', sa.Integer(), sa.ForeignKey('team.id', ondelete='CASCADE'), nullable=False),
            sa.Column('table_number', sa.String(length=32), nullable=True),
            sa.Column('participants_count', sa.Integer(), nullable=True),
            sa.UniqueConstraint('game_id', 'team_id', name='uq_game_participant_team'),
        )
        op.create_index('ix_game_participant_game_id', 'game_participant', ['game_id'])
        op.create_index('ix_game_participant_team_id', 'game_participant', ['team_id'])

    if 'round_score' not in tables:
        op.create_table(
            'round_score',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id', ondelete='CASCADE'), nullable=False),
            sa.Column('team_id', sa.Integer(), sa.ForeignKey('team.id', ondelete='CASCADE'), nullable=False),
            sa.Column('round_number', sa.Integer(), nullable=False),
            sa.Column('score', sa.Numeric(8, 1), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.UniqueConstraint('game_id', 'team_id', 'round_number', name='uq_round_score_game_team_round'),
        )
        op.create_index('ix_round_score_game_id', 'round_score', ['game_id'])
        op.create_index('ix_round_score_team_id', 'round_score', ['team_id'])


def downgrade():
    op.drop_table('round_score')
    op.drop_table('game_participant')
    op.drop_table('game')
    op.drop_table('template_round')
    op.drop_table('game_template')
    op.drop_table('team')
