"""promotion requests + role change (demotion) requests

Revision ID: 8e4f2b6c0a13
Revises: 3c1d9a7e5b20
Create Date: 2026-10-12 10:05:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8e4f2b6c0a13'
down_revision = '3c1d9a7e5b20'
branch_labels = None
depends_on = None

PROMOTION_ACTIVE = "status IN ('pending_review', 'interview_scheduled', 'interview_completed', 'awaiting_user_confirmation', 'under_review')"
DEMOTION_ACTIVE = "status IN ('pending_user_review', 'user_accepted', 'user_disputed')"


def upgrade():
    op.create_table(
        'promotion_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('initiated_by', sa.String(length=8), nullable=False),
        sa.Column('current_role_at_request', sa.String(length=32), nullable=False),
        sa.Column('requested_role', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('interview_required', sa.Boolean(), nullable=False),
        sa.Column('interview_scheduled_at', sa.DateTime(), nullable=True),
        sa.Column('interview_mode', sa.String(length=16), nullable=True),
        sa.Column('interview_meeting_link', sa.String(length=400), nullable=True),
        sa.Column('interview_location', sa.String(length=240), nullable=True),
        sa.Column('interview_notes', sa.Text(), nullable=True),
        sa.Column('interview_completed_at', sa.DateTime(), nullable=True),
        sa.Column('interview_completed_by', sa.Integer(), nullable=True),
        sa.Column('interview_confirmed_by_user', sa.String(length=8), nullable=False),
        sa.Column('interview_proof_url', sa.String(length=600), nullable=True),
        sa.Column('decided_by', sa.Integer(), nullable=True),
        sa.Column('decided_at', sa.DateTime(), nullable=True),
        sa.Column('decision_reason', sa.String(length=400), nullable=True),
        sa.Column('cooldown_ends_at', sa.DateTime(), nullable=True),
        sa.Column('last_updated_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['interview_completed_by'], ['users.id'], ),
        sa.ForeignKeyConstraint(['decided_by'], ['users.id'], ),
        sa.ForeignKeyConstraint(['last_updated_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('promotion_requests', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_promotion_requests_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_promotion_requests_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_promotion_requests_created_at'), ['created_at'], unique=False)
    op.create_index(
        'uq_promotion_requests_active_user',
        'promotion_requests',
        ['user_id'],
        unique=True,
        sqlite_where=sa.text(PROMOTION_ACTIVE),
        postgresql_where=sa.text(PROMOTION_ACTIVE),
    )

    op.create_table(
        'role_change_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('current_role', sa.String(length=32), nullable=False),
        sa.Column('new_role', sa.String(length=32), nullable=False),
        sa.Column('reason', sa.String(length=400), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('user_response', sa.String(length=16), nullable=True),
        sa.Column('dispute_note', sa.String(length=1000), nullable=True),
        sa.Column('initiated_by', sa.Integer(), nullable=False),
        sa.Column('finalized_by', sa.Integer(), nullable=True),
        sa.Column('finalized_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_by', sa.Integer(), nullable=True),
        sa.Column('last_updated_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['initiated_by'], ['users.id'], ),
        sa.ForeignKeyConstraint(['finalized_by'], ['users.id'], ),
        sa.ForeignKeyConstraint(['cancelled_by'], ['users.id'], ),
        sa.ForeignKeyConstraint(['last_updated_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('role_change_requests', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_role_change_requests_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_role_change_requests_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_role_change_requests_created_at'), ['created_at'], unique=False)
    op.create_index(
        'uq_role_change_requests_active_user',
        'role_change_requests',
        ['user_id'],
        unique=True,
        sqlite_where=sa.text(DEMOTION_ACTIVE),
        postgresql_where=sa.text(DEMOTION_ACTIVE),
    )


def downgrade():
    op.drop_index('uq_role_change_requests_active_user', table_name='role_change_requests')
    with op.batch_alter_table('role_change_requests', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_role_change_requests_created_at'))
        batch_op.drop_index(batch_op.f('ix_role_change_requests_status'))
        batch_op.drop_index(batch_op.f('ix_role_change_requests_user_id'))
    op.drop_table('role_change_requests')

    op.drop_index('uq_promotion_requests_active_user', table_name='promotion_requests')
    with op.batch_alter_table('promotion_requests', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_promotion_requests_created_at'))
        batch_op.drop_index(batch_op.f('ix_promotion_requests_status'))
        batch_op.drop_index(batch_op.f('ix_promotion_requests_user_id'))
    op.drop_table('promotion_requests')
