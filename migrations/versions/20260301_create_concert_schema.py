"""Create concert, ticket and support report tables

Revision ID: 5c2e8f1a9b3d
Revises:
Create Date: 2026-03-01 10:12:44.180311

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2e8f1a9b3d'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('concert',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('image', sa.String(500), nullable=False),
        sa.Column('stream_url', sa.String(500), nullable=True),
        sa.Column('is_visible', sa.Boolean(), nullable=False),
        sa.Column('stripe_product_id', sa.String(100), nullable=True),
        sa.Column('stripe_price_id', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('concert_translation',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('concert_id', sa.Integer(), nullable=False),
        sa.Column('locale', sa.String(10), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('subtitle', sa.String(255), nullable=True),
        sa.Column('venue', sa.String(255), nullable=False),
        sa.Column('performer', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('performer_details', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['concert_id'], ['concert.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('concert_id', 'locale')
    )

    op.create_table('program_piece',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('concert_id', sa.Integer(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['concert_id'], ['concert.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('program_piece_translation',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('piece_id', sa.Integer(), nullable=False),
        sa.Column('locale', sa.String(10), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('composer', sa.String(255), nullable=False),
        sa.ForeignKeyConstraint(['piece_id'], ['program_piece.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('piece_id', 'locale')
    )

    op.create_table('ticket',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(100), nullable=False),
        sa.Column('concert_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('stripe_checkout_session_id', sa.String(255), nullable=True),
        sa.Column('stripe_payment_intent_id', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['concert_id'], ['concert.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'concert_id', name='uq_ticket_user_concert')
    )
    op.create_index('ix_ticket_user_id', 'ticket', ['user_id'])

    op.create_table('support_report',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('concert_id', sa.Integer(), nullable=False),
        sa.Column('locale', sa.String(10), nullable=True),
        sa.Column('is_live', sa.Boolean(), nullable=False),
        sa.Column('ever_live', sa.Boolean(), nullable=False),
        sa.Column('window_open', sa.Boolean(), nullable=False),
        sa.Column('purchased', sa.Boolean(), nullable=True),
        sa.Column('user_agent', sa.String(500), nullable=True),
        sa.Column('user_id', sa.String(100), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_support_report_concert_id', 'support_report', ['concert_id'])


def downgrade():
    op.drop_index('ix_support_report_concert_id', table_name='support_report')
    op.drop_table('support_report')
    op.drop_index('ix_ticket_user_id', table_name='ticket')
    op.drop_table('ticket')
    op.drop_table('program_piece_translation')
    op.drop_table('program_piece')
    op.drop_table('concert_translation')
    op.drop_table('concert')
