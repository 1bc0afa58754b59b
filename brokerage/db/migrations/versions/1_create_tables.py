"""Lots, buyers, rounds, invites, offers and awards

Revision ID: 1_create_tables
Revises:
Create Date: 2026-10-19 12:00:00
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = '1_create_tables'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    # ### Лоты и позиции ###
    op.create_table(
        'lots',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('currency', sa.String(), server_default='USD', nullable=False),
        sa.Column('status', sa.String(), server_default='draft', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.Index('ix_lots_id', 'id')
    )

    op.create_table(
        'line_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('lot_id', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('model', sa.String(), nullable=True),
        sa.Column('qty', sa.Integer(), nullable=True),
        sa.Column('serial_tag', sa.String(), nullable=True),
        sa.Column('cpu', sa.String(), nullable=True),
        sa.Column('cpu_qty', sa.Integer(), nullable=True),
        sa.Column('memory_part_numbers', sa.String(), nullable=True),
        sa.Column('memory_qty', sa.Integer(), nullable=True),
        sa.Column('network_card', sa.String(), nullable=True),
        sa.Column('expansion_card', sa.String(), nullable=True),
        sa.Column('gpu', sa.String(), nullable=True),
        sa.Column('specs', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('asking_price', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.ForeignKeyConstraint(['lot_id'], ['lots.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.Index('ix_line_items_id', 'id'),
        sa.Index('ix_line_items_lot_id', 'lot_id')
    )

    # ### Покупатели ###
    op.create_table(
        'buyers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('company', sa.String(), nullable=True),
        sa.Column('tags', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('credit_ok', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('reliability_score', sa.Float(), nullable=True),
        sa.Column('lots_won_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('po_lots_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('pos_received_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('avg_hours_to_po', sa.Float(), nullable=True),
        sa.Column('award_conversion_rate', sa.Float(), nullable=True),
        sa.Column('last_win_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_po_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('do_not_invite', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.Index('ix_buyers_id', 'id')
    )

    # ### Раунды: номер уникален в пределах лота ###
    op.create_table(
        'lot_rounds',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('lot_id', sa.Integer(), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('scope', sa.String(), server_default='all', nullable=False),
        sa.Column('status', sa.String(), server_default='live', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['lot_id'], ['lots.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('lot_id', 'round_number', name='uq_lot_rounds_lot_number'),
        sa.Index('ix_lot_rounds_id', 'id'),
        sa.Index('ix_lot_rounds_lot_id', 'lot_id')
    )

    op.create_table(
        'lot_invites',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('lot_id', sa.Integer(), nullable=False),
        sa.Column('round_id', sa.Integer(), nullable=False),
        sa.Column('buyer_id', sa.Integer(), nullable=False),
        sa.Column('token', sa.String(), nullable=False),
        sa.Column('status', sa.String(), server_default='pending', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['lot_id'], ['lots.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['round_id'], ['lot_rounds.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['buyer_id'], ['buyers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('round_id', 'buyer_id', name='uq_lot_invites_round_buyer'),
        sa.Index('ix_lot_invites_id', 'id'),
        sa.Index('ix_lot_invites_lot_id', 'lot_id'),
        sa.Index('ix_lot_invites_token', 'token', unique=True)
    )

    # ### Офферы: один на покупателя в лоте ###
    op.create_table(
        'offers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('lot_id', sa.Integer(), nullable=False),
        sa.Column('buyer_id', sa.Integer(), nullable=False),
        sa.Column('invite_id', sa.Integer(), nullable=True),
        sa.Column('round_id', sa.Integer(), nullable=True),
        sa.Column('currency', sa.String(), nullable=True),
        sa.Column('take_all_total', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('total_offer', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(), server_default='new', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['lot_id'], ['lots.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['buyer_id'], ['buyers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['invite_id'], ['lot_invites.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['round_id'], ['lot_rounds.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('lot_id', 'buyer_id', name='uq_offers_lot_buyer'),
        sa.Index('ix_offers_id', 'id'),
        sa.Index('ix_offers_lot_id', 'lot_id')
    )

    op.create_table(
        'offer_lines',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('offer_id', sa.Integer(), nullable=False),
        sa.Column('line_item_id', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('qty_snapshot', sa.Integer(), nullable=True),
        sa.Column('currency', sa.String(), nullable=True),
        sa.ForeignKeyConstraint(['offer_id'], ['offers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['line_item_id'], ['line_items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.Index('ix_offer_lines_id', 'id'),
        sa.Index('ix_offer_lines_offer_id', 'offer_id'),
        sa.Index('ix_offer_lines_line_item_id', 'line_item_id')
    )

    # ### Присуждения: позиция один раз в раунде ###
    op.create_table(
        'awarded_lines',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('lot_id', sa.Integer(), nullable=False),
        sa.Column('round_id', sa.Integer(), nullable=False),
        sa.Column('line_item_id', sa.Integer(), nullable=False),
        sa.Column('buyer_id', sa.Integer(), nullable=False),
        sa.Column('offer_id', sa.Integer(), nullable=True),
        sa.Column('currency', sa.String(), nullable=True),
        sa.Column('unit_price', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('qty', sa.Integer(), server_default='0', nullable=False),
        sa.Column('extended', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['lot_id'], ['lots.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['round_id'], ['lot_rounds.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['line_item_id'], ['line_items.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['buyer_id'], ['buyers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['offer_id'], ['offers.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('round_id', 'line_item_id', name='uq_awarded_lines_round_line'),
        sa.Index('ix_awarded_lines_id', 'id'),
        sa.Index('ix_awarded_lines_lot_id', 'lot_id')
    )

def downgrade():
    op.drop_table('awarded_lines')
    op.drop_table('offer_lines')
    op.drop_table('offers')
    op.drop_table('lot_invites')
    op.drop_table('lot_rounds')
    op.drop_table('buyers')
    op.drop_table('line_items')
    op.drop_table('lots')
