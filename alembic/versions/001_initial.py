"""Initial migration

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_SLOT_PREDICATE = "status IN ('awaiting', 'confirmed') AND deleted_at IS NULL"


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255)),
        sa.Column('role', sa.Enum('SUPER_ADMIN', 'ADMIN', 'STAFF', name='userrole'), default='STAFF'),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('last_login', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create customers table
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.Enum('Mr', 'Mrs', 'Ms', 'Dr', 'Prof', name='customer_title')),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100)),
        sa.Column('phone', sa.String(20), unique=True, nullable=False),
        sa.Column('email', sa.String(255)),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create tables table
    op.create_table(
        'tables',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('table_number', sa.String(20), unique=True, nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('available', 'occupied', 'reserved', name='table_status'),
            nullable=False,
            server_default='available',
        ),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint('capacity >= 1', name='ck_tables_capacity_positive'),
    )

    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('table_id', sa.Integer(), sa.ForeignKey('tables.id'), nullable=False),
        sa.Column('pax_number', sa.Integer(), nullable=False),
        sa.Column('reservation_date', sa.Date(), nullable=False),
        sa.Column('reservation_time', sa.Time(), nullable=False),
        sa.Column('deposit_fee_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column(
            'status',
            sa.Enum('awaiting', 'confirmed', 'cancelled', 'completed', name='reservation_status'),
            nullable=False,
            server_default='awaiting',
        ),
        sa.Column('notes', sa.Text()),
        sa.Column('checked_in_at', sa.DateTime()),
        sa.Column('checked_out_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.Column('deleted_at', sa.DateTime()),
    )

    # Create indexes
    op.create_index('ix_reservations_customer_id', 'reservations', ['customer_id'])
    op.create_index('ix_reservations_table_date', 'reservations', ['table_id', 'reservation_date'])
    op.create_index(
        'uq_reservations_active_table_slot',
        'reservations',
        ['table_id', 'reservation_date', 'reservation_time'],
        unique=True,
        postgresql_where=sa.text(ACTIVE_SLOT_PREDICATE),
        sqlite_where=sa.text(ACTIVE_SLOT_PREDICATE),
    )


def downgrade() -> None:
    op.drop_index('uq_reservations_active_table_slot', table_name='reservations')
    op.drop_index('ix_reservations_table_date', table_name='reservations')
    op.drop_index('ix_reservations_customer_id', table_name='reservations')
    op.drop_table('reservations')
    op.drop_table('tables')
    op.drop_table('customers')
    op.drop_table('users')
    sa.Enum(name='reservation_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='table_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='customer_title').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)
