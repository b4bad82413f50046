"""create users, colours, categories, subcategories, labels and entries tables

Revision ID: 3c1f9e7a5b20
Revises:
Create Date: 2026-10-18 10:12:41.518204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f9e7a5b20'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('username', sa.Text, nullable=False),
        sa.Column('password', sa.LargeBinary, nullable=False),
        sa.Column('email', sa.Text, nullable=True),
        sa.Column('first_name', sa.Text, nullable=True),
        sa.Column('last_name', sa.Text, nullable=True),
        sa.UniqueConstraint('username', name='uq_user_username'),
        sa.UniqueConstraint('email', name='uq_user_email'),
        sqlite_autoincrement=True,
    )
    op.create_index('idx_users_username', 'users', ['username'])

    op.create_table(
        'colours',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.Text, nullable=False),
        sa.Column('code', sa.LargeBinary, nullable=False),
        sqlite_autoincrement=True,
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.LargeBinary, nullable=False),
        sa.Column('description', sa.LargeBinary, nullable=True),
        sa.Column('colour_id', sa.Integer, sa.ForeignKey('colours.id'), nullable=False),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index('idx_categories_user', 'categories', ['user_id'])

    op.create_table(
        'subcategories',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('category_id', sa.Integer, sa.ForeignKey('categories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.LargeBinary, nullable=False),
        sa.Column('description', sa.LargeBinary, nullable=True),
        sa.Column('colour_id', sa.Integer, sa.ForeignKey('colours.id'), nullable=False),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index('idx_subcategories_user_category', 'subcategories', ['user_id', 'category_id'])

    op.create_table(
        'labels',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.LargeBinary, nullable=False),
        sa.Column('description', sa.LargeBinary, nullable=True),
        sa.Column('colour_id', sa.Integer, sa.ForeignKey('colours.id'), nullable=False),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index('idx_labels_user', 'labels', ['user_id'])

    op.create_table(
        'entries',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('subcategory_id', sa.Integer, sa.ForeignKey('subcategories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.LargeBinary, nullable=True),
        sa.Column('description', sa.LargeBinary, nullable=True),
        sa.Column('amount', sa.LargeBinary, nullable=False),
        sa.Column('creation_time', sa.LargeBinary, nullable=False),
        sa.Column('time_of_expense', sa.LargeBinary, nullable=False),
        sa.Column('attachment', sa.LargeBinary, nullable=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index('idx_entries_user_subcategory', 'entries', ['user_id', 'subcategory_id'])

    op.create_table(
        'entry_labels',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('entry_id', sa.Integer, sa.ForeignKey('entries.id', ondelete='CASCADE'), nullable=False),
        sa.Column('label_id', sa.Integer, sa.ForeignKey('labels.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index('entry_labels_unique_idx', 'entry_labels', ['entry_id', 'label_id', 'user_id'], unique=True)


def downgrade() -> None:
    op.drop_table('entry_labels')
    op.drop_table('entries')
    op.drop_table('labels')
    op.drop_table('subcategories')
    op.drop_table('categories')
    op.drop_table('colours')
    op.drop_table('users')
