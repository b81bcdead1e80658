"""show ratings

Revision ID: 3
Create Date: 2024-12-14 21:05:00

Adds the ratings table and links shows to it. The shows table from
revision 1 is extended in place.
"""
from alembic.operations import Operations
import sqlalchemy as sa

revision: int = 3


def upgrade(op: Operations) -> None:
    op.create_table(
        'ratings',
        sa.Column('slug', sa.Text(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('release_year', sa.Integer(), nullable=True),
        sa.Column('audience_score', sa.Integer(), nullable=True),
        sa.Column('score_sentiment', sa.Text(), nullable=True),
        sa.Column('want_to_see_count', sa.Integer(), nullable=True),
        sa.Column('critics_score', sa.Integer(), nullable=True),
        sa.Column('certified_fresh', sa.Boolean(), nullable=True),
        sa.Column('new_adjusted_tm_score', sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint('slug')
    )

    # Inline REFERENCES: SQLite cannot add a foreign key constraint to an existing table
    op.execute('ALTER TABLE shows ADD COLUMN rating_slug TEXT REFERENCES ratings (slug)')
    op.add_column('shows', sa.Column('rating_match_score', sa.Float(), nullable=True))
