"""pathe tables

Revision ID: 1
Create Date: 2024-11-02 10:00:00

First version of the catalog schema. Shows carry no rating columns yet;
those are added by revision 3.
"""
from alembic.operations import Operations
import sqlalchemy as sa

revision: int = 1


def upgrade(op: Operations) -> None:
    op.create_table(
        'cities',
        sa.Column('slug', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('slug')
    )

    op.create_table(
        'cinemas',
        sa.Column('slug', sa.Text(), nullable=False),
        sa.Column('city_slug', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(['city_slug'], ['cities.slug']),
        sa.PrimaryKeyConstraint('slug')
    )

    op.create_table(
        'shows',
        sa.Column('slug', sa.Text(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('release_at', sa.Text(), nullable=True),
        sa.Column('movie_type', sa.Text(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('slug')
    )

    op.create_table(
        'posters',
        sa.Column('show_slug', sa.Text(), nullable=False),
        sa.Column('lg', sa.Text(), nullable=True),
        sa.Column('md', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['show_slug'], ['shows.slug']),
        sa.PrimaryKeyConstraint('show_slug')
    )

    op.create_table(
        'genres',
        sa.Column('show_slug', sa.Text(), nullable=False),
        sa.Column('genre', sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(['show_slug'], ['shows.slug']),
        sa.PrimaryKeyConstraint('show_slug', 'genre')
    )

    op.create_table(
        'showtimes',
        sa.Column('show_slug', sa.Text(), nullable=False),
        sa.Column('cinema_slug', sa.Text(), nullable=False),
        sa.Column('time', sa.Text(), nullable=False),
        sa.Column('reservation_url', sa.Text(), nullable=True),
        sa.Column('auditorium_name', sa.Text(), nullable=False),
        sa.Column('auditorium_capacity', sa.Text(), nullable=True),
        sa.Column('end_time', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['show_slug'], ['shows.slug']),
        sa.ForeignKeyConstraint(['cinema_slug'], ['cinemas.slug']),
        sa.PrimaryKeyConstraint('show_slug', 'cinema_slug', 'time', 'auditorium_name')
    )
