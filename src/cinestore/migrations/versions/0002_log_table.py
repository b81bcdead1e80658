"""log table

Revision ID: 2
Create Date: 2024-11-09 18:30:00

"""
from alembic.operations import Operations
import sqlalchemy as sa

revision: int = 2


def upgrade(op: Operations) -> None:
    op.create_table(
        'joblogs',
        sa.Column('jobname', sa.Text(), nullable=False),
        sa.Column(
            'run_dt',
            sa.DateTime(timezone=True),
            server_default=sa.text('CURRENT_TIMESTAMP'),
            nullable=False,
        ),
    )
    op.create_index('dt_index', 'joblogs', [sa.text('run_dt DESC')], unique=False)
