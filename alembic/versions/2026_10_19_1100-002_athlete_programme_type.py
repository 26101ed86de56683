"""Add programme_type to athletes

Revision ID: 002
Revises: 001
Create Date: 2026-10-19 11:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add the nullable programme split column used to infer experience."""
    with op.batch_alter_table('athletes') as batch_op:
        batch_op.add_column(sa.Column('programme_type', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table('athletes') as batch_op:
        batch_op.drop_column('programme_type')
