"""add profile assessment score

Revision ID: 8d2e6b1f4a70
Revises: 3c1f7a9e2b4d
Create Date: 2026-10-18 14:00:00.000000+00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8d2e6b1f4a70'
down_revision = '3c1f7a9e2b4d'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        'profiles',
        sa.Column('assessment_score', sa.Numeric(precision=3, scale=1), nullable=True)
    )


def downgrade() -> None:
    op.drop_column('profiles', 'assessment_score')
