"""add audit reports

Revision ID: 7a4d2b9c1e53
Revises: 3f1c9a7d2e10
Create Date: 2026-10-20 14:03:27.911460

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '7a4d2b9c1e53'
down_revision = '3f1c9a7d2e10'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('audit_reports',
    sa.Column('ballot_id', sa.String(length=64), nullable=False),
    sa.Column('report_json', sa.Text(), nullable=False),
    sa.Column('public_json', sa.Text(), nullable=False),
    sa.Column('created_at', sa.BigInteger(), nullable=False),
    sa.ForeignKeyConstraint(['ballot_id'], ['ballots.ballot_id'], ),
    sa.PrimaryKeyConstraint('ballot_id')
    )


def downgrade():
    op.drop_table('audit_reports')
