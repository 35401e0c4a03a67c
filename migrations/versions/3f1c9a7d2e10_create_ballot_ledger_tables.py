"""create ballot, vote, ledger and rate limit tables

Revision ID: 3f1c9a7d2e10
Revises: 
Create Date: 2026-10-19 09:12:44.518203

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3f1c9a7d2e10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('uid', sa.String(length=64), nullable=False),
    sa.Column('username', sa.String(length=80), nullable=False),
    sa.Column('email', sa.String(length=200), nullable=False),
    sa.Column('password_hash', sa.String(length=256), nullable=False),
    sa.Column('tier', sa.String(length=20), nullable=False),
    sa.Column('region_country', sa.String(length=80), nullable=True),
    sa.Column('region_state', sa.String(length=80), nullable=True),
    sa.Column('region_city', sa.String(length=80), nullable=True),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('email'),
    sa.UniqueConstraint('uid'),
    sa.UniqueConstraint('username')
    )
    op.create_table('concerns',
    sa.Column('concern_id', sa.String(length=64), nullable=False),
    sa.Column('title', sa.String(length=200), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('created_by', sa.Integer(), nullable=False),
    sa.Column('created_at', sa.BigInteger(), nullable=False),
    sa.ForeignKeyConstraint(['created_by'], ['users.id'], ),
    sa.PrimaryKeyConstraint('concern_id')
    )
    op.create_table('ballots',
    sa.Column('ballot_id', sa.String(length=64), nullable=False),
    sa.Column('concern_id', sa.String(length=64), nullable=False),
    sa.Column('type', sa.String(length=20), nullable=False),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('created_by', sa.Integer(), nullable=False),
    sa.Column('start_at', sa.BigInteger(), nullable=False),
    sa.Column('end_at', sa.BigInteger(), nullable=False),
    sa.Column('min_tier', sa.String(length=20), nullable=False),
    sa.Column('min_tier_rank', sa.Integer(), nullable=False),
    sa.Column('allowed_regions_json', sa.Text(), nullable=True),
    sa.Column('results_json', sa.Text(), nullable=True),
    sa.Column('tally_hash', sa.String(length=64), nullable=True),
    sa.Column('tally_signature_json', sa.Text(), nullable=True),
    sa.Column('ledger_id', sa.String(length=64), nullable=True),
    sa.Column('created_at', sa.BigInteger(), nullable=False),
    sa.Column('updated_at', sa.BigInteger(), nullable=False),
    sa.ForeignKeyConstraint(['concern_id'], ['concerns.concern_id'], ),
    sa.ForeignKeyConstraint(['created_by'], ['users.id'], ),
    sa.PrimaryKeyConstraint('ballot_id')
    )
    op.create_index('ix_ballots_concern_id', 'ballots', ['concern_id'], unique=False)
    op.create_index('ix_ballots_status', 'ballots', ['status'], unique=False)
    op.create_table('ballot_options',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('ballot_id', sa.String(length=64), nullable=False),
    sa.Column('position', sa.Integer(), nullable=False),
    sa.Column('option_key', sa.String(length=120), nullable=False),
    sa.Column('label', sa.String(length=200), nullable=False),
    sa.ForeignKeyConstraint(['ballot_id'], ['ballots.ballot_id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('ballot_id', 'option_key')
    )
    op.create_table('votes',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('ballot_id', sa.String(length=64), nullable=False),
    sa.Column('voter_id', sa.Integer(), nullable=False),
    sa.Column('voter_hash', sa.String(length=64), nullable=False),
    sa.Column('payload_json', sa.Text(), nullable=False),
    sa.Column('receipt_hash', sa.String(length=32), nullable=False),
    sa.Column('signature_json', sa.Text(), nullable=True),
    sa.Column('created_at', sa.BigInteger(), nullable=False),
    sa.Column('updated_at', sa.BigInteger(), nullable=False),
    sa.ForeignKeyConstraint(['ballot_id'], ['ballots.ballot_id'], ),
    sa.ForeignKeyConstraint(['voter_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('ballot_id', 'voter_id')
    )
    op.create_index('ix_votes_ballot_id', 'votes', ['ballot_id'], unique=False)
    op.create_index('ix_votes_receipt_hash', 'votes', ['receipt_hash'], unique=False)
    op.create_table('transparency_ledger',
    sa.Column('ledger_id', sa.String(length=64), nullable=False),
    sa.Column('seq', sa.Integer(), nullable=False),
    sa.Column('prev_hash', sa.String(length=64), nullable=True),
    sa.Column('entry_hash', sa.String(length=64), nullable=False),
    sa.Column('canonical', sa.Text(), nullable=False),
    sa.Column('kind', sa.String(length=40), nullable=False),
    sa.Column('ballot_id', sa.String(length=64), nullable=True),
    sa.Column('signature_json', sa.Text(), nullable=True),
    sa.Column('created_at', sa.BigInteger(), nullable=False),
    sa.PrimaryKeyConstraint('ledger_id'),
    sa.UniqueConstraint('seq')
    )
    op.create_index('ix_transparency_ledger_ballot_id', 'transparency_ledger', ['ballot_id'], unique=False)
    op.create_table('rate_limits',
    sa.Column('key', sa.String(length=255), nullable=False),
    sa.Column('count', sa.Integer(), nullable=False),
    sa.Column('since', sa.BigInteger(), nullable=False),
    sa.PrimaryKeyConstraint('key')
    )
    op.create_table('audit_logs',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('event', sa.String(length=80), nullable=False),
    sa.Column('uid', sa.String(length=64), nullable=True),
    sa.Column('ref_id', sa.String(length=64), nullable=True),
    sa.Column('severity', sa.String(length=10), nullable=False),
    sa.Column('data_json', sa.Text(), nullable=True),
    sa.Column('hash', sa.String(length=64), nullable=False),
    sa.Column('signature_json', sa.Text(), nullable=True),
    sa.Column('created_at', sa.BigInteger(), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_audit_logs_ref_id', 'audit_logs', ['ref_id'], unique=False)


def downgrade():
    op.drop_index('ix_audit_logs_ref_id', table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_table('rate_limits')
    op.drop_index('ix_transparency_ledger_ballot_id', table_name='transparency_ledger')
    op.drop_table('transparency_ledger')
    op.drop_index('ix_votes_receipt_hash', table_name='votes')
    op.drop_index('ix_votes_ballot_id', table_name='votes')
    op.drop_table('votes')
    op.drop_table('ballot_options')
    op.drop_index('ix_ballots_status', table_name='ballots')
    op.drop_index('ix_ballots_concern_id', table_name='ballots')
    op.drop_table('ballots')
    op.drop_table('concerns')
    op.drop_table('users')
