"""Create users, admins and documents tables

Revision ID: 001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('first_name', sa.Text(), nullable=True),
        sa.Column('last_name', sa.Text(), nullable=True),
        sa.Column('username', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('password', sa.Text(), nullable=False),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('role', sa.Text(), server_default='UPLOADER', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username', name='uq_users_username'),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sa.CheckConstraint("role IN ('UPLOADER', 'APPROVER', 'REVIEWER', 'ADMIN')", name='ck_users_role')
    )
    op.create_index('ix_users_role', 'users', ['role'])

    # Admin password column holds an Argon2id hash
    op.create_table(
        'admins',
        sa.Column('username', sa.Text(), nullable=False),
        sa.Column('password', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('username')
    )

    op.create_table(
        'documents',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('document_name', sa.Text(), nullable=False),
        sa.Column('document_link', sa.Text(), nullable=False),
        sa.Column('storage_key', sa.Text(), nullable=True),
        sa.Column('uploaded_by', sa.Text(), nullable=False),
        sa.Column('upload_time', sa.TIMESTAMP(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('approval_status', sa.Text(), server_default='Pending', nullable=False),
        sa.Column('approved_by', sa.Text(), nullable=True),
        sa.Column('approval_time', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('review_status', sa.Text(), server_default='Pending', nullable=False),
        sa.Column('reviewer', sa.Text(), nullable=True),
        sa.Column('review_time', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("approval_status IN ('Pending', 'Approved', 'Unapproved')", name='ck_documents_approval_status'),
        sa.CheckConstraint("review_status IN ('Pending', 'Approved', 'Rejected')", name='ck_documents_review_status')
    )
    op.create_index('ix_documents_uploaded_by', 'documents', ['uploaded_by'])
    op.create_index('ix_documents_approval_status', 'documents', ['approval_status'])


def downgrade():
    op.drop_index('ix_documents_approval_status', table_name='documents')
    op.drop_index('ix_documents_uploaded_by', table_name='documents')
    op.drop_table('documents')

    op.drop_table('admins')

    op.drop_index('ix_users_role', table_name='users')
    op.drop_table('users')
