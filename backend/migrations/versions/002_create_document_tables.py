"""Create document and document_share tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-12 11:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade():
    """Create document (with visibility/sensitivity state) and share grants."""

    op.create_table(
        'document',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),

        # File metadata
        sa.Column('original_name', sa.Text(), nullable=False),
        sa.Column('mime_type', sa.Text(), nullable=False),
        sa.Column('size_bytes', sa.BigInteger(), nullable=False),

        # Blob location (immutable after upload)
        sa.Column('storage_disk', sa.Text(), nullable=False),
        sa.Column('storage_path', sa.Text(), nullable=False),

        # Visibility
        sa.Column('visibility', sa.String(length=7), server_default='private', nullable=False),
        sa.Column('public_token', sa.String(length=64), nullable=True),
        sa.Column('public_enabled_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('public_disabled_at', sa.TIMESTAMP(timezone=True), nullable=True),

        # Descriptive metadata
        sa.Column('title', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('tags', postgresql.JSONB(astext_type=sa.Text()), nullable=True),

        # Classification
        sa.Column('ai_summary', sa.Text(), nullable=True),
        sa.Column('sensitivity', sa.String(length=15), nullable=True),
        sa.Column('ai_analyzed', sa.Boolean(), server_default=sa.text('false'), nullable=False),

        # Timestamps
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),

        # Constraints
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('public_token', name='uq_document_public_token'),
        sa.CheckConstraint("visibility IN ('private', 'public')", name='ck_document_visibility'),
        sa.CheckConstraint(
            "sensitivity IS NULL OR sensitivity IN ('safe', 'maybe_sensitive', 'sensitive')",
            name='ck_document_sensitivity',
        ),
        # Sensitive documents are never public
        sa.CheckConstraint(
            "NOT (sensitivity = 'sensitive' AND visibility = 'public')",
            name='ck_document_sensitive_private',
        ),
    )

    op.create_index('ix_document_user_id', 'document', ['user_id'])
    op.create_index('ix_document_visibility', 'document', ['visibility'])
    op.create_index('idx_document_user_created', 'document', ['user_id', sa.text('created_at DESC')])

    op.execute("""
        CREATE TRIGGER update_document_updated_at
        BEFORE UPDATE ON document
        FOR EACH ROW
        EXECUTE FUNCTION update_updated_at_column();
    """)

    op.create_table(
        'document_share',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('document_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('shared_by', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('can_download', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['document_id'], ['document.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['shared_by'], ['user.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('document_id', 'user_id', name='uq_document_share_document_user'),
    )

    op.create_index('ix_document_share_user_id', 'document_share', ['user_id'])

    op.execute("""
        CREATE TRIGGER update_document_share_updated_at
        BEFORE UPDATE ON document_share
        FOR EACH ROW
        EXECUTE FUNCTION update_updated_at_column();
    """)


def downgrade():
    op.execute('DROP TRIGGER IF EXISTS update_document_share_updated_at ON document_share')
    op.drop_index('ix_document_share_user_id', table_name='document_share')
    op.drop_table('document_share')

    op.execute('DROP TRIGGER IF EXISTS update_document_updated_at ON document')
    op.drop_index('idx_document_user_created', table_name='document')
    op.drop_index('ix_document_visibility', table_name='document')
    op.drop_index('ix_document_user_id', table_name='document')
    op.drop_table('document')
