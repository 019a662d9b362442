"""initial schema: users, log entries and images

Revision ID: 7d1e4b2a9c30
Revises:
Create Date: 2024-06-01 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '7d1e4b2a9c30'
down_revision = None
branch_labels = None
depends_on = None

SPRING_TYPES = (
    'sulfur', 'carbonic', 'alkaline', 'acidic', 'chloride',
    'iron', 'radium', 'simple', 'other', 'unknown',
)


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=False)

    op.create_table(
        'log_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('location', sa.String(length=200), server_default='', nullable=False),
        sa.Column('spring_type', sa.Enum(*SPRING_TYPES, name='spring_type'), server_default='unknown', nullable=False),
        sa.Column('features', sa.JSON(), nullable=False),
        sa.Column('visit_date', sa.Date(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), server_default='', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_log_entries_rating_range'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_log_entries_user_id_users', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_log_entries'),
    )
    op.create_index('ix_log_entries_user_visit', 'log_entries', ['user_id', 'visit_date'], unique=False)

    op.create_table(
        'images',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('log_entry_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['log_entry_id'], ['log_entries.id'], name='fk_images_log_entry_id_log_entries', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_images_user_id_users', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_images'),
    )
    op.create_index('ix_images_log_entry', 'images', ['log_entry_id'], unique=False)
    op.create_index('ix_images_user', 'images', ['user_id'], unique=False)


def downgrade():
    op.drop_index('ix_images_user', table_name='images')
    op.drop_index('ix_images_log_entry', table_name='images')
    op.drop_table('images')
    op.drop_index('ix_log_entries_user_visit', table_name='log_entries')
    op.drop_table('log_entries')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    sa.Enum(name='spring_type').drop(op.get_bind(), checkfirst=True)
